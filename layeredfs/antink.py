"""Filesystem view that flags suspicious files and ROT13-encodes everything else on read."""

from __future__ import annotations

import os

from layeredfs.hexed import _stat_dict

_DANGEROUS_MARKERS = ("nafis", "kimcun")

_ROT13_TABLE = bytes.maketrans(
    b"ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz",
    b"NOPQRSTUVWXYZABCDEFGHIJKLMnopqrstuvwxyzabcdefghijklm",
)


def is_dangerous(name: str) -> bool:
    """Return True when ``name`` contains one of the flagged markers."""
    return any(marker in name for marker in _DANGEROUS_MARKERS)


def rot13(data: bytes) -> bytes:
    """Rotate ASCII letters by 13 places, leaving every other byte alone."""
    return bytes(data).translate(_ROT13_TABLE)


class AntinkFS:
    """Mirror ``source_path``; dangerous names are shown reversed and read unencoded."""

    def __init__(self, source_path: str | os.PathLike[str], log_path: str | os.PathLike[str]) -> None:
        self.source_path = os.fspath(source_path)
        self.log_path = os.fspath(log_path)

    def _real(self, path: str) -> str:
        return f"{self.source_path}{path}"

    def _log(self, message: str) -> None:
        try:
            with open(self.log_path, "a", encoding="utf-8") as log:
                log.write(f"{message}\n")
        except OSError:
            pass

    def getattr(self, path: str) -> dict[str, float | int]:
        """Return the attributes of the mirrored ``path``."""
        return _stat_dict(os.lstat(self._real(path)))

    def readdir(self, path: str) -> list[str]:
        """List ``path``; dangerous names are reversed and a warning is logged."""
        entries = []
        for name in [".", ".."] + sorted(os.listdir(self._real(path))):
            if is_dangerous(name):
                self._log(f"[WARNING] File {name} terdeteksi sebagai berbahaya (dibalik)")
                entries.append(name[::-1])
            else:
                entries.append(name)
        return entries

    def open(self, path: str) -> int:
        """Open the mirrored file read-only and return its descriptor."""
        return os.open(self._real(path), os.O_RDONLY)

    def read(self, path: str, size: int, offset: int, fh: int) -> bytes:
        """Read from descriptor ``fh``; safe files come back ROT13-encoded."""
        data = os.pread(fh, size, offset)
        if is_dangerous(path):
            self._log(f"[INFO] File {path} dibaca tanpa enkripsi (berbahaya)")
            return data
        return rot13(data)

    def release(self, path: str, fh: int) -> None:
        """Close descriptor ``fh``."""
        os.close(fh)