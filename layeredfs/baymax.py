"""Filesystem view that stores each file as a sequence of fixed-size chunk files."""

from __future__ import annotations

import errno
import os
import stat
import sys
from collections.abc import Iterator
from datetime import datetime
from pathlib import Path

_MAX_NAME_LOG = 200


def _name_from(path: str) -> str:
    if not path.startswith("/"):
        raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), path)
    return path[1:].split("\n", 1)[0]


class ChunkedFS:
    """Present ``name.000``, ``name.001``, ... in a source directory as one file ``name``."""

    def __init__(
        self,
        source_dir: str | os.PathLike[str],
        log_file: str | os.PathLike[str],
        chunk_size: int = 1024,
        max_chunks: int = 1000,
    ) -> None:
        self.source_dir = Path(source_dir)
        self.log_file = Path(log_file)
        self.chunk_size = chunk_size
        self.max_chunks = max_chunks

    def chunk_path(self, name: str, index: int) -> Path:
        """Return the path of chunk ``index`` of ``name``."""
        return self.source_dir / f"{name}.{index:03d}"

    def _log(self, message: str) -> None:
        try:
            with open(self.log_file, "a", encoding="utf-8") as log:
                log.write(f"[{datetime.now():%Y-%m-%d %H:%M:%S}] {message}\n")
        except OSError as exc:
            print(f"Failed to open log file: {exc.strerror}", file=sys.stderr)

    def _chunks(self, name: str) -> Iterator[Path]:
        for index in range(self.max_chunks):
            chunk = self.chunk_path(name, index)
            if not chunk.is_file():
                return
            yield chunk

    def _remove_chunks(self, name: str) -> int:
        removed = 0
        while True:
            chunk = self.chunk_path(name, removed)
            if not os.path.lexists(chunk):
                return removed
            chunk.unlink()
            removed += 1

    def getattr(self, path: str) -> dict[str, int]:
        """Return the attributes of ``path``; a file's size is the sum of its chunks."""
        if path == "/":
            return {
                "st_mode": stat.S_IFDIR | 0o755,
                "st_nlink": 2,
                "st_uid": os.getuid(),
                "st_gid": os.getgid(),
            }

        name = _name_from(path)
        if not os.path.lexists(self.chunk_path(name, 0)):
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), path)

        return {
            "st_mode": stat.S_IFREG | 0o644,
            "st_nlink": 1,
            "st_size": sum(chunk.stat().st_size for chunk in self._chunks(name)),
            "st_uid": os.getuid(),
            "st_gid": os.getgid(),
        }

    def readdir(self, path: str) -> list[str]:
        """List each chunked file once, plus ``.`` and ``..``."""
        entries = [".", ".."]
        seen: set[str] = set()
        for entry in sorted(os.listdir(self.source_dir)):
            if ".000" not in entry:
                continue
            base = entry[:-4]
            if base not in seen:
                seen.add(base)
                entries.append(base)
        return entries

    def open(self, path: str, flags: int) -> int:
        """Accept any open; no per-file handle is kept."""
        return 0

    def read(self, path: str, size: int, offset: int) -> bytes:
        """Read up to ``size`` bytes starting at ``offset`` across the chunks."""
        name = _name_from(path)
        parts: list[bytes] = []
        total = 0
        position = 0

        for chunk in self._chunks(name):
            chunk_size = chunk.stat().st_size
            if offset < position + chunk_size:
                skip = max(offset - position, 0)
                wanted = min(chunk_size - skip, size - total)
                with open(chunk, "rb") as handle:
                    handle.seek(skip)
                    data = handle.read(wanted)
                parts.append(data)
                total += len(data)
            position += chunk_size
            if total >= size:
                break

        self._log(f"READ: {name}")
        return b"".join(parts)

    def write(self, path: str, data: bytes, offset: int) -> int:
        """Replace the whole file with ``data``, split into chunks; ``offset`` is ignored."""
        name = _name_from(path)
        self._remove_chunks(name)

        part = 0
        for start in range(0, len(data), self.chunk_size):
            try:
                self.chunk_path(name, part).write_bytes(data[start:start + self.chunk_size])
            except OSError:
                break
            part += 1

        safe_name = name[:_MAX_NAME_LOG]
        if part == 1:
            written = f"{safe_name}.000"
        else:
            written = f"{safe_name}.000 to {safe_name}.{part - 1:03d}"
        self._log(f"WRITE: {safe_name} -> {written}")
        return len(data)

    def unlink(self, path: str) -> None:
        """Remove every chunk of ``path``."""
        name = _name_from(path)
        removed = self._remove_chunks(name)
        if removed:
            self._log(f"DELETE: {name}.000 - {name}.{removed - 1:03d}")
        else:
            self._log(f"DELETE: {name} (no chunks found)")

    def create(self, path: str, mode: int) -> None:
        """Create the first chunk of ``path`` with ``mode``."""
        name = _name_from(path)
        fd = os.open(self.chunk_path(name, 0), os.O_CREAT | os.O_WRONLY, mode)
        os.close(fd)
        self._log(f"CREATE: {name}")