"""Filesystem view whose top-level areas each store files in a different encoding."""

from __future__ import annotations

import errno
import os
import string
import subprocess
import tempfile
import zlib

from layeredfs.hexed import _stat_dict

__all__ = [
    "MaimaiFS",
    "build_real_path",
    "compress_data",
    "decompress_data",
    "resolve_7sref",
    "rot13",
    "shift_decode",
    "shift_encode",
]

_REF_PREFIX = "/7sref/"
_YOUTH_READ_LIMIT = 65536

_AREA_EXTENSIONS = (
    ("/starter/", ".mai"),
    ("/metro/", ".ccc"),
    ("/dragon/", ".rot"),
    ("/blackrose/", ".bin"),
    ("/heaven/", ".enc"),
    ("/youth/", ".gz"),
)

_LOWER = string.ascii_lowercase.encode()
_UPPER = string.ascii_uppercase.encode()
_ROT13_TABLE = bytes.maketrans(
    _LOWER + _UPPER,
    _LOWER[13:] + _LOWER[:13] + _UPPER[13:] + _UPPER[:13],
)


def _extension_for(path: str) -> str:
    for prefix, extension in _AREA_EXTENSIONS:
        if path.startswith(prefix):
            return extension
    return ""


def resolve_7sref(path: str) -> str:
    """Map ``/7sref/<area>_<name>`` to ``/<area>/<name>``; other paths pass through."""
    if not path.startswith(_REF_PREFIX):
        return path
    area, underscore, rest = path[len(_REF_PREFIX):].partition("_")
    if not underscore:
        return "/invalid_path"
    return f"/{area}/{rest}"


def shift_encode(data: bytes) -> bytes:
    """Add each byte's position (mod 256) to it."""
    return bytes((byte + index) & 0xFF for index, byte in enumerate(data))


def shift_decode(data: bytes) -> bytes:
    """Undo :func:`shift_encode`."""
    return bytes((byte - index) & 0xFF for index, byte in enumerate(data))


def rot13(data: bytes) -> bytes:
    """Rotate ASCII letters by 13 places, leaving every other byte alone."""
    return bytes(data).translate(_ROT13_TABLE)


def compress_data(data: bytes) -> bytes:
    """Compress ``data`` as a zlib stream."""
    return zlib.compress(data)


def decompress_data(data: bytes) -> bytes:
    """Decompress a zlib stream whose output may be at most four times its input."""
    if not data:
        raise zlib.error("no compressed data")
    decompressor = zlib.decompressobj()
    result = decompressor.decompress(data, len(data) * 4)
    if not decompressor.eof:
        raise zlib.error("decompressed data exceeds limit")
    return result


def build_real_path(root: str | os.PathLike[str], path: str) -> str:
    """Return the backing file of ``path``, with its area's extension appended."""
    return f"{os.fspath(root)}{path}{_extension_for(path)}"


class MaimaiFS:
    """Serve a directory tree where each area transforms file contents differently."""

    def __init__(self, root: str | os.PathLike[str], secret_key: str) -> None:
        self.root = os.fspath(root)
        self.secret_key = secret_key

    def _real(self, path: str) -> tuple[str, str]:
        resolved = resolve_7sref(path)
        return resolved, build_real_path(self.root, resolved)

    def _openssl(self, source: str, target: str, decrypt: bool) -> None:
        command = ["openssl", "enc", "-aes-256-cbc"]
        if decrypt:
            command.append("-d")
        command += ["-salt", "-in", source, "-out", target, "-pass", f"pass:{self.secret_key}"]
        try:
            subprocess.run(command, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL, check=False)
        except OSError:
            pass

    def getattr(self, path: str) -> dict[str, float | int]:
        """Return the attributes of the backing file of ``path``."""
        _, real = self._real(path)
        return _stat_dict(os.lstat(real))

    def readdir(self, path: str) -> list[str]:
        """List ``path`` with each area's storage extension removed."""
        resolved = resolve_7sref(path)
        extension = _extension_for(resolved)
        entries = []
        for name in sorted(os.listdir(f"{self.root}{resolved}")):
            if extension and extension in name:
                entries.append(name[: -len(extension)])
            else:
                entries.append(name)
        return entries

    def open(self, path: str, flags: int) -> int:
        """Check that the backing file opens with ``flags``."""
        _, real = self._real(path)
        os.close(os.open(real, flags))
        return 0

    def read(self, path: str, size: int, offset: int) -> bytes:
        """Read up to ``size`` decoded bytes of ``path`` starting at ``offset``."""
        resolved, real = self._real(path)

        if resolved.startswith("/heaven/"):
            fd, plain = tempfile.mkstemp(prefix="decrypted")
            os.close(fd)
            try:
                self._openssl(real, plain, decrypt=True)
                with open(plain, "rb") as handle:
                    handle.seek(offset)
                    return handle.read(size)
            finally:
                os.unlink(plain)

        if resolved.startswith("/youth/"):
            with open(real, "rb") as handle:
                raw = handle.read(_YOUTH_READ_LIMIT)
            if not raw:
                return b""
            try:
                decoded = decompress_data(raw)
            except zlib.error as exc:
                raise OSError(errno.EIO, os.strerror(errno.EIO), path) from exc
            return decoded[offset:offset + size]

        with open(real, "rb") as handle:
            handle.seek(offset)
            data = handle.read(size)
        if resolved.startswith("/metro/"):
            data = shift_decode(data)
        if resolved.startswith("/dragon/"):
            data = rot13(data)
        return data

    def write(self, path: str, data: bytes, offset: int) -> int:
        """Encode ``data`` for the area of ``path`` and store it; return the bytes written."""
        resolved, real = self._real(path)

        if resolved.startswith("/heaven/"):
            fd, plain = tempfile.mkstemp(prefix="plain")
            try:
                os.write(fd, data)
                os.close(fd)
                self._openssl(plain, real, decrypt=False)
            finally:
                os.unlink(plain)
            return len(data)

        if resolved.startswith("/youth/"):
            compressed = compress_data(data)
            fd = os.open(real, os.O_WRONLY | os.O_CREAT, 0o644)
            try:
                return os.write(fd, compressed)
            finally:
                os.close(fd)

        encoded = bytes(data)
        if resolved.startswith("/metro/"):
            encoded = shift_encode(encoded)
        if resolved.startswith("/dragon/"):
            encoded = rot13(encoded)
        fd = os.open(real, os.O_WRONLY | os.O_CREAT, 0o644)
        try:
            return os.pwrite(fd, encoded, offset)
        finally:
            os.close(fd)

    def create(self, path: str, mode: int) -> None:
        """Create (or truncate) the backing file of ``path``."""
        _, real = self._real(path)
        os.close(os.open(real, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, mode))

    def unlink(self, path: str) -> None:
        """Remove the backing file of ``path``."""
        _, real = self._real(path)
        os.unlink(real)