"""Filesystem view that turns hex-encoded text files into PNG images on demand."""

from __future__ import annotations

import errno
import os
import stat
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

_MAX_HEX_CHARS = 7999
_NAME_LIMIT = 511
_IMAGE_DIR = "image"
_LOG_NAME = "conversion.log"

_STAT_FIELDS = (
    "st_mode",
    "st_ino",
    "st_dev",
    "st_nlink",
    "st_uid",
    "st_gid",
    "st_size",
    "st_atime",
    "st_mtime",
    "st_ctime",
)


def hex_nibble(char: str) -> int:
    """Return the value of one hex digit, or 0 for anything that is not one."""
    if "0" <= char <= "9":
        return ord(char) - ord("0")
    if "a" <= char <= "f":
        return ord(char) - ord("a") + 10
    if "A" <= char <= "F":
        return ord(char) - ord("A") + 10
    return 0


def hex_to_bytes(text: str) -> bytes:
    """Decode pairs of hex digits; a trailing odd digit is dropped."""
    pairs = zip(text[0::2], text[1::2])
    return bytes((hex_nibble(high) << 4) | hex_nibble(low) for high, low in pairs)


def _stat_dict(result: os.stat_result) -> dict[str, float | int]:
    return {field: getattr(result, field) for field in _STAT_FIELDS}


def _directory_attr() -> dict[str, int]:
    return {"st_mode": stat.S_IFDIR | 0o755, "st_nlink": 2}


def _not_found(path: str) -> FileNotFoundError:
    return FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), path)


def _strip_extension(name: str) -> str:
    stem, dot, _ = name.rpartition(".")
    return stem if dot else name


class HexImageFS:
    """Mirror a directory and expose each ``.txt`` hex dump as an image under ``/image``."""

    def __init__(self, root: str | os.PathLike[str], clock: Callable[[], datetime] | None = None) -> None:
        self.root = Path(root)
        self.clock = clock or datetime.now

    @property
    def image_dir(self) -> Path:
        return self.root / _IMAGE_DIR

    def _image_name(self, base: str, moment: datetime) -> str:
        return f"{base}_image_{moment:%Y-%m-%d_%H:%M:%S}.png"

    def generate_image(self, text_filename: str) -> Path:
        """Decode ``text_filename`` from the root into a timestamped PNG and return its path."""
        self.image_dir.mkdir(mode=0o755, exist_ok=True)

        raw = (self.root / text_filename).read_bytes()[:_MAX_HEX_CHARS]
        hex_text = raw.decode("latin-1").split("\0", 1)[0]
        image_data = hex_to_bytes(hex_text)

        moment = self.clock()
        image_name = self._image_name(_strip_extension(text_filename), moment)
        image_path = self.image_dir / image_name

        if image_path.exists():
            return image_path

        image_path.write_bytes(image_data)

        try:
            with open(self.root / _LOG_NAME, "a", encoding="utf-8") as log:
                log.write(
                    f"[{moment:%Y-%m-%d}][{moment:%H:%M:%S}]: "
                    f"Successfully converted {text_filename} to {image_name}\n"
                )
        except OSError:
            pass

        return image_path

    def _image_for(self, path: str) -> Path:
        filename = path[len("/image/"):][:_NAME_LIMIT]
        position = filename.find("image")
        if position < 0:
            raise _not_found(path)
        text_name = f"{filename[:position]}.txt"
        if not (self.root / text_name).exists():
            raise _not_found(path)
        try:
            return self.generate_image(text_name)
        except OSError as exc:
            raise _not_found(path) from exc

    def getattr(self, path: str) -> dict[str, float | int]:
        """Return the attributes of ``path`` as a dict of ``st_*`` fields."""
        if path in ("/", "/."):
            return _directory_attr()
        if path in ("/image", "/image/"):
            return _directory_attr()
        if path.startswith("/image/"):
            return _stat_dict(os.lstat(self._image_for(path)))
        return _stat_dict(os.lstat(f"{self.root}{path}"))

    def readdir(self, path: str) -> list[str]:
        """List the entries of ``path``, including ``.`` and ``..``."""
        if path == "/":
            names = sorted(os.listdir(self.root))
            return [".", "..", _IMAGE_DIR] + [name for name in names if name != _IMAGE_DIR]

        if path == "/image":
            names = sorted(os.listdir(self.root))
            entries = [".", ".."]
            for name in names:
                if ".txt" in name:
                    entries.append(self._image_name(_strip_extension(name), self.clock()))
            return entries

        return [".", ".."] + sorted(os.listdir(f"{self.root}{path}"))

    def read(self, path: str, size: int, offset: int) -> bytes:
        """Read up to ``size`` bytes of ``path`` starting at ``offset``."""
        if path.startswith("/image/"):
            target: Path | str = self._image_for(path)
        else:
            target = f"{self.root}{path}"
        with open(target, "rb") as handle:
            handle.seek(offset)
            return handle.read(size)