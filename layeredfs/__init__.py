"""Filesystem layers that transform names and content over a backing directory."""

__version__ = "0.1.0"
__all__ = ["antink", "baymax", "hexed", "maimai"]