"""Build tag indexes from items and tags directories."""

from .discovery import DirectoryScanner
from .errors import ScanError

__all__ = ["DirectoryScanner", "ScanError"]
