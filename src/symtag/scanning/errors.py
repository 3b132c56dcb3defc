"""Directory scanning errors."""

from __future__ import annotations

from pathlib import Path


class ScanError(Exception):
    """Raised when a root cannot be scanned into a trustworthy index."""

    def __init__(self, message: str, path: Path | None = None) -> None:
        super().__init__(message)
        self.path = path
