"""Exception hierarchy for radiodial."""

from __future__ import annotations


class RadiodialError(Exception):
    """Base exception for all radiodial errors."""


class SnapshotError(RadiodialError):
    """The build-time snapshot file is missing or unreadable."""


class BlobStorageError(RadiodialError):
    """The remote blob tier failed a read or write."""

    def __init__(self, message: str, *, key: str = "", status_code: int | None = None) -> None:
        self.key = key
        self.status_code = status_code
        super().__init__(message)


class ImageProcessingError(RadiodialError):
    """An uploaded image could not be decoded or re-encoded."""
