from enum import Enum


class FailureKind(Enum):
    """Enumeration for why a station operation failed."""

    NOT_FOUND = "not_found"
    INVALID_INPUT = "invalid_input"
    INVALID_IMAGE = "invalid_image"
    NOT_CONFIRMED = "not_confirmed"
    STORAGE = "storage"
