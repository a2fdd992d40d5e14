from .enums import FailureKind
from .results import OperationResult
from .stations import Station, active_only, find_station

__all__ = [
    "FailureKind",
    "OperationResult",
    "Station",
    "active_only",
    "find_station",
]
