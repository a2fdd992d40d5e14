from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from radiodial.domain.enums import FailureKind


@dataclass(frozen=True)
class OperationResult:
    """Outcome of a mutating station operation.

    Serializes to ``{"success": True, **payload}`` or
    ``{"success": False, "error": ...}``. ``kind`` stays out of the wire form;
    the HTTP layer uses it to choose a status code.
    """

    success: bool
    payload: dict[str, Any] = field(default_factory=dict)
    error: str | None = None
    kind: FailureKind | None = None

    @classmethod
    def ok(cls, **payload: Any) -> OperationResult:
        return cls(success=True, payload=payload)

    @classmethod
    def failure(cls, error: str, kind: FailureKind, **payload: Any) -> OperationResult:
        return cls(success=False, payload=payload, error=error, kind=kind)

    def to_dict(self) -> dict[str, Any]:
        if self.success:
            return {"success": True, **self.payload}
        return {"success": False, **self.payload, "error": self.error}
