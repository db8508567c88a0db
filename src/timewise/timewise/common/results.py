from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from ..core.enums import ResultCode


@dataclass(frozen=True)
class OperationResult:
    """Uniform ``{success, message, event?, fieldErrors?}`` result of a write operation."""

    success: bool
    message: str
    code: ResultCode = ResultCode.OK
    event: Optional[Any] = None
    field_errors: dict[str, list[str]] = field(default_factory=dict)

    @classmethod
    def ok(cls, message: str, *, event: Optional[Any] = None) -> "OperationResult":
        return cls(success=True, message=message, code=ResultCode.OK, event=event)

    @classmethod
    def fail(cls, message: str, code: ResultCode, *, field_errors: Optional[dict[str, list[str]]] = None) -> "OperationResult":
        return cls(success=False, message=message, code=code, field_errors=dict(field_errors or {}))

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"success": self.success, "message": self.message}
        if self.event is not None:
            out["event"] = self.event.to_dict()
        if self.field_errors:
            out["fieldErrors"] = self.field_errors
        return out
