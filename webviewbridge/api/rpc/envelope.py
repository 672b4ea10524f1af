"""Uniform response envelope returned for every command."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class Envelope:
    """``{success, data, error}`` result of one dispatch.

    A successful envelope never carries an error; a failed one never carries data.
    """

    success: bool
    data: Any | None = None
    error: str | None = None

    def __post_init__(self) -> None:
        if self.success and self.error is not None:
            raise ValueError("successful envelope cannot carry an error")
        if not self.success and self.data is not None:
            raise ValueError("failed envelope cannot carry data")

    @classmethod
    def ok(cls, data: Any = None) -> "Envelope":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str) -> "Envelope":
        return cls(success=False, error=error)

    def to_dict(self) -> dict[str, Any]:
        return {"success": self.success, "data": self.data, "error": self.error}
