from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class DocumentKind(str, Enum):
    INDIVIDUAL = "F"
    ORGANIZATION = "J"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class DocumentNumber:
    raw: str
    digits: str
    kind: DocumentKind
    inferred_kind: DocumentKind
    formatted: str
    is_valid: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "raw": self.raw,
            "digits": self.digits,
            "kind": _kind_value(self.kind),
            "inferred_kind": _kind_value(self.inferred_kind),
            "formatted": self.formatted,
            "is_valid": self.is_valid,
        }


def _kind_value(kind: DocumentKind) -> str | None:
    return None if kind is DocumentKind.UNKNOWN else kind.value


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    kind: DocumentKind | None


@dataclass(frozen=True)
class NormalizedResult:
    success: bool
    data: list[dict[str, Any]] = field(default_factory=list)
    error: str | None = None

    @classmethod
    def ok(cls, data: list[dict[str, Any]]) -> "NormalizedResult":
        return cls(success=True, data=list(data))

    @classmethod
    def fail(cls, error: str) -> "NormalizedResult":
        return cls(success=False, data=[], error=error)

    def to_dict(self) -> dict[str, Any]:
        if self.success:
            return {"success": True, "data": self.data}
        return {"success": False, "error": self.error}


@dataclass
class User:
    id: str
    email: str
