"""
Domain errors for tooldeck.

Expected rule failures travel as DomainError values inside a Result.
Exceptions are only raised for programmer errors (unwrapping a failed
Result, reaching a state the invariants rule out).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Classification of domain errors, forwarded as-is by the API layer."""

    VALIDATION_ERROR = "validation_error"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    INVALID_OPERATION = "invalid_operation"


@dataclass(frozen=True, slots=True)
class DomainError:
    """
    A tagged domain failure.

    Attributes:
        kind: Error classification
        message: Human-readable description
    """

    kind: ErrorKind
    message: str

    @classmethod
    def validation(cls, message: str) -> DomainError:
        return cls(ErrorKind.VALIDATION_ERROR, message)

    @classmethod
    def not_found(cls, message: str) -> DomainError:
        return cls(ErrorKind.NOT_FOUND, message)

    @classmethod
    def conflict(cls, message: str) -> DomainError:
        return cls(ErrorKind.CONFLICT, message)

    @classmethod
    def invalid_operation(cls, message: str) -> DomainError:
        return cls(ErrorKind.INVALID_OPERATION, message)

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "message": self.message}

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"


class UnwrapError(Exception):
    """Raised when a failed Result is unwrapped."""

    def __init__(self, error: DomainError):
        super().__init__(str(error))
        self.error = error


class InvariantViolation(Exception):
    """Raised when code reaches a state the domain invariants forbid."""
