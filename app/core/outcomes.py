"""
Resultados con nombre para operaciones del motor de curación.

Los conflictos y not-found son estados normales del sistema, no fallos,
así que los servicios devuelven un `OperationResult` en lugar de lanzar.
"""

import enum
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class Outcome(str, enum.Enum):
    OK = "ok"
    ALREADY_PENDING = "already_pending"
    ALREADY_FOLLOWING = "already_following"
    ALREADY_RESOLVED = "already_resolved"
    ALREADY_SHARED = "already_shared"
    NOT_FOUND = "not_found"
    NOT_OWNER = "not_owner"
    FORBIDDEN = "forbidden"
    INVALID = "invalid"


CONFLICT_OUTCOMES = frozenset({
    Outcome.ALREADY_PENDING,
    Outcome.ALREADY_FOLLOWING,
    Outcome.ALREADY_RESOLVED,
    Outcome.ALREADY_SHARED,
})


@dataclass(frozen=True)
class OperationResult(Generic[T]):
    outcome: Outcome
    value: Optional[T] = None
    detail: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.outcome == Outcome.OK

    @property
    def is_conflict(self) -> bool:
        return self.outcome in CONFLICT_OUTCOMES

    @classmethod
    def success(cls, value: Optional[T] = None) -> "OperationResult[T]":
        return cls(Outcome.OK, value=value)

    @classmethod
    def failure(cls, outcome: Outcome, detail: Optional[str] = None) -> "OperationResult[T]":
        return cls(outcome, detail=detail)
