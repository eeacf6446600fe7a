"""Success/failure values for best-effort steps.

Lookups, pagination and tracking checks continue past failures.
Instead of catching and discarding exceptions, each fallible step returns an
``Outcome`` so the call site decides, visibly, what a failure means.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class FailureKind(str, Enum):
    """Why a best-effort step produced no value."""

    HTTP_ERROR = "http_error"
    NETWORK_ERROR = "network_error"
    TIMEOUT = "timeout"
    INVALID_PAYLOAD = "invalid_payload"
    EMPTY = "empty"


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Result of a fallible step.

    Attributes:
        value: The produced value (None on failure).
        failure: Failure kind, None on success.
        detail: Human-readable failure detail for logs.
        status: HTTP status when the failure came from a response.
    """

    value: T | None = None
    failure: FailureKind | None = None
    detail: str = ""
    status: int = 0

    @property
    def ok(self) -> bool:
        return self.failure is None

    @classmethod
    def success(cls, value: T) -> "Outcome[T]":
        return cls(value=value)

    @classmethod
    def failed(cls, failure: FailureKind, detail: str = "", status: int = 0) -> "Outcome[T]":
        return cls(failure=failure, detail=detail, status=status)
