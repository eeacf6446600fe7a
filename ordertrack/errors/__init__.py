"""Error handling framework for ordertrack.

This package provides:
- Error code registry with E-XXXX format codes
- Typed domain exceptions mapped to HTTP status codes

Error categories:
- E-1xxx: Request errors
- E-2xxx: Order lookup errors
- E-3xxx: Upstream commerce API errors
- E-4xxx: System/internal errors
"""

from ordertrack.errors.domain import (
    BadRequestError,
    DomainError,
    EmailMismatchError,
    OrderNotFoundError,
    UpstreamUnavailableError,
)
from ordertrack.errors.registry import (
    ERROR_REGISTRY,
    ErrorCategory,
    ErrorCode,
    format_message,
    get_error,
    get_errors_by_category,
)

__all__ = [
    # Registry
    "ErrorCode",
    "ErrorCategory",
    "ERROR_REGISTRY",
    "get_error",
    "get_errors_by_category",
    "format_message",
    # Domain
    "DomainError",
    "BadRequestError",
    "EmailMismatchError",
    "OrderNotFoundError",
    "UpstreamUnavailableError",
]
