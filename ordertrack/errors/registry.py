"""Error code registry with E-XXXX format codes.

Categories:
- E-1xxx: Request errors (missing or malformed query parameters)
- E-2xxx: Order lookup errors (not found, ownership mismatch)
- E-3xxx: Upstream commerce API errors
- E-4xxx: System/internal errors

Each error includes a code, title, message template, HTTP status and
remediation text.
"""

from dataclasses import dataclass
from enum import Enum


class ErrorCategory(str, Enum):
    """Categories for error codes."""

    REQUEST = "request"  # E-1xxx
    LOOKUP = "lookup"  # E-2xxx
    UPSTREAM = "upstream"  # E-3xxx
    SYSTEM = "system"  # E-4xxx


@dataclass
class ErrorCode:
    """Definition of an error code with metadata.

    Attributes:
        code: Error code in E-XXXX format.
        category: Error category for grouping.
        title: Short title for display.
        message_template: Message with {placeholders} for context.
        http_status: Status code the API answers with.
        remediation: Action the caller should take to resolve.
    """

    code: str
    category: ErrorCategory
    title: str
    message_template: str
    http_status: int
    remediation: str = ""


ERROR_REGISTRY: dict[str, ErrorCode] = {
    "E-1001": ErrorCode(
        code="E-1001",
        category=ErrorCategory.REQUEST,
        title="Missing Parameter",
        message_template="Query parameter '{param}' is required.",
        http_status=400,
        remediation="Add the missing query parameter and retry.",
    ),
    "E-2001": ErrorCode(
        code="E-2001",
        category=ErrorCategory.LOOKUP,
        title="Email Mismatch",
        message_template="Order '{order_id}' does not belong to the given email.",
        http_status=403,
        remediation="Use the email address the order was placed with.",
    ),
    "E-2002": ErrorCode(
        code="E-2002",
        category=ErrorCategory.LOOKUP,
        title="Order Not Found",
        message_template="No order matches '{identifier}'.",
        http_status=404,
        remediation="Check the order number or email address.",
    ),
    "E-3001": ErrorCode(
        code="E-3001",
        category=ErrorCategory.UPSTREAM,
        title="Upstream Unavailable",
        message_template="Commerce API request failed: {detail}",
        http_status=500,
        remediation="Check the shop slug and API token, then retry.",
    ),
    "E-4001": ErrorCode(
        code="E-4001",
        category=ErrorCategory.SYSTEM,
        title="Stream Aborted",
        message_template="Audit stream aborted: {detail}",
        http_status=500,
    ),
}


def get_error(code: str) -> ErrorCode | None:
    """Get error definition by code.

    Args:
        code: Error code in E-XXXX format.

    Returns:
        ErrorCode if found, None otherwise.
    """
    return ERROR_REGISTRY.get(code)


def get_errors_by_category(category: ErrorCategory) -> list[ErrorCode]:
    """Get all errors in a category."""
    return [e for e in ERROR_REGISTRY.values() if e.category == category]


def format_message(code: str, **context: object) -> str:
    """Render an error's message template, keeping the template on missing keys."""
    error_def = get_error(code)
    if error_def is None:
        return f"Unknown error: {code}"
    try:
        return error_def.message_template.format(**context)
    except KeyError:
        return error_def.message_template
