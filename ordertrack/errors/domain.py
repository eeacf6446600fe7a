"""Typed domain exceptions for API error mapping.

Service code raises these; the FastAPI exception handler in
``ordertrack.api.main`` turns them into JSON responses using the
``http_status`` of their registry entry.

Usage:
    # In service layer
    raise OrderNotFoundError("1042")

    # In route handler (automatic via the app exception handler)
    {"error": "Order Not Found", "error_code": "E-2002", "detail": "..."}
"""

from ordertrack.errors.registry import format_message, get_error


class DomainError(Exception):
    """Base exception for all domain errors."""

    code = "E-4001"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    @property
    def http_status(self) -> int:
        error_def = get_error(self.code)
        return error_def.http_status if error_def else 500

    @property
    def title(self) -> str:
        error_def = get_error(self.code)
        return error_def.title if error_def else "Error"


class BadRequestError(DomainError):
    """A required query parameter is missing. Maps to HTTP 400."""

    code = "E-1001"

    def __init__(self, param: str) -> None:
        super().__init__(format_message(self.code, param=param))
        self.param = param


class EmailMismatchError(DomainError):
    """The given email does not own the order. Maps to HTTP 403."""

    code = "E-2001"

    def __init__(self, order_id: str) -> None:
        super().__init__(format_message(self.code, order_id=order_id))
        self.order_id = order_id


class OrderNotFoundError(DomainError):
    """No order matches the id, number or email. Maps to HTTP 404."""

    code = "E-2002"

    def __init__(self, identifier: str) -> None:
        super().__init__(format_message(self.code, identifier=identifier))
        self.identifier = identifier


class UpstreamUnavailableError(DomainError):
    """Non-2xx or network failure from the commerce API. Maps to HTTP 500."""

    code = "E-3001"

    def __init__(self, detail: str, status: int = 0) -> None:
        super().__init__(format_message(self.code, detail=detail))
        self.detail = detail
        self.status = status
