from typing import Optional


class ArgumentValidationError(ValueError):
    """Raised when command-line input is rejected before any request is made."""


class MissingArgument(ArgumentValidationError):
    pass


class InvalidUsername(ArgumentValidationError):
    pass


class InvalidDate(ArgumentValidationError):
    pass


class ExportError(RuntimeError):
    """Base class for failures while fetching chart data."""

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.url = url


class TransportError(ExportError):
    """The HTTP client could not complete the request."""


class UnexpectedStatus(ExportError):
    def __init__(self, status_code: int, body: str, url: Optional[str] = None):
        super().__init__(f"Basis API returned HTTP {status_code}", url=url)
        self.status_code = status_code
        self.body = body


class InvalidPayload(ExportError):
    def __init__(self, message: str, body: str, url: Optional[str] = None):
        super().__init__(message, url=url)
        self.body = body
