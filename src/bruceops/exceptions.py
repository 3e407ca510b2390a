"""Custom exceptions for the BruceOps client."""

from typing import Optional


class BruceOpsError(Exception):
    """Base exception for all BruceOps errors."""

    def __init__(self, message: str, status_code: int | None = None, body: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.body = body


class AuthenticationError(BruceOpsError):
    """Raised when the server has no session for the caller (401)."""

    def __init__(self, message: str = "Authentication failed", body: Optional[str] = None) -> None:
        super().__init__(message, status_code=401, body=body)


class AuthorizationError(BruceOpsError):
    """Raised when authorization is denied (403)."""

    def __init__(self, message: str = "Authorization denied", body: Optional[str] = None) -> None:
        super().__init__(message, status_code=403, body=body)


class NotFoundError(BruceOpsError):
    """Raised when a resource is not found (404)."""

    def __init__(self, message: str = "Resource not found", body: Optional[str] = None) -> None:
        super().__init__(message, status_code=404, body=body)


class ValidationError(BruceOpsError):
    """Raised when request validation fails (400 or 422)."""

    def __init__(self, message: str = "Validation error", status_code: int = 400, body: Optional[str] = None) -> None:
        super().__init__(message, status_code=status_code, body=body)


class RateLimitError(BruceOpsError):
    """Raised when rate limit is exceeded (429)."""

    def __init__(self, message: str = "Rate limit exceeded", body: Optional[str] = None) -> None:
        super().__init__(message, status_code=429, body=body)


class ServerError(BruceOpsError):
    """Raised when server returns 5xx error."""

    def __init__(self, message: str = "Server error", status_code: int = 500, body: Optional[str] = None) -> None:
        super().__init__(message, status_code=status_code, body=body)
