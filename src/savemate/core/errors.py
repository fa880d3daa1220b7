"""Application error taxonomy.

Services raise these; the HTTP layer renders them into the
``{"error": {code, message, details, requestId}}`` envelope.
"""

from __future__ import annotations

from typing import Any


class AppError(Exception):
    """Base class for caller-visible failures."""

    code: str = "INTERNAL"
    status_code: int = 500
    default_message: str = "Something went wrong"

    def __init__(
        self,
        message: str | None = None,
        details: Any | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        self.message = message or self.default_message
        self.details = details
        self.headers = headers
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r})"


class ValidationError(AppError):
    code = "VALIDATION_ERROR"
    status_code = 400
    default_message = "Invalid request"

    @classmethod
    def for_field(cls, field: str, reason: str) -> ValidationError:
        """Build an error carrying ``fieldErrors`` for a single field."""
        return cls(details={"fieldErrors": {field: [reason]}})


class Unauthorized(AppError):
    code = "UNAUTHORIZED"
    status_code = 401
    default_message = "Not authenticated"


class Forbidden(AppError):
    code = "FORBIDDEN"
    status_code = 403
    default_message = "Forbidden"


class NotFound(AppError):
    code = "NOT_FOUND"
    status_code = 404
    default_message = "Not found"


class Conflict(AppError):
    code = "CONFLICT"
    status_code = 409
    default_message = "Conflict"


class RateLimited(AppError):
    code = "RATE_LIMITED"
    status_code = 429
    default_message = "Too many requests"


class Internal(AppError):
    code = "INTERNAL"
    status_code = 500
    default_message = "Something went wrong"
