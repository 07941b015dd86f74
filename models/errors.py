"""Error taxonomy shared by the API service and its clients."""

from __future__ import annotations

from typing import Dict, Optional, Sequence, Type


class TrafficError(Exception):
    """Base class for every failure surfaced to callers."""

    status_code: int = 500
    default_message = "Request failed"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class ValidationError(TrafficError):
    """Malformed date or visits; fixable by the caller."""

    status_code = 400
    default_message = "Invalid traffic entry"

    def __init__(self, message: Optional[str] = None, errors: Sequence[str] = ()) -> None:
        self.errors = list(errors)
        super().__init__(message or ("; ".join(self.errors) if self.errors else None))


class AuthError(TrafficError):
    """Missing, expired or invalid credential."""

    status_code = 401
    default_message = "Unauthorized"


class NotFoundError(TrafficError):
    """The referenced record does not exist."""

    status_code = 404
    default_message = "Traffic entry not found"


class ConflictError(TrafficError):
    """A record for the same date already exists."""

    status_code = 409
    default_message = "Traffic entry for this date already exists"


class ServerError(TrafficError):
    """Server-side or network failure; safe to retry."""

    status_code = 500
    default_message = "Internal server error"


_STATUS_MAP: Dict[int, Type[TrafficError]] = {
    400: ValidationError,
    401: AuthError,
    403: AuthError,
    404: NotFoundError,
    409: ConflictError,
}


def error_for_status(status_code: int, message: Optional[str] = None) -> TrafficError:
    """Translate an HTTP status into the matching taxonomy error."""
    error_cls = _STATUS_MAP.get(status_code)
    if error_cls is not None:
        return error_cls(message)
    if status_code >= 500:
        return ServerError(message)
    error = TrafficError(message or f"Request failed with status {status_code}")
    error.status_code = status_code
    return error
