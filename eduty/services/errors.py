"""Domain errors raised by services and mapped to HTTP responses in eduty.api.error_handlers."""

from __future__ import annotations


class DomainError(Exception):
    """Base class for expected, caller-facing failures."""

    status_code: int = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(DomainError):
    """Entity absent."""

    status_code = 404


class ForbiddenError(DomainError):
    """Caller lacks the required ownership, enrollment or identity."""

    status_code = 403


class ConflictError(DomainError):
    """Duplicate state: already enrolled, pending request exists, overlap, ..."""

    status_code = 409


class BadRequestError(DomainError):
    """Invalid state transition or invalid input range."""

    status_code = 400
