"""
Domain errors raised by the service layer.

Each error carries an HTTP status and a short machine-readable code; the
handlers registered in ``reserve.main`` turn them into JSON responses.
"""
from typing import Any


class ReserveError(Exception):
    """Base exception for domain errors."""

    status_code = 400
    code = "error"

    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(ReserveError):
    """Malformed or out-of-range input, rejected before any state change."""

    status_code = 400
    code = "validation_error"


class NotFoundError(ReserveError):
    """The targeted record does not exist (or is not visible to the caller)."""

    status_code = 404
    code = "not_found"


class ForbiddenError(ReserveError):
    """The caller may not perform this operation."""

    status_code = 403
    code = "forbidden"


class SelfInviteError(ForbiddenError):
    """A user tried to accept their own Circle invite."""

    code = "self_invite"


class ConflictError(ReserveError):
    """The operation conflicts with existing state."""

    status_code = 409
    code = "conflict"


class AlreadyConnectedError(ConflictError):
    """The two users are already in each other's Circle."""

    code = "already_connected"


class InviteUnavailableError(ConflictError):
    """The invite was already accepted or has been marked expired."""

    code = "invite_unavailable"


class InviteExpiredError(ReserveError):
    """The invite passed its expiry time."""

    status_code = 410
    code = "invite_expired"
