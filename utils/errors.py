"""
Error taxonomy for the account service.

``ApiError`` carries an HTTP status and a human-readable message; the
exception handlers in ``api.middleware`` turn it into the failure
envelope.  The lower-level errors (storage, tokens, media) never reach the
transport directly; the session manager maps them onto an ``ApiError``.
"""

from __future__ import annotations

from typing import Any, List, Optional

from fastapi import status


class ApiError(Exception):
    """Uniform error object: numeric status + message."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Something went wrong"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        status_code: Optional[int] = None,
        errors: Optional[List[Any]] = None,
    ) -> None:
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        self.errors = errors or []
        super().__init__(self.message)


class BadRequest(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Bad request"


class Unauthorized(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized request"


class NotFound(ApiError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class Conflict(ApiError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflict"


class UploadFailed(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Upload failed"


class InternalError(ApiError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"


# ── Collaborator errors ─────────────────────────────────────────────────


class DuplicateKeyError(Exception):
    """The storage layer rejected a row because of a unique constraint."""


class AccountValidationError(ValueError):
    """An account record violates its invariants on a validated save."""


class MediaUploadError(Exception):
    """The media store refused or failed to accept a file."""


class TokenError(Exception):
    """Base class for token verification failures."""


class InvalidTokenError(TokenError):
    pass


class ExpiredTokenError(TokenError):
    pass
