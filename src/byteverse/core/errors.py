"""Access-control error taxonomy.

Every failure raised by the blocklist gate, credential verifier, principal
resolver and role gate is an :class:`AccessError`. Each one is terminal for
the current request: it is rendered as ``{"success": false, "message": ...}``
with the class's HTTP status and never retried on the server side.
"""

from __future__ import annotations

from fastapi import status


class AccessError(Exception):
    """Base class for request rejections raised by the access-control layer."""

    status_code: int = status.HTTP_401_UNAUTHORIZED
    default_message: str = "Not authorized to access this route"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class MissingCredentialError(AccessError):
    """No token in the Authorization header, admin header or cookie."""


class InvalidCredentialError(AccessError):
    """Token is malformed, tampered, or belongs to another secret domain."""


class ExpiredCredentialError(AccessError):
    default_message = "Token has expired"


class PrincipalNotFoundError(AccessError):
    """Token subject does not resolve to a stored principal."""

    default_message = "Principal not found"


class RoleForbiddenError(AccessError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Not allowed to access this route"


class SourceBlockedError(AccessError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Access denied"


__all__ = [
    "AccessError",
    "MissingCredentialError",
    "InvalidCredentialError",
    "ExpiredCredentialError",
    "PrincipalNotFoundError",
    "RoleForbiddenError",
    "SourceBlockedError",
]
