"""Shared API dependencies for authentication and role checks."""

import logging
from collections.abc import Awaitable, Callable
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from byteverse.core.errors import AccessError
from byteverse.core.settings import settings
from byteverse.db.session import get_db
from byteverse.models import Role
from byteverse.services.principals import Principal, PrincipalResolver, RoleGate
from byteverse.services.tokens import (
    TokenVerifier,
    build_admin_verifier,
    build_user_verifier,
)

logger = logging.getLogger(__name__)

USER_TOKEN_COOKIE = "token"
ADMIN_TOKEN_COOKIE = "admin_token"
ADMIN_TOKEN_HEADER = "admin-token"

# Missing headers are reported by the verifier, not by the scheme itself.
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]
BearerDep = Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)]


def get_user_verifier() -> TokenVerifier:
    return build_user_verifier()


def get_admin_verifier() -> TokenVerifier:
    return build_admin_verifier()


def get_principal_resolver() -> PrincipalResolver:
    return PrincipalResolver(timeout=settings.principal_lookup_timeout_seconds)


UserVerifierDep = Annotated[TokenVerifier, Depends(get_user_verifier)]
AdminVerifierDep = Annotated[TokenVerifier, Depends(get_admin_verifier)]
ResolverDep = Annotated[PrincipalResolver, Depends(get_principal_resolver)]


def extract_user_token(
    request: Request, credentials: HTTPAuthorizationCredentials | None
) -> str | None:
    """Return the user token from the bearer header or the ``token`` cookie."""
    if credentials is not None and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(USER_TOKEN_COOKIE) or None


def extract_admin_token(
    request: Request, credentials: HTTPAuthorizationCredentials | None
) -> str | None:
    """Return the admin token from the bearer header, ``admin-token`` header or cookie."""
    if credentials is not None and credentials.credentials:
        return credentials.credentials
    header_token = request.headers.get(ADMIN_TOKEN_HEADER)
    if header_token:
        return header_token
    return request.cookies.get(ADMIN_TOKEN_COOKIE) or None


def _attach(request: Request, principal: Principal) -> Principal:
    request.state.principal = principal
    request.state.role = principal.role
    return principal


async def _authenticate(
    request: Request,
    db: Session,
    token: str | None,
    verifier: TokenVerifier,
    resolver: PrincipalResolver,
) -> Principal:
    claims = verifier.verify(token)
    principal = await resolver.resolve(db, claims.subject, verifier.domain)
    return _attach(request, principal)


async def get_current_user(
    request: Request,
    db: SessionDep,
    credentials: BearerDep,
    verifier: UserVerifierDep,
    resolver: ResolverDep,
) -> Principal:
    """Resolve the community member behind a user-domain token.

    Raises:
        AccessError: 401 for missing, invalid or expired tokens and for
            subjects that no longer exist.
    """
    token = extract_user_token(request, credentials)
    return await _authenticate(request, db, token, verifier, resolver)


async def get_current_admin(
    request: Request,
    db: SessionDep,
    credentials: BearerDep,
    verifier: AdminVerifierDep,
    resolver: ResolverDep,
) -> Principal:
    """Resolve the administrator behind an admin-domain token."""
    token = extract_admin_token(request, credentials)
    return await _authenticate(request, db, token, verifier, resolver)


async def get_optional_user(
    request: Request,
    db: SessionDep,
    credentials: BearerDep,
    verifier: UserVerifierDep,
    resolver: ResolverDep,
) -> Principal | None:
    """Resolve the user if a usable token is present; anonymous otherwise."""
    token = extract_user_token(request, credentials)
    if token is None:
        return None
    try:
        return await _authenticate(request, db, token, verifier, resolver)
    except AccessError as err:
        logger.debug("Ignoring unusable credential on optional route: %s", err.message)
        return None


PrincipalDep = Callable[..., Awaitable[Principal | None]]


def require_roles(*roles: Role, source: PrincipalDep = get_current_user) -> PrincipalDep:
    """Build a dependency that admits principals holding one of ``roles``.

    ``source`` is the dependency that resolves the principal; when it yields
    no principal the request is refused with 403.
    """
    gate = RoleGate(roles)

    async def _role_gate(
        principal: Annotated[Principal | None, Depends(source)],
    ) -> Principal:
        return gate.check(principal)

    _role_gate.__name__ = f"require_roles_{'_'.join(sorted(r.value for r in gate.roles))}"
    return _role_gate


# Type aliases for principal dependencies
CurrentUserDep = Annotated[Principal, Depends(get_current_user)]
CurrentAdminDep = Annotated[Principal, Depends(get_current_admin)]
OptionalUserDep = Annotated[Principal | None, Depends(get_optional_user)]
PlatformAdminDep = Annotated[Principal, Depends(require_roles(Role.ADMIN))]

__all__ = [
    "SessionDep",
    "CurrentUserDep",
    "CurrentAdminDep",
    "OptionalUserDep",
    "PlatformAdminDep",
    "extract_admin_token",
    "extract_user_token",
    "get_current_admin",
    "get_current_user",
    "get_optional_user",
    "require_roles",
]
