"""Signed bearer tokens for the user and admin secret domains."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from jose import ExpiredSignatureError, JWTError, jwt

from byteverse.core.errors import (
    ExpiredCredentialError,
    InvalidCredentialError,
    MissingCredentialError,
)
from byteverse.core.settings import Settings, settings

SCOPE_CLAIM = "scope"


class TokenDomain(str, enum.Enum):
    """Principal class a token was issued for; each has its own secret."""

    USER = "user"
    ADMIN = "admin"


@dataclass(frozen=True)
class TokenClaims:
    """Decoded claim set of a verified token."""

    subject: str
    domain: TokenDomain
    issued_at: datetime | None
    expires_at: datetime


def _timestamp(value: object) -> datetime | None:
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, UTC)
    return None


class TokenVerifier:
    """Issue and verify tokens for exactly one secret domain.

    A verifier never accepts a token minted for the other domain: the
    signature is checked against this domain's secret and the ``scope``
    claim must name this domain, so a shared secret is not enough to cross
    over.
    """

    def __init__(
        self,
        domain: TokenDomain,
        secret: str,
        *,
        algorithm: str = "HS256",
        expire_minutes: int = 60,
    ) -> None:
        if not secret:
            raise ValueError(f"A signing secret is required for the {domain.value} domain")
        self.domain = domain
        self._secret = secret
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes

    def issue(self, subject: str | int, *, expires_in: timedelta | None = None) -> str:
        """Create a signed token binding ``subject`` to this domain."""
        now = datetime.now(UTC)
        expire = now + (expires_in or timedelta(minutes=self.expire_minutes))
        to_encode: dict[str, object] = {
            "sub": str(subject),
            "iat": int(now.timestamp()),
            "exp": expire,
            SCOPE_CLAIM: self.domain.value,
        }
        encoded_jwt: str = jwt.encode(to_encode, self._secret, algorithm=self.algorithm)
        return encoded_jwt

    def verify(self, token: str | None) -> TokenClaims:
        """Return the claims of ``token`` or raise an access error.

        Raises:
            MissingCredentialError: If no token was supplied.
            ExpiredCredentialError: If the token's ``exp`` has passed.
            InvalidCredentialError: If the token is malformed, tampered with,
                lacks a subject, or belongs to another domain.
        """
        if token is None or not token.strip():
            raise MissingCredentialError()

        try:
            payload = jwt.decode(
                token.strip(),
                self._secret,
                algorithms=[self.algorithm],
                options={"require_exp": True},
            )
        except ExpiredSignatureError as err:
            raise ExpiredCredentialError() from err
        except JWTError as err:
            raise InvalidCredentialError() from err

        if payload.get(SCOPE_CLAIM) != self.domain.value:
            raise InvalidCredentialError()

        subject = payload.get("sub")
        if not isinstance(subject, str) or not subject:
            raise InvalidCredentialError()

        expires_at = _timestamp(payload.get("exp"))
        if expires_at is None:  # pragma: no cover - enforced by require_exp
            raise InvalidCredentialError()

        return TokenClaims(
            subject=subject,
            domain=self.domain,
            issued_at=_timestamp(payload.get("iat")),
            expires_at=expires_at,
        )


def build_user_verifier(config: Settings | None = None) -> TokenVerifier:
    cfg = config or settings
    return TokenVerifier(
        TokenDomain.USER,
        cfg.jwt_secret,
        algorithm=cfg.jwt_algorithm,
        expire_minutes=cfg.access_token_expire_minutes,
    )


def build_admin_verifier(config: Settings | None = None) -> TokenVerifier:
    cfg = config or settings
    return TokenVerifier(
        TokenDomain.ADMIN,
        cfg.admin_jwt_secret,
        algorithm=cfg.jwt_algorithm,
        expire_minutes=cfg.admin_token_expire_minutes,
    )


def create_access_token(subject: str | int) -> str:
    """Create a user-domain access token."""
    return build_user_verifier().issue(subject)


def create_admin_token(subject: str | int) -> str:
    """Create an admin-domain access token."""
    return build_admin_verifier().issue(subject)
