"""Password hashing utilities built on passlib."""
from __future__ import annotations

import hashlib
import secrets

from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    """Return a salted hash suitable for storing in a principal record."""
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Return True if ``password`` matches ``password_hash``.

    Malformed or unknown hash formats are treated as a mismatch.
    """
    try:
        return pwd_context.verify(password, password_hash)
    except (ValueError, TypeError):
        return False


def hash_token(raw: str) -> str:
    """Digest stored in place of a one-time link token."""
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


def generate_token_pair() -> tuple[str, str]:
    """Return ``(raw_token, sha256_hex)`` for verification and reset links.

    Only the digest is persisted; the raw value goes into the link.
    """
    raw = secrets.token_hex(20)
    return raw, hash_token(raw)
