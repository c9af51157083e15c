"""Principal resolution and role gating."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass

from sqlalchemy.orm import Session

from byteverse.core.errors import PrincipalNotFoundError, RoleForbiddenError
from byteverse.models import Admin, Role, User
from byteverse.services.tokens import TokenDomain

logger = logging.getLogger(__name__)

_MODELS: dict[TokenDomain, type[User] | type[Admin]] = {
    TokenDomain.USER: User,
    TokenDomain.ADMIN: Admin,
}


@dataclass(frozen=True)
class Principal:
    """An authenticated actor attached to the request context."""

    id: int
    role: Role
    domain: TokenDomain
    record: User | Admin


class PrincipalResolver:
    """Load the stored record behind a decoded token subject.

    The lookup runs in a worker thread on its own short-lived session bound
    to the request session's engine or connection, and is bounded by
    ``timeout``. A thread that outlives the timeout therefore never touches
    the request session. The loaded row is merged into the request session
    without another query. A timeout or any store fault is reported as
    :class:`PrincipalNotFoundError` so that a degraded store never lets a
    request through.
    """

    def __init__(self, timeout: float = 5.0) -> None:
        self.timeout = timeout

    def _lookup(self, db: Session, domain: TokenDomain, principal_id: int) -> User | Admin | None:
        model = _MODELS[domain]
        with Session(bind=db.get_bind()) as lookup:
            record = lookup.get(model, principal_id)
            if record is not None:
                lookup.expunge(record)
        return record

    async def resolve(self, db: Session, principal_id: str, domain: TokenDomain) -> Principal:
        """Return the principal for ``principal_id`` in the ``domain`` collection."""
        try:
            key = int(principal_id)
        except (TypeError, ValueError) as err:
            raise PrincipalNotFoundError() from err

        try:
            record = await asyncio.wait_for(
                asyncio.to_thread(self._lookup, db, domain, key),
                timeout=self.timeout,
            )
        except TimeoutError as err:
            logger.error(
                "Principal lookup timed out after %.1fs (domain=%s id=%s)",
                self.timeout,
                domain.value,
                key,
            )
            raise PrincipalNotFoundError() from err
        except Exception as err:  # store unavailable, driver faults
            logger.error(
                "Principal lookup failed (domain=%s id=%s): %s",
                domain.value,
                key,
                err,
                exc_info=True,
            )
            raise PrincipalNotFoundError() from err

        if record is None:
            raise PrincipalNotFoundError()

        record = db.merge(record, load=False)
        return Principal(id=record.id, role=Role(record.role), domain=domain, record=record)


class RoleGate:
    """Accept a principal only if its role is one of ``roles``."""

    def __init__(self, roles: Iterable[Role]) -> None:
        self.roles: frozenset[Role] = frozenset(roles)
        if not self.roles:
            raise ValueError("RoleGate requires at least one accepted role")

    def check(self, principal: Principal | None) -> Principal:
        """Return ``principal`` if allowed; raise :class:`RoleForbiddenError` otherwise."""
        if principal is None or principal.role not in self.roles:
            raise RoleForbiddenError()
        return principal

    def __repr__(self) -> str:
        names = ",".join(sorted(role.value for role in self.roles))
        return f"RoleGate({names})"
