from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from app.core.errors import Forbidden, Unauthorized
from app.core.rbac import Role, has_any_role
from app.core.security import TokenService
from app.repositories.revocation import RevocationStore
from app.repositories.users import UserRepository


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Principal:
    user_id: str
    username: str
    roles: frozenset[Role]
    employee_id: Optional[str] = None
    token: Optional[str] = field(default=None, repr=False)

    def has_any(self, *roles: Role) -> bool:
        return has_any_role(self.roles, roles)


@dataclass(frozen=True)
class RoleRequirement:
    """What an operation demands of the caller.

    ``roles`` empty with ``authenticated`` set means any signed-in caller.
    """

    authenticated: bool = True
    roles: frozenset[Role] = frozenset()

    @classmethod
    def any_of(cls, *roles: Role) -> "RoleRequirement":
        return cls(authenticated=True, roles=frozenset(roles))


ANONYMOUS_OK = RoleRequirement(authenticated=False)
ANY_AUTHENTICATED = RoleRequirement(authenticated=True)


class AccessDecisionLayer:
    """Per-request gate: bearer token -> principal -> permit or deny.

    Token problems never raise out of here; they just leave the caller
    anonymous, and the requirement check then decides between 401 and 403.
    """

    def __init__(
        self,
        tokens: TokenService,
        users: UserRepository,
        revocations: RevocationStore,
    ) -> None:
        self.tokens = tokens
        self.users = users
        self.revocations = revocations

    def resolve(self, token: str | None) -> Optional[Principal]:
        if not token:
            return None

        validation = self.tokens.validate(token)
        if not validation.ok:
            logger.debug("Bearer token rejected: %s", validation.reason)
            return None

        claims = validation.claims
        if self.revocations.is_revoked(claims.get("jti"), self.tokens.clock()):
            logger.debug("Bearer token rejected: revoked")
            return None

        user = self.users.find_by_username(claims["sub"])
        if not user:
            logger.debug("Bearer token rejected: subject %s no longer exists", claims["sub"])
            return None

        return Principal(
            user_id=user["user_id"],
            username=user["username"],
            roles=frozenset(Role(r) for r in user.get("roles", [])),
            employee_id=user.get("employee_id"),
            token=token,
        )

    def authorize(
        self,
        state: Any,
        token: str | None,
        requirement: RoleRequirement,
    ) -> Optional[Principal]:
        """Decide one request. ``state`` is the request-scoped attribute bag."""
        if getattr(state, "principal_resolved", False):
            principal = getattr(state, "principal", None)
        else:
            principal = self.resolve(token)
            state.principal = principal
            state.principal_resolved = True

        if requirement.authenticated and principal is None:
            raise Unauthorized()

        if requirement.roles and (principal is None or not principal.has_any(*requirement.roles)):
            logger.info(
                "Access denied for %s: requires one of %s",
                principal.username if principal else "anonymous",
                ",".join(sorted(r.value for r in requirement.roles)),
            )
            raise Forbidden()

        return principal
