from __future__ import annotations

from collections.abc import Iterable
from enum import Enum

from app.core.errors import InvalidRole


class Role(str, Enum):
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    EMPLOYEE = "EMPLOYEE"


DEFAULT_ROLE = Role.EMPLOYEE

# order used when a single "primary" role has to be reported
ROLE_PRECEDENCE: tuple[Role, ...] = (Role.ADMIN, Role.MANAGER, Role.EMPLOYEE)


def parse_role(name: str) -> Role:
    try:
        return Role(name.strip().upper())
    except ValueError as exc:
        raise InvalidRole(f"Unknown role '{name}'") from exc


def parse_roles(names: Iterable[str] | None) -> set[Role]:
    """Map requested role names onto the closed role set.

    An empty or missing request yields the baseline role.
    """
    roles = {parse_role(n) for n in (names or [])}
    return roles or {DEFAULT_ROLE}


def primary_role(roles: Iterable[str | Role]) -> Role | None:
    held = {Role(r) for r in roles}
    return next((r for r in ROLE_PRECEDENCE if r in held), None)


def has_any_role(held: Iterable[str | Role], required: Iterable[Role]) -> bool:
    return bool({Role(r) for r in held} & set(required))
