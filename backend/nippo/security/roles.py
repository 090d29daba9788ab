"""Role model for report access control."""

from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Sales organisation roles (ordered by privilege).

    Values are the role strings carried in session token claims.
    """

    SALES = "営業"
    MANAGER = "上長"
    ADMIN = "管理者"


def is_role_allowed(subject_role: Role, allowed: frozenset[Role] | set[Role]) -> bool:
    """Default-deny role check with explicit allow set."""
    return subject_role in allowed


def parse_role(value: object) -> Role:
    """Accept either the claim value ("上長") or the member name ("MANAGER")."""
    if isinstance(value, Role):
        return value
    s = str(value)
    try:
        return Role(s)
    except ValueError:
        return Role[s]
