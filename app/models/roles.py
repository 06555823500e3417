"""
User roles and the capability policy used by role-gated routes.

Roles are ranked rather than matched exactly: a caller is allowed when its
rank is at least the rank the route requires. New roles slot in by rank.
"""

from enum import Enum


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"


ROLE_RANKS: dict[Role, int] = {
    Role.USER: 0,
    Role.ADMIN: 100,
}


def is_allowed(required: Role, caller: Role | str | None) -> bool:
    """Policy check: may a caller holding `caller` use something that requires `required`?"""
    if caller is None:
        return False
    try:
        caller_role = Role(caller)
    except ValueError:
        return False
    return ROLE_RANKS[caller_role] >= ROLE_RANKS[required]
