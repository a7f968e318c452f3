"""Role gate."""

from collections.abc import Collection

from src.carledger.models.enums import Role


def is_role_allowed(role: Role | str, allowed: Collection[Role]) -> bool:
    """Return True when `role` is one of the `allowed` roles.

    Membership only: there is no implied ordering between roles.
    """
    try:
        return Role(role) in allowed
    except ValueError:
        return False
