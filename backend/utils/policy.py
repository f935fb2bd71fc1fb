# utils/policy.py
"""
Authorization decisions. Pure functions over a verified identity: they never
touch the database and raise Forbidden when the caller is not allowed.
"""
from typing import Iterable

from models.users import Role
from utils.errors import Forbidden


def _role_value(role) -> str:
    return role.value if isinstance(role, Role) else str(role)


def has_role(identity, allowed_roles: Iterable) -> bool:
    return identity.role in {_role_value(r) for r in allowed_roles}


def require_role(identity, allowed_roles: Iterable, message: str = None) -> None:
    if not has_role(identity, allowed_roles):
        raise Forbidden(message or f"User role {identity.role} is not authorized to access this route")


def is_owner_or_admin(identity, resource_owner_id: int) -> bool:
    return identity.is_admin or identity.user_id == resource_owner_id


def require_owner_or_admin(identity, resource_owner_id: int, message: str = None) -> None:
    if not is_owner_or_admin(identity, resource_owner_id):
        raise Forbidden(message or "Not authorized to access this resource")
