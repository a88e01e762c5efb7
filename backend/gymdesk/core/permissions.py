"""
Role to permission table.

Roles are a closed set; every role maps to a fixed, non-empty permission set
and any unrecognised role value maps to no permissions at all.
"""
import enum
from typing import assert_never

from gymdesk.models.user import UserRole


class Permission(str, enum.Enum):
    MANAGE_USERS = "manage_users"
    MANAGE_MEMBERS = "manage_members"
    VIEW_MEMBERS = "view_members"
    CHECK_IN = "check_in"
    RENEW_MEMBERSHIP = "renew_membership"
    POS = "pos"
    MANAGE_INVENTORY = "manage_inventory"
    VIEW_FINANCIALS = "view_financials"
    CONFIGURE_SYSTEM = "configure_system"
    MANAGE_MACHINES = "manage_machines"


_RECEPTION = frozenset({
    Permission.MANAGE_MEMBERS,
    Permission.VIEW_MEMBERS,
    Permission.CHECK_IN,
    Permission.RENEW_MEMBERSHIP,
    Permission.POS,
})

_CASHIER = frozenset({
    Permission.VIEW_MEMBERS,
    Permission.POS,
    Permission.MANAGE_INVENTORY,
})

# Role names stored by older databases
_LEGACY_ROLE_NAMES = {
    "recepcion": UserRole.RECEPTION,
    "cajero": UserRole.CASHIER,
}


def role_permissions(role: UserRole) -> frozenset[Permission]:
    match role:
        case UserRole.ADMIN:
            return frozenset(Permission)
        case UserRole.RECEPTION:
            return _RECEPTION
        case UserRole.CASHIER:
            return _CASHIER
        case _:
            assert_never(role)


def parse_role(value: UserRole | str | None) -> UserRole | None:
    if isinstance(value, UserRole):
        return value
    if not isinstance(value, str):
        return None
    normalized = value.strip().lower()
    try:
        return UserRole(normalized)
    except ValueError:
        return _LEGACY_ROLE_NAMES.get(normalized)


def permissions_for(value: UserRole | str | None) -> frozenset[Permission]:
    role = parse_role(value)
    if role is None:
        return frozenset()
    return role_permissions(role)


def has_permission(value: UserRole | str | None, permission: Permission) -> bool:
    return permission in permissions_for(value)
