"""Business rules over users and roles, as composable specifications.

Admin privilege is only ever grown from existing admin privilege: a user can
receive an admin-type role only while already holding one, and a role can
receive a system-admin permission only while already being an admin role.
"""
from __future__ import annotations

from typing import TYPE_CHECKING

from gatehouse.domain.specification import Specification

from .collections import is_system_admin_permission

if TYPE_CHECKING:
    from .entities import Permission, Role, User


# ── User ─────────────────────────────────────────────────────────────────────

active_user: Specification[User] = Specification(lambda u: u.is_active, "active user")

two_factor_enabled: Specification[User] = Specification(lambda u: u.otp_enabled, "two-factor enabled")

admin_user: Specification[User] = Specification(
    lambda u: any(r.is_admin_role() for r in u.roles), "admin user"
)

eligible_for_admin_role: Specification[User] = Specification(
    lambda u: u.is_eligible_for_admin_role(), "eligible for admin role"
)

complete_user_account: Specification[User] = Specification(
    lambda u: (
        u.is_active
        and bool(str(u.email))
        and bool(str(u.first_name))
        and bool(str(u.last_name))
        and len(u.roles) > 0
    ),
    "complete account",
)


def user_has_permission(permission_name: str) -> Specification[User]:
    return Specification(lambda u: u.has_permission(permission_name), f"has {permission_name}")


def can_assign_role(role: Role) -> Specification[User]:
    def _check(user: User) -> bool:
        if not user.is_active or user.has_role(role.id):
            return False
        return not role.is_admin_role() or eligible_for_admin_role.is_satisfied_by(user)

    return Specification(_check, f"can receive role {role.name}")


# ── Role ─────────────────────────────────────────────────────────────────────

admin_role: Specification[Role] = Specification(lambda r: r.is_admin_role(), "admin role")

can_delete_role: Specification[Role] = Specification(lambda r: r.can_be_deleted(), "deletable role")


def can_assign_permission_to_role(permission: Permission) -> Specification[Role]:
    def _check(role: Role) -> bool:
        if role.has_permission(permission.id) or role.has_permission_named(permission.name):
            return False
        return not is_system_admin_permission(permission) or role.is_admin_role()

    return Specification(_check, f"can receive {permission.name}")
