"""Authorization decisions built from the identity specifications."""
from __future__ import annotations

from . import specifications as specs
from .entities import Role, User

ROLE_UPDATE_PERMISSION = "role:update"
ROLE_DELETE_PERMISSION = "role:delete"


class UserAuthorizationService:
    """Stateless: answers whether a user may do something, never raises."""

    _admin_access = specs.active_user & specs.admin_user & specs.complete_user_account
    _sensitive_operations = specs.active_user & specs.two_factor_enabled

    def can_access_admin_features(self, user: User) -> bool:
        return self._admin_access.is_satisfied_by(user)

    def can_perform_sensitive_operations(self, user: User) -> bool:
        return self._sensitive_operations.is_satisfied_by(user)

    def can_assign_role(self, assigner: User, target: User, role: Role) -> bool:
        if not self.can_access_admin_features(assigner):
            return False
        if not specs.can_assign_role(role).is_satisfied_by(target):
            return False
        # Handing out an admin-type role takes more than generic admin access.
        if specs.admin_role.is_satisfied_by(role):
            return specs.user_has_permission(ROLE_UPDATE_PERMISSION).is_satisfied_by(assigner)
        return True

    def can_delete_role(self, user: User, role: Role) -> bool:
        if not self.can_access_admin_features(user):
            return False
        if not specs.can_delete_role.is_satisfied_by(role):
            return False
        return specs.user_has_permission(ROLE_DELETE_PERMISSION).is_satisfied_by(user)

    def can_access_resource(self, user: User, resource: str, action: str) -> bool:
        spec = specs.active_user & specs.user_has_permission(f"{resource}:{action}")
        return spec.is_satisfied_by(user)
