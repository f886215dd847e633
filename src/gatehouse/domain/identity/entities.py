"""Domain entities for the Identity bounded context.

Role and permission membership is held in tuples, so whatever a caller reads
is a snapshot; membership changes go through the entity methods, which run
the business rules and bump ``updated_at``. Methods that would not change
anything return early and leave ``updated_at`` alone.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import UUID, uuid4

from gatehouse.domain.errors import (
    CannotDeleteDefaultRoleError,
    InactiveUserError,
    InvalidValueError,
    PermissionAlreadyAssignedError,
    UserAlreadyHasRoleError,
    UserCannotRemoveLastRoleError,
    UserNotEligibleForRoleError,
)

from . import specifications as specs
from .collections import PermissionsCollection, RolesCollection
from .value_objects import Email, PasswordHash, PersonName, ResourceAction

ROLE_NAME_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _require_text(value: str, label: str, max_length: int) -> None:
    if not isinstance(value, str) or not value.strip():
        raise InvalidValueError(f"{label} cannot be empty")
    if len(value) > max_length:
        raise InvalidValueError(f"{label} cannot exceed {max_length} characters")


@dataclass
class Permission:
    id: UUID
    resource_action: ResourceAction
    description: str
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        _require_text(self.description, "Permission description", DESCRIPTION_MAX_LENGTH)

    @classmethod
    def create(cls, resource_action: ResourceAction, description: str) -> Permission:
        now = _utcnow()
        return cls(id=uuid4(), resource_action=resource_action, description=description,
                   created_at=now, updated_at=now)

    @property
    def name(self) -> str:
        return str(self.resource_action)

    @property
    def resource(self) -> str:
        return self.resource_action.resource

    @property
    def action(self) -> str:
        return str(self.resource_action.action)

    def allows_action(self, resource: str, action: str) -> bool:
        return self.resource == resource and self.action == action

    def update_description(self, description: str) -> None:
        _require_text(description, "Permission description", DESCRIPTION_MAX_LENGTH)
        if description == self.description:
            return
        self.description = description
        self.updated_at = _utcnow()


@dataclass
class Role:
    id: UUID
    name: str
    description: str
    permissions: tuple[Permission, ...] = ()
    is_default: bool = False
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        _require_text(self.name, "Role name", ROLE_NAME_MAX_LENGTH)
        _require_text(self.description, "Role description", DESCRIPTION_MAX_LENGTH)
        self.permissions = PermissionsCollection(self.permissions).items

    @classmethod
    def create(cls, name: str, description: str, is_default: bool = False) -> Role:
        now = _utcnow()
        return cls(id=uuid4(), name=name, description=description, is_default=is_default,
                   created_at=now, updated_at=now)

    @property
    def permissions_collection(self) -> PermissionsCollection:
        return PermissionsCollection(self.permissions)

    def _touch(self) -> None:
        self.updated_at = max(_utcnow(), self.created_at)

    # ── Business methods ─────────────────────────────────────────────────────

    def add_permission(self, permission: Permission) -> None:
        if not specs.can_assign_permission_to_role(permission).is_satisfied_by(self):
            raise PermissionAlreadyAssignedError(permission.name, self.name)
        self.permissions = self.permissions_collection.add(permission).items
        self._touch()

    def add_permissions_on_creation(self, permissions: list[Permission]) -> None:
        """Attach permissions without the assignment rules (seeding, role creation)."""
        if not permissions:
            return
        merged = self.permissions_collection
        for permission in permissions:
            merged = merged.add(permission)
        self.permissions = merged.items
        self._touch()

    def remove_permission(self, permission_id: UUID) -> None:
        if not self.has_permission(permission_id):
            return
        self.permissions = self.permissions_collection.remove(permission_id).items
        self._touch()

    def update_details(self, name: str | None = None, description: str | None = None) -> None:
        changed = False
        if name and name != self.name:
            _require_text(name, "Role name", ROLE_NAME_MAX_LENGTH)
            self.name = name
            changed = True
        if description and description != self.description:
            _require_text(description, "Role description", DESCRIPTION_MAX_LENGTH)
            self.description = description
            changed = True
        if changed:
            self._touch()

    def set_as_default(self) -> None:
        if self.is_default:
            return
        self.is_default = True
        self._touch()

    def remove_as_default(self) -> None:
        if not self.is_default:
            return
        self.is_default = False
        self._touch()

    # ── Queries ──────────────────────────────────────────────────────────────

    def has_permission(self, permission_id: UUID) -> bool:
        return self.permissions_collection.contains(permission_id)

    def has_permission_named(self, permission_name: str) -> bool:
        return self.permissions_collection.contains_name(permission_name)

    def is_admin_role(self) -> bool:
        lowered = self.name.lower()
        return (
            self.permissions_collection.has_admin_permissions()
            or "admin" in lowered
            or "administrator" in lowered
        )

    def can_be_deleted(self) -> bool:
        return not self.is_default

    def validate_for_deletion(self) -> None:
        if not self.can_be_deleted():
            raise CannotDeleteDefaultRoleError()

    def permission_names(self) -> list[str]:
        return [p.name for p in self.permissions]


@dataclass
class User:
    id: UUID
    email: Email
    password_hash: PasswordHash
    first_name: PersonName
    last_name: PersonName
    is_active: bool = True
    otp_enabled: bool = False
    otp_secret: str | None = None
    roles: tuple[Role, ...] = ()
    last_login_at: datetime | None = None
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        if self.otp_enabled and not self.otp_secret:
            raise InvalidValueError("Two-factor secret is required when two-factor is enabled")
        if not self.otp_enabled and self.otp_secret:
            raise InvalidValueError("Two-factor secret is only kept while two-factor is enabled")
        if self.updated_at < self.created_at:
            raise InvalidValueError("updated_at cannot precede created_at")
        self.roles = RolesCollection(self.roles).items

    @classmethod
    def create(
        cls,
        email: Email,
        password_hash: PasswordHash,
        first_name: PersonName,
        last_name: PersonName,
    ) -> User:
        now = _utcnow()
        return cls(
            id=uuid4(),
            email=email,
            password_hash=password_hash,
            first_name=first_name,
            last_name=last_name,
            created_at=now,
            updated_at=now,
        )

    @property
    def roles_collection(self) -> RolesCollection:
        return RolesCollection(self.roles)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def _touch(self) -> None:
        self.updated_at = max(_utcnow(), self.created_at)

    def _require_active(self, operation: str) -> None:
        if not self.is_active:
            raise InactiveUserError(operation)

    # ── Lifecycle ────────────────────────────────────────────────────────────

    def activate(self) -> None:
        if self.is_active:
            return
        self.is_active = True
        self._touch()

    def deactivate(self) -> None:
        if not self.is_active:
            return
        self.is_active = False
        self._touch()

    def enable_two_factor(self, secret: str) -> None:
        if not secret or not secret.strip():
            raise InvalidValueError("Two-factor secret cannot be empty")
        self._require_active("enable two-factor authentication")
        self.otp_enabled = True
        self.otp_secret = secret
        self._touch()

    def disable_two_factor(self) -> None:
        if not self.otp_enabled:
            return
        self.otp_enabled = False
        self.otp_secret = None
        self._touch()

    # ── Roles ────────────────────────────────────────────────────────────────

    def add_role(self, role: Role) -> None:
        if not specs.can_assign_role(role).is_satisfied_by(self):
            self._require_active("assign role")
            if self.has_role(role.id):
                raise UserAlreadyHasRoleError(self.id, role.name)
            raise UserNotEligibleForRoleError(self.id, role.name)
        self.roles = self.roles_collection.add(role).items
        self._touch()

    def remove_role(self, role_id: UUID) -> None:
        self._require_active("remove role")
        if not self.has_role(role_id):
            return
        if len(self.roles) <= 1:
            raise UserCannotRemoveLastRoleError()
        self.roles = self.roles_collection.remove(role_id).items
        self._touch()

    # ── Profile ──────────────────────────────────────────────────────────────

    def change_email(self, new_email: Email) -> None:
        self._require_active("change email")
        if new_email == self.email:
            return
        self.email = new_email
        self._touch()

    def change_password(self, new_password_hash: PasswordHash) -> None:
        """Replace the stored hash. Hashing is the caller's job."""
        self._require_active("change password")
        self.password_hash = new_password_hash
        self._touch()

    def update_profile(
        self,
        first_name: PersonName | None = None,
        last_name: PersonName | None = None,
    ) -> None:
        self._require_active("update profile")
        changed = False
        if first_name is not None and first_name != self.first_name:
            self.first_name = first_name
            changed = True
        if last_name is not None and last_name != self.last_name:
            self.last_name = last_name
            changed = True
        if changed:
            self._touch()

    def record_login(self) -> None:
        now = _utcnow()
        self.last_login_at = now
        self.updated_at = max(now, self.created_at)

    # ── Queries ──────────────────────────────────────────────────────────────

    def has_role(self, role_id: UUID) -> bool:
        return self.roles_collection.contains(role_id)

    def has_permission(self, permission_name: str) -> bool:
        return self.roles_collection.has_permission(permission_name)

    def is_eligible_for_admin_role(self) -> bool:
        """Promotion to an admin role requires already holding admin privileges."""
        return self.is_active and self.roles_collection.has_admin_privileges()
