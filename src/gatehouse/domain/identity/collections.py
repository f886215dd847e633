"""Immutable collections over permissions and roles.

Every operation that would change membership returns a new collection.
Construction rejects duplicate ids and duplicate names.
"""
from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from typing import TYPE_CHECKING, Literal
from uuid import UUID

from gatehouse.domain.errors import InvalidValueError

if TYPE_CHECKING:
    from .entities import Permission, Role

ADMIN_RESOURCES = frozenset({"user", "role", "permission", "system"})
CRITICAL_ACTIONS = frozenset({"create", "update", "delete"})
# Actions are CRUD only, so role deletion marks the top level.
SUPERADMIN_PERMISSION = "role:delete"

PrivilegeLevel = Literal["guest", "user", "admin", "superadmin"]


def is_system_admin_permission(permission: Permission) -> bool:
    """Critical CRUD on a sensitive resource."""
    return permission.resource.lower() in ADMIN_RESOURCES and permission.action.lower() in CRITICAL_ACTIONS


class PermissionsCollection:
    __slots__ = ("_items",)

    def __init__(self, permissions: Iterable[Permission] = ()) -> None:
        items = tuple(permissions)
        seen_ids: set[UUID] = set()
        seen_names: set[str] = set()
        for permission in items:
            if permission.id in seen_ids:
                raise InvalidValueError(f"Duplicate permission ID: {permission.id}")
            if permission.name in seen_names:
                raise InvalidValueError(f"Duplicate permission name: {permission.name}")
            seen_ids.add(permission.id)
            seen_names.add(permission.name)
        self._items = items

    @property
    def items(self) -> tuple[Permission, ...]:
        return self._items

    def __iter__(self) -> Iterator[Permission]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PermissionsCollection):
            return NotImplemented
        return {p.id for p in self._items} == {p.id for p in other._items}

    def __hash__(self) -> int:
        return hash(frozenset(p.id for p in self._items))

    def __repr__(self) -> str:
        return f"PermissionsCollection({self.names()})"

    # ── Derivations ──────────────────────────────────────────────────────────

    def add(self, permission: Permission) -> PermissionsCollection:
        if self.contains(permission.id):
            raise InvalidValueError(f"Permission '{permission.name}' already exists in collection")
        return PermissionsCollection((*self._items, permission))

    def remove(self, permission_id: UUID) -> PermissionsCollection:
        if not self.contains(permission_id):
            return self
        return PermissionsCollection(p for p in self._items if p.id != permission_id)

    def merge(self, other: PermissionsCollection) -> PermissionsCollection:
        extra = [p for p in other if not self.contains(p.id)]
        return PermissionsCollection((*self._items, *extra))

    def intersect(self, other: PermissionsCollection) -> PermissionsCollection:
        return PermissionsCollection(p for p in self._items if other.contains(p.id))

    def filter_by_resource(self, resource: str) -> PermissionsCollection:
        return PermissionsCollection(p for p in self._items if p.resource.lower() == resource.lower())

    def filter_by_action(self, action: str) -> PermissionsCollection:
        return PermissionsCollection(p for p in self._items if p.action.lower() == action.lower())

    # ── Queries ──────────────────────────────────────────────────────────────

    def contains(self, permission_id: UUID) -> bool:
        return any(p.id == permission_id for p in self._items)

    def contains_name(self, permission_name: str) -> bool:
        return any(p.name == permission_name for p in self._items)

    def get_by_id(self, permission_id: UUID) -> Permission | None:
        return next((p for p in self._items if p.id == permission_id), None)

    def get_by_name(self, permission_name: str) -> Permission | None:
        return next((p for p in self._items if p.name == permission_name), None)

    def resources(self) -> list[str]:
        return list(dict.fromkeys(p.resource for p in self._items))

    def actions(self) -> list[str]:
        return list(dict.fromkeys(p.action for p in self._items))

    def names(self) -> list[str]:
        return [p.name for p in self._items]

    def has_admin_permissions(self) -> bool:
        return any(is_system_admin_permission(p) for p in self._items)

    def allows_access(self, resource: str, action: str) -> bool:
        return any(p.allows_action(resource, action) for p in self._items)


class RolesCollection:
    __slots__ = ("_items",)

    def __init__(self, roles: Iterable[Role] = ()) -> None:
        items = tuple(roles)
        seen_ids: set[UUID] = set()
        seen_names: set[str] = set()
        defaults = 0
        for role in items:
            name = role.name.lower()
            if role.id in seen_ids:
                raise InvalidValueError(f"Duplicate role ID: {role.id}")
            if name in seen_names:
                raise InvalidValueError(f"Duplicate role name: {role.name}")
            if role.is_default:
                defaults += 1
            seen_ids.add(role.id)
            seen_names.add(name)
        if defaults > 1:
            raise InvalidValueError("Cannot have more than one default role")
        self._items = items

    @property
    def items(self) -> tuple[Role, ...]:
        return self._items

    def __iter__(self) -> Iterator[Role]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RolesCollection):
            return NotImplemented
        return {r.id for r in self._items} == {r.id for r in other._items}

    def __hash__(self) -> int:
        return hash(frozenset(r.id for r in self._items))

    def __repr__(self) -> str:
        return f"RolesCollection({self.names()})"

    # ── Derivations ──────────────────────────────────────────────────────────

    def add(self, role: Role) -> RolesCollection:
        if self.contains(role.id):
            raise InvalidValueError(f"Role '{role.name}' already exists in collection")
        return RolesCollection((*self._items, role))

    def remove(self, role_id: UUID) -> RolesCollection:
        if not self.contains(role_id):
            return self
        return RolesCollection(r for r in self._items if r.id != role_id)

    def merge(self, other: RolesCollection) -> RolesCollection:
        extra = [r for r in other if not self.contains(r.id)]
        return RolesCollection((*self._items, *extra))

    def intersect(self, other: RolesCollection) -> RolesCollection:
        return RolesCollection(r for r in self._items if other.contains(r.id))

    def filter(self, predicate: Callable[[Role], bool]) -> RolesCollection:
        return RolesCollection(r for r in self._items if predicate(r))

    def admin_roles(self) -> RolesCollection:
        return self.filter(lambda r: r.is_admin_role())

    def non_admin_roles(self) -> RolesCollection:
        return self.filter(lambda r: not r.is_admin_role())

    def deletable_roles(self) -> RolesCollection:
        return self.filter(lambda r: r.can_be_deleted())

    def sort_by_privilege(self) -> RolesCollection:
        """Admin roles first, the default role last, then by name."""
        return RolesCollection(
            sorted(self._items, key=lambda r: (not r.is_admin_role(), r.is_default, r.name))
        )

    def all_permissions(self) -> PermissionsCollection:
        """Union of every role's permissions, first occurrence wins."""
        by_name: dict[str, Permission] = {}
        for role in self._items:
            for permission in role.permissions:
                by_name.setdefault(permission.name, permission)
        return PermissionsCollection(by_name.values())

    # ── Queries ──────────────────────────────────────────────────────────────

    def contains(self, role_id: UUID) -> bool:
        return any(r.id == role_id for r in self._items)

    def contains_name(self, role_name: str) -> bool:
        return any(r.name.lower() == role_name.lower() for r in self._items)

    def get_by_id(self, role_id: UUID) -> Role | None:
        return next((r for r in self._items if r.id == role_id), None)

    def get_by_name(self, role_name: str) -> Role | None:
        return next((r for r in self._items if r.name.lower() == role_name.lower()), None)

    def default_role(self) -> Role | None:
        return next((r for r in self._items if r.is_default), None)

    def find(self, predicate: Callable[[Role], bool]) -> Role | None:
        return next((r for r in self._items if predicate(r)), None)

    def any(self, predicate: Callable[[Role], bool]) -> bool:
        return any(predicate(r) for r in self._items)

    def all(self, predicate: Callable[[Role], bool]) -> bool:
        return all(predicate(r) for r in self._items)

    def names(self) -> list[str]:
        return [r.name for r in self._items]

    def has_admin_privileges(self) -> bool:
        return any(r.is_admin_role() for r in self._items)

    def allows_access(self, resource: str, action: str) -> bool:
        return any(r.permissions_collection.allows_access(resource, action) for r in self._items)

    def has_permission(self, permission_name: str) -> bool:
        return any(r.has_permission_named(permission_name) for r in self._items)

    def highest_privilege_level(self) -> PrivilegeLevel:
        if self.has_permission(SUPERADMIN_PERMISSION):
            return "superadmin"
        if self.has_admin_privileges():
            return "admin"
        if self._items:
            return "user"
        return "guest"
