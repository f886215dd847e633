"""Role and permission management use cases.

At most one role is the default at any time. Every write that sets
``is_default`` first clears the flag on the current default role.
"""
from __future__ import annotations

import logging
from uuid import UUID

from gatehouse.domain.errors import (
    EntityAlreadyExistsError,
    EntityNotFoundError,
    ForbiddenActionError,
    RoleHasAssignedUsersError,
)
from gatehouse.domain.identity.authorization import UserAuthorizationService
from gatehouse.domain.identity.entities import Permission, Role
from gatehouse.domain.identity.repositories import (
    IPermissionRepository,
    IRoleRepository,
    IUserRepository,
)

logger = logging.getLogger(__name__)


class RoleService:
    def __init__(
        self,
        role_repo: IRoleRepository,
        permission_repo: IPermissionRepository,
        user_repo: IUserRepository,
        authorization: UserAuthorizationService | None = None,
    ) -> None:
        self._roles = role_repo
        self._permissions = permission_repo
        self._users = user_repo
        self._authorization = authorization or UserAuthorizationService()

    async def _require_role(self, role_id: UUID) -> Role:
        role = await self._roles.get_by_id(role_id)
        if role is None:
            raise EntityNotFoundError("Role", role_id)
        return role

    async def _require_permission(self, permission_id: UUID) -> Permission:
        permission = await self._permissions.get_by_id(permission_id)
        if permission is None:
            raise EntityNotFoundError("Permission", permission_id)
        return permission

    async def _ensure_name_available(self, name: str, role_id: UUID | None = None) -> None:
        existing = await self._roles.get_by_name(name)
        if existing is not None and existing.id != role_id:
            raise EntityAlreadyExistsError("Role", "name")

    async def _release_default(self, keep_id: UUID | None = None) -> None:
        current = await self._roles.get_default()
        if current is not None and current.id != keep_id:
            current.remove_as_default()
            await self._roles.save(current)
            logger.info("Role %s is no longer the default", current.name)

    async def create_role(self, name: str, description: str, is_default: bool = False) -> Role:
        return await self.create_role_with_permissions(name, description, [], is_default)

    async def create_role_with_permissions(
        self,
        name: str,
        description: str,
        permission_ids: list[UUID],
        is_default: bool = False,
    ) -> Role:
        await self._ensure_name_available(name)
        role = Role.create(name, description, is_default=is_default)

        permissions = [
            await self._require_permission(permission_id)
            for permission_id in dict.fromkeys(permission_ids)
        ]
        role.add_permissions_on_creation(permissions)

        if is_default:
            await self._release_default()
        role = await self._roles.save(role)
        logger.info("Role %s created with %d permissions", role.name, len(role.permissions))
        return role

    async def update_role(
        self,
        role_id: UUID,
        *,
        name: str | None = None,
        description: str | None = None,
        is_default: bool | None = None,
    ) -> Role:
        role = await self._require_role(role_id)
        if name is not None:
            await self._ensure_name_available(name, role_id)
        role.update_details(name=name, description=description)

        if is_default is True:
            await self._release_default(keep_id=role.id)
            role.set_as_default()
        elif is_default is False:
            role.remove_as_default()

        return await self._roles.save(role)

    async def assign_permission_to_role(self, role_id: UUID, permission_id: UUID) -> Role:
        role = await self._require_role(role_id)
        permission = await self._require_permission(permission_id)
        role.add_permission(permission)
        role = await self._roles.save(role)
        logger.info("Permission %s assigned to role %s", permission.name, role.name)
        return role

    async def remove_permission_from_role(self, role_id: UUID, permission_id: UUID) -> Role:
        role = await self._require_role(role_id)
        role.remove_permission(permission_id)
        return await self._roles.save(role)

    async def delete_role(self, role_id: UUID, deleter_id: UUID | None = None) -> None:
        role = await self._require_role(role_id)
        role.validate_for_deletion()

        if deleter_id is not None:
            deleter = await self._users.get_by_id(deleter_id)
            if deleter is None:
                raise EntityNotFoundError("User", deleter_id)
            if not self._authorization.can_delete_role(deleter, role):
                logger.warning("User %s denied deleting role %s", deleter_id, role.name)
                raise ForbiddenActionError("You are not authorized to delete this role")

        if await self._roles.count_users(role.id) > 0:
            raise RoleHasAssignedUsersError(role.name)

        await self._roles.delete(role.id)
        logger.info("Role %s deleted", role.name)

    async def get_role(self, role_id: UUID) -> Role:
        return await self._require_role(role_id)

    async def list_roles(self) -> list[Role]:
        return await self._roles.list()

    async def list_permissions(self) -> list[Permission]:
        return await self._permissions.list()
