"""Concrete SQLAlchemy repository implementations for the identity context."""
from __future__ import annotations

from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from gatehouse.domain.identity.entities import Permission, Role, User
from gatehouse.domain.identity.value_objects import (
    Email,
    PasswordHash,
    PersonName,
    ResourceAction,
)
from gatehouse.infrastructure.database.models.identity import (
    PermissionModel,
    RoleModel,
    UserModel,
    user_roles,
)


class UserRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, user_id: UUID) -> User | None:
        result = await self._session.get(UserModel, user_id)
        return _to_user(result) if result else None

    async def get_by_email(self, email: str) -> User | None:
        stmt = select(UserModel).where(UserModel.email == email)
        result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()
        return _to_user(row) if row else None

    async def list(self, limit: int = 50, offset: int = 0) -> list[User]:
        stmt = select(UserModel).order_by(UserModel.created_at).limit(limit).offset(offset)
        result = await self._session.execute(stmt)
        return [_to_user(r) for r in result.scalars()]

    async def count(self) -> int:
        result = await self._session.execute(select(func.count()).select_from(UserModel))
        return result.scalar_one()

    async def save(self, user: User) -> User:
        role_models = [await self._session.get(RoleModel, role.id) for role in user.roles]
        role_models = [m for m in role_models if m is not None]

        existing = await self._session.get(UserModel, user.id)
        if existing:
            existing.email = str(user.email)
            existing.password_hash = str(user.password_hash)
            existing.first_name = str(user.first_name)
            existing.last_name = str(user.last_name)
            existing.is_active = user.is_active
            existing.otp_enabled = user.otp_enabled
            existing.otp_secret = user.otp_secret
            existing.last_login_at = user.last_login_at
            existing.updated_at = user.updated_at
            existing.roles = role_models
        else:
            model = UserModel(
                id=user.id,
                email=str(user.email),
                password_hash=str(user.password_hash),
                first_name=str(user.first_name),
                last_name=str(user.last_name),
                is_active=user.is_active,
                otp_enabled=user.otp_enabled,
                otp_secret=user.otp_secret,
                last_login_at=user.last_login_at,
                created_at=user.created_at,
                updated_at=user.updated_at,
                roles=role_models,
            )
            self._session.add(model)
        await self._session.flush()
        return user

    async def delete(self, user_id: UUID) -> None:
        model = await self._session.get(UserModel, user_id)
        if model:
            await self._session.delete(model)
            await self._session.flush()


class RoleRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, role_id: UUID) -> Role | None:
        result = await self._session.get(RoleModel, role_id)
        return _to_role(result) if result else None

    async def get_by_name(self, name: str) -> Role | None:
        stmt = select(RoleModel).where(func.lower(RoleModel.name) == name.lower())
        result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()
        return _to_role(row) if row else None

    async def get_default(self) -> Role | None:
        stmt = select(RoleModel).where(RoleModel.is_default.is_(True))
        result = await self._session.execute(stmt)
        row = result.scalars().first()
        return _to_role(row) if row else None

    async def list(self) -> list[Role]:
        result = await self._session.execute(select(RoleModel).order_by(RoleModel.name))
        return [_to_role(r) for r in result.scalars()]

    async def count_users(self, role_id: UUID) -> int:
        stmt = select(func.count()).select_from(user_roles).where(user_roles.c.role_id == role_id)
        result = await self._session.execute(stmt)
        return result.scalar_one()

    async def save(self, role: Role) -> Role:
        permission_models = [await self._session.get(PermissionModel, p.id) for p in role.permissions]
        permission_models = [m for m in permission_models if m is not None]

        existing = await self._session.get(RoleModel, role.id)
        if existing:
            existing.name = role.name
            existing.description = role.description
            existing.is_default = role.is_default
            existing.updated_at = role.updated_at
            existing.permissions = permission_models
        else:
            model = RoleModel(
                id=role.id,
                name=role.name,
                description=role.description,
                is_default=role.is_default,
                created_at=role.created_at,
                updated_at=role.updated_at,
                permissions=permission_models,
            )
            self._session.add(model)
        await self._session.flush()
        return role

    async def delete(self, role_id: UUID) -> None:
        await self._session.execute(delete(RoleModel).where(RoleModel.id == role_id))
        await self._session.flush()


class PermissionRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, permission_id: UUID) -> Permission | None:
        result = await self._session.get(PermissionModel, permission_id)
        return _to_permission(result) if result else None

    async def get_by_name(self, name: str) -> Permission | None:
        stmt = select(PermissionModel).where(PermissionModel.name == name)
        result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()
        return _to_permission(row) if row else None

    async def list(self) -> list[Permission]:
        result = await self._session.execute(select(PermissionModel).order_by(PermissionModel.name))
        return [_to_permission(r) for r in result.scalars()]

    async def save(self, permission: Permission) -> Permission:
        existing = await self._session.get(PermissionModel, permission.id)
        if existing:
            existing.description = permission.description
            existing.updated_at = permission.updated_at
        else:
            self._session.add(PermissionModel(
                id=permission.id,
                resource=permission.resource,
                action=permission.action,
                name=permission.name,
                description=permission.description,
                created_at=permission.created_at,
                updated_at=permission.updated_at,
            ))
        await self._session.flush()
        return permission


# ── Mappers ───────────────────────────────────────────────────────────────────

def _to_permission(m: PermissionModel) -> Permission:
    return Permission(
        id=m.id,
        resource_action=ResourceAction(m.resource, m.action),
        description=m.description,
        created_at=m.created_at,
        updated_at=m.updated_at,
    )


def _to_role(m: RoleModel) -> Role:
    return Role(
        id=m.id,
        name=m.name,
        description=m.description,
        permissions=tuple(_to_permission(p) for p in m.permissions),
        is_default=m.is_default,
        created_at=m.created_at,
        updated_at=m.updated_at,
    )


def _to_user(m: UserModel) -> User:
    return User(
        id=m.id,
        email=Email(m.email),
        password_hash=PasswordHash(m.password_hash),
        first_name=PersonName(m.first_name),
        last_name=PersonName(m.last_name),
        is_active=m.is_active,
        otp_enabled=m.otp_enabled,
        otp_secret=m.otp_secret,
        roles=tuple(_to_role(r) for r in m.roles),
        last_login_at=m.last_login_at,
        created_at=m.created_at,
        updated_at=m.updated_at,
    )
