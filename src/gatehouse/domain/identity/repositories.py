"""Repository interfaces for the identity context (implemented in infrastructure)."""
from __future__ import annotations

from typing import Protocol
from uuid import UUID

from .entities import Permission, Role, User


class IUserRepository(Protocol):
    async def get_by_id(self, user_id: UUID) -> User | None: ...
    async def get_by_email(self, email: str) -> User | None: ...
    async def list(self, limit: int = 50, offset: int = 0) -> list[User]: ...
    async def count(self) -> int: ...
    async def save(self, user: User) -> User: ...
    async def delete(self, user_id: UUID) -> None: ...


class IRoleRepository(Protocol):
    async def get_by_id(self, role_id: UUID) -> Role | None: ...
    async def get_by_name(self, name: str) -> Role | None: ...
    async def get_default(self) -> Role | None: ...
    async def list(self) -> list[Role]: ...
    async def count_users(self, role_id: UUID) -> int: ...
    async def save(self, role: Role) -> Role: ...
    async def delete(self, role_id: UUID) -> None: ...


class IPermissionRepository(Protocol):
    async def get_by_id(self, permission_id: UUID) -> Permission | None: ...
    async def get_by_name(self, name: str) -> Permission | None: ...
    async def list(self) -> list[Permission]: ...
    async def save(self, permission: Permission) -> Permission: ...
