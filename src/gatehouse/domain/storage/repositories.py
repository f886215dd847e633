"""Repository interface for stored file metadata."""
from __future__ import annotations

from typing import Protocol
from uuid import UUID

from .entities import StoredFile


class IFileRepository(Protocol):
    async def get_by_id(self, file_id: UUID) -> StoredFile | None: ...
    async def get_by_path(self, path: str) -> StoredFile | None: ...
    async def list_by_user(self, user_id: UUID) -> list[StoredFile]: ...
    async def list(self, limit: int = 20, offset: int = 0) -> list[StoredFile]: ...
    async def count(self) -> int: ...
    async def save(self, stored_file: StoredFile) -> StoredFile: ...
    async def delete(self, file_id: UUID) -> None: ...
