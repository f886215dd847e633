"""Concrete SQLAlchemy repository for stored file metadata."""
from __future__ import annotations

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from gatehouse.domain.storage.entities import StoredFile
from gatehouse.infrastructure.database.models.storage import FileModel


class FileRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, file_id: UUID) -> StoredFile | None:
        result = await self._session.get(FileModel, file_id)
        return _to_file(result) if result else None

    async def get_by_path(self, path: str) -> StoredFile | None:
        stmt = select(FileModel).where(FileModel.path == path)
        result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()
        return _to_file(row) if row else None

    async def list_by_user(self, user_id: UUID) -> list[StoredFile]:
        stmt = select(FileModel).where(FileModel.user_id == user_id).order_by(FileModel.created_at.desc())
        result = await self._session.execute(stmt)
        return [_to_file(r) for r in result.scalars()]

    async def list(self, limit: int = 20, offset: int = 0) -> list[StoredFile]:
        stmt = select(FileModel).order_by(FileModel.created_at.desc()).limit(limit).offset(offset)
        result = await self._session.execute(stmt)
        return [_to_file(r) for r in result.scalars()]

    async def count(self) -> int:
        result = await self._session.execute(select(func.count()).select_from(FileModel))
        return result.scalar_one()

    async def save(self, stored_file: StoredFile) -> StoredFile:
        existing = await self._session.get(FileModel, stored_file.id)
        if existing:
            existing.is_public = stored_file.is_public
            existing.updated_at = stored_file.updated_at
        else:
            self._session.add(FileModel(
                id=stored_file.id,
                filename=stored_file.filename,
                original_name=stored_file.original_name,
                path=stored_file.path,
                mime_type=stored_file.mime_type,
                size=stored_file.size,
                user_id=stored_file.user_id,
                is_public=stored_file.is_public,
                created_at=stored_file.created_at,
                updated_at=stored_file.updated_at,
            ))
        await self._session.flush()
        return stored_file

    async def delete(self, file_id: UUID) -> None:
        model = await self._session.get(FileModel, file_id)
        if model:
            await self._session.delete(model)
            await self._session.flush()


def _to_file(m: FileModel) -> StoredFile:
    return StoredFile(
        id=m.id,
        filename=m.filename,
        original_name=m.original_name,
        path=m.path,
        mime_type=m.mime_type,
        size=m.size,
        user_id=m.user_id,
        is_public=m.is_public,
        created_at=m.created_at,
        updated_at=m.updated_at,
    )
