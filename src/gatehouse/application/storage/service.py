"""File storage use cases: upload, lookup, access control, removal."""
from __future__ import annotations

import logging
from uuid import UUID, uuid4

from gatehouse.application.ports import StorageProvider
from gatehouse.domain.errors import EntityNotFoundError, FileAccessDeniedError
from gatehouse.domain.storage.entities import StoredFile
from gatehouse.domain.storage.repositories import IFileRepository

logger = logging.getLogger(__name__)


class StorageService:
    def __init__(
        self,
        file_repo: IFileRepository,
        provider: StorageProvider,
        signed_url_expire_seconds: int = 900,
    ) -> None:
        self._files = file_repo
        self._provider = provider
        self._signed_url_expire_seconds = signed_url_expire_seconds

    async def _require_file(self, file_id: UUID) -> StoredFile:
        stored = await self._files.get_by_id(file_id)
        if stored is None:
            raise EntityNotFoundError("File", file_id)
        return stored

    async def upload_file(
        self,
        content: bytes,
        original_name: str,
        mime_type: str,
        user_id: UUID | None = None,
        is_public: bool = False,
    ) -> StoredFile:
        blob = await self._provider.upload(content, original_name, mime_type)
        stored = StoredFile(
            id=uuid4(),
            filename=blob.path.rsplit("/", 1)[-1],
            original_name=original_name,
            path=blob.path,
            mime_type=blob.mime_type,
            size=blob.size,
            user_id=user_id,
            is_public=is_public,
        )
        stored = await self._files.save(stored)
        logger.info("File %s uploaded by %s", stored.id, user_id)
        return stored

    async def get_file(self, file_id: UUID, user_id: UUID | None = None) -> StoredFile:
        """Fetch metadata. Private files are only visible to their owner."""
        stored = await self._require_file(file_id)
        if not stored.is_public and (user_id is None or not stored.is_owned_by(user_id)):
            raise FileAccessDeniedError(file_id)
        return stored

    async def get_file_by_path(self, path: str) -> StoredFile:
        stored = await self._files.get_by_path(path)
        if stored is None:
            raise EntityNotFoundError("File", path)
        return stored

    async def list_user_files(self, user_id: UUID) -> list[StoredFile]:
        return await self._files.list_by_user(user_id)

    async def list_files(self, limit: int = 20, offset: int = 0) -> tuple[list[StoredFile], int]:
        files = await self._files.list(limit=limit, offset=offset)
        return files, await self._files.count()

    async def set_access(self, file_id: UUID, user_id: UUID, is_public: bool) -> StoredFile:
        stored = await self._require_file(file_id)
        stored.ensure_owned_by(user_id)
        if is_public:
            stored.make_public()
        else:
            stored.make_private()
        return await self._files.save(stored)

    async def delete_file(self, file_id: UUID, user_id: UUID | None = None) -> None:
        """Remove blob and metadata. ``user_id=None`` skips the owner check (admin)."""
        stored = await self._require_file(file_id)
        if user_id is not None:
            stored.ensure_owned_by(user_id)
        await self._provider.delete(stored.path)
        await self._files.delete(stored.id)
        logger.info("File %s deleted", stored.id)

    async def resolve_url(self, stored: StoredFile) -> str:
        if stored.is_public:
            return self._provider.public_url(stored.path)
        return await self._provider.signed_url(stored.path, self._signed_url_expire_seconds)
