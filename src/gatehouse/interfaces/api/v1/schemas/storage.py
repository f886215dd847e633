"""Pydantic v2 schemas for storage endpoints."""
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class FileResponse(BaseModel):
    id: UUID
    filename: str
    original_name: str
    mime_type: str
    size: int
    is_public: bool
    user_id: UUID | None
    url: str
    created_at: datetime
    updated_at: datetime


class FileListResponse(BaseModel):
    items: list[FileResponse]
    total: int
    limit: int
    offset: int


class FileAccessRequest(BaseModel):
    is_public: bool
