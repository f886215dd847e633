"""Storage router: uploads, metadata, access control and downloads."""
from urllib.parse import quote
from uuid import UUID

from fastapi import APIRouter, Depends, Form, HTTPException, Query, Response, UploadFile, status

from gatehouse.domain.storage.entities import StoredFile
from gatehouse.interfaces.api.v1.schemas.storage import FileAccessRequest, FileListResponse, FileResponse
from gatehouse.interfaces.dependencies import CurrentUserId, Facade, Storage, require_admin

router = APIRouter(prefix="/files", tags=["files"])
admin_router = APIRouter(prefix="/admin/files", tags=["admin"], dependencies=[Depends(require_admin)])
# Served at the application root so URLs built from storage_public_url resolve.
download_router = APIRouter(tags=["files"])

_MAX_FILE_SIZE = 20 * 1024 * 1024  # 20 MB


def _content_disposition(filename: str) -> str:
    """Inline disposition with an ASCII fallback name and the UTF-8 original (RFC 6266)."""
    fallback = "".join(c if " " <= c <= "~" and c not in "\"\\" else "_" for c in filename)
    return f"inline; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename, safe='')}"


async def _file_response(facade, stored: StoredFile) -> FileResponse:
    return FileResponse(
        id=stored.id,
        filename=stored.filename,
        original_name=stored.original_name,
        mime_type=stored.mime_type,
        size=stored.size,
        is_public=stored.is_public,
        user_id=stored.user_id,
        url=await facade.file_url(stored),
        created_at=stored.created_at,
        updated_at=stored.updated_at,
    )


@router.post("", response_model=FileResponse, status_code=status.HTTP_201_CREATED)
async def upload_file(
    file: UploadFile,
    facade: Facade,
    current_user_id: CurrentUserId,
    is_public: bool = Form(False),
):
    if not file.filename:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="A filename is required")

    content = await file.read()
    if len(content) > _MAX_FILE_SIZE:
        raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail="File too large (max 20 MB)")

    stored = await facade.upload_file(
        current_user_id,
        content,
        file.filename,
        file.content_type or "application/octet-stream",
        is_public,
    )
    return await _file_response(facade, stored)


@router.get("", response_model=list[FileResponse])
async def list_my_files(facade: Facade, current_user_id: CurrentUserId):
    return [await _file_response(facade, f) for f in await facade.list_my_files(current_user_id)]


@router.get("/{file_id}", response_model=FileResponse)
async def get_file(file_id: UUID, facade: Facade, current_user_id: CurrentUserId):
    return await _file_response(facade, await facade.get_file(file_id, current_user_id))


@router.patch("/{file_id}/access", response_model=FileResponse)
async def set_access(file_id: UUID, body: FileAccessRequest, facade: Facade, current_user_id: CurrentUserId):
    stored = await facade.set_file_access(file_id, current_user_id, body.is_public)
    return await _file_response(facade, stored)


@router.delete("/{file_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_file(file_id: UUID, facade: Facade, current_user_id: CurrentUserId):
    await facade.delete_file(file_id, current_user_id)


@admin_router.get("", response_model=FileListResponse)
async def list_all_files(
    facade: Facade,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
):
    files, total = await facade.list_all_files(limit, offset)
    return FileListResponse(
        items=[await _file_response(facade, f) for f in files], total=total, limit=limit, offset=offset,
    )


@admin_router.delete("/{file_id}", status_code=status.HTTP_204_NO_CONTENT)
async def admin_delete_file(file_id: UUID, facade: Facade):
    await facade.delete_file(file_id, None)


@download_router.get("/files/{path:path}")
async def download(path: str, facade: Facade, storage: Storage, signature: str | None = None):
    stored = await facade.get_file_by_path(path)
    if not stored.is_public:
        if signature is None:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Signature required")
        storage.verify_signature(path, signature)

    content = await storage.read(path)
    return Response(
        content=content,
        media_type=stored.mime_type,
        headers={"Content-Disposition": _content_disposition(stored.original_name)},
    )
