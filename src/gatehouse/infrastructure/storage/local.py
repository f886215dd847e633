"""Filesystem storage provider with JWT-signed download URLs."""
import asyncio
import logging
from pathlib import Path
from urllib.parse import quote
from uuid import uuid4

from jose import JWTError

from gatehouse.application.ports import StoredBlob
from gatehouse.domain.errors import FileAccessDeniedError, InvalidValueError
from gatehouse.infrastructure.auth.jwt import decode_token, sign_payload

logger = logging.getLogger(__name__)

SIGNED_URL_PURPOSE = "file-download"


class LocalStorageProvider:
    def __init__(self, root: Path, public_base_url: str) -> None:
        self._root = Path(root)
        self._public_base_url = public_base_url.rstrip("/")

    def _resolve(self, path: str) -> Path:
        target = (self._root / path).resolve()
        if not target.is_relative_to(self._root.resolve()):
            raise InvalidValueError(f"Path escapes storage root: {path}")
        return target

    async def upload(self, content: bytes, filename: str, mime_type: str) -> StoredBlob:
        safe_name = Path(filename).name or "file"
        relative = f"{uuid4().hex}_{safe_name}"
        target = self._resolve(relative)
        self._root.mkdir(parents=True, exist_ok=True)
        await asyncio.to_thread(target.write_bytes, content)
        logger.info("Stored %s (%d bytes)", relative, len(content))
        return StoredBlob(path=relative, size=len(content), mime_type=mime_type)

    async def read(self, path: str) -> bytes:
        return await asyncio.to_thread(self._resolve(path).read_bytes)

    def public_url(self, path: str) -> str:
        return f"{self._public_base_url}/{quote(path)}"

    async def signed_url(self, path: str, expires_in_seconds: int) -> str:
        token = sign_payload({"path": path, "purpose": SIGNED_URL_PURPOSE}, expires_in_seconds)
        return f"{self.public_url(path)}?signature={token}"

    def verify_signature(self, path: str, signature: str) -> None:
        """Raise ``FileAccessDeniedError`` unless ``signature`` was issued for ``path``."""
        try:
            payload = decode_token(signature)
        except JWTError as exc:
            raise FileAccessDeniedError(path) from exc
        if payload.get("purpose") != SIGNED_URL_PURPOSE or payload.get("path") != path:
            raise FileAccessDeniedError(path)

    async def delete(self, path: str) -> None:
        target = self._resolve(path)
        await asyncio.to_thread(target.unlink, True)
        logger.info("Deleted %s", path)
