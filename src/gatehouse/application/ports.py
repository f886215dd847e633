"""Outbound capabilities the application layer depends on."""
from dataclasses import dataclass
from typing import Protocol


class EmailSender(Protocol):
    async def send_verification_code(self, to: str, code: str) -> None: ...
    async def send_password_reset(self, to: str, reset_url: str) -> None: ...
    async def send_welcome(self, to: str, first_name: str) -> None: ...


@dataclass(frozen=True)
class StoredBlob:
    """What a provider reports back after accepting an upload."""
    path: str
    size: int
    mime_type: str


class StorageProvider(Protocol):
    async def upload(self, content: bytes, filename: str, mime_type: str) -> StoredBlob: ...
    async def signed_url(self, path: str, expires_in_seconds: int) -> str: ...
    def public_url(self, path: str) -> str: ...
    async def delete(self, path: str) -> None: ...
