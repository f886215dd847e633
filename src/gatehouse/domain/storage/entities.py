"""Domain entities for the Storage bounded context."""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import UUID

from gatehouse.domain.errors import FileNotOwnedByUserError


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class StoredFile:
    """Metadata for a blob held by a storage provider."""
    id: UUID
    filename: str
    original_name: str
    path: str
    mime_type: str
    size: int
    user_id: UUID | None = None
    is_public: bool = False
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    def is_owned_by(self, user_id: UUID) -> bool:
        return self.user_id is not None and self.user_id == user_id

    def ensure_owned_by(self, user_id: UUID) -> None:
        if not self.is_owned_by(user_id):
            raise FileNotOwnedByUserError(self.id, user_id)

    def make_public(self) -> None:
        if self.is_public:
            return
        self.is_public = True
        self.updated_at = _utcnow()

    def make_private(self) -> None:
        if not self.is_public:
            return
        self.is_public = False
        self.updated_at = _utcnow()
