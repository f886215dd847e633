"""In-memory stand-ins for the repositories and outbound ports.

Stored entities are deep-copied on the way in and out, so a test sees the
same detached snapshots the SQLAlchemy repositories hand back.
"""
from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass, field, replace
from uuid import UUID

from gatehouse.application.ports import StoredBlob
from gatehouse.config import Settings
from gatehouse.domain.auth.entities import EmailVerification, Otp, PasswordReset, RefreshToken
from gatehouse.domain.identity.entities import Permission, Role, User
from gatehouse.domain.identity.value_objects import Email, Password, PersonName, ResourceAction
from gatehouse.domain.storage.entities import StoredFile
from gatehouse.infrastructure.auth.password import hash_password
from gatehouse.interfaces.facade import GatehouseFacade

# ── Identity ──────────────────────────────────────────────────────────────────


class FakeUserRepository:
    def __init__(self) -> None:
        self.rows: dict[UUID, User] = {}

    async def get_by_id(self, user_id: UUID) -> User | None:
        user = self.rows.get(user_id)
        return deepcopy(user) if user else None

    async def get_by_email(self, email: str) -> User | None:
        user = next((u for u in self.rows.values() if str(u.email) == email), None)
        return deepcopy(user) if user else None

    async def list(self, limit: int = 50, offset: int = 0) -> list[User]:
        ordered = sorted(self.rows.values(), key=lambda u: u.created_at)
        return [deepcopy(u) for u in ordered[offset:offset + limit]]

    async def count(self) -> int:
        return len(self.rows)

    async def save(self, user: User) -> User:
        self.rows[user.id] = deepcopy(user)
        return user

    async def delete(self, user_id: UUID) -> None:
        self.rows.pop(user_id, None)


class FakeRoleRepository:
    def __init__(self, users: FakeUserRepository) -> None:
        self.rows: dict[UUID, Role] = {}
        self._users = users

    async def get_by_id(self, role_id: UUID) -> Role | None:
        role = self.rows.get(role_id)
        return deepcopy(role) if role else None

    async def get_by_name(self, name: str) -> Role | None:
        role = next((r for r in self.rows.values() if r.name.lower() == name.lower()), None)
        return deepcopy(role) if role else None

    async def get_default(self) -> Role | None:
        role = next((r for r in self.rows.values() if r.is_default), None)
        return deepcopy(role) if role else None

    async def list(self) -> list[Role]:
        return [deepcopy(r) for r in sorted(self.rows.values(), key=lambda r: r.name)]

    async def count_users(self, role_id: UUID) -> int:
        return sum(1 for u in self._users.rows.values() if u.has_role(role_id))

    async def save(self, role: Role) -> Role:
        self.rows[role.id] = deepcopy(role)
        return role

    async def delete(self, role_id: UUID) -> None:
        self.rows.pop(role_id, None)


class FakePermissionRepository:
    def __init__(self) -> None:
        self.rows: dict[UUID, Permission] = {}

    async def get_by_id(self, permission_id: UUID) -> Permission | None:
        permission = self.rows.get(permission_id)
        return deepcopy(permission) if permission else None

    async def get_by_name(self, name: str) -> Permission | None:
        permission = next((p for p in self.rows.values() if p.name == name), None)
        return deepcopy(permission) if permission else None

    async def list(self) -> list[Permission]:
        return [deepcopy(p) for p in sorted(self.rows.values(), key=lambda p: p.name)]

    async def save(self, permission: Permission) -> Permission:
        self.rows[permission.id] = deepcopy(permission)
        return permission


# ── Auth ──────────────────────────────────────────────────────────────────────


class FakeOtpRepository:
    def __init__(self) -> None:
        self.rows: dict[UUID, Otp] = {}

    async def get_by_user_id(self, user_id: UUID) -> Otp | None:
        matches = [o for o in self.rows.values() if o.user_id == user_id]
        if not matches:
            return None
        return deepcopy(max(matches, key=lambda o: o.created_at))

    async def save(self, otp: Otp) -> Otp:
        self.rows[otp.id] = deepcopy(otp)
        return otp

    async def delete_by_user_id(self, user_id: UUID) -> None:
        self.rows = {k: v for k, v in self.rows.items() if v.user_id != user_id}


class FakeRefreshTokenRepository:
    def __init__(self) -> None:
        self.rows: dict[UUID, RefreshToken] = {}

    async def get_by_token(self, token: str) -> RefreshToken | None:
        match = next((t for t in self.rows.values() if str(t.token) == token), None)
        return deepcopy(match) if match else None

    async def save(self, refresh_token: RefreshToken) -> RefreshToken:
        self.rows[refresh_token.id] = deepcopy(refresh_token)
        return refresh_token

    async def delete_by_user_id(self, user_id: UUID) -> None:
        self.rows = {k: v for k, v in self.rows.items() if v.user_id != user_id}


class FakeEmailVerificationRepository:
    def __init__(self) -> None:
        self.rows: dict[UUID, EmailVerification] = {}

    def _latest(self, matches: list[EmailVerification]) -> EmailVerification | None:
        if not matches:
            return None
        return deepcopy(max(matches, key=lambda v: v.created_at))

    async def get_by_email_and_code(self, email: str, code: str) -> EmailVerification | None:
        return self._latest([
            v for v in self.rows.values() if str(v.email) == email and str(v.code) == code
        ])

    async def get_latest_by_email(self, email: str) -> EmailVerification | None:
        return self._latest([v for v in self.rows.values() if str(v.email) == email])

    async def save(self, verification: EmailVerification) -> EmailVerification:
        self.rows[verification.id] = deepcopy(verification)
        return verification

    async def delete_by_email(self, email: str) -> None:
        self.rows = {k: v for k, v in self.rows.items() if str(v.email) != email}


class FakePasswordResetRepository:
    def __init__(self) -> None:
        self.rows: dict[UUID, PasswordReset] = {}

    async def get_by_token(self, token: str) -> PasswordReset | None:
        match = next((r for r in self.rows.values() if str(r.token) == token), None)
        return deepcopy(match) if match else None

    async def save(self, reset: PasswordReset) -> PasswordReset:
        self.rows[reset.id] = deepcopy(reset)
        return reset

    async def delete_by_user_id(self, user_id: UUID) -> None:
        self.rows = {k: v for k, v in self.rows.items() if v.user_id != user_id}


# ── Storage ───────────────────────────────────────────────────────────────────


class FakeFileRepository:
    def __init__(self) -> None:
        self.rows: dict[UUID, StoredFile] = {}

    async def get_by_id(self, file_id: UUID) -> StoredFile | None:
        stored = self.rows.get(file_id)
        return deepcopy(stored) if stored else None

    async def get_by_path(self, path: str) -> StoredFile | None:
        stored = next((f for f in self.rows.values() if f.path == path), None)
        return deepcopy(stored) if stored else None

    async def list_by_user(self, user_id: UUID) -> list[StoredFile]:
        matches = [f for f in self.rows.values() if f.user_id == user_id]
        return [deepcopy(f) for f in sorted(matches, key=lambda f: f.created_at, reverse=True)]

    async def list(self, limit: int = 20, offset: int = 0) -> list[StoredFile]:
        ordered = sorted(self.rows.values(), key=lambda f: f.created_at, reverse=True)
        return [deepcopy(f) for f in ordered[offset:offset + limit]]

    async def count(self) -> int:
        return len(self.rows)

    async def save(self, stored_file: StoredFile) -> StoredFile:
        self.rows[stored_file.id] = deepcopy(stored_file)
        return stored_file

    async def delete(self, file_id: UUID) -> None:
        self.rows.pop(file_id, None)


# ── Ports ─────────────────────────────────────────────────────────────────────


class RecordingEmailSender:
    def __init__(self) -> None:
        self.verification_codes: list[tuple[str, str]] = []
        self.password_resets: list[tuple[str, str]] = []
        self.welcomes: list[tuple[str, str]] = []

    async def send_verification_code(self, to: str, code: str) -> None:
        self.verification_codes.append((to, code))

    async def send_password_reset(self, to: str, reset_url: str) -> None:
        self.password_resets.append((to, reset_url))

    async def send_welcome(self, to: str, first_name: str) -> None:
        self.welcomes.append((to, first_name))

    def last_code_for(self, email: str) -> str:
        return next(code for to, code in reversed(self.verification_codes) if to == email)


class MemoryStorageProvider:
    def __init__(self) -> None:
        self.blobs: dict[str, bytes] = {}

    async def upload(self, content: bytes, filename: str, mime_type: str) -> StoredBlob:
        path = f"{len(self.blobs)}_{filename}"
        self.blobs[path] = content
        return StoredBlob(path=path, size=len(content), mime_type=mime_type)

    async def signed_url(self, path: str, expires_in_seconds: int) -> str:
        return f"memory://{path}?expires={expires_in_seconds}"

    def public_url(self, path: str) -> str:
        return f"memory://{path}"

    async def delete(self, path: str) -> None:
        self.blobs.pop(path, None)


# ── Wiring ────────────────────────────────────────────────────────────────────


@dataclass
class Backend:
    """Every fake collaborator a ``GatehouseFacade`` needs, kept reachable for assertions."""
    users: FakeUserRepository = field(default_factory=FakeUserRepository)
    permissions: FakePermissionRepository = field(default_factory=FakePermissionRepository)
    otps: FakeOtpRepository = field(default_factory=FakeOtpRepository)
    refresh_tokens: FakeRefreshTokenRepository = field(default_factory=FakeRefreshTokenRepository)
    verifications: FakeEmailVerificationRepository = field(default_factory=FakeEmailVerificationRepository)
    resets: FakePasswordResetRepository = field(default_factory=FakePasswordResetRepository)
    files: FakeFileRepository = field(default_factory=FakeFileRepository)
    mailer: RecordingEmailSender = field(default_factory=RecordingEmailSender)
    storage: MemoryStorageProvider = field(default_factory=MemoryStorageProvider)
    roles: FakeRoleRepository = field(init=False)

    def __post_init__(self) -> None:
        self.roles = FakeRoleRepository(self.users)

    def facade(self, settings: Settings) -> GatehouseFacade:
        return GatehouseFacade(
            user_repo=self.users,
            role_repo=self.roles,
            permission_repo=self.permissions,
            otp_repo=self.otps,
            refresh_token_repo=self.refresh_tokens,
            email_verification_repo=self.verifications,
            password_reset_repo=self.resets,
            file_repo=self.files,
            email_sender=self.mailer,
            storage_provider=self.storage,
            settings=settings,
        )


def make_permission(name: str, description: str = "Test permission") -> Permission:
    return Permission.create(ResourceAction.parse(name), description)


async def seed_roles(backend: Backend) -> tuple[Role, Role]:
    """Store an ``admin`` role holding the full grid and a default ``user`` role."""
    names = [
        f"{resource}:{action}"
        for resource in ("user", "role", "storage")
        for action in ("read", "create", "update", "delete")
    ]
    permissions = {name: make_permission(name) for name in names}
    for permission in permissions.values():
        await backend.permissions.save(permission)

    admin = Role.create("admin", "Administrator role with full access")
    admin.add_permissions_on_creation(list(permissions.values()))
    user = Role.create("user", "Default user role", is_default=True)
    user.add_permissions_on_creation([permissions["user:read"], permissions["storage:read"]])

    await backend.roles.save(admin)
    await backend.roles.save(user)
    return admin, user


async def store_admin(backend: Backend, admin_role: Role, email: str = "admin@example.com",
                      password: str = "Admin123!pass") -> User:
    """Persist an active administrator without going through role assignment."""
    admin = replace(
        User.create(Email(email), hash_password(Password(password)), PersonName("Ada"), PersonName("Admin")),
        roles=(admin_role,),
    )
    await backend.users.save(admin)
    return admin
