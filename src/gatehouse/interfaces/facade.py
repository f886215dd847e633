"""GatehouseFacade: the single entry point to the application layer.

Routers go through this facade instead of wiring services themselves, which
keeps the API layer thin.
"""
from __future__ import annotations

from uuid import UUID

from gatehouse.application.auth import commands as auth_commands
from gatehouse.application.auth.commands import LoginResult
from gatehouse.application.auth.service import AuthService, TwoFactorSetup
from gatehouse.application.auth.tokens import TokenIssuer, TokenPair
from gatehouse.application.identity.roles import RoleService
from gatehouse.application.identity.users import UserService
from gatehouse.application.ports import EmailSender, StorageProvider
from gatehouse.application.storage.service import StorageService
from gatehouse.config import Settings
from gatehouse.domain.auth.repositories import (
    IEmailVerificationRepository,
    IOtpRepository,
    IPasswordResetRepository,
    IRefreshTokenRepository,
)
from gatehouse.domain.identity.authorization import UserAuthorizationService
from gatehouse.domain.identity.entities import Permission, Role, User
from gatehouse.domain.identity.repositories import (
    IPermissionRepository,
    IRoleRepository,
    IUserRepository,
)
from gatehouse.domain.storage.entities import StoredFile
from gatehouse.domain.storage.repositories import IFileRepository
from gatehouse.infrastructure.auth.totp import TotpService


class GatehouseFacade:
    """Aggregates all application use cases. Injected via FastAPI dependency."""

    def __init__(
        self,
        *,
        user_repo: IUserRepository,
        role_repo: IRoleRepository,
        permission_repo: IPermissionRepository,
        otp_repo: IOtpRepository,
        refresh_token_repo: IRefreshTokenRepository,
        email_verification_repo: IEmailVerificationRepository,
        password_reset_repo: IPasswordResetRepository,
        file_repo: IFileRepository,
        email_sender: EmailSender,
        storage_provider: StorageProvider,
        settings: Settings,
    ) -> None:
        self._user_repo = user_repo
        self._mailer = email_sender
        self._settings = settings
        self.authorization = UserAuthorizationService()
        self.users = UserService(user_repo, role_repo, self.authorization)
        self.roles = RoleService(role_repo, permission_repo, user_repo, self.authorization)
        self.auth = AuthService(
            user_repo,
            otp_repo,
            refresh_token_repo,
            email_verification_repo,
            password_reset_repo,
            TotpService(settings.otp_issuer, settings.otp_digits, settings.otp_step_seconds),
            settings,
        )
        self.tokens = TokenIssuer(self.auth, user_repo, role_repo)
        self.storage = StorageService(file_repo, storage_provider, settings.storage_signed_url_expire_seconds)

    # ── Auth ──────────────────────────────────────────────────────────────────

    async def register(self, email: str, password: str, first_name: str, last_name: str) -> User:
        return await auth_commands.register_user(
            email=email, password=password, first_name=first_name, last_name=last_name,
            users=self.users, auth=self.auth, mailer=self._mailer,
        )

    async def login(self, email: str, password: str) -> LoginResult:
        return await auth_commands.login_user(
            email=email, password=password, users=self.users, auth=self.auth, tokens=self.tokens,
        )

    async def verify_two_factor_login(self, challenge_token: str, code: str) -> LoginResult:
        return await auth_commands.verify_two_factor_login(
            challenge_token=challenge_token, code=code,
            auth=self.auth, tokens=self.tokens, user_repo=self._user_repo,
        )

    async def refresh(self, refresh_token: str) -> TokenPair:
        return await auth_commands.refresh_session(refresh_token=refresh_token, tokens=self.tokens)

    async def logout(self, user_id: UUID) -> None:
        await auth_commands.logout_user(user_id=user_id, auth=self.auth)

    async def send_verification_email(self, email: str) -> None:
        await auth_commands.send_verification_email(email=email, auth=self.auth, mailer=self._mailer)

    async def verify_email(self, email: str, code: str) -> LoginResult:
        return await auth_commands.verify_email(
            email=email, code=code, auth=self.auth, tokens=self.tokens, user_repo=self._user_repo,
        )

    async def is_email_verified(self, email: str) -> bool:
        return await self.auth.is_email_verified(email)

    async def request_password_reset(self, email: str) -> None:
        await auth_commands.request_password_reset(
            email=email, auth=self.auth, mailer=self._mailer,
            reset_url=self._settings.password_reset_url,
        )

    async def reset_password(self, token: str, new_password: str) -> User:
        return await auth_commands.reset_password(token=token, new_password=new_password, auth=self.auth)

    async def generate_otp(self, user_id: UUID) -> str:
        return await self.auth.generate_otp(user_id)

    async def verify_otp(self, user_id: UUID, code: str) -> bool:
        return await self.auth.verify_otp(user_id, code)

    async def setup_two_factor(self, user_id: UUID) -> TwoFactorSetup:
        return await auth_commands.setup_two_factor(user_id=user_id, auth=self.auth)

    async def verify_two_factor(self, user_id: UUID, code: str) -> bool:
        return await self.auth.verify_two_factor_token(user_id, code)

    async def disable_two_factor(self, user_id: UUID, code: str) -> User:
        return await auth_commands.disable_two_factor(user_id=user_id, code=code, auth=self.auth)

    # ── Users ─────────────────────────────────────────────────────────────────

    async def get_user(self, user_id: UUID) -> User:
        return await self.users.get_user(user_id)

    async def update_profile(self, user_id: UUID, first_name: str | None, last_name: str | None) -> User:
        return await self.users.update_user_details(user_id, first_name=first_name, last_name=last_name)

    async def change_password(self, user_id: UUID, current_password: str, new_password: str) -> User:
        return await self.users.change_password(user_id, new_password, current_password=current_password)

    async def list_users(self, limit: int, offset: int) -> tuple[list[User], int]:
        return await self.users.list_users(limit=limit, offset=offset)

    async def update_user(self, user_id: UUID, assigner_id: UUID, **changes) -> User:
        return await self.users.update_user_details(user_id, assigner_id=assigner_id, **changes)

    async def set_user_password(self, user_id: UUID, new_password: str) -> User:
        return await self.users.change_password(user_id, new_password)

    async def assign_role(self, user_id: UUID, role_id: UUID, assigner_id: UUID) -> User:
        return await self.users.assign_role_to_user(user_id, role_id, assigner_id=assigner_id)

    async def remove_role(self, user_id: UUID, role_id: UUID) -> User:
        return await self.users.remove_role_from_user(user_id, role_id)

    async def activate_user(self, user_id: UUID) -> User:
        return await self.users.activate_user(user_id)

    async def deactivate_user(self, user_id: UUID) -> User:
        return await self.users.deactivate_user(user_id)

    async def delete_user(self, user_id: UUID) -> None:
        await self.users.delete_user(user_id)

    # ── Roles ─────────────────────────────────────────────────────────────────

    async def list_roles(self) -> list[Role]:
        return await self.roles.list_roles()

    async def get_role(self, role_id: UUID) -> Role:
        return await self.roles.get_role(role_id)

    async def create_role(
        self, name: str, description: str, permission_ids: list[UUID], is_default: bool
    ) -> Role:
        return await self.roles.create_role_with_permissions(name, description, permission_ids, is_default)

    async def update_role(self, role_id: UUID, **changes) -> Role:
        return await self.roles.update_role(role_id, **changes)

    async def delete_role(self, role_id: UUID, deleter_id: UUID) -> None:
        await self.roles.delete_role(role_id, deleter_id=deleter_id)

    async def assign_permission(self, role_id: UUID, permission_id: UUID) -> Role:
        return await self.roles.assign_permission_to_role(role_id, permission_id)

    async def remove_permission(self, role_id: UUID, permission_id: UUID) -> Role:
        return await self.roles.remove_permission_from_role(role_id, permission_id)

    async def list_permissions(self) -> list[Permission]:
        return await self.roles.list_permissions()

    # ── Storage ───────────────────────────────────────────────────────────────

    async def upload_file(
        self, user_id: UUID, content: bytes, filename: str, mime_type: str, is_public: bool
    ) -> StoredFile:
        return await self.storage.upload_file(content, filename, mime_type, user_id=user_id, is_public=is_public)

    async def get_file(self, file_id: UUID, user_id: UUID | None) -> StoredFile:
        return await self.storage.get_file(file_id, user_id)

    async def get_file_by_path(self, path: str) -> StoredFile:
        return await self.storage.get_file_by_path(path)

    async def list_my_files(self, user_id: UUID) -> list[StoredFile]:
        return await self.storage.list_user_files(user_id)

    async def list_all_files(self, limit: int, offset: int) -> tuple[list[StoredFile], int]:
        return await self.storage.list_files(limit=limit, offset=offset)

    async def set_file_access(self, file_id: UUID, user_id: UUID, is_public: bool) -> StoredFile:
        return await self.storage.set_access(file_id, user_id, is_public)

    async def delete_file(self, file_id: UUID, user_id: UUID | None) -> None:
        await self.storage.delete_file(file_id, user_id)

    async def file_url(self, stored: StoredFile) -> str:
        return await self.storage.resolve_url(stored)
