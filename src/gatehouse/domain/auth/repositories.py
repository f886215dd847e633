"""Repository interfaces for the auth context."""
from typing import Protocol
from uuid import UUID

from .entities import EmailVerification, Otp, PasswordReset, RefreshToken


class IOtpRepository(Protocol):
    async def get_by_user_id(self, user_id: UUID) -> Otp | None: ...
    async def save(self, otp: Otp) -> Otp: ...
    async def delete_by_user_id(self, user_id: UUID) -> None: ...


class IRefreshTokenRepository(Protocol):
    async def get_by_token(self, token: str) -> RefreshToken | None: ...
    async def save(self, refresh_token: RefreshToken) -> RefreshToken: ...
    async def delete_by_user_id(self, user_id: UUID) -> None: ...


class IEmailVerificationRepository(Protocol):
    async def get_by_email_and_code(self, email: str, code: str) -> EmailVerification | None: ...
    async def get_latest_by_email(self, email: str) -> EmailVerification | None: ...
    async def save(self, verification: EmailVerification) -> EmailVerification: ...
    async def delete_by_email(self, email: str) -> None: ...


class IPasswordResetRepository(Protocol):
    async def get_by_token(self, token: str) -> PasswordReset | None: ...
    async def save(self, reset: PasswordReset) -> PasswordReset: ...
    async def delete_by_user_id(self, user_id: UUID) -> None: ...
