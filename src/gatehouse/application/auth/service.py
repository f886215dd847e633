"""Credential lifecycles: OTP, two-factor, refresh tokens, email codes, password resets."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from uuid import UUID

from gatehouse.config import Settings
from gatehouse.domain.auth.entities import EmailVerification, Otp, PasswordReset, RefreshToken
from gatehouse.domain.auth.repositories import (
    IEmailVerificationRepository,
    IOtpRepository,
    IPasswordResetRepository,
    IRefreshTokenRepository,
)
from gatehouse.domain.auth.value_objects import Token, VerificationCode
from gatehouse.domain.errors import (
    AuthenticationError,
    EntityNotFoundError,
    InvalidValueError,
    OtpExpiredError,
    OtpInvalidError,
)
from gatehouse.domain.identity.entities import User
from gatehouse.domain.identity.repositories import IUserRepository
from gatehouse.domain.identity.value_objects import Email, Password
from gatehouse.infrastructure.auth.password import hash_password
from gatehouse.infrastructure.auth.totp import TotpService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TwoFactorSetup:
    secret: str
    provisioning_uri: str
    qr_code_url: str


class AuthService:
    def __init__(
        self,
        user_repo: IUserRepository,
        otp_repo: IOtpRepository,
        refresh_token_repo: IRefreshTokenRepository,
        email_verification_repo: IEmailVerificationRepository,
        password_reset_repo: IPasswordResetRepository,
        totp: TotpService,
        settings: Settings,
    ) -> None:
        self._users = user_repo
        self._otps = otp_repo
        self._refresh_tokens = refresh_token_repo
        self._verifications = email_verification_repo
        self._resets = password_reset_repo
        self._totp = totp
        self._settings = settings

    async def _require_user(self, user_id: UUID) -> User:
        user = await self._users.get_by_id(user_id)
        if user is None:
            raise EntityNotFoundError("User", user_id)
        return user

    # ── One-time passwords ───────────────────────────────────────────────────

    async def generate_otp(self, user_id: UUID) -> str:
        """Issue a fresh OTP secret for the user and return the current code."""
        await self._require_user(user_id)
        secret = self._totp.generate_secret()
        await self._otps.delete_by_user_id(user_id)
        await self._otps.save(Otp.issue(user_id, secret, self._settings.otp_expiration_minutes))
        return self._totp.current_code(secret)

    async def verify_otp(self, user_id: UUID, code: str) -> bool:
        await self._require_user(user_id)
        otp = await self._otps.get_by_user_id(user_id)
        if otp is None:
            raise EntityNotFoundError("OTP")
        if otp.is_expired():
            raise OtpExpiredError()
        if otp.is_verified:
            raise OtpInvalidError("Code has already been used")
        if not self._totp.verify(otp.secret, code):
            raise OtpInvalidError()

        otp.mark_as_verified()
        await self._otps.save(otp)
        return True

    # ── Two-factor authentication ────────────────────────────────────────────

    async def setup_two_factor(self, user_id: UUID) -> TwoFactorSetup:
        user = await self._require_user(user_id)
        secret = self._totp.generate_secret()
        user.enable_two_factor(secret)
        await self._users.save(user)
        logger.info("Two-factor enabled for user %s", user.id)
        return TwoFactorSetup(
            secret=secret,
            provisioning_uri=self._totp.provisioning_uri(secret, str(user.email)),
            qr_code_url=self._totp.qr_code_data_url(secret, str(user.email)),
        )

    async def verify_two_factor_token(self, user_id: UUID, code: str) -> bool:
        user = await self._require_user(user_id)
        if not user.otp_enabled or not user.otp_secret:
            raise AuthenticationError("Two-factor authentication is not enabled for this user")
        if not self._totp.verify(user.otp_secret, code):
            raise OtpInvalidError()
        return True

    async def disable_two_factor(self, user_id: UUID) -> User:
        user = await self._require_user(user_id)
        user.disable_two_factor()
        user = await self._users.save(user)
        logger.info("Two-factor disabled for user %s", user.id)
        return user

    # ── Refresh tokens ───────────────────────────────────────────────────────

    async def create_refresh_token(self, user_id: UUID) -> RefreshToken:
        """Issue a refresh token, dropping every earlier one for the user."""
        await self._refresh_tokens.delete_by_user_id(user_id)
        refresh_token = RefreshToken.issue(
            user_id, Token.generate(), self._settings.jwt_refresh_token_expire_days
        )
        return await self._refresh_tokens.save(refresh_token)

    async def _find_refresh_token(self, token: str) -> RefreshToken:
        try:
            Token(token)
        except InvalidValueError:
            raise AuthenticationError("Invalid refresh token") from None
        refresh_token = await self._refresh_tokens.get_by_token(token)
        if refresh_token is None:
            raise AuthenticationError("Invalid refresh token")
        return refresh_token

    async def validate_refresh_token(self, token: str) -> RefreshToken:
        refresh_token = await self._find_refresh_token(token)
        if refresh_token.is_expired():
            raise AuthenticationError("Refresh token has expired")
        if refresh_token.is_revoked():
            raise AuthenticationError("Refresh token has been revoked")
        return refresh_token

    async def revoke_refresh_token(self, token: str) -> None:
        refresh_token = await self._find_refresh_token(token)
        if refresh_token.is_revoked():
            return
        refresh_token.revoke()
        await self._refresh_tokens.save(refresh_token)

    async def revoke_all_refresh_tokens(self, user_id: UUID) -> None:
        await self._require_user(user_id)
        await self._refresh_tokens.delete_by_user_id(user_id)

    async def update_last_login(self, user_id: UUID) -> User:
        user = await self._require_user(user_id)
        user.record_login()
        return await self._users.save(user)

    # ── Email verification ───────────────────────────────────────────────────

    async def generate_email_verification_code(self, email: str) -> str:
        """Replace any outstanding codes for ``email`` with a new one."""
        email_vo = Email(email)
        await self._verifications.delete_by_email(str(email_vo))
        code = VerificationCode.generate()
        await self._verifications.save(EmailVerification.issue(
            email_vo, code, self._settings.email_verification_expire_minutes
        ))
        return str(code)

    async def verify_email_code(self, email: str, code: str) -> bool:
        email_vo = Email(email)
        try:
            VerificationCode(code)
        except InvalidValueError:
            raise OtpInvalidError() from None

        verification = await self._verifications.get_by_email_and_code(str(email_vo), code)
        if verification is None:
            raise OtpInvalidError()
        if verification.is_expired():
            raise OtpExpiredError()

        verification.mark_as_verified()
        await self._verifications.save(verification)
        logger.info("Email %s verified", email_vo)
        return True

    async def is_email_verified(self, email: str) -> bool:
        try:
            email_vo = Email(email)
        except InvalidValueError:
            return False
        verification = await self._verifications.get_latest_by_email(str(email_vo))
        return verification is not None and verification.is_verified()

    # ── Password reset ───────────────────────────────────────────────────────

    async def create_password_reset_token(self, email: str) -> PasswordReset:
        """Issue a reset token. Unknown emails raise ``EntityNotFoundError``."""
        email_vo = Email(email)
        user = await self._users.get_by_email(str(email_vo))
        if user is None:
            raise EntityNotFoundError("User", f"with email {email_vo}")

        await self._resets.delete_by_user_id(user.id)
        reset = PasswordReset.issue(user.id, email_vo, self._settings.password_reset_expire_minutes)
        reset = await self._resets.save(reset)
        logger.info("Password reset requested for user %s", user.id)
        return reset

    async def _load_reset(self, token: str) -> tuple[PasswordReset, User]:
        reset = await self._resets.get_by_token(token)
        if reset is None:
            raise EntityNotFoundError("Password reset token")
        if reset.is_expired():
            raise OtpExpiredError("Password reset token has expired")
        if reset.is_used():
            raise OtpInvalidError("Password reset token has already been used")
        return reset, await self._require_user(reset.user_id)

    async def validate_password_reset_token(self, token: str) -> User:
        _, user = await self._load_reset(token)
        return user

    async def reset_password(self, token: str, new_password: str) -> User:
        """Apply a new password, burn the token and sign the user out everywhere."""
        reset, user = await self._load_reset(token)

        user.change_password(hash_password(Password(new_password)))
        user = await self._users.save(user)

        reset.mark_as_used()
        await self._resets.save(reset)
        await self._refresh_tokens.delete_by_user_id(user.id)
        logger.info("Password reset completed for user %s", user.id)
        return user
