"""Concrete SQLAlchemy repository implementations for the auth context."""
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from gatehouse.domain.auth.entities import EmailVerification, Otp, PasswordReset, RefreshToken
from gatehouse.domain.auth.value_objects import Token, VerificationCode
from gatehouse.domain.identity.value_objects import Email
from gatehouse.infrastructure.database.models.auth import (
    EmailVerificationModel,
    OtpModel,
    PasswordResetModel,
    RefreshTokenModel,
)


class OtpRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_user_id(self, user_id: UUID) -> Otp | None:
        stmt = (
            select(OtpModel)
            .where(OtpModel.user_id == user_id)
            .order_by(OtpModel.created_at.desc())
            .limit(1)
        )
        result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()
        return _to_otp(row) if row else None

    async def save(self, otp: Otp) -> Otp:
        existing = await self._session.get(OtpModel, otp.id)
        if existing:
            existing.verified_at = otp.verified_at
        else:
            self._session.add(OtpModel(
                id=otp.id,
                user_id=otp.user_id,
                secret=otp.secret,
                expires_at=otp.expires_at,
                created_at=otp.created_at,
                verified_at=otp.verified_at,
            ))
        await self._session.flush()
        return otp

    async def delete_by_user_id(self, user_id: UUID) -> None:
        await self._session.execute(delete(OtpModel).where(OtpModel.user_id == user_id))


class RefreshTokenRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_token(self, token: str) -> RefreshToken | None:
        stmt = select(RefreshTokenModel).where(RefreshTokenModel.token == token)
        result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()
        return _to_refresh_token(row) if row else None

    async def save(self, refresh_token: RefreshToken) -> RefreshToken:
        existing = await self._session.get(RefreshTokenModel, refresh_token.id)
        if existing:
            existing.revoked_at = refresh_token.revoked_at
        else:
            self._session.add(RefreshTokenModel(
                id=refresh_token.id,
                user_id=refresh_token.user_id,
                token=str(refresh_token.token),
                expires_at=refresh_token.expires_at,
                created_at=refresh_token.created_at,
                revoked_at=refresh_token.revoked_at,
            ))
        await self._session.flush()
        return refresh_token

    async def delete_by_user_id(self, user_id: UUID) -> None:
        await self._session.execute(delete(RefreshTokenModel).where(RefreshTokenModel.user_id == user_id))


class EmailVerificationRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_email_and_code(self, email: str, code: str) -> EmailVerification | None:
        stmt = (
            select(EmailVerificationModel)
            .where(EmailVerificationModel.email == email, EmailVerificationModel.code == code)
            .order_by(EmailVerificationModel.created_at.desc())
            .limit(1)
        )
        result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()
        return _to_email_verification(row) if row else None

    async def get_latest_by_email(self, email: str) -> EmailVerification | None:
        stmt = (
            select(EmailVerificationModel)
            .where(EmailVerificationModel.email == email)
            .order_by(EmailVerificationModel.created_at.desc())
            .limit(1)
        )
        result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()
        return _to_email_verification(row) if row else None

    async def save(self, verification: EmailVerification) -> EmailVerification:
        existing = await self._session.get(EmailVerificationModel, verification.id)
        if existing:
            existing.verified_at = verification.verified_at
        else:
            self._session.add(EmailVerificationModel(
                id=verification.id,
                email=str(verification.email),
                code=str(verification.code),
                expires_at=verification.expires_at,
                created_at=verification.created_at,
                verified_at=verification.verified_at,
            ))
        await self._session.flush()
        return verification

    async def delete_by_email(self, email: str) -> None:
        await self._session.execute(delete(EmailVerificationModel).where(EmailVerificationModel.email == email))


class PasswordResetRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_token(self, token: str) -> PasswordReset | None:
        stmt = select(PasswordResetModel).where(PasswordResetModel.token == token)
        result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()
        return _to_password_reset(row) if row else None

    async def save(self, reset: PasswordReset) -> PasswordReset:
        existing = await self._session.get(PasswordResetModel, reset.id)
        if existing:
            existing.used_at = reset.used_at
        else:
            self._session.add(PasswordResetModel(
                id=reset.id,
                user_id=reset.user_id,
                email=str(reset.email),
                token=str(reset.token),
                expires_at=reset.expires_at,
                created_at=reset.created_at,
                used_at=reset.used_at,
            ))
        await self._session.flush()
        return reset

    async def delete_by_user_id(self, user_id: UUID) -> None:
        await self._session.execute(delete(PasswordResetModel).where(PasswordResetModel.user_id == user_id))


# ── Mappers ───────────────────────────────────────────────────────────────────

def _to_otp(m: OtpModel) -> Otp:
    return Otp(
        id=m.id,
        user_id=m.user_id,
        secret=m.secret,
        expires_at=m.expires_at,
        created_at=m.created_at,
        verified_at=m.verified_at,
    )


def _to_refresh_token(m: RefreshTokenModel) -> RefreshToken:
    return RefreshToken(
        id=m.id,
        user_id=m.user_id,
        token=Token(m.token),
        expires_at=m.expires_at,
        created_at=m.created_at,
        revoked_at=m.revoked_at,
    )


def _to_email_verification(m: EmailVerificationModel) -> EmailVerification:
    return EmailVerification(
        id=m.id,
        email=Email(m.email),
        code=VerificationCode(m.code),
        expires_at=m.expires_at,
        created_at=m.created_at,
        verified_at=m.verified_at,
    )


def _to_password_reset(m: PasswordResetModel) -> PasswordReset:
    return PasswordReset(
        id=m.id,
        user_id=m.user_id,
        email=Email(m.email),
        token=Token(m.token),
        expires_at=m.expires_at,
        created_at=m.created_at,
        used_at=m.used_at,
    )
