"""Domain entities for the Auth bounded context.

Each record has an expiry and a one-shot consume step. Consuming twice is an
invalid state and raises ``OtpInvalidError``; revoking a refresh token twice
is harmless.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from uuid import UUID, uuid4

from gatehouse.domain.errors import OtpInvalidError
from gatehouse.domain.identity.value_objects import Email

from .value_objects import Token, VerificationCode


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Otp:
    id: UUID
    user_id: UUID
    secret: str
    expires_at: datetime
    created_at: datetime = field(default_factory=_utcnow)
    verified_at: datetime | None = None

    @classmethod
    def issue(cls, user_id: UUID, secret: str, expires_in_minutes: int) -> Otp:
        now = _utcnow()
        return cls(id=uuid4(), user_id=user_id, secret=secret,
                   expires_at=now + timedelta(minutes=expires_in_minutes), created_at=now)

    @property
    def is_verified(self) -> bool:
        return self.verified_at is not None

    def is_expired(self, now: datetime | None = None) -> bool:
        return (now or _utcnow()) > self.expires_at

    def mark_as_verified(self) -> None:
        if self.is_verified:
            raise OtpInvalidError("Code has already been used")
        self.verified_at = _utcnow()


@dataclass
class RefreshToken:
    id: UUID
    user_id: UUID
    token: Token
    expires_at: datetime
    created_at: datetime = field(default_factory=_utcnow)
    revoked_at: datetime | None = None

    @classmethod
    def issue(cls, user_id: UUID, token: Token, expires_in_days: int) -> RefreshToken:
        now = _utcnow()
        return cls(id=uuid4(), user_id=user_id, token=token,
                   expires_at=now + timedelta(days=expires_in_days), created_at=now)

    def is_expired(self, now: datetime | None = None) -> bool:
        return (now or _utcnow()) > self.expires_at

    def is_revoked(self) -> bool:
        return self.revoked_at is not None

    @property
    def is_active(self) -> bool:
        return not self.is_revoked() and not self.is_expired()

    def revoke(self) -> None:
        if self.is_revoked():
            return
        self.revoked_at = _utcnow()


@dataclass
class EmailVerification:
    id: UUID
    email: Email
    code: VerificationCode
    expires_at: datetime
    created_at: datetime = field(default_factory=_utcnow)
    verified_at: datetime | None = None

    @classmethod
    def issue(cls, email: Email, code: VerificationCode, expires_in_minutes: int) -> EmailVerification:
        now = _utcnow()
        return cls(id=uuid4(), email=email, code=code,
                   expires_at=now + timedelta(minutes=expires_in_minutes), created_at=now)

    def is_verified(self) -> bool:
        return self.verified_at is not None

    def is_expired(self, now: datetime | None = None) -> bool:
        return (now or _utcnow()) > self.expires_at

    def mark_as_verified(self) -> None:
        if self.is_verified():
            raise OtpInvalidError("Email has already been verified with this code")
        self.verified_at = _utcnow()


@dataclass
class PasswordReset:
    id: UUID
    user_id: UUID
    email: Email
    token: Token
    expires_at: datetime
    created_at: datetime = field(default_factory=_utcnow)
    used_at: datetime | None = None

    @classmethod
    def issue(cls, user_id: UUID, email: Email, expires_in_minutes: int = 60) -> PasswordReset:
        now = _utcnow()
        return cls(id=uuid4(), user_id=user_id, email=email, token=Token.generate(),
                   expires_at=now + timedelta(minutes=expires_in_minutes), created_at=now)

    def is_used(self) -> bool:
        return self.used_at is not None

    def is_expired(self, now: datetime | None = None) -> bool:
        return (now or _utcnow()) > self.expires_at

    def mark_as_used(self) -> None:
        if self.is_used():
            raise OtpInvalidError("Password reset token has already been used")
        self.used_at = _utcnow()
