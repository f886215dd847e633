"""FastAPI dependency injection: DB session, facade, current user, throttling."""
from __future__ import annotations

from collections.abc import AsyncGenerator
from functools import lru_cache
from typing import Annotated
from uuid import UUID

from fastapi import Depends, HTTPException, Request, Response, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from gatehouse.application.ports import EmailSender
from gatehouse.config import Settings, get_settings
from gatehouse.domain.auth.value_objects import ThrottleLimit
from gatehouse.domain.errors import AuthenticationError, EntityNotFoundError, ForbiddenActionError
from gatehouse.domain.identity.entities import User
from gatehouse.infrastructure.auth.jwt import get_user_id_from_token
from gatehouse.infrastructure.database.connection import get_db_session
from gatehouse.infrastructure.email.senders import build_email_sender
from gatehouse.infrastructure.storage.local import LocalStorageProvider
from gatehouse.infrastructure.throttling.throttler import ThrottlerService
from gatehouse.interfaces.facade import GatehouseFacade

# ── Session ───────────────────────────────────────────────────────────────────

_bearer = HTTPBearer(auto_error=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with get_db_session() as session:
        yield session


# ── Process-wide collaborators ────────────────────────────────────────────────

@lru_cache
def get_email_sender() -> EmailSender:
    return build_email_sender(get_settings())


@lru_cache
def get_storage_provider() -> LocalStorageProvider:
    settings = get_settings()
    return LocalStorageProvider(settings.storage_path, settings.storage_public_url)


@lru_cache
def get_throttler() -> ThrottlerService:
    settings = get_settings()
    return ThrottlerService(ThrottleLimit(ttl=settings.throttle_ttl_seconds, limit=settings.throttle_limit))


# ── Repositories (lazy imports to avoid circular) ────────────────────────────

def _build_facade(
    session: AsyncSession,
    email_sender: EmailSender,
    storage_provider: LocalStorageProvider,
    settings: Settings,
) -> GatehouseFacade:
    from gatehouse.infrastructure.database.repositories.auth import (
        EmailVerificationRepository,
        OtpRepository,
        PasswordResetRepository,
        RefreshTokenRepository,
    )
    from gatehouse.infrastructure.database.repositories.identity import (
        PermissionRepository,
        RoleRepository,
        UserRepository,
    )
    from gatehouse.infrastructure.database.repositories.storage import FileRepository

    return GatehouseFacade(
        user_repo=UserRepository(session),
        role_repo=RoleRepository(session),
        permission_repo=PermissionRepository(session),
        otp_repo=OtpRepository(session),
        refresh_token_repo=RefreshTokenRepository(session),
        email_verification_repo=EmailVerificationRepository(session),
        password_reset_repo=PasswordResetRepository(session),
        file_repo=FileRepository(session),
        email_sender=email_sender,
        storage_provider=storage_provider,
        settings=settings,
    )


async def get_facade(
    session: Annotated[AsyncSession, Depends(get_db)],
    email_sender: Annotated[EmailSender, Depends(get_email_sender)],
    storage_provider: Annotated[LocalStorageProvider, Depends(get_storage_provider)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> GatehouseFacade:
    return _build_facade(session, email_sender, storage_provider, settings)


# ── Auth ──────────────────────────────────────────────────────────────────────

_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Could not validate credentials",
    headers={"WWW-Authenticate": "Bearer"},
)


async def get_current_user_id(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer)],
) -> UUID:
    if credentials is None:
        raise _CREDENTIALS_EXCEPTION
    try:
        return get_user_id_from_token(credentials.credentials)
    except AuthenticationError:
        raise _CREDENTIALS_EXCEPTION


async def get_current_user(
    user_id: Annotated[UUID, Depends(get_current_user_id)],
    facade: Annotated[GatehouseFacade, Depends(get_facade)],
) -> User:
    try:
        user = await facade.get_user(user_id)
    except EntityNotFoundError:
        raise _CREDENTIALS_EXCEPTION
    if not user.is_active:
        raise _CREDENTIALS_EXCEPTION
    return user


async def require_admin(
    user: Annotated[User, Depends(get_current_user)],
    facade: Annotated[GatehouseFacade, Depends(get_facade)],
) -> User:
    if not facade.authorization.can_access_admin_features(user):
        raise ForbiddenActionError("Administrator access required")
    return user


# ── Throttling ────────────────────────────────────────────────────────────────

async def throttle(
    request: Request,
    response: Response,
    throttler: Annotated[ThrottlerService, Depends(get_throttler)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> None:
    """Count the request against the caller's address and expose the window state."""
    user_agent = request.headers.get("user-agent", "")
    if any(ignored in user_agent for ignored in settings.throttle_ignore_user_agents):
        return

    identifier = request.client.host if request.client else ""
    await throttler.track_request(identifier)

    response.headers["X-RateLimit-Limit"] = str(throttler.default_limit.limit)
    response.headers["X-RateLimit-Remaining"] = str(await throttler.get_remaining_requests(identifier))
    response.headers["X-RateLimit-Reset"] = str(await throttler.get_reset_seconds(identifier))


# Type aliases for cleaner signatures
DbSession = Annotated[AsyncSession, Depends(get_db)]
Facade = Annotated[GatehouseFacade, Depends(get_facade)]
CurrentUserId = Annotated[UUID, Depends(get_current_user_id)]
CurrentUser = Annotated[User, Depends(get_current_user)]
AdminUser = Annotated[User, Depends(require_admin)]
Storage = Annotated[LocalStorageProvider, Depends(get_storage_provider)]
