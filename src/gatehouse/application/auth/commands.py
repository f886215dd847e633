"""Authentication use cases: register, login, refresh, logout, verification, reset."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from uuid import UUID

from gatehouse.application.identity.users import UserService
from gatehouse.application.ports import EmailSender
from gatehouse.domain.errors import EntityNotFoundError, InvalidCredentialsError
from gatehouse.domain.identity.entities import User
from gatehouse.domain.identity.repositories import IUserRepository
from gatehouse.infrastructure.auth.jwt import create_challenge_token, get_user_id_from_challenge

from .service import AuthService, TwoFactorSetup
from .tokens import TokenIssuer, TokenPair

logger = logging.getLogger(__name__)

CHALLENGE_TTL_SECONDS = 300


@dataclass
class LoginResult:
    """Either a token pair, or the next step the caller must complete."""
    user: User
    tokens: TokenPair | None = None
    requires_email_verification: bool = False
    requires_two_factor: bool = False
    challenge_token: str | None = None


async def _complete_login(
    user: User,
    *,
    auth: AuthService,
    tokens: TokenIssuer,
    email_verified: bool,
) -> LoginResult:
    if user.otp_enabled:
        logger.info("Login for user %s awaits a two-factor code", user.id)
        return LoginResult(
            user=user,
            requires_two_factor=True,
            challenge_token=create_challenge_token(user.id, CHALLENGE_TTL_SECONDS),
        )
    pair = await tokens.issue(user, email_verified=email_verified)
    logger.info("Login succeeded for user %s", user.id)
    return LoginResult(user=user, tokens=pair)


async def register_user(
    *,
    email: str,
    password: str,
    first_name: str,
    last_name: str,
    users: UserService,
    auth: AuthService,
    mailer: EmailSender,
) -> User:
    """Create the account, then send a welcome note and an email verification code."""
    user = await users.create_user(email, password, first_name, last_name)
    code = await auth.generate_email_verification_code(str(user.email))
    await mailer.send_welcome(str(user.email), str(user.first_name))
    await mailer.send_verification_code(str(user.email), code)
    return user


async def login_user(
    *,
    email: str,
    password: str,
    users: UserService,
    auth: AuthService,
    tokens: TokenIssuer,
) -> LoginResult:
    user = await users.validate_credentials(email, password)
    if user is None:
        logger.warning("Login failed for %s", email)
        raise InvalidCredentialsError()

    user = await auth.update_last_login(user.id)

    if not await auth.is_email_verified(str(user.email)):
        logger.info("Login for user %s awaits email verification", user.id)
        return LoginResult(user=user, requires_email_verification=True)

    return await _complete_login(user, auth=auth, tokens=tokens, email_verified=True)


async def verify_two_factor_login(
    *,
    challenge_token: str,
    code: str,
    auth: AuthService,
    tokens: TokenIssuer,
    user_repo: IUserRepository,
) -> LoginResult:
    """Finish a login that stopped at the two-factor step."""
    user_id = get_user_id_from_challenge(challenge_token)
    await auth.verify_two_factor_token(user_id, code)
    user = await user_repo.get_by_id(user_id)
    if user is None or not user.is_active:
        raise InvalidCredentialsError()
    pair = await tokens.issue(user)
    logger.info("Two-factor login succeeded for user %s", user.id)
    return LoginResult(user=user, tokens=pair)


async def refresh_session(*, refresh_token: str, tokens: TokenIssuer) -> TokenPair:
    _, pair = await tokens.rotate(refresh_token)
    return pair


async def logout_user(*, user_id: UUID, auth: AuthService) -> None:
    await auth.revoke_all_refresh_tokens(user_id)
    logger.info("User %s logged out", user_id)


async def send_verification_email(*, email: str, auth: AuthService, mailer: EmailSender) -> None:
    code = await auth.generate_email_verification_code(email)
    await mailer.send_verification_code(email, code)


async def verify_email(
    *,
    email: str,
    code: str,
    auth: AuthService,
    tokens: TokenIssuer,
    user_repo: IUserRepository,
) -> LoginResult:
    """Confirm the code and sign the owner in, as login would after verification."""
    await auth.verify_email_code(email, code)
    user = await user_repo.get_by_email(email)
    if user is None or not user.is_active:
        raise InvalidCredentialsError()
    user = await auth.update_last_login(user.id)
    return await _complete_login(user, auth=auth, tokens=tokens, email_verified=True)


async def request_password_reset(
    *,
    email: str,
    auth: AuthService,
    mailer: EmailSender,
    reset_url: str,
) -> None:
    """Send a reset link. Unknown addresses are logged and otherwise ignored."""
    try:
        reset = await auth.create_password_reset_token(email)
    except EntityNotFoundError:
        logger.info("Password reset requested for unknown email %s", email)
        return
    await mailer.send_password_reset(str(reset.email), f"{reset_url}?token={reset.token}")


async def reset_password(*, token: str, new_password: str, auth: AuthService) -> User:
    return await auth.reset_password(token, new_password)


async def setup_two_factor(*, user_id: UUID, auth: AuthService) -> TwoFactorSetup:
    return await auth.setup_two_factor(user_id)


async def disable_two_factor(*, user_id: UUID, code: str, auth: AuthService) -> User:
    """Turning two-factor off needs a current code from the authenticator."""
    await auth.verify_two_factor_token(user_id, code)
    return await auth.disable_two_factor(user_id)
