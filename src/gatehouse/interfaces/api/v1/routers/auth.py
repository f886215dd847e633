"""Auth router: registration, login, tokens, email verification, password reset, 2FA."""
from fastapi import APIRouter, Depends, status

from gatehouse.application.auth.commands import LoginResult
from gatehouse.application.auth.tokens import TokenPair
from gatehouse.interfaces.api.v1.schemas.identity import (
    CodeRequest,
    EmailRequest,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    OtpResponse,
    RefreshRequest,
    RegisterRequest,
    ResetPasswordRequest,
    TokenResponse,
    TwoFactorLoginRequest,
    TwoFactorSetupResponse,
    UserResponse,
    VerifiedResponse,
    VerifyEmailRequest,
)
from gatehouse.interfaces.dependencies import CurrentUserId, Facade, throttle

router = APIRouter(prefix="/auth", tags=["auth"], dependencies=[Depends(throttle)])


def _tokens(pair: TokenPair) -> TokenResponse:
    return TokenResponse(
        access_token=pair.access_token,
        refresh_token=pair.refresh_token,
        token_type=pair.token_type,
        expires_at=pair.expires_at,
    )


def _login_response(result: LoginResult) -> LoginResponse:
    return LoginResponse(
        user_id=result.user.id,
        tokens=_tokens(result.tokens) if result.tokens else None,
        requires_email_verification=result.requires_email_verification,
        requires_two_factor=result.requires_two_factor,
        challenge_token=result.challenge_token,
    )


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(body: RegisterRequest, facade: Facade):
    user = await facade.register(
        email=str(body.email),
        password=body.password,
        first_name=body.first_name,
        last_name=body.last_name,
    )
    return UserResponse.from_entity(user)


@router.post("/login", response_model=LoginResponse)
async def login(body: LoginRequest, facade: Facade):
    return _login_response(await facade.login(body.email, body.password))


@router.post("/login/2fa", response_model=LoginResponse)
async def login_two_factor(body: TwoFactorLoginRequest, facade: Facade):
    return _login_response(await facade.verify_two_factor_login(body.challenge_token, body.code))


@router.post("/refresh", response_model=TokenResponse)
async def refresh(body: RefreshRequest, facade: Facade):
    return _tokens(await facade.refresh(body.refresh_token))


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(facade: Facade, current_user_id: CurrentUserId):
    await facade.logout(current_user_id)


@router.post("/email/send-verification", response_model=MessageResponse)
async def send_verification(body: EmailRequest, facade: Facade):
    await facade.send_verification_email(str(body.email))
    return MessageResponse(message="Verification email sent")


@router.post("/email/verify", response_model=LoginResponse)
async def verify_email(body: VerifyEmailRequest, facade: Facade):
    return _login_response(await facade.verify_email(str(body.email), body.code))


@router.get("/email/status", response_model=VerifiedResponse)
async def email_status(email: str, facade: Facade):
    return VerifiedResponse(verified=await facade.is_email_verified(email))


@router.post("/password/forgot", response_model=MessageResponse)
async def forgot_password(body: EmailRequest, facade: Facade):
    await facade.request_password_reset(str(body.email))
    return MessageResponse(message="If the address is registered, a reset link has been sent")


@router.post("/password/reset", response_model=MessageResponse)
async def reset_password(body: ResetPasswordRequest, facade: Facade):
    await facade.reset_password(body.token, body.new_password)
    return MessageResponse(message="Password reset successfully")


@router.post("/otp/generate", response_model=OtpResponse)
async def generate_otp(facade: Facade, current_user_id: CurrentUserId):
    return OtpResponse(otp=await facade.generate_otp(current_user_id))


@router.post("/otp/verify", response_model=VerifiedResponse)
async def verify_otp(body: CodeRequest, facade: Facade, current_user_id: CurrentUserId):
    return VerifiedResponse(verified=await facade.verify_otp(current_user_id, body.code))


@router.post("/2fa/setup", response_model=TwoFactorSetupResponse)
async def setup_two_factor(facade: Facade, current_user_id: CurrentUserId):
    setup = await facade.setup_two_factor(current_user_id)
    return TwoFactorSetupResponse(
        secret=setup.secret,
        provisioning_uri=setup.provisioning_uri,
        qr_code_url=setup.qr_code_url,
    )


@router.post("/2fa/verify", response_model=VerifiedResponse)
async def verify_two_factor(body: CodeRequest, facade: Facade, current_user_id: CurrentUserId):
    return VerifiedResponse(verified=await facade.verify_two_factor(current_user_id, body.code))


@router.post("/2fa/disable", response_model=UserResponse)
async def disable_two_factor(body: CodeRequest, facade: Facade, current_user_id: CurrentUserId):
    return UserResponse.from_entity(await facade.disable_two_factor(current_user_id, body.code))
