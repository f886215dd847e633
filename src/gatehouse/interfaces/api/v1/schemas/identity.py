"""Pydantic v2 schemas for auth, profile and admin endpoints."""
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from gatehouse.domain.identity.entities import Permission, Role, User


# ── Auth ──────────────────────────────────────────────────────────────────────

class RegisterRequest(BaseModel):
    email: EmailStr
    password: str
    first_name: str = Field(min_length=1, max_length=50)
    last_name: str = Field(min_length=1, max_length=50)


class LoginRequest(BaseModel):
    email: str
    password: str


class TwoFactorLoginRequest(BaseModel):
    challenge_token: str
    code: str


class RefreshRequest(BaseModel):
    refresh_token: str


class EmailRequest(BaseModel):
    email: EmailStr


class VerifyEmailRequest(BaseModel):
    email: EmailStr
    code: str = Field(min_length=6, max_length=6)


class ResetPasswordRequest(BaseModel):
    token: str
    new_password: str


class CodeRequest(BaseModel):
    code: str


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_at: datetime


class LoginResponse(BaseModel):
    user_id: UUID
    tokens: TokenResponse | None = None
    requires_email_verification: bool = False
    requires_two_factor: bool = False
    challenge_token: str | None = None


class TwoFactorSetupResponse(BaseModel):
    secret: str
    provisioning_uri: str
    qr_code_url: str


class OtpResponse(BaseModel):
    otp: str


class VerifiedResponse(BaseModel):
    verified: bool


class MessageResponse(BaseModel):
    message: str


# ── Users ─────────────────────────────────────────────────────────────────────

class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str


class ProfileUpdateRequest(BaseModel):
    first_name: str | None = Field(default=None, min_length=1, max_length=50)
    last_name: str | None = Field(default=None, min_length=1, max_length=50)


class AdminUserUpdateRequest(BaseModel):
    first_name: str | None = Field(default=None, min_length=1, max_length=50)
    last_name: str | None = Field(default=None, min_length=1, max_length=50)
    email: EmailStr | None = None
    role_ids: list[UUID] | None = None
    is_active: bool | None = None


class AdminPasswordRequest(BaseModel):
    new_password: str


class PermissionResponse(BaseModel):
    id: UUID
    name: str
    resource: str
    action: str
    description: str

    @classmethod
    def from_entity(cls, permission: Permission) -> "PermissionResponse":
        return cls(id=permission.id, name=permission.name, resource=permission.resource,
                   action=permission.action, description=permission.description)


class RoleResponse(BaseModel):
    id: UUID
    name: str
    description: str
    is_default: bool
    is_admin: bool
    permissions: list[PermissionResponse]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, role: Role) -> "RoleResponse":
        return cls(
            id=role.id,
            name=role.name,
            description=role.description,
            is_default=role.is_default,
            is_admin=role.is_admin_role(),
            permissions=[PermissionResponse.from_entity(p) for p in role.permissions],
            created_at=role.created_at,
            updated_at=role.updated_at,
        )


class RoleSummary(BaseModel):
    id: UUID
    name: str


class UserResponse(BaseModel):
    id: UUID
    email: str
    first_name: str
    last_name: str
    is_active: bool
    otp_enabled: bool
    roles: list[RoleSummary]
    permissions: list[str]
    last_login_at: datetime | None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            email=str(user.email),
            first_name=str(user.first_name),
            last_name=str(user.last_name),
            is_active=user.is_active,
            otp_enabled=user.otp_enabled,
            roles=[RoleSummary(id=r.id, name=r.name) for r in user.roles],
            permissions=user.roles_collection.all_permissions().names(),
            last_login_at=user.last_login_at,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class UserListResponse(BaseModel):
    items: list[UserResponse]
    total: int
    limit: int
    offset: int


# ── Roles ─────────────────────────────────────────────────────────────────────

class RoleCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=1, max_length=500)
    is_default: bool = False
    permission_ids: list[UUID] = []


class RoleUpdateRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, min_length=1, max_length=500)
    is_default: bool | None = None
