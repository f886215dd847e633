from .identity import PermissionModel, RoleModel, UserModel, role_permissions, user_roles
from .auth import EmailVerificationModel, OtpModel, PasswordResetModel, RefreshTokenModel
from .storage import FileModel

__all__ = [
    "PermissionModel",
    "RoleModel",
    "UserModel",
    "role_permissions",
    "user_roles",
    "OtpModel",
    "RefreshTokenModel",
    "EmailVerificationModel",
    "PasswordResetModel",
    "FileModel",
]
