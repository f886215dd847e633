"""Error taxonomy shared by every bounded context.

Domain code raises these; the HTTP layer maps them to status codes in
``gatehouse.interfaces.errors``.
"""
from __future__ import annotations


class DomainError(Exception):
    pass


class EntityNotFoundError(DomainError):
    def __init__(self, entity: str, identifier: object | None = None) -> None:
        self.entity = entity
        self.identifier = identifier
        if identifier is None:
            super().__init__(f"{entity} not found")
        else:
            super().__init__(f"{entity} {identifier} not found")


class EntityAlreadyExistsError(DomainError):
    def __init__(self, entity: str, field: str | None = None) -> None:
        self.entity = entity
        self.field = field
        if field is None:
            super().__init__(f"{entity} already exists")
        else:
            super().__init__(f"{entity} with this {field} already exists")


class InvalidValueError(DomainError, ValueError):
    """A value object or entity field failed validation."""


class AuthenticationError(DomainError):
    pass


class InvalidCredentialsError(AuthenticationError):
    def __init__(self) -> None:
        super().__init__("Invalid credentials")


class OtpExpiredError(DomainError):
    def __init__(self, message: str = "Code has expired") -> None:
        super().__init__(message)


class OtpInvalidError(DomainError):
    def __init__(self, message: str = "Invalid code") -> None:
        super().__init__(message)


class ForbiddenActionError(DomainError):
    pass


class ThrottlingError(DomainError):
    def __init__(self, retry_after: int) -> None:
        self.retry_after = retry_after
        super().__init__(f"Too many requests, please try again after {retry_after} seconds")


class InvalidThrottleIdentifierError(DomainError):
    def __init__(self) -> None:
        super().__init__("Throttle identifier cannot be empty")


# ── User ─────────────────────────────────────────────────────────────────────

class UserDomainError(DomainError):
    pass


class UserNotEligibleForRoleError(UserDomainError):
    def __init__(self, user_id: object, role_name: str) -> None:
        super().__init__(f"User {user_id} is not eligible for role: {role_name}")


class UserAlreadyHasRoleError(UserDomainError):
    def __init__(self, user_id: object, role_name: str) -> None:
        super().__init__(f"User {user_id} already has role: {role_name}")


class InactiveUserError(UserDomainError):
    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(f"Cannot {operation} for inactive user")


class UserCannotRemoveLastRoleError(UserDomainError):
    def __init__(self) -> None:
        super().__init__("Cannot remove the last role from user")


# ── Role ─────────────────────────────────────────────────────────────────────

class RoleDomainError(DomainError):
    pass


class CannotDeleteDefaultRoleError(RoleDomainError):
    def __init__(self) -> None:
        super().__init__("Cannot delete default role")


class RoleHasAssignedUsersError(RoleDomainError):
    def __init__(self, role_name: str) -> None:
        super().__init__(f"Cannot delete role {role_name} as it has assigned users")


class PermissionAlreadyAssignedError(RoleDomainError):
    def __init__(self, permission_name: str, role_name: str) -> None:
        super().__init__(f"Permission {permission_name} cannot be assigned to role {role_name}")


# ── Storage ──────────────────────────────────────────────────────────────────

class FileDomainError(DomainError):
    pass


class FileNotOwnedByUserError(FileDomainError):
    def __init__(self, file_id: object, user_id: object) -> None:
        super().__init__(f"File {file_id} is not owned by user {user_id}")


class FileAccessDeniedError(FileDomainError):
    def __init__(self, file_id: object) -> None:
        super().__init__(f"Access denied to file {file_id}")
