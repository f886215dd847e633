"""Translate domain errors into HTTP responses."""
import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from gatehouse.domain.errors import (
    AuthenticationError,
    CannotDeleteDefaultRoleError,
    DomainError,
    EntityAlreadyExistsError,
    EntityNotFoundError,
    FileAccessDeniedError,
    FileNotOwnedByUserError,
    ForbiddenActionError,
    InactiveUserError,
    InvalidThrottleIdentifierError,
    InvalidValueError,
    OtpExpiredError,
    OtpInvalidError,
    PermissionAlreadyAssignedError,
    RoleHasAssignedUsersError,
    ThrottlingError,
    UserAlreadyHasRoleError,
    UserCannotRemoveLastRoleError,
    UserNotEligibleForRoleError,
)

logger = logging.getLogger(__name__)

# Most specific first: the first matching class wins.
STATUS_BY_ERROR: tuple[tuple[type[DomainError], int], ...] = (
    (EntityNotFoundError, status.HTTP_404_NOT_FOUND),
    (EntityAlreadyExistsError, status.HTTP_409_CONFLICT),
    (UserAlreadyHasRoleError, status.HTTP_409_CONFLICT),
    (PermissionAlreadyAssignedError, status.HTTP_409_CONFLICT),
    (RoleHasAssignedUsersError, status.HTTP_409_CONFLICT),
    (AuthenticationError, status.HTTP_401_UNAUTHORIZED),
    (OtpExpiredError, status.HTTP_401_UNAUTHORIZED),
    (OtpInvalidError, status.HTTP_401_UNAUTHORIZED),
    (ForbiddenActionError, status.HTTP_403_FORBIDDEN),
    (FileNotOwnedByUserError, status.HTTP_403_FORBIDDEN),
    (FileAccessDeniedError, status.HTTP_403_FORBIDDEN),
    (CannotDeleteDefaultRoleError, status.HTTP_403_FORBIDDEN),
    (UserNotEligibleForRoleError, status.HTTP_403_FORBIDDEN),
    (InactiveUserError, status.HTTP_403_FORBIDDEN),
    (UserCannotRemoveLastRoleError, status.HTTP_400_BAD_REQUEST),
    (InvalidThrottleIdentifierError, status.HTTP_400_BAD_REQUEST),
    (InvalidValueError, status.HTTP_400_BAD_REQUEST),
    (ThrottlingError, status.HTTP_429_TOO_MANY_REQUESTS),
)


def status_for(exc: DomainError) -> int:
    for error_type, code in STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return code
    return status.HTTP_400_BAD_REQUEST


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    code = status_for(exc)
    headers: dict[str, str] = {}
    if isinstance(exc, ThrottlingError):
        headers["Retry-After"] = str(exc.retry_after)
    elif code == status.HTTP_401_UNAUTHORIZED:
        headers["WWW-Authenticate"] = "Bearer"

    logger.info("%s %s -> %d %s", request.method, request.url.path, code, type(exc).__name__)
    return JSONResponse(
        status_code=code,
        content={"detail": str(exc), "error": type(exc).__name__},
        headers=headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)
