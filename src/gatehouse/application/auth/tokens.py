"""Access token issuance and refresh-token rotation."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from gatehouse.domain.errors import AuthenticationError
from gatehouse.domain.identity.entities import User
from gatehouse.domain.identity.repositories import IRoleRepository, IUserRepository
from gatehouse.infrastructure.auth.jwt import create_access_token

from .service import AuthService


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str
    expires_at: datetime
    token_type: str = "bearer"


class TokenIssuer:
    def __init__(
        self,
        auth_service: AuthService,
        user_repo: IUserRepository,
        role_repo: IRoleRepository,
    ) -> None:
        self._auth = auth_service
        self._users = user_repo
        self._roles = role_repo

    async def collect_permissions(self, user: User) -> list[str]:
        """Permission names from the user's roles as currently stored."""
        names: dict[str, None] = {}
        for role in user.roles:
            stored = await self._roles.get_by_id(role.id) or role
            for permission in stored.permissions:
                names.setdefault(permission.name, None)
        return list(names)

    async def build_claims(self, user: User, email_verified: bool) -> dict[str, Any]:
        return {
            "sub": str(user.id),
            "email": str(user.email),
            "emailVerified": email_verified,
            "roles": [role.name for role in user.roles],
            "permissions": await self.collect_permissions(user),
        }

    async def issue(self, user: User, email_verified: bool | None = None) -> TokenPair:
        if email_verified is None:
            email_verified = await self._auth.is_email_verified(str(user.email))
        access_token, expires_at = create_access_token(await self.build_claims(user, email_verified))
        refresh_token = await self._auth.create_refresh_token(user.id)
        return TokenPair(
            access_token=access_token,
            refresh_token=str(refresh_token.token),
            expires_at=expires_at,
        )

    async def rotate(self, refresh_token: str) -> tuple[User, TokenPair]:
        """Trade a live refresh token for a new pair; the old token stops working."""
        current = await self._auth.validate_refresh_token(refresh_token)
        user = await self._users.get_by_id(current.user_id)
        if user is None or not user.is_active:
            raise AuthenticationError("Invalid refresh token")
        await self._auth.revoke_refresh_token(refresh_token)
        return user, await self.issue(user)
