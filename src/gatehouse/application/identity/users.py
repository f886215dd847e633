"""User management use cases."""
from __future__ import annotations

import logging
from uuid import UUID

from gatehouse.domain.errors import (
    AuthenticationError,
    EntityAlreadyExistsError,
    EntityNotFoundError,
    ForbiddenActionError,
    InvalidValueError,
)
from gatehouse.domain.identity.authorization import UserAuthorizationService
from gatehouse.domain.identity.entities import User
from gatehouse.domain.identity.repositories import IRoleRepository, IUserRepository
from gatehouse.domain.identity.value_objects import Email, Password, PersonName
from gatehouse.infrastructure.auth.password import hash_password, verify_password

logger = logging.getLogger(__name__)


class UserService:
    def __init__(
        self,
        user_repo: IUserRepository,
        role_repo: IRoleRepository,
        authorization: UserAuthorizationService | None = None,
    ) -> None:
        self._users = user_repo
        self._roles = role_repo
        self._authorization = authorization or UserAuthorizationService()

    async def _require_user(self, user_id: UUID) -> User:
        user = await self._users.get_by_id(user_id)
        if user is None:
            raise EntityNotFoundError("User", user_id)
        return user

    async def create_user(self, email: str, password: str, first_name: str, last_name: str) -> User:
        """Register a user and attach the default role when one exists."""
        email_vo = Email(email)
        password_vo = Password(password)

        if await self._users.get_by_email(str(email_vo)) is not None:
            raise EntityAlreadyExistsError("User", "email")

        user = User.create(
            email=email_vo,
            password_hash=hash_password(password_vo),
            first_name=PersonName(first_name),
            last_name=PersonName(last_name),
        )
        default_role = await self._roles.get_default()
        if default_role is not None:
            user.add_role(default_role)

        user = await self._users.save(user)
        logger.info("User %s created", user.id)
        return user

    async def validate_credentials(self, email: str, password: str) -> User | None:
        """Return the user for a correct active login, ``None`` for anything else.

        Callers cannot tell an unknown email from a bad password or an
        inactive account.
        """
        try:
            email_vo = Email(email)
        except InvalidValueError:
            return None
        user = await self._users.get_by_email(str(email_vo))
        if user is None or not user.is_active:
            return None
        if not verify_password(password, user.password_hash):
            return None
        return user

    async def update_user_details(
        self,
        user_id: UUID,
        *,
        first_name: str | None = None,
        last_name: str | None = None,
        email: str | None = None,
        role_ids: list[UUID] | None = None,
        is_active: bool | None = None,
        assigner_id: UUID | None = None,
    ) -> User:
        user = await self._require_user(user_id)

        # Reactivate first so the remaining changes are allowed.
        if is_active:
            user.activate()

        if first_name is not None or last_name is not None:
            user.update_profile(
                PersonName(first_name) if first_name is not None else None,
                PersonName(last_name) if last_name is not None else None,
            )

        if email is not None:
            email_vo = Email(email)
            existing = await self._users.get_by_email(str(email_vo))
            if existing is not None and existing.id != user.id:
                raise EntityAlreadyExistsError("User", "email")
            user.change_email(email_vo)

        if role_ids is not None:
            await self._apply_role_ids(user, role_ids, assigner_id)

        if is_active is False:
            user.deactivate()

        return await self._users.save(user)

    async def _apply_role_ids(self, user: User, role_ids: list[UUID], assigner_id: UUID | None) -> None:
        wanted = list(dict.fromkeys(role_ids))
        current = {role.id for role in user.roles}
        assigner = await self._require_user(assigner_id) if assigner_id is not None else None

        # Additions go first so a full swap never trips the last-role rule.
        for role_id in wanted:
            if role_id in current:
                continue
            role = await self._roles.get_by_id(role_id)
            if role is None:
                raise EntityNotFoundError("Role", role_id)
            if assigner is not None and not self._authorization.can_assign_role(assigner, user, role):
                logger.warning("User %s denied assigning role %s to %s", assigner.id, role.name, user.id)
                raise ForbiddenActionError("You are not authorized to assign this role")
            user.add_role(role)

        for role_id in current:
            if role_id not in wanted:
                user.remove_role(role_id)

    async def verify_current_password(self, user_id: UUID, password: str) -> bool:
        user = await self._require_user(user_id)
        return verify_password(password, user.password_hash)

    async def change_password(
        self,
        user_id: UUID,
        new_password: str,
        current_password: str | None = None,
    ) -> User:
        user = await self._require_user(user_id)
        if current_password is not None and not verify_password(current_password, user.password_hash):
            raise AuthenticationError("Current password is incorrect")

        user.change_password(hash_password(Password(new_password)))
        user = await self._users.save(user)
        logger.info("Password changed for user %s", user.id)
        return user

    async def assign_role_to_user(
        self,
        user_id: UUID,
        role_id: UUID,
        assigner_id: UUID | None = None,
    ) -> User:
        user = await self._require_user(user_id)
        role = await self._roles.get_by_id(role_id)
        if role is None:
            raise EntityNotFoundError("Role", role_id)

        if assigner_id is not None:
            assigner = await self._require_user(assigner_id)
            if not self._authorization.can_assign_role(assigner, user, role):
                logger.warning("User %s denied assigning role %s to %s", assigner_id, role.name, user_id)
                raise ForbiddenActionError("You are not authorized to assign this role")

        user.add_role(role)
        user = await self._users.save(user)
        logger.info("Role %s assigned to user %s", role.name, user.id)
        return user

    async def remove_role_from_user(self, user_id: UUID, role_id: UUID) -> User:
        user = await self._require_user(user_id)
        user.remove_role(role_id)
        return await self._users.save(user)

    async def activate_user(self, user_id: UUID) -> User:
        user = await self._require_user(user_id)
        user.activate()
        return await self._users.save(user)

    async def deactivate_user(self, user_id: UUID) -> User:
        user = await self._require_user(user_id)
        user.deactivate()
        user = await self._users.save(user)
        logger.info("User %s deactivated", user.id)
        return user

    async def get_user(self, user_id: UUID) -> User:
        return await self._require_user(user_id)

    async def list_users(self, limit: int = 50, offset: int = 0) -> tuple[list[User], int]:
        users = await self._users.list(limit=limit, offset=offset)
        return users, await self._users.count()

    async def delete_user(self, user_id: UUID) -> None:
        await self._require_user(user_id)
        await self._users.delete(user_id)
        logger.info("User %s deleted", user_id)
