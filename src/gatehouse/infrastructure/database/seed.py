"""Baseline data: the permission grid, the ``admin`` and default ``user`` roles,
and optionally a first administrator.

Safe to run repeatedly; existing rows are left as they are.

    python -m gatehouse.infrastructure.database.seed
"""
import asyncio
import logging
from dataclasses import replace

from sqlalchemy.ext.asyncio import AsyncSession

from gatehouse.config import get_settings
from gatehouse.domain.auth.entities import EmailVerification
from gatehouse.domain.auth.value_objects import VerificationCode
from gatehouse.domain.identity.entities import Permission, Role, User
from gatehouse.domain.identity.value_objects import (
    ActionType,
    Email,
    Password,
    PersonName,
    ResourceAction,
    ResourceType,
)
from gatehouse.infrastructure.auth.password import hash_password
from gatehouse.infrastructure.database.connection import dispose_engine, get_db_session
from gatehouse.infrastructure.database.repositories.auth import EmailVerificationRepository
from gatehouse.infrastructure.database.repositories.identity import (
    PermissionRepository,
    RoleRepository,
    UserRepository,
)
from gatehouse.logging_config import setup_logging

logger = logging.getLogger(__name__)

PERMISSION_GRID: dict[ResourceType, tuple[ActionType, ...]] = {
    ResourceType.USER: (ActionType.READ, ActionType.CREATE, ActionType.UPDATE, ActionType.DELETE),
    ResourceType.ROLE: (ActionType.READ, ActionType.CREATE, ActionType.UPDATE, ActionType.DELETE),
    ResourceType.STORAGE: (ActionType.READ, ActionType.CREATE, ActionType.UPDATE, ActionType.DELETE),
    ResourceType.AUDIT: (ActionType.READ,),
}

DEFAULT_ROLE_PERMISSIONS = ("user:read", "storage:create", "storage:read", "storage:update")


async def seed(session: AsyncSession, admin_email: str | None = None, admin_password: str | None = None) -> None:
    permission_repo = PermissionRepository(session)
    role_repo = RoleRepository(session)
    user_repo = UserRepository(session)

    permissions: dict[str, Permission] = {}
    for resource, actions in PERMISSION_GRID.items():
        for action in actions:
            resource_action = ResourceAction(resource, action)
            name = str(resource_action)
            existing = await permission_repo.get_by_name(name)
            if existing is None:
                existing = await permission_repo.save(
                    Permission.create(resource_action, f"Can {action} {resource} records")
                )
                logger.info("Seeded permission %s", name)
            permissions[name] = existing

    admin_role = await role_repo.get_by_name("admin")
    if admin_role is None:
        admin_role = Role.create("admin", "Administrator role with full access")
        admin_role.add_permissions_on_creation(list(permissions.values()))
        admin_role = await role_repo.save(admin_role)
        logger.info("Seeded role admin")

    if await role_repo.get_by_name("user") is None:
        user_role = Role.create("user", "Default user role with limited access", is_default=True)
        user_role.add_permissions_on_creation([permissions[n] for n in DEFAULT_ROLE_PERMISSIONS])
        if await role_repo.get_default() is None:
            await role_repo.save(user_role)
        else:
            await role_repo.save(replace(user_role, is_default=False))
        logger.info("Seeded role user")

    if admin_email and admin_password:
        email = Email(admin_email)
        if await user_repo.get_by_email(str(email)) is None:
            # Built with the admin role directly: nobody holds admin rights yet.
            admin = replace(
                User.create(
                    email=email,
                    password_hash=hash_password(Password(admin_password)),
                    first_name=PersonName("Admin"),
                    last_name=PersonName("User"),
                ),
                roles=(admin_role,),
            )
            await user_repo.save(admin)

            verification = EmailVerification.issue(email, VerificationCode.generate(), 1)
            verification.mark_as_verified()
            await EmailVerificationRepository(session).save(verification)
            logger.info("Seeded administrator %s", email)


async def main() -> None:
    setup_logging()
    settings = get_settings()
    async with get_db_session() as session:
        await seed(session, settings.admin_email, settings.admin_password)
    await dispose_engine()


if __name__ == "__main__":
    asyncio.run(main())
