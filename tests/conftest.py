"""Shared fixtures: settings, fake backend, wired facade."""
import os

# Settings are read from the environment on first use, before any gatehouse import.
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("ENVIRONMENT", "test")

import pytest

from gatehouse.config import Settings, get_settings
from gatehouse.interfaces.facade import GatehouseFacade

from fakes import Backend, seed_roles, store_admin


@pytest.fixture(name="settings")
def settings_fixture() -> Settings:
    get_settings.cache_clear()
    return get_settings()


@pytest.fixture(name="backend")
def backend_fixture() -> Backend:
    return Backend()


@pytest.fixture(name="facade")
def facade_fixture(backend: Backend, settings: Settings) -> GatehouseFacade:
    return backend.facade(settings)


@pytest.fixture(name="roles")
async def roles_fixture(backend: Backend):
    """(admin_role, default_user_role), both stored."""
    return await seed_roles(backend)


@pytest.fixture(name="admin")
async def admin_fixture(backend: Backend, roles):
    admin_role, _ = roles
    return await store_admin(backend, admin_role)
