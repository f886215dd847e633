"""Aggregate all v1 routers."""
from fastapi import APIRouter

from .routers.admin_roles import router as admin_roles_router
from .routers.admin_users import router as admin_users_router
from .routers.auth import router as auth_router
from .routers.storage import admin_router as admin_files_router
from .routers.storage import router as files_router
from .routers.users import router as users_router

v1_router = APIRouter(prefix="/api/v1")
v1_router.include_router(auth_router)
v1_router.include_router(users_router)
v1_router.include_router(files_router)
v1_router.include_router(admin_users_router)
v1_router.include_router(admin_roles_router)
v1_router.include_router(admin_files_router)
