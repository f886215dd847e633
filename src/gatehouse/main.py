"""FastAPI application entry point."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from gatehouse.config import get_settings
from gatehouse.infrastructure.database.connection import dispose_engine, get_engine
from gatehouse.interfaces.api.v1.router import v1_router
from gatehouse.interfaces.api.v1.routers.storage import download_router
from gatehouse.interfaces.errors import register_exception_handlers
from gatehouse.logging_config import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: warm up the engine
    settings = get_settings()
    settings.storage_path.mkdir(parents=True, exist_ok=True)
    get_engine()  # Initialize connection pool
    logger.info("%s %s started (%s)", settings.app_name, settings.app_version, settings.environment)
    yield
    # Shutdown: clean up
    await dispose_engine()


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Authentication and role-based access control API",
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-RateLimit-Limit", "X-RateLimit-Remaining", "X-RateLimit-Reset", "Retry-After"],
    )

    register_exception_handlers(app)
    app.include_router(v1_router)
    app.include_router(download_router)

    @app.get("/health")
    async def health():
        return {"status": "ok", "version": settings.app_version}

    return app


app = create_app()
