"""Skillverse - FastAPI app entry point."""
from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from skillverse.core.config import settings
from skillverse.core.database import DatabaseManager, check_database_connection
from skillverse.core.error_handlers import register_exception_handlers
from skillverse.core.logging import setup_logging
from skillverse.routers import api_router


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    DatabaseManager.create_all_tables()
    logger.info(f"{settings.PROJECT_NAME} {settings.VERSION} started")
    yield


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.PROJECT_NAME,
        description=settings.DESCRIPTION,
        version=settings.VERSION,
        openapi_url=f"{settings.API_V1_STR}/openapi.json",
        lifespan=lifespan,
    )

    if settings.BACKEND_CORS_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=[str(origin).rstrip("/") for origin in settings.BACKEND_CORS_ORIGINS],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    register_exception_handlers(app)
    app.include_router(api_router, prefix=settings.API_V1_STR)

    @app.get("/health")
    async def health():
        return {
            "status": "ok" if check_database_connection() else "degraded",
            "version": settings.VERSION,
        }

    return app


app = create_app()
