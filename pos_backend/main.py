# pos_backend/main.py
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from pos_backend.config.database import Database
from pos_backend.config.settings import Settings, get_settings
from pos_backend.core.exceptions import register_exception_handlers
from pos_backend.core.middleware import configure_logging, setup_middleware
from pos_backend.api.v1.router import api_router

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    """
    Build the API.

    The database handle is created here (or injected) and stored on
    ``app.state``; request dependencies read it from there.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        db = app.state.database
        db.create_schema()
        logger.info(f"{settings.app_name} starting - version {settings.version}")
        logger.info(f"Environment: {'Development' if settings.debug else 'Production'}")
        logger.info(f"Negative stock allowed: {settings.allow_negative_stock}")

        yield

        # Shutdown
        logger.info(f"{settings.app_name} shutting down")
        if database is None:
            db.dispose()

    app = FastAPI(
        title=settings.app_name,
        version=settings.version,
        description="Point-of-sale backend: catalog, sales ledger and analytics",
        lifespan=lifespan
    )
    app.state.settings = settings
    app.state.database = database or Database.from_settings(settings)

    setup_middleware(app, settings.cors_origins)
    register_exception_handlers(app)

    app.include_router(api_router, prefix="/api/v1")

    @app.get("/")
    async def root():
        return {
            "message": f"{settings.app_name}",
            "version": settings.version,
            "status": "running",
            "environment": "production" if not settings.debug else "development",
            "docs": "/docs",
            "api": "/api/v1"
        }

    @app.get("/health")
    async def health_check():
        return {
            "status": "healthy",
            "version": settings.version,
            "app": settings.app_name
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(
        "pos_backend.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
