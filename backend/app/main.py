"""Vidhub - video platform user and channel API."""
from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app.config import get_settings
from app.errors import register_exception_handlers

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup: create tables and the media directory
    from app.database import Base, engine

    # Import all models so they're registered with Base
    from app import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    settings.media_dir.mkdir(parents=True, exist_ok=True)
    logger.info(f"{settings.app_name} started")

    yield


def create_app() -> FastAPI:
    """Build the application with routers and the error boundary installed."""
    from app.api import channels, users

    application = FastAPI(
        title=settings.app_name,
        description="User accounts, authentication and channel pages for a video platform",
        version="0.1.0",
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(application)

    @application.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "app": settings.app_name}

    application.include_router(users.router, prefix="/api/v1")
    application.include_router(channels.router, prefix="/api/v1")
    application.mount(
        settings.media_url_prefix,
        StaticFiles(directory=settings.media_dir, check_dir=False),
        name="media",
    )
    return application


app = create_app()
