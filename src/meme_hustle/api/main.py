"""FastAPI main application."""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..cache.base import GenerationCache
from ..cache.factory import build_cache
from ..config.config import Settings, get_settings
from ..database.connection import DatabaseConnectionManager
from ..dspy_modules.caption_generator import CaptionGenerator
from ..exceptions.base import GeneratorError
from ..repositories.meme_repository import MemeRepository
from ..services.broadcaster import ConnectionManager
from ..services.leaderboard import LeaderboardProjection
from ..services.meme_service import MemeService
from ..utils.logging import get_logger, setup_logging
from .middleware.error_handler import register_error_handlers
from .middleware.logging import LoggingMiddleware
from .realtime import realtime_channel
from .routers import health, leaderboard, memes

logger = get_logger(__name__)


async def check_generator(generator: CaptionGenerator) -> None:
    """Log whether the content generator answers; never fails startup."""
    try:
        phrase = await generator.check_connection()
    except GeneratorError as e:
        logger.error("generator_connection_failed", error=e.message)
        return
    logger.info("generator_connection_ok", response=phrase)


def create_app(
    settings: Optional[Settings] = None,
    *,
    generator: Optional[CaptionGenerator] = None,
    cache: Optional[GenerationCache] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Settings to use; read from the environment when omitted
        generator: Content generator; built from settings when omitted
        cache: Generated-content cache; built from settings when omitted

    Returns:
        The FastAPI application
    """
    settings = settings or get_settings()
    setup_logging(
        level=settings.log_level, json_format=settings.log_json, log_file=settings.log_file
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "starting", app=settings.app_name, version=settings.app_version, env=settings.app_env
        )
        db = DatabaseConnectionManager(settings.store_url)
        if settings.create_tables:
            await db.init_db()

        repository = MemeRepository(db)
        content_cache = cache if cache is not None else build_cache(settings)
        content_generator = (
            generator if generator is not None else CaptionGenerator.from_settings(settings)
        )
        connections = ConnectionManager()
        projection = LeaderboardProjection(repository, size=settings.leaderboard_size)

        app.state.db = db
        app.state.connections = connections
        app.state.meme_service = MemeService(
            repository=repository,
            generator=content_generator,
            cache=content_cache,
            leaderboard=projection,
            broadcaster=connections,
        )

        if settings.generator_startup_check:
            await check_generator(content_generator)
        await projection.refresh()

        yield

        logger.info("shutting_down", app=settings.app_name)
        await connections.close_all()
        await projection.wait_for_pending()
        await content_cache.close()
        await db.dispose()

    app = FastAPI(
        title=settings.app_name,
        description="Realtime meme sharing, voting and bidding",
        version=settings.app_version,
        docs_url="/docs",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(LoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )
    register_error_handlers(app)

    app.include_router(health.router, prefix=f"{settings.api_prefix}/health", tags=["health"])
    app.include_router(memes.router, prefix=f"{settings.api_prefix}/memes", tags=["memes"])
    app.include_router(leaderboard.router, prefix=settings.api_prefix, tags=["leaderboard"])
    app.add_api_websocket_route(settings.realtime_path, realtime_channel)

    return app


app = create_app()
