"""
Candle Chart Backend - FastAPI Application

Main entry point for the backend API.
"""

import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app.core.config import Settings, settings as default_settings
from app.api import router as api_router

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application for the given settings."""
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler."""
        # Startup
        logger.info(f"Starting {settings.app_name} v{settings.app_version}")
        logger.info(f"Environment: {settings.environment}")

        from app.services.cache import DerivedCache, init_redis, close_redis
        from app.services.chart import build_chart_service

        redis_client = await init_redis(settings.redis_url) if settings.enable_cache else None
        if redis_client:
            logger.info("Redis cache connected")
        else:
            logger.info("Redis unavailable or disabled - using in-memory cache")
        cache = DerivedCache(redis_client, prefix=settings.cache_key_prefix)

        # Build or open the candle store; failure aborts startup
        service = build_chart_service(settings, cache)
        store = await service.guard.ensure_loaded()
        status = store.status()
        logger.info(
            f"Candle store ready: {status.candle_count} candles "
            f"({status.first_timestamp} to {status.last_timestamp})"
        )
        app.state.chart_service = service

        yield

        # Shutdown
        logger.info("Shutting down...")
        await service.guard.close()
        if redis_client:
            await close_redis()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="""
        Candle Chart API

        ## Endpoints
        - **Candles**: OHLCV series, most recent N bars
        - **Indicators**: SMA-14, EMA-14, RSI-14 per candle
        - **Fibonacci**: retracement levels over any date window

        The series is loaded once from CSV into SQLite and never modified.
        """,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    # Include API routes
    app.include_router(api_router, prefix="/api")

    @app.get("/health")
    async def health_check(request: Request):
        """Health check endpoint."""
        service = getattr(request.app.state, "chart_service", None)
        healthy = service is not None and await service.health_check()
        return {
            "status": "healthy" if healthy else "unavailable",
            "app": settings.app_name,
            "version": settings.app_version,
            "environment": settings.environment,
            "series": service.get_status().model_dump(mode="json") if service else None,
        }

    if settings.static_dir and os.path.isdir(settings.static_dir):
        app.mount("/", StaticFiles(directory=settings.static_dir, html=True), name="static")
    else:
        @app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "message": "Candle Chart Backend API",
                "docs": "/docs",
                "health": "/health",
            }

    return app


app = create_app()
