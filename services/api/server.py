"""
Video Generation HTTP Server

FastAPI application exposing the generation orchestrator:
- POST /api/videos/generate - Start video generation
- GET /api/videos/{id}/status - Job progress
- GET /api/videos/{id} - Job record
- GET /api/health - Health check

The job store, provider registry and poll scheduler are built once per app
and kept on app.state; tests pass their own.

Usage:
    # Start server
    python -m uvicorn services.api.server:app --host 0.0.0.0 --port 5000

    # Or via main.py
    python main.py server
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from core.config import Config, get_config
from core.logging import setup_logging
from services.video_generation import (
    AsyncioScheduler,
    GenerationOrchestrator,
    JobStore,
    ProviderRegistry,
    Scheduler,
    build_registry,
)

from .routes import router, validation_exception_handler

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


def create_app(
    config: Optional[Config] = None,
    store: Optional[JobStore] = None,
    registry: Optional[ProviderRegistry] = None,
    scheduler: Optional[Scheduler] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        config: Configuration (defaults to the environment)
        store: Job store (a fresh in-memory store by default)
        registry: Provider registry (built from config by default)
        scheduler: Poll scheduler (asyncio timers by default)
    """
    config = config or get_config()
    store = store if store is not None else JobStore()
    registry = registry or build_registry(config)
    scheduler = scheduler or AsyncioScheduler()

    orchestrator = GenerationOrchestrator(
        store=store,
        registry=registry,
        scheduler=scheduler,
        polling=config.polling,
        fallbacks=config.fallbacks,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup and shutdown events."""
        setup_logging(config.server.log_level)
        logger.info("Starting video generation server...")
        logger.info(f"Providers: {registry.availability()}")
        for issue in config.validate(registry.names()):
            logger.warning(f"Config: {issue}")

        yield

        logger.info("Shutting down video generation server...")
        shutdown = getattr(scheduler, "shutdown", None)
        if shutdown is not None:
            await shutdown()
        await registry.close()

    app = FastAPI(
        title="Video Generation API",
        description="Prompt-to-video generation through external AI providers",
        version=API_VERSION,
        lifespan=lifespan,
    )

    app.state.config = config
    app.state.store = store
    app.state.registry = registry
    app.state.scheduler = scheduler
    app.state.orchestrator = orchestrator

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.cors_origins,
        allow_credentials="*" not in config.server.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.include_router(router)

    @app.get("/")
    async def root():
        """Root endpoint with API info."""
        return {
            "service": "Video Generation API",
            "version": API_VERSION,
            "endpoints": {
                "POST /api/videos/generate": "Start video generation",
                "GET /api/videos/{id}/status": "Job progress",
                "GET /api/videos/{id}": "Job details",
                "GET /api/health": "Health check",
            },
        }

    return app


app = create_app()
