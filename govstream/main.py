"""GovStream demo - FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from . import __version__
from .config.settings import get_settings
from .demo.routes import init_dependencies, router
from .pipeline.handler import attach_handler
from .pipeline.provider import LoggingProvider
from .pipeline.rotation import RotationWorker

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("govstream")


def create_app(
    provider: LoggingProvider | None = None,
    rotation_interval_seconds: float | None = None,
) -> FastAPI:
    """Create the demo application.

    Args:
        provider: Logging provider (built from settings at startup if None)
        rotation_interval_seconds: Rotation pass interval (settings if None)
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan events."""
        # Startup
        settings = get_settings()
        logger.info(f"Starting GovStream demo v{__version__}")

        active = provider or LoggingProvider(settings.to_pipeline_config())
        init_dependencies(active)
        app.state.provider = active

        interval = rotation_interval_seconds or settings.rotation_interval_seconds
        worker = RotationWorker(active, interval_seconds=interval)
        worker.start()
        app.state.rotation_worker = worker
        logger.info(f"Rotation worker started (every {interval}s)")

        handler = None
        if settings.govern_stdlib_logging:
            handler = attach_handler(active)
            logger.info("Root logger records are routed through governance")

        yield

        # Shutdown
        logger.info("Shutting down GovStream demo")
        worker.stop()
        if handler is not None:
            logging.getLogger().removeHandler(handler)

    app = FastAPI(
        title="GovStream Demo",
        description="Governed structured logging: redaction, enrichment, fallback sinks and rotation",
        version=__version__,
        lifespan=lifespan,
    )
    app.include_router(router)
    return app


app = create_app()


def run(host: str | None = None, port: int | None = None, reload: bool = False):
    """Run the application (entry point for CLI)."""
    settings = get_settings()
    host = host or settings.api_host
    port = port or settings.api_port

    logger.info(f"Starting server on {host}:{port}")

    uvicorn.run(
        "govstream.main:app",
        host=host,
        port=port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
