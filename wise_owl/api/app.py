"""FastAPI application factory and configuration.

Hosts the NiceGUI chat page and exposes a health route. The answer service
itself is remote; this app only serves the front-end.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from wise_owl import __version__
from wise_owl.client.config import get_client_config

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Log startup and shutdown of the front-end host.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control to the application while it runs.
    """
    logger.info(f"Starting Wise Owl front-end against {get_client_config().base_url}")
    yield
    logger.info("Shutting down Wise Owl front-end...")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    application = FastAPI(
        title="Wise Owl Chat",
        description=(
            "Study assistant chat front-end. Streams answers from the remote "
            "answer service and renders them as they arrive."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @application.get("/health")
    async def health_check() -> dict[str, str]:
        """Check service health status."""
        return {
            "status": "healthy",
            "service": "wise-owl-chat",
            "answer_service": get_client_config().base_url,
        }

    return application


app = create_app()
