"""FastAPI application factory and configuration.

Main application entry point with lifespan management, middleware,
and router registration.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from localchat import __version__
from localchat.api.chat import router as chat_router
from localchat.relay.config import get_relay_config

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Manage application startup and shutdown lifecycle.

    Relay settings are validated on startup so a bad OLLAMA_URL or
    OLLAMA_MODEL fails the boot instead of the first chat request.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control to the application while it runs.
    """
    config = get_relay_config()
    logger.info(
        f"Starting Local LLM Chat API (model {config.model_name} at {config.upstream_url})"
    )
    yield
    logger.info("Shutting down Local LLM Chat API...")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    application = FastAPI(
        title="Local LLM Chat API",
        description=(
            "Chat relay for a locally running Ollama server. Forwards the "
            "conversation as a prompt and streams the generated tokens back "
            "as Server-Sent Events."
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
        expose_headers=["*"],
    )

    application.include_router(chat_router)

    @application.get("/health")
    async def health_check() -> dict[str, str]:
        """Check service health status."""
        return {"status": "healthy", "service": "local-llm-chat"}

    return application


app = create_app()
