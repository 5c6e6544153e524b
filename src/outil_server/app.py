"""FastAPI application factory and lifespan management.

This module contains the create_app() factory function that creates and configures
the FastAPI application instance, including lifespan management for startup/shutdown
and router registration.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from outil_server.config import OutilServerSettings
from outil_server.ollama import OllamaClient
from outil_server.routers import chat, health, sessions, tools
from outil_server.tools import CapabilityRegistry
from outil_server.tools.providers import register_default_providers

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan context manager for FastAPI application.

    Expensive objects (the Ollama client, the shared HTTP client used by
    capability providers, and the capability registry) are created once at
    startup and stored in app.state for reuse across all requests.

    Args:
        app: The FastAPI application instance.

    Yields:
        None: Control is yielded while the app is running.
    """
    settings: OutilServerSettings = app.state.settings

    app.state.ollama_client = OllamaClient(host=settings.ollama_host)
    logger.info(f"Initialized Ollama client with host: {settings.ollama_host}")

    app.state.http_client = httpx.AsyncClient(timeout=settings.http_timeout_seconds)

    # A registry supplied to create_app() replaces the default providers
    registry: CapabilityRegistry | None = getattr(
        app.state, "capability_registry", None
    )
    if registry is None:
        registry = CapabilityRegistry()
        register_default_providers(registry, app.state.http_client, settings)
    if not registry.frozen:
        registry.freeze()
    app.state.capability_registry = registry
    logger.info(f"Registered tools: {', '.join(registry.names()) or 'none'}")

    connected = await app.state.ollama_client.check_connection()
    if connected:
        logger.info("Successfully connected to Ollama")
    else:
        logger.warning("Could not connect to Ollama - check if server is running")

    yield

    await app.state.http_client.aclose()
    if hasattr(app.state, "ollama_client"):
        await app.state.ollama_client.close()
        logger.info("Ollama client closed")


def create_app(
    settings: OutilServerSettings | None = None,
    registry: CapabilityRegistry | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional OutilServerSettings instance. If not provided,
                  settings will be loaded from environment variables.
        registry: Optional capability registry to use instead of the
                  default providers (used by tests and embedders).

    Returns:
        FastAPI: Configured FastAPI application instance.
    """
    if settings is None:
        from outil_server.dependencies import get_settings

        settings = get_settings()

    app = FastAPI(
        title="outil-server",
        description="Headless FastAPI server for local LLM tool calling via Ollama",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Store settings in app.state for lifespan access
    app.state.settings = settings
    if registry is not None:
        app.state.capability_registry = registry

    # Note: FastAPI's type hints for add_middleware are overly strict
    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router)
    app.include_router(tools.router)
    app.include_router(sessions.router)
    app.include_router(chat.router)

    return app
