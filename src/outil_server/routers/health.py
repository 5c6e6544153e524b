"""Health check endpoint router."""

import logging

from fastapi import APIRouter, Request

from outil_server.models.health import HealthResponse
from outil_server.ollama import OllamaClient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Health check endpoint.

    Returns the current health status and version of outil-server, Ollama
    connectivity when the client is initialized, and the number of
    registered tools.
    """
    ollama_connected = None
    ollama_host = None
    tools_registered = None

    if hasattr(request.app.state, "ollama_client"):
        ollama_client: OllamaClient = request.app.state.ollama_client
        ollama_host = ollama_client.host

        try:
            ollama_connected = await ollama_client.check_connection()
            logger.debug(f"Ollama connectivity check: {ollama_connected}")
        except Exception as e:
            logger.warning(f"Ollama connectivity check failed: {e}")
            ollama_connected = False

    if hasattr(request.app.state, "capability_registry"):
        tools_registered = len(request.app.state.capability_registry)

    return HealthResponse(
        status="ok",
        version="0.1.0",
        ollama_connected=ollama_connected,
        ollama_host=ollama_host,
        tools_registered=tools_registered,
    )
