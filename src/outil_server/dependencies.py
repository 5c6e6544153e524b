"""Dependency injection providers for FastAPI endpoints.

This module provides FastAPI dependency functions that are used across
multiple routers to inject common dependencies like settings and services.
"""

from functools import lru_cache

from fastapi import HTTPException, Request

from outil_server.config import OutilServerSettings
from outil_server.ollama import OllamaClient
from outil_server.services import ConversationRunner
from outil_server.sessions import SessionManager
from outil_server.tools import CapabilityRegistry, ToolCallProcessor


@lru_cache
def get_settings() -> OutilServerSettings:
    """Get the application settings instance.

    This function is cached so that the same settings instance is reused
    across all requests. Settings are loaded from environment variables
    with the OUTIL_ prefix.
    """
    return OutilServerSettings()


def get_ollama_client(request: Request) -> OllamaClient:
    """Get the Ollama client from app state.

    Raises:
        HTTPException: If the Ollama client is not initialized (503 Service Unavailable).
    """
    if not hasattr(request.app.state, "ollama_client"):
        raise HTTPException(
            status_code=503,
            detail="Ollama client not initialized",
        )
    return request.app.state.ollama_client


def get_capability_registry(request: Request) -> CapabilityRegistry:
    """Get the frozen capability registry built during startup.

    Raises:
        HTTPException: If the registry is not initialized (503 Service Unavailable).
    """
    if not hasattr(request.app.state, "capability_registry"):
        raise HTTPException(
            status_code=503,
            detail="Capability registry not initialized",
        )
    return request.app.state.capability_registry


def get_session_manager(request: Request) -> SessionManager:
    """Get a SessionManager for the configured sessions directory."""
    # Use settings from app.state instead of cached get_settings()
    # This ensures tests can use their own isolated settings
    settings = request.app.state.settings
    return SessionManager(sessions_dir=settings.resolved_sessions_dir)


def get_conversation_runner(request: Request) -> ConversationRunner:
    """Build a ConversationRunner for one chat request.

    Every request gets its own ToolCallProcessor, and with it its own frame
    scanner. Only the frozen registry is shared.
    """
    settings = request.app.state.settings
    registry = get_capability_registry(request)
    return ConversationRunner(
        ollama_client=get_ollama_client(request),
        processor=ToolCallProcessor.from_registry(
            registry, repair=settings.payload_repair_enabled
        ),
        max_tool_rounds=settings.max_tool_rounds,
    )
