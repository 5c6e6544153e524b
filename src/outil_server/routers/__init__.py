"""FastAPI routers for API endpoints.

This package contains all route handlers organized by resource type.
Each router module defines endpoints for a specific domain (health, tools, sessions, chat).
"""

from outil_server.routers import chat, health, sessions, tools

__all__ = [
    "chat",
    "health",
    "sessions",
    "tools",
]
