"""Session management for outil-server.

This package provides session persistence and message history management
for chat sessions.
"""

from outil_server.sessions.manager import SessionManager
from outil_server.sessions.session import ChatSession
from outil_server.sessions.types import (
    AssistantMessage,
    Message,
    SessionCreationOptions,
    SessionMetadata,
    SystemMessage,
    ToolMessage,
    UserMessage,
)

__all__ = [
    # Core classes
    "ChatSession",
    "SessionManager",
    # Message types
    "Message",
    "UserMessage",
    "SystemMessage",
    "AssistantMessage",
    "ToolMessage",
    # Configuration types
    "SessionMetadata",
    "SessionCreationOptions",
]
