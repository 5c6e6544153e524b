"""Service layer for outil-server.

This package contains business logic services that are used by routers.
"""

from outil_server.services.conversation import ConversationEvent, ConversationRunner

__all__ = ["ConversationEvent", "ConversationRunner"]
