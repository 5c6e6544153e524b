"""Pydantic models for API request and response schemas.

This package contains all Pydantic models used for validating and
serializing API requests and responses across all endpoints.
"""

from outil_server.models.chat import (
    ChatRequest,
    ChatResponse,
    ContentDeltaEvent,
    DoneEvent,
    ErrorEvent,
    MessageCompleteEvent,
    ToolCallEvent,
    ToolCallExecuted,
    ToolResultEvent,
)

__all__ = [
    "ChatRequest",
    "ChatResponse",
    "ContentDeltaEvent",
    "DoneEvent",
    "ErrorEvent",
    "MessageCompleteEvent",
    "ToolCallEvent",
    "ToolCallExecuted",
    "ToolResultEvent",
]
