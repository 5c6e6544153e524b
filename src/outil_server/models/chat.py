"""Pydantic models for chat API requests, responses, and SSE events.

This module defines the request and response schemas for the chat endpoints,
including both streaming and non-streaming chat interactions.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ChatRequest(BaseModel):
    """Request body for chat endpoints.

    Used by both POST /api/v1/chat/{session_id} (non-streaming)
    and POST /api/v1/chat/{session_id}/stream (streaming).
    """

    message: str | None = Field(
        default=None,
        description="The user message to send. If null, re-generates from the current session history.",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {"message": "What's the weather like in Paris?"},
                {"message": None},
            ]
        }
    )


class MessageResponse(BaseModel):
    """Response schema for the final assistant message."""

    role: str = Field(description="Message role (assistant)")
    content: str = Field(description="Message content")
    model: str = Field(description="Model that generated this message")
    message_id: str = Field(description="Unique message identifier")
    timestamp: str = Field(description="ISO 8601 timestamp")
    eval_count: int | None = Field(
        default=None, description="Number of tokens generated"
    )
    prompt_eval_count: int | None = Field(
        default=None, description="Number of tokens in the prompt"
    )

    model_config = ConfigDict(from_attributes=True)


class ToolCallExecuted(BaseModel):
    """One directive processed while producing the response."""

    tool_name: str | None = Field(description="Tool identifier, if one was found")
    arguments: dict[str, Any] | None = Field(
        default=None, description="Validated arguments (null when decoding failed)"
    )
    ok: bool = Field(description="Whether the tool produced a result")
    content: str = Field(description="Result text or error message fed back to the model")
    error_code: str | None = Field(
        default=None,
        description="parse_error, unknown_tool, invalid_arguments, or capability_failure",
    )


class ChatResponse(BaseModel):
    """Response body for the non-streaming chat endpoint."""

    session_id: str = Field(description="Session identifier")
    message: MessageResponse = Field(description="The assistant's final message")
    tool_calls_executed: list[ToolCallExecuted] = Field(
        default_factory=list,
        description="Tool calls processed during this response, in order",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "session_id": "a1b2c3d4e5",
                "message": {
                    "role": "assistant",
                    "content": "It is 18°C and partly cloudy in Paris.",
                    "model": "qwen2.5:1.5b",
                    "message_id": "f1e2d3c4b5",
                    "timestamp": "2025-01-15T10:35:00.000000Z",
                    "eval_count": 45,
                    "prompt_eval_count": 320,
                },
                "tool_calls_executed": [
                    {
                        "tool_name": "get_weather_data",
                        "arguments": {"location": "Paris"},
                        "ok": True,
                        "content": "Current Weather for Paris, France: ...",
                        "error_code": None,
                    }
                ],
            }
        }
    )


# --- SSE events ---


class ContentDeltaEvent(BaseModel):
    """Narrative text from the model, passed through as it is generated."""

    content: str
    role: str = "assistant"


class ToolCallEvent(BaseModel):
    """A directive was extracted from the stream."""

    tool_name: str | None
    arguments: dict[str, Any] | None = None
    wire_format: str
    payload: str


class ToolResultEvent(BaseModel):
    """The result (or error) fed back to the model for a directive."""

    tool_name: str | None
    ok: bool
    content: str
    error_code: str | None = None


class MessageCompleteEvent(BaseModel):
    """The final assistant message has been generated."""

    message_id: str
    model: str
    eval_count: int | None = None
    prompt_eval_count: int | None = None
    tool_calls_executed: int = 0


class ErrorEvent(BaseModel):
    code: str
    message: str
    details: dict[str, Any] = Field(default_factory=dict)


class DoneEvent(BaseModel):
    session_id: str
