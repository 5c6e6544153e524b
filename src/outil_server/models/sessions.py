"""Pydantic models for session API requests and responses."""

from typing import Any

from pydantic import BaseModel, Field


class CreateSessionRequest(BaseModel):
    """Request body for creating a new session."""

    model: str | None = Field(
        None, description="The LLM model to use (defaults to the server's default model)"
    )
    system_prompt: str | None = Field(
        None,
        description="System prompt content. Defaults to the generated tool prompt.",
    )


class MessageResponse(BaseModel):
    """A single message in a session."""

    role: str = Field(..., description="Message role (user, system, assistant, tool)")
    content: str = Field(..., description="Message content")
    message_id: str = Field(..., description="Unique message identifier")
    timestamp: str = Field(..., description="ISO 8601 timestamp")
    model: str | None = Field(None, description="Model name (assistant messages)")
    eval_count: int | None = Field(None, description="Tokens generated")
    prompt_eval_count: int | None = Field(None, description="Tokens in prompt")
    tool_calls: list[dict[str, Any]] | None = Field(
        None, description="Decoded tool call (assistant messages)"
    )
    tool_name: str | None = Field(None, description="Tool name (tool messages)")
    error_code: str | None = Field(
        None, description="Error kind when a tool message reports a failure"
    )


class SessionResponse(BaseModel):
    """Session metadata returned after creation."""

    session_id: str = Field(..., description="Unique session identifier")
    model: str = Field(..., description="LLM model used in this session")
    created_at: str = Field(..., description="ISO 8601 creation timestamp")
    updated_at: str = Field(..., description="ISO 8601 last update timestamp")
    message_count: int = Field(..., description="Number of messages in session")


class SessionListItem(SessionResponse):
    """Session summary for list view."""

    preview: str = Field("", description="Preview of the first user message")


class SessionListResponse(BaseModel):
    sessions: list[SessionListItem] = Field(
        default_factory=list, description="Sessions, most recently updated first"
    )


class SessionDetailResponse(SessionResponse):
    """Full session details including message history."""

    messages: list[MessageResponse] = Field(
        default_factory=list, description="Complete message history"
    )
