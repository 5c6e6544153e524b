"""Pydantic models for the tool catalog endpoint."""

from typing import Any

from pydantic import BaseModel, Field


class ToolInfo(BaseModel):
    """A registered tool as advertised to clients and models."""

    name: str = Field(description="Tool identifier used in directives")
    description: str = Field(description="What the tool does")
    timeout_seconds: float | None = Field(
        default=None, description="Per-call deadline, if any"
    )
    schema_: dict[str, Any] = Field(
        alias="schema",
        serialization_alias="schema",
        description="OpenAI-style function schema",
    )


class ToolListResponse(BaseModel):
    tools: list[ToolInfo]
    system_prompt: str = Field(
        description="System prompt new sessions receive by default"
    )
