"""Tool catalog: identifiers, descriptions, and argument shapes.

Each tool's arguments are described by a pydantic model. The model is the
single source of truth for validation in the decoder and for the function
schema advertised to the language model.
"""

from dataclasses import dataclass
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class ToolArguments(BaseModel):
    """Base class for tool argument models.

    Strict mode keeps the model from coercing values (a number is not a
    location). Unknown keys are ignored.
    """

    model_config = ConfigDict(strict=True, frozen=True, extra="ignore")


class WeatherArguments(ToolArguments):
    location: str = Field(
        description="The city and state, e.g. New Delhi, Delhi",
    )


class SearchArguments(ToolArguments):
    query: str = Field(description="The search query to look up")


class NoArguments(ToolArguments):
    """Arguments for tools that take no parameters."""


class CalendarArguments(ToolArguments):
    action: Literal["create", "query", "read", "update"]
    title: str | None = None
    startDate: str | None = Field(default=None, description="ISO 8601 date")
    endDate: str | None = Field(default=None, description="ISO 8601 date")
    location: str | None = None
    notes: str | None = None
    calendarName: str | None = None
    daysAhead: int | None = None
    eventId: str | None = None


class RemindersArguments(ToolArguments):
    action: Literal["create", "query", "complete", "update", "delete"]
    title: str | None = None
    notes: str | None = None
    dueDate: str | None = Field(default=None, description="ISO 8601 date")
    priority: str | None = None
    listName: str | None = None
    reminderId: str | None = None
    filter: str | None = None


class ContactsArguments(ToolArguments):
    action: Literal["search", "read", "create"]
    query: str | None = None
    contactId: str | None = None
    givenName: str | None = None
    familyName: str | None = None
    email: str | None = None
    phoneNumber: str | None = None
    organization: str | None = None


class LocationArguments(ToolArguments):
    action: Literal["current", "geocode", "reverse", "distance"]
    address: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    latitude2: float | None = None
    longitude2: float | None = None


class MusicArguments(ToolArguments):
    action: Literal["search", "play", "pause", "next", "previous", "currentSong"]
    query: str | None = None
    searchType: str | None = None
    limit: int | None = None
    itemId: str | None = None


@dataclass(frozen=True)
class ToolDefinition:
    """Static description of one tool."""

    name: str
    description: str
    arguments: type[ToolArguments]

    def schema(self) -> dict[str, Any]:
        """Build an OpenAI-style function schema for this tool."""
        parameters = self.arguments.model_json_schema()
        parameters.pop("title", None)
        parameters.pop("description", None)
        parameters.setdefault("properties", {})
        parameters.setdefault("required", [])
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": parameters,
            },
        }


TOOL_CATALOG: dict[str, ToolDefinition] = {
    definition.name: definition
    for definition in (
        ToolDefinition(
            name="get_weather_data",
            description="Get current weather data for a specific location",
            arguments=WeatherArguments,
        ),
        ToolDefinition(
            name="search_duckduckgo",
            description="Search DuckDuckGo for information on a topic",
            arguments=SearchArguments,
        ),
        ToolDefinition(
            name="get_workout_summary",
            description="Get a summary of workouts for this week",
            arguments=NoArguments,
        ),
        ToolDefinition(
            name="manage_calendar",
            description="Create, read, update, and query calendar events",
            arguments=CalendarArguments,
        ),
        ToolDefinition(
            name="manage_reminders",
            description="Create, read, update, complete, and query reminders",
            arguments=RemindersArguments,
        ),
        ToolDefinition(
            name="manage_contacts",
            description="Search, read, and create contacts",
            arguments=ContactsArguments,
        ),
        ToolDefinition(
            name="access_location",
            description=(
                "Get current location, geocode addresses, and calculate distances"
            ),
            arguments=LocationArguments,
        ),
        ToolDefinition(
            name="access_music",
            description="Search and play music, manage playback",
            arguments=MusicArguments,
        ),
    )
}
