"""Error types for tool-call extraction and dispatch.

Every error raised while turning a directive into a capability result derives
from ToolCallError. Each carries a machine-readable code and a human-readable
message, using the same shape as the API error bodies:
{"error": {"code": ..., "message": ..., "details": {...}}}.
"""

from typing import Any


class ToolCallError(Exception):
    """Base class for all directive processing failures."""

    code = "tool_call_error"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Render the error in the API error body format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
            }
        }


class ParseError(ToolCallError):
    """The candidate payload is not a well-formed JSON object."""

    code = "parse_error"


class UnknownTool(ToolCallError):
    """The tool identifier is absent or not in the registry."""

    code = "unknown_tool"

    def __init__(self, tool_name: str | None) -> None:
        if tool_name is None:
            message = "Tool call is missing a tool name"
        else:
            message = f"Unknown tool: {tool_name}"
        super().__init__(message, details={"tool_name": tool_name})
        self.tool_name = tool_name


class InvalidArguments(ToolCallError):
    """The tool is known but its arguments fail validation."""

    code = "invalid_arguments"

    def __init__(
        self,
        tool_name: str,
        reason: str,
        errors: list[dict[str, Any]] | None = None,
    ) -> None:
        super().__init__(
            f"Invalid arguments for tool '{tool_name}': {reason}",
            details={"tool_name": tool_name, "errors": errors or []},
        )
        self.tool_name = tool_name


class CapabilityFailure(ToolCallError):
    """A registered capability handler raised while executing."""

    code = "capability_failure"

    def __init__(self, tool_name: str, underlying: BaseException) -> None:
        reason = str(underlying) or type(underlying).__name__
        super().__init__(
            f"Tool '{tool_name}' execution failed: {reason}",
            details={
                "tool_name": tool_name,
                "exception_type": type(underlying).__name__,
            },
        )
        self.tool_name = tool_name
        self.underlying = underlying


class CapabilityError(Exception):
    """Typed failure raised by capability providers.

    Providers raise subclasses of this to report an expected failure (such as
    an unknown location). The dispatcher wraps it in CapabilityFailure like
    any other handler exception.
    """


class LocationNotFoundError(CapabilityError):
    """No place matches the requested location."""

    def __init__(self, location: str) -> None:
        if location.strip():
            super().__init__(f"Location not found: {location}")
        else:
            super().__init__("Location not found: no location was given")
        self.location = location
