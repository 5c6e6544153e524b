"""Decoding of directive payloads into typed tool commands.

The tool identifier is resolved against the registry first. Only then are
the arguments validated, using the argument model declared for that tool.
Which keys happen to be present never decides which tool is meant.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from outil_server.tools.definitions import ToolArguments
from outil_server.tools.errors import InvalidArguments, ParseError, UnknownTool
from outil_server.tools.normalizer import repair_doubled_braces
from outil_server.tools.registry import CapabilityRegistry
from outil_server.tools.scanner import WireFormat

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolCommand:
    """A decoded and validated tool invocation.

    Attributes:
        name: Registered tool identifier
        arguments: Instance of the argument model declared for the tool
    """

    name: str
    arguments: ToolArguments


class CommandDecoder:
    """Turns normalized payload text into ToolCommand values."""

    def __init__(self, registry: CapabilityRegistry, repair: bool = False) -> None:
        """Initialize the decoder.

        Args:
            registry: Registry holding the closed set of executable tools
            repair: Whether to try repair_doubled_braces after a parse failure
        """
        self.registry = registry
        self.repair = repair

    def decode(
        self, candidate: str, wire_format: WireFormat | None = None
    ) -> ToolCommand:
        """Decode a candidate payload.

        Args:
            candidate: Normalized payload text
            wire_format: Format the directive arrived in. Selects the name of
                the arguments field; when None either name is accepted.

        Returns:
            The validated ToolCommand

        Raises:
            ParseError: If the text is not a JSON object
            UnknownTool: If the tool name is missing or not registered
            InvalidArguments: If the arguments fail the tool's validation
        """
        data = self._parse(candidate)

        name = data.get("name")
        if not isinstance(name, str):
            raise UnknownTool(None)
        tool = self.registry.get(name)
        if tool is None:
            raise UnknownTool(name)

        raw_arguments = _extract_arguments(data, wire_format)
        if not isinstance(raw_arguments, dict):
            raise InvalidArguments(name, "arguments must be a JSON object")

        try:
            arguments = tool.arguments.model_validate(raw_arguments)
        except ValidationError as e:
            errors = [
                {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
                for err in e.errors()
            ]
            reason = "; ".join(f"{err['field']}: {err['message']}" for err in errors)
            raise InvalidArguments(name, reason, errors) from e

        logger.debug(f"Decoded tool command: {name}")
        return ToolCommand(name=name, arguments=arguments)

    def _parse(self, candidate: str) -> dict[str, Any]:
        try:
            data = json.loads(candidate)
        except json.JSONDecodeError as e:
            repaired = repair_doubled_braces(candidate) if self.repair else None
            if repaired is None:
                raise ParseError(f"Tool call is not valid JSON: {e.msg}") from e
            try:
                data = json.loads(repaired)
            except json.JSONDecodeError:
                raise ParseError(f"Tool call is not valid JSON: {e.msg}") from e
            logger.info("Tool call payload parsed after brace repair")

        if not isinstance(data, dict):
            raise ParseError("Tool call must be a JSON object")
        return data


def _extract_arguments(data: dict[str, Any], wire_format: WireFormat | None) -> Any:
    if wire_format is not None:
        return data.get(wire_format.arguments_field, {})
    for wf in WireFormat:
        if wf.arguments_field in data:
            return data[wf.arguments_field]
    return {}


def encode(command: ToolCommand, wire_format: WireFormat) -> str:
    """Render a command as a complete directive in the given wire format."""
    payload = {
        "name": command.name,
        wire_format.arguments_field: command.arguments.model_dump(exclude_none=True),
    }
    return (
        f"{wire_format.open_marker}{json.dumps(payload)}{wire_format.close_marker}"
    )
