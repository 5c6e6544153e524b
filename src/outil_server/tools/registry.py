"""Capability registry.

The registry is the closed set of tools the server can execute. It is filled
once at startup, frozen, and then shared read-only by every conversation.
The decoder resolves tool identifiers against it and the dispatcher looks up
handlers in it, so both always agree on what exists.
"""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterator

from outil_server.tools.definitions import TOOL_CATALOG, ToolArguments, ToolDefinition

logger = logging.getLogger(__name__)

CapabilityHandler = Callable[[Any], Awaitable[str]]


@dataclass(frozen=True)
class RegisteredTool:
    """A tool definition bound to its handler."""

    definition: ToolDefinition
    handler: CapabilityHandler
    timeout: float | None = None

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def arguments(self) -> type[ToolArguments]:
        return self.definition.arguments


class CapabilityRegistry:
    """Maps tool identifiers to asynchronous capability handlers."""

    def __init__(self) -> None:
        self._tools: dict[str, RegisteredTool] = {}
        self._frozen = False

    def register(
        self,
        identifier: str,
        handler: CapabilityHandler,
        *,
        definition: ToolDefinition | None = None,
        timeout: float | None = None,
    ) -> None:
        """Register the handler for a tool.

        Args:
            identifier: Tool identifier, e.g. "get_weather_data"
            handler: Async callable taking the validated arguments model
                and returning result text
            definition: Definition for a tool outside the built-in catalog
            timeout: Optional per-call deadline in seconds

        Raises:
            RuntimeError: If the registry has been frozen
            ValueError: If the identifier is already registered or has no
                definition
        """
        if self._frozen:
            raise RuntimeError(
                f"Cannot register '{identifier}': registry is frozen"
            )
        if identifier in self._tools:
            raise ValueError(f"Tool '{identifier}' is already registered")

        if definition is None:
            definition = TOOL_CATALOG.get(identifier)
            if definition is None:
                raise ValueError(f"No definition for tool '{identifier}'")
        elif definition.name != identifier:
            raise ValueError(
                f"Definition name '{definition.name}' does not match '{identifier}'"
            )

        self._tools[identifier] = RegisteredTool(
            definition=definition, handler=handler, timeout=timeout
        )
        logger.debug(f"Registered tool: {identifier}")

    def freeze(self) -> None:
        """Prevent further registrations."""
        self._frozen = True
        logger.info(f"Capability registry frozen with {len(self._tools)} tools")

    @property
    def frozen(self) -> bool:
        return self._frozen

    def get(self, identifier: str) -> RegisteredTool | None:
        return self._tools.get(identifier)

    def names(self) -> list[str]:
        return list(self._tools)

    def tool_schemas(self) -> list[dict[str, Any]]:
        """Function schemas for every registered tool, in registration order."""
        return [tool.definition.schema() for tool in self._tools.values()]

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def __iter__(self) -> Iterator[RegisteredTool]:
        return iter(self._tools.values())
