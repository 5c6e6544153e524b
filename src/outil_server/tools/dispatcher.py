"""Dispatch of decoded tool commands to capability handlers."""

import asyncio
import logging
from dataclasses import dataclass

from outil_server.tools.decoder import ToolCommand
from outil_server.tools.errors import CapabilityFailure, ToolCallError
from outil_server.tools.registry import CapabilityRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DispatchResult:
    """Outcome of processing one directive.

    Exactly one of output and error is set.
    """

    tool_name: str | None
    output: str | None = None
    error: ToolCallError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def feedback_text(self) -> str:
        """Text handed back to the model, for successes and failures alike."""
        if self.error is not None:
            return f"Error: {self.error.message}"
        return self.output or ""

    @classmethod
    def success(cls, tool_name: str, output: str) -> "DispatchResult":
        return cls(tool_name=tool_name, output=output)

    @classmethod
    def failure(cls, error: ToolCallError, tool_name: str | None = None) -> "DispatchResult":
        return cls(tool_name=tool_name or error.details.get("tool_name"), error=error)


class Dispatcher:
    """Invokes registered handlers for decoded commands.

    Handler exceptions never escape dispatch(); they come back as a
    CapabilityFailure inside the result so a failing capability cannot end
    the conversation loop.
    """

    def __init__(self, registry: CapabilityRegistry) -> None:
        self.registry = registry

    async def dispatch(self, command: ToolCommand) -> DispatchResult:
        """Run the handler registered for command.name.

        Args:
            command: A command produced by a CommandDecoder over the same registry

        Returns:
            DispatchResult with the handler's text or a CapabilityFailure
        """
        tool = self.registry.get(command.name)
        if tool is None:
            # Decoding against the same registry makes this unreachable
            raise LookupError(f"No handler registered for '{command.name}'")

        logger.info(f"Dispatching tool call: {command.name}")
        try:
            if tool.timeout is not None:
                output = await asyncio.wait_for(
                    tool.handler(command.arguments), timeout=tool.timeout
                )
            else:
                output = await tool.handler(command.arguments)
            if not isinstance(output, str):
                raise TypeError(
                    f"handler returned {type(output).__name__}, expected str"
                )
        except asyncio.CancelledError:
            raise
        except Exception as e:
            if isinstance(e, asyncio.TimeoutError):
                e = TimeoutError(f"timed out after {tool.timeout} seconds")
            logger.warning(f"Tool '{command.name}' failed: {e}")
            return DispatchResult.failure(CapabilityFailure(command.name, e))

        logger.debug(f"Tool '{command.name}' returned {len(output)} characters")
        return DispatchResult.success(command.name, output)
