"""Per-conversation tool-call processing.

ToolCallProcessor ties the pipeline together for one conversation:

    fragment -> FrameScanner -> normalize -> CommandDecoder -> Dispatcher

The scanner belongs to the processor and therefore to the conversation that
created it. Decoder and dispatcher are stateless and may be shared.
"""

import logging
from dataclasses import dataclass

from outil_server.tools.decoder import CommandDecoder, ToolCommand
from outil_server.tools.dispatcher import DispatchResult, Dispatcher
from outil_server.tools.errors import InvalidArguments, ParseError, UnknownTool
from outil_server.tools.normalizer import normalize
from outil_server.tools.registry import CapabilityRegistry
from outil_server.tools.scanner import Complete, FrameEvent, FrameScanner, WireFormat

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolCallOutcome:
    """Everything known about one processed directive."""

    payload: str
    wire_format: WireFormat
    command: ToolCommand | None
    result: DispatchResult


class ToolCallProcessor:
    """Extracts, decodes, and dispatches directives for one conversation."""

    def __init__(
        self,
        decoder: CommandDecoder,
        dispatcher: Dispatcher,
        scanner: FrameScanner | None = None,
    ) -> None:
        self.decoder = decoder
        self.dispatcher = dispatcher
        self.scanner = scanner or FrameScanner()

    @classmethod
    def from_registry(
        cls, registry: CapabilityRegistry, repair: bool = False
    ) -> "ToolCallProcessor":
        """Build a processor with a fresh scanner over registry."""
        return cls(
            decoder=CommandDecoder(registry, repair=repair),
            dispatcher=Dispatcher(registry),
        )

    def observe(self, fragment: str) -> FrameEvent:
        return self.scanner.observe(fragment)

    def finish(self) -> FrameEvent:
        return self.scanner.finish()

    def cancel(self) -> None:
        """Drop any partial directive. Nothing is executed."""
        self.scanner.reset()

    async def process(self, event: Complete) -> ToolCallOutcome:
        """Decode and dispatch a completed frame.

        Decode failures are returned as failed results; the scanner is
        already Idle, so the next directive starts clean.
        """
        candidate = normalize(event.payload)
        try:
            command = self.decoder.decode(candidate, event.wire_format)
        except (ParseError, UnknownTool, InvalidArguments) as e:
            logger.warning(f"Rejected tool call ({e.code}): {e.message}")
            return ToolCallOutcome(
                payload=candidate,
                wire_format=event.wire_format,
                command=None,
                result=DispatchResult.failure(e),
            )

        result = await self.dispatcher.dispatch(command)
        return ToolCallOutcome(
            payload=candidate,
            wire_format=event.wire_format,
            command=command,
            result=result,
        )
