"""Streaming tool-call extraction and dispatch.

This package recognizes tool-call directives in model output as it streams,
decodes them into typed commands, and dispatches them to the capability
handlers registered at startup.
"""

from outil_server.tools.decoder import CommandDecoder, ToolCommand, encode
from outil_server.tools.definitions import TOOL_CATALOG, ToolArguments, ToolDefinition
from outil_server.tools.dispatcher import DispatchResult, Dispatcher
from outil_server.tools.errors import (
    CapabilityError,
    CapabilityFailure,
    InvalidArguments,
    LocationNotFoundError,
    ParseError,
    ToolCallError,
    UnknownTool,
)
from outil_server.tools.normalizer import normalize, repair_doubled_braces
from outil_server.tools.processor import ToolCallOutcome, ToolCallProcessor
from outil_server.tools.registry import CapabilityRegistry, RegisteredTool
from outil_server.tools.scanner import (
    Buffering,
    Complete,
    FrameEvent,
    FrameScanner,
    Idle,
    NoDirective,
    StillBuffering,
    WireFormat,
)

__all__ = [
    # Scanning
    "FrameScanner",
    "FrameEvent",
    "NoDirective",
    "StillBuffering",
    "Complete",
    "Idle",
    "Buffering",
    "WireFormat",
    "normalize",
    "repair_doubled_braces",
    # Decoding
    "CommandDecoder",
    "ToolCommand",
    "encode",
    "TOOL_CATALOG",
    "ToolArguments",
    "ToolDefinition",
    # Dispatch
    "CapabilityRegistry",
    "RegisteredTool",
    "Dispatcher",
    "DispatchResult",
    "ToolCallProcessor",
    "ToolCallOutcome",
    # Errors
    "ToolCallError",
    "ParseError",
    "UnknownTool",
    "InvalidArguments",
    "CapabilityFailure",
    "CapabilityError",
    "LocationNotFoundError",
]
