"""Incremental frame scanner for tool-call directives.

The scanner consumes model output one fragment at a time and recognizes
directives in either supported wire format:

- Tagged block:      <tool_call>{...}</tool_call>
- Inline directive:  <|python_tag|>{...}<|eom_id|> followed by ignored text

It is a pure text state machine. It knows nothing about JSON or tools; it
only decides which text is ordinary narrative and which text is the payload
of a directive. Validating the payload is the decoder's job.
"""

import logging
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


class WireFormat(str, Enum):
    """The two directive encodings a model may emit."""

    TAGGED_BLOCK = "tagged_block"
    INLINE_DIRECTIVE = "inline_directive"

    @property
    def open_marker(self) -> str:
        return _MARKERS[self][0]

    @property
    def close_marker(self) -> str:
        return _MARKERS[self][1]

    @property
    def arguments_field(self) -> str:
        """Name of the JSON field holding the tool arguments."""
        return _ARGUMENT_FIELDS[self]


_MARKERS: dict[WireFormat, tuple[str, str]] = {
    WireFormat.TAGGED_BLOCK: ("<tool_call>", "</tool_call>"),
    WireFormat.INLINE_DIRECTIVE: ("<|python_tag|>", "<|eom_id|>"),
}

_ARGUMENT_FIELDS: dict[WireFormat, str] = {
    WireFormat.TAGGED_BLOCK: "arguments",
    WireFormat.INLINE_DIRECTIVE: "parameters",
}

ALL_MARKERS: tuple[str, ...] = tuple(
    marker for pair in _MARKERS.values() for marker in pair
)


# --- Scan state ---


@dataclass(frozen=True)
class Idle:
    """No directive in progress."""


@dataclass(frozen=True)
class Buffering:
    """A directive has been opened and its payload is accumulating."""

    partial: str
    wire_format: WireFormat


ScanState = Idle | Buffering

IDLE = Idle()


# --- Events ---


@dataclass(frozen=True)
class NoDirective:
    """The fragment is ordinary narrative text."""

    text: str


@dataclass(frozen=True)
class StillBuffering:
    """A directive is open but not yet closed.

    Attributes:
        narrative: Text that preceded the opening marker in this fragment
    """

    narrative: str = ""


@dataclass(frozen=True)
class Complete:
    """A directive payload is ready for decoding.

    Attributes:
        payload: Raw text between the opening and closing markers
        wire_format: Format the directive was opened with
        narrative: Text that preceded the opening marker in this fragment
        trailing: Text after the closing marker in this fragment, cut at
            any further opening marker. Only one directive completes per
            event, so a second one in the same fragment is dropped, the same
            as when it arrives after generation has stopped.
        flushed: True when produced by finish() without a closing marker
    """

    payload: str
    wire_format: WireFormat
    narrative: str = ""
    trailing: str = ""
    flushed: bool = False


FrameEvent = NoDirective | StillBuffering | Complete


def _find_opening(text: str) -> tuple[WireFormat, int] | None:
    """Return the format whose opening marker appears first in text."""
    found: tuple[WireFormat, int] | None = None
    for wire_format in WireFormat:
        index = text.find(wire_format.open_marker)
        if index != -1 and (found is None or index < found[1]):
            found = (wire_format, index)
    return found


def _split_held(text: str) -> tuple[str, str]:
    """Split off a trailing partial opening marker.

    Returns:
        Tuple of (narrative, held) where held is the longest suffix of text
        that is a proper prefix of an opening marker.
    """
    longest = max(len(wire_format.open_marker) for wire_format in WireFormat)
    for size in range(min(len(text), longest - 1), 0, -1):
        suffix = text[-size:]
        if any(wf.open_marker.startswith(suffix) for wf in WireFormat):
            return text[:-size], suffix
    return text, ""


class FrameScanner:
    """Per-conversation directive scanner.

    A scanner is owned by exactly one conversation. It is Idle between
    directives; a directive that completes, is flushed, or is discarded via
    reset() always returns it to Idle.
    """

    def __init__(self) -> None:
        self.state: ScanState = IDLE
        # Suffix of the last Idle fragment that may be the start of a marker
        self._held = ""

    @property
    def is_idle(self) -> bool:
        return isinstance(self.state, Idle) and not self._held

    def observe(self, fragment: str) -> FrameEvent:
        """Consume one fragment of model output.

        Args:
            fragment: The next piece of generated text

        Returns:
            NoDirective, StillBuffering, or Complete
        """
        if isinstance(self.state, Buffering):
            return self._advance(
                self.state.partial + fragment, self.state.wire_format, narrative=""
            )

        text = self._held + fragment
        self._held = ""

        opening = _find_opening(text)
        if opening is None:
            narrative, self._held = _split_held(text)
            return NoDirective(narrative)

        wire_format, index = opening
        logger.debug(f"Directive opened ({wire_format.value})")
        return self._advance(
            text[index + len(wire_format.open_marker) :],
            wire_format,
            narrative=text[:index],
        )

    def finish(self) -> FrameEvent:
        """Signal the end of generation.

        An unterminated directive is flushed as a final payload attempt
        instead of being dropped. Held partial-marker text is released as
        narrative.
        """
        if isinstance(self.state, Buffering):
            buffered = self.state
            self.state = IDLE
            logger.debug(
                f"Flushing unterminated directive ({len(buffered.partial)} chars)"
            )
            return Complete(
                payload=buffered.partial,
                wire_format=buffered.wire_format,
                flushed=True,
            )

        held, self._held = self._held, ""
        return NoDirective(held)

    def reset(self) -> None:
        """Discard any in-progress directive without emitting it."""
        if isinstance(self.state, Buffering):
            logger.debug(
                f"Discarding buffered directive ({len(self.state.partial)} chars)"
            )
        self.state = IDLE
        self._held = ""

    def _advance(
        self, partial: str, wire_format: WireFormat, narrative: str
    ) -> FrameEvent:
        end = partial.find(wire_format.close_marker)
        if end == -1:
            self.state = Buffering(partial=partial, wire_format=wire_format)
            return StillBuffering(narrative)

        self.state = IDLE
        trailing = partial[end + len(wire_format.close_marker) :]
        opening = _find_opening(trailing)
        if opening is not None:
            logger.debug("Dropping directive after a completed one")
            trailing = trailing[: opening[1]]
        return Complete(
            payload=partial[:end],
            wire_format=wire_format,
            narrative=narrative,
            trailing=trailing,
        )
