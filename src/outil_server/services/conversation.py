"""Conversation feedback loop.

ConversationRunner drives generation for one chat turn:

    generate -> scan -> decode -> await capability -> feed back -> generate

Each round streams from Ollama and feeds every fragment through the turn's
ToolCallProcessor. Narrative text is emitted as it arrives. When a directive
completes, generation for the round stops, the directive is processed, and
the result (or the error text standing in for it) is appended to the session
as a tool message before the next round starts. A round that ends without a
directive produces the final assistant message.
"""

import logging
import uuid
from contextlib import aclosing
from dataclasses import dataclass
from typing import AsyncIterator

from pydantic import BaseModel

from outil_server.models.chat import (
    ContentDeltaEvent,
    MessageCompleteEvent,
    ToolCallEvent,
    ToolResultEvent,
)
from outil_server.ollama.client import OllamaClient
from outil_server.sessions.session import ChatSession, utc_timestamp
from outil_server.sessions.types import AssistantMessage, Message, ToolMessage
from outil_server.tools.processor import ToolCallOutcome, ToolCallProcessor
from outil_server.tools.scanner import Complete, FrameEvent, NoDirective, StillBuffering

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConversationEvent:
    """An SSE-ready event: name plus payload model."""

    event: str
    data: BaseModel


def convert_messages_to_ollama_format(messages: list[Message]) -> list[dict]:
    """Convert session messages to Ollama API format.

    Assistant tool_calls are not sent: the directive text is already part of
    the assistant content the model produced.
    """
    ollama_messages = []

    for msg in messages:
        ollama_msg = {
            "role": msg.role,
            "content": msg.content,
        }
        if isinstance(msg, ToolMessage) and msg.tool_name:
            ollama_msg["tool_name"] = msg.tool_name

        ollama_messages.append(ollama_msg)

    return ollama_messages


def _narrative(event: FrameEvent) -> list[str]:
    """Text in a frame event that should be shown as ordinary output."""
    if isinstance(event, NoDirective):
        parts = [event.text]
    elif isinstance(event, StillBuffering):
        parts = [event.narrative]
    else:
        parts = [event.narrative, event.trailing]
    return [part for part in parts if part]


def _new_id() -> str:
    return uuid.uuid4().hex[:10]


class ConversationRunner:
    """Runs one chat turn, including any tool calls, against a session.

    Attributes:
        outcomes: Directives processed during the turn, in order
        final_message: The last assistant message, once the turn completes
    """

    def __init__(
        self,
        ollama_client: OllamaClient,
        processor: ToolCallProcessor,
        max_tool_rounds: int = 3,
    ) -> None:
        """Initialize the runner.

        Args:
            ollama_client: Client used for every generation round
            processor: Tool-call processor owned by this conversation
            max_tool_rounds: Maximum directives processed per turn. The round
                after the last one runs with tool processing disabled.
        """
        self.ollama_client = ollama_client
        self.processor = processor
        self.max_tool_rounds = max_tool_rounds
        self.outcomes: list[ToolCallOutcome] = []
        self.final_message: AssistantMessage | None = None

    async def run(self, session: ChatSession) -> AsyncIterator[ConversationEvent]:
        """Generate the assistant's reply, executing tool calls on the way.

        Messages are added to the session but the session is not saved.

        Yields:
            ConversationEvent for content_delta, tool_call, tool_result,
            and finally message_complete

        Raises:
            Exception: Whatever the Ollama stream raises. Any partially
                buffered directive is discarded without being executed.
        """
        try:
            for round_index in range(self.max_tool_rounds + 1):
                tools_enabled = round_index < self.max_tool_rounds
                generated: list[str] = []
                final_chunk: dict | None = None
                completed: Complete | None = None

                messages = convert_messages_to_ollama_format(session.messages)
                logger.debug(
                    f"Round {round_index} for session {session.session_id} "
                    f"({len(messages)} messages, tools {'on' if tools_enabled else 'off'})"
                )

                async with aclosing(
                    self.ollama_client.chat_stream(
                        model=session.model, messages=messages
                    )
                ) as stream:
                    async for chunk in stream:
                        content = chunk.get("message", {}).get("content", "")
                        if content:
                            generated.append(content)
                            if not tools_enabled:
                                yield self._delta(content)
                            else:
                                frame = self.processor.observe(content)
                                for text in _narrative(frame):
                                    yield self._delta(text)
                                if isinstance(frame, Complete):
                                    completed = frame
                                    break

                        if chunk.get("done"):
                            final_chunk = chunk
                            break

                if tools_enabled and completed is None:
                    frame = self.processor.finish()
                    if isinstance(frame, Complete):
                        completed = frame
                    else:
                        for text in _narrative(frame):
                            yield self._delta(text)

                if completed is None:
                    yield self._complete(session, "".join(generated), final_chunk)
                    return

                outcome = await self.processor.process(completed)
                self.outcomes.append(outcome)
                for event in self._record_tool_call(
                    session, "".join(generated), final_chunk, outcome
                ):
                    yield event
        finally:
            # A partial directive is never executed after cancel or error
            self.processor.cancel()

    @staticmethod
    def _delta(content: str) -> ConversationEvent:
        return ConversationEvent("content_delta", ContentDeltaEvent(content=content))

    def _record_tool_call(
        self,
        session: ChatSession,
        generated: str,
        final_chunk: dict | None,
        outcome: ToolCallOutcome,
    ) -> list[ConversationEvent]:
        result = outcome.result
        command = outcome.command
        arguments = (
            command.arguments.model_dump(exclude_none=True) if command else None
        )

        session.add_message(
            AssistantMessage(
                content=generated,
                model=session.model,
                message_id=_new_id(),
                timestamp=utc_timestamp(),
                eval_count=final_chunk.get("eval_count") if final_chunk else None,
                prompt_eval_count=final_chunk.get("prompt_eval_count")
                if final_chunk
                else None,
                tool_calls=[{"function": {"name": command.name, "arguments": arguments}}]
                if command
                else None,
            )
        )
        session.add_message(
            ToolMessage(
                tool_name=result.tool_name or "",
                content=result.feedback_text,
                message_id=_new_id(),
                timestamp=utc_timestamp(),
                error_code=result.error.code if result.error else None,
            )
        )

        if result.ok:
            logger.info(f"Tool '{result.tool_name}' result fed back to session {session.session_id}")
        else:
            logger.warning(
                f"Tool call error fed back to session {session.session_id}: {result.feedback_text}"
            )

        return [
            ConversationEvent(
                "tool_call",
                ToolCallEvent(
                    tool_name=result.tool_name,
                    arguments=arguments,
                    wire_format=outcome.wire_format.value,
                    payload=outcome.payload,
                ),
            ),
            ConversationEvent(
                "tool_result",
                ToolResultEvent(
                    tool_name=result.tool_name,
                    ok=result.ok,
                    content=result.feedback_text,
                    error_code=result.error.code if result.error else None,
                ),
            ),
        ]

    def _complete(
        self, session: ChatSession, content: str, final_chunk: dict | None
    ) -> ConversationEvent:
        message = AssistantMessage(
            content=content,
            model=session.model,
            message_id=_new_id(),
            timestamp=utc_timestamp(),
            eval_count=final_chunk.get("eval_count") if final_chunk else None,
            prompt_eval_count=final_chunk.get("prompt_eval_count")
            if final_chunk
            else None,
        )
        session.add_message(message)
        self.final_message = message

        return ConversationEvent(
            "message_complete",
            MessageCompleteEvent(
                message_id=message.message_id,
                model=message.model,
                eval_count=message.eval_count,
                prompt_eval_count=message.prompt_eval_count,
                tool_calls_executed=len(self.outcomes),
            ),
        )
