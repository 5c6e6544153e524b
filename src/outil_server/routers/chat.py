"""Chat API endpoints.

This module provides endpoints for chat interactions with sessions,
including non-streaming and streaming responses via SSE. Both run the same
conversation loop, so tool-call directives produced by the model are
executed and fed back before the final answer is returned.
"""

import logging
import uuid
from contextlib import aclosing
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request
from sse_starlette.sse import EventSourceResponse

from outil_server.dependencies import get_conversation_runner
from outil_server.models.chat import (
    ChatRequest,
    ChatResponse,
    DoneEvent,
    ErrorEvent,
    MessageResponse,
    ToolCallExecuted,
)
from outil_server.services import ConversationRunner
from outil_server.sessions.session import ChatSession, utc_timestamp
from outil_server.sessions.types import UserMessage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/chat", tags=["chat"])


def _error_detail(
    code: str, message: str, details: dict[str, Any] | None = None
) -> dict[str, Any]:
    return {"error": {"code": code, "message": message, "details": details or {}}}


def _prepare_session(
    session_id: str, request_body: ChatRequest, request: Request
) -> ChatSession:
    """Load the session and append the user's message, if one was sent.

    Raises:
        HTTPException: 404 if the session does not exist, 500 if it cannot be
            loaded, 400 if there is nothing to respond to
    """
    sessions_dir = request.app.state.settings.resolved_sessions_dir

    try:
        session = ChatSession.load(session_id, sessions_dir)
    except FileNotFoundError:
        raise HTTPException(
            status_code=404,
            detail=_error_detail(
                "session_not_found",
                f"Session {session_id} not found",
                {"session_id": session_id},
            ),
        )
    except Exception as e:
        logger.error(f"Failed to load session {session_id}: {e}")
        raise HTTPException(
            status_code=500,
            detail=_error_detail(
                "session_load_error", f"Failed to load session: {str(e)}"
            ),
        )

    if request_body.message is not None:
        session.add_message(
            UserMessage(
                content=request_body.message,
                message_id=uuid.uuid4().hex[:10],
                timestamp=utc_timestamp(),
            )
        )
        logger.info(f"Added user message to session {session_id}")

    if not session.messages:
        raise HTTPException(
            status_code=400,
            detail=_error_detail("empty_history", "Session has no messages to process"),
        )

    return session


@router.post("/{session_id}", response_model=ChatResponse)
async def chat_non_streaming(
    session_id: str,
    request_body: ChatRequest,
    request: Request,
    runner: ConversationRunner = Depends(get_conversation_runner),
) -> ChatResponse:
    """Send a message to a session and receive the complete response.

    Tool calls are executed as they appear; every processed directive is
    listed in tool_calls_executed, including those that failed.

    Raises:
        HTTPException: 404 if session not found, 502 if Ollama fails
    """
    session = _prepare_session(session_id, request_body, request)
    sessions_dir = request.app.state.settings.resolved_sessions_dir

    try:
        async with aclosing(runner.run(session)) as events:
            async for _ in events:
                pass
    except Exception as e:
        logger.error(f"Ollama streaming error: {e}")
        raise HTTPException(
            status_code=502,
            detail=_error_detail(
                "ollama_error", f"Failed to get response from Ollama: {str(e)}"
            ),
        )

    final_message = runner.final_message
    if final_message is None:
        raise HTTPException(
            status_code=502,
            detail=_error_detail(
                "incomplete_response", "Conversation ended without a final message"
            ),
        )

    try:
        session.save(sessions_dir)
        logger.debug(f"Saved session {session_id} with new messages")
    except Exception as e:
        logger.error(f"Failed to save session {session_id}: {e}")
        raise HTTPException(
            status_code=500,
            detail=_error_detail(
                "session_save_error", f"Failed to save session: {str(e)}"
            ),
        )

    executed = []
    for outcome in runner.outcomes:
        result = outcome.result
        executed.append(
            ToolCallExecuted(
                tool_name=result.tool_name,
                arguments=outcome.command.arguments.model_dump(exclude_none=True)
                if outcome.command
                else None,
                ok=result.ok,
                content=result.feedback_text,
                error_code=result.error.code if result.error else None,
            )
        )

    return ChatResponse(
        session_id=session_id,
        message=MessageResponse.model_validate(final_message),
        tool_calls_executed=executed,
    )


@router.post("/{session_id}/stream")
async def chat_streaming(
    session_id: str,
    request_body: ChatRequest,
    request: Request,
    runner: ConversationRunner = Depends(get_conversation_runner),
) -> EventSourceResponse:
    """Stream a chat response via Server-Sent Events (SSE).

    SSE Events:
        - content_delta: Narrative text from the LLM
        - tool_call: A directive was extracted and decoded
        - tool_result: The result or error fed back to the model
        - message_complete: Final message metadata after generation
        - error: If an error occurs during streaming
        - done: Stream is complete

    Raises:
        HTTPException: 404 if session not found
    """
    session = _prepare_session(session_id, request_body, request)
    sessions_dir = request.app.state.settings.resolved_sessions_dir

    logger.info(
        f"Starting streaming chat for session {session_id} "
        f"with {len(session.messages)} messages"
    )

    async def event_generator():
        """Generate SSE events from the conversation loop."""
        try:
            async with aclosing(runner.run(session)) as events:
                async for item in events:
                    if await request.is_disconnected():
                        # Closing the loop discards any half-scanned directive
                        logger.warning(
                            f"Client disconnected during streaming for session {session_id}"
                        )
                        return
                    yield {"event": item.event, "data": item.data.model_dump_json()}

            try:
                session.save(sessions_dir)
                logger.debug(f"Saved session {session_id} after streaming")
            except OSError as e:
                logger.error(f"Failed to save session {session_id}: {e}")
                error_event = ErrorEvent(
                    code="session_save_error",
                    message=f"Failed to save session: {str(e)}",
                )
                yield {"event": "error", "data": error_event.model_dump_json()}
                return

            yield {
                "event": "done",
                "data": DoneEvent(session_id=session_id).model_dump_json(),
            }

        except Exception as e:
            logger.error(f"Error during streaming for session {session_id}: {e}")
            error_event = ErrorEvent(
                code="ollama_error",
                message=f"Failed to generate response: {str(e)}",
                details={"session_id": session_id},
            )
            yield {
                "event": "error",
                "data": error_event.model_dump_json(),
            }

    return EventSourceResponse(event_generator())
