"""Sessions router for chat session CRUD operations.

This module provides REST API endpoints for:
- Creating new sessions
- Listing all sessions
- Retrieving session details
- Deleting sessions
"""

import logging
from dataclasses import asdict
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status

from outil_server.dependencies import get_capability_registry, get_session_manager
from outil_server.models.sessions import (
    CreateSessionRequest,
    MessageResponse,
    SessionDetailResponse,
    SessionListItem,
    SessionListResponse,
    SessionResponse,
)
from outil_server.sessions import ChatSession, SessionCreationOptions, SessionManager
from outil_server.tools import CapabilityRegistry
from outil_server.tools.prompt import build_system_prompt

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/sessions", tags=["sessions"])


def _session_response(session: ChatSession) -> SessionResponse:
    return SessionResponse(
        session_id=session.session_id,
        model=session.model,
        created_at=session.metadata.created_at,
        updated_at=session.metadata.updated_at,
        message_count=session.metadata.message_count,
    )


@router.post(
    "",
    response_model=SessionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new session",
)
async def create_session(
    body: CreateSessionRequest,
    request: Request,
    session_manager: Annotated[SessionManager, Depends(get_session_manager)],
    registry: Annotated[CapabilityRegistry, Depends(get_capability_registry)],
) -> SessionResponse:
    """Create a new chat session.

    Without an explicit system prompt the session starts with the generated
    tool prompt, which lists every registered tool and the tagged
    <tool_call> directive format.
    An empty string disables the system prompt entirely.
    """
    model = body.model or request.app.state.settings.default_model
    system_prompt = body.system_prompt
    if system_prompt is None:
        system_prompt = build_system_prompt(registry)

    try:
        session = session_manager.create_session(
            SessionCreationOptions(model=model, system_prompt=system_prompt)
        )
    except OSError as e:
        logger.error(f"Failed to create session: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to create session: {str(e)}",
        )

    return _session_response(session)


@router.get(
    "",
    response_model=SessionListResponse,
    summary="List all sessions",
)
async def list_sessions(
    session_manager: Annotated[SessionManager, Depends(get_session_manager)],
) -> SessionListResponse:
    """List all chat sessions, sorted by most recently updated."""
    sessions = session_manager.list_sessions()
    items = [
        SessionListItem(
            **_session_response(session).model_dump(),
            preview=session.get_preview(),
        )
        for session in sessions
    ]
    return SessionListResponse(sessions=items)


@router.get(
    "/{session_id}",
    response_model=SessionDetailResponse,
    summary="Get session details",
)
async def get_session(
    session_id: str,
    session_manager: Annotated[SessionManager, Depends(get_session_manager)],
) -> SessionDetailResponse:
    """Get full details of a specific session including message history.

    Raises:
        HTTPException: 404 if session not found
    """
    try:
        session = session_manager.get_session(session_id)
    except FileNotFoundError:
        logger.warning(f"Session {session_id} not found")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Session {session_id} not found",
        )
    except Exception as e:
        logger.error(f"Failed to get session {session_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to get session: {str(e)}",
        )

    return SessionDetailResponse(
        **_session_response(session).model_dump(),
        messages=[MessageResponse(**asdict(msg)) for msg in session.messages],
    )


@router.delete(
    "/{session_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a session",
)
async def delete_session(
    session_id: str,
    session_manager: Annotated[SessionManager, Depends(get_session_manager)],
) -> None:
    """Delete a chat session permanently.

    Raises:
        HTTPException: 404 if session not found
    """
    try:
        session_manager.delete_session(session_id)
    except FileNotFoundError:
        logger.warning(f"Session {session_id} not found")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Session {session_id} not found",
        )
