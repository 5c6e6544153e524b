"""Tool catalog router."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends

from outil_server.dependencies import get_capability_registry
from outil_server.models.tools import ToolInfo, ToolListResponse
from outil_server.tools import CapabilityRegistry
from outil_server.tools.prompt import build_system_prompt

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/tools", tags=["tools"])


@router.get("", response_model=ToolListResponse, response_model_by_alias=True)
async def list_tools(
    registry: Annotated[CapabilityRegistry, Depends(get_capability_registry)],
) -> ToolListResponse:
    """List the registered tools with their function schemas."""
    tools = [
        ToolInfo(
            name=tool.name,
            description=tool.definition.description,
            timeout_seconds=tool.timeout,
            schema=tool.definition.schema(),
        )
        for tool in registry
    ]
    logger.debug(f"Listed {len(tools)} tools")
    return ToolListResponse(tools=tools, system_prompt=build_system_prompt(registry))
