"""ReadFileMiddleware - exposes ReadTool to a langchain agent.

Injects the ``read`` tool schema into model calls and answers ``read``
tool calls with a ToolMessage whose content is a list of content blocks
(text, then image for image files). Other tool calls pass through.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any

from langchain.agents.middleware.types import (
    AgentMiddleware,
    ModelRequest,
    ModelResponse,
    ToolCallRequest,
)
from langchain_core.messages import ToolMessage

from octo.cancellation import CancelToken
from octo.config.schema import ReadToolConfig
from octo.filesystem.backend import ReadOperations
from octo.filesystem.read.errors import ReadError
from octo.filesystem.read.tool import ReadTool
from octo.filesystem.read.types import ContentPart, ReadRequest

logger = logging.getLogger(__name__)


class ReadFileMiddleware(AgentMiddleware):
    """Serve ``read`` tool calls from a ReadTool.

    Each in-flight call gets its own CancelToken; ``cancel()`` fires them
    so the agent loop can abort reads without leaking partial content.
    """

    TOOL_READ = "read"

    def __init__(
        self,
        workspace_root: str | Path,
        *,
        operations: ReadOperations | None = None,
        config: ReadToolConfig | None = None,
    ):
        self.read_tool = ReadTool(workspace_root, operations=operations, config=config)
        self._inflight: dict[str, CancelToken] = {}

    def cancel(self, tool_call_id: str | None = None) -> None:
        """Abort one in-flight read, or all of them when no id is given.

        Safe to call from any thread, including while ``wrap_tool_call``
        blocks another one.
        """
        if tool_call_id is None:
            tokens = list(self._inflight.values())
        else:
            token = self._inflight.get(tool_call_id)
            tokens = [token] if token else []
        for token in tokens:
            token.cancel()

    async def _run_read(self, args: dict[str, Any], tool_call_id: str) -> ToolMessage:
        token = CancelToken()
        inflight_key = tool_call_id or f"anon-{uuid.uuid4().hex[:12]}"
        self._inflight[inflight_key] = token
        try:
            request = ReadRequest.from_args(args)
            if not request.path:
                return self._error_message("Parameter 'path' is required.", tool_call_id)
            parts = await self.read_tool.run(request, cancel_token=token)
        except (OSError, ReadError, ValueError) as e:
            logger.debug("read failed for call %s: %s", tool_call_id, e)
            return self._error_message(str(e), tool_call_id)
        finally:
            self._inflight.pop(inflight_key, None)
        return self._make_tool_message(parts, tool_call_id)

    def _make_tool_message(self, parts: list[ContentPart], tool_call_id: str) -> ToolMessage:
        return ToolMessage(
            content=[part.to_content_block() for part in parts],
            tool_call_id=tool_call_id,
            name=self.TOOL_READ,
        )

    def _error_message(self, message: str, tool_call_id: str) -> ToolMessage:
        return ToolMessage(
            content=f"Error: {message}",
            tool_call_id=tool_call_id,
            name=self.TOOL_READ,
            status="error",
        )

    # -- model call: inject tool schema -------------------------------------

    def wrap_model_call(
        self,
        request: ModelRequest,
        handler: Callable[[ModelRequest], ModelResponse],
    ) -> ModelResponse:
        tools = list(request.tools or [])
        tools.append(self.read_tool.get_schema())
        return handler(request.override(tools=tools))

    async def awrap_model_call(
        self,
        request: ModelRequest,
        handler: Callable[[ModelRequest], Awaitable[ModelResponse]],
    ) -> ModelResponse:
        tools = list(request.tools or [])
        tools.append(self.read_tool.get_schema())
        return await handler(request.override(tools=tools))

    # -- tool call: serve reads ---------------------------------------------

    def wrap_tool_call(
        self,
        request: ToolCallRequest,
        handler: Callable[[ToolCallRequest], Any],
    ) -> Any:
        tool_call = request.tool_call
        if tool_call.get("name") != self.TOOL_READ:
            return handler(request)
        return asyncio.run(self._run_read(tool_call.get("args", {}), tool_call.get("id") or ""))

    async def awrap_tool_call(
        self,
        request: ToolCallRequest,
        handler: Callable[[ToolCallRequest], Awaitable[Any]],
    ) -> Any:
        tool_call = request.tool_call
        if tool_call.get("name") != self.TOOL_READ:
            return await handler(request)
        return await self._run_read(tool_call.get("args", {}), tool_call.get("id") or "")


__all__ = ["ReadFileMiddleware"]
