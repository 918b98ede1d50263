"""MultipartResultMiddleware - applies the splitter before every model call.

Only the request sent to the model is rewritten; graph state keeps the
original tool results.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from langchain.agents.middleware.types import (
    AgentMiddleware,
    ModelRequest,
    ModelResponse,
)

from octo.multipart.splitter import split_multipart_results

logger = logging.getLogger(__name__)


class MultipartResultMiddleware(AgentMiddleware):
    """Move images out of tool results for transports that cannot carry them."""

    def _rewrite(self, request: ModelRequest) -> ModelRequest:
        messages = split_multipart_results(request.messages)
        added = len(messages) - len(request.messages)
        if not added:
            return request
        logger.debug("Split media out of %d tool result(s)", added)
        return request.override(messages=messages)

    def wrap_model_call(
        self,
        request: ModelRequest,
        handler: Callable[[ModelRequest], ModelResponse],
    ) -> ModelResponse:
        return handler(self._rewrite(request))

    async def awrap_model_call(
        self,
        request: ModelRequest,
        handler: Callable[[ModelRequest], Awaitable[ModelResponse]],
    ) -> ModelResponse:
        return await handler(self._rewrite(request))
