"""Relocate media blocks from ToolMessages into follow-up HumanMessages.

Several chat transports reject or silently drop images inside tool
results. The splitter keeps the text in the tool message and re-sends
the media as a user message placed directly after it.
"""

from __future__ import annotations

import copy
from collections.abc import Sequence
from typing import Any

from langchain_core.messages import BaseMessage, HumanMessage, ToolMessage

MEDIA_BLOCK_TYPES = frozenset({"image", "image_url", "file", "audio", "video", "media"})

MEDIA_PLACEHOLDER = "[Media content moved to the following message]"

SPLIT_SOURCE = "tool_media"


def _is_media_block(block: Any) -> bool:
    return isinstance(block, dict) and block.get("type") in MEDIA_BLOCK_TYPES


def _partition(content: list[Any]) -> tuple[list[Any], list[Any]]:
    kept: list[Any] = []
    media: list[Any] = []
    for block in content:
        (media if _is_media_block(block) else kept).append(block)
    return kept, media


def _split_tool_message(msg: ToolMessage) -> tuple[ToolMessage, HumanMessage] | None:
    content = msg.content
    if not isinstance(content, list):
        return None

    kept, media = _partition(content)
    if not media:
        return None

    new_msg = copy.copy(msg)
    new_msg.content = kept if kept else MEDIA_PLACEHOLDER

    media_msg = HumanMessage(
        content=media,
        metadata={"source": SPLIT_SOURCE, "tool_call_id": msg.tool_call_id},
    )
    return new_msg, media_msg


def split_multipart_results(messages: Sequence[BaseMessage]) -> list[BaseMessage]:
    """Return a new message list with tool-result media split out.

    Does NOT modify the input messages. Messages without media are passed
    through as the same objects, so running this twice is a no-op.
    """
    result: list[BaseMessage] = []
    for msg in messages:
        split = _split_tool_message(msg) if isinstance(msg, ToolMessage) else None
        if split is None:
            result.append(msg)
        else:
            result.extend(split)
    return result
