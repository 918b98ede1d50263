"""ReadTool - turns a file into bounded text/image parts.

Text files are paged with offset/limit and capped by truncate_head();
images are optionally downsized and returned as base64 attachments.
"""

from __future__ import annotations

import asyncio
import base64
import logging
import os
from pathlib import Path
from typing import Any

from octo.cancellation import CancelToken, checkpoint
from octo.config.schema import ReadToolConfig
from octo.filesystem.backend import ReadOperations
from octo.filesystem.local_backend import LocalBackend
from octo.filesystem.read.errors import OffsetOutOfRangeError
from octo.filesystem.read.image import ImageResizeOptions, format_dimension_note, resize_image
from octo.filesystem.read.mime import SUPPORTED_IMAGE_MIME_TYPES, mime_type_from_extension
from octo.filesystem.read.paths import resolve_read_path
from octo.filesystem.read.truncate import (
    DEFAULT_MAX_BYTES,
    DEFAULT_MAX_LINES,
    format_size,
    truncate_head,
)
from octo.filesystem.read.types import ContentPart, ImagePart, ReadRequest, TextPart

logger = logging.getLogger(__name__)


class ReadTool:
    """File-read operation exposed to the agent as ``read``.

    Args:
        cwd: Working directory relative paths resolve against
        operations: File access backend (default: LocalBackend)
        config: Image/debug settings (default: ReadToolConfig())
    """

    name = "read"

    def __init__(
        self,
        cwd: str | Path,
        *,
        operations: ReadOperations | None = None,
        config: ReadToolConfig | None = None,
    ) -> None:
        self.cwd = str(cwd)
        self.operations = operations or LocalBackend()
        self.config = config or ReadToolConfig()

    @property
    def description(self) -> str:
        return (
            "Read the contents of a file. Supports text files and images (jpg, png, gif, webp). "
            "Images are sent as attachments. For text files, output is truncated to "
            f"{DEFAULT_MAX_LINES} lines or {DEFAULT_MAX_BYTES // 1024}KB (whichever is hit first). "
            "Use offset/limit for large files. When you need the full file, continue with offset until complete."
        )

    def get_schema(self) -> dict[str, Any]:
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": {
                    "type": "object",
                    "properties": {
                        "path": {"type": "string", "description": "Path to the file to read (relative or absolute)"},
                        "offset": {
                            "type": "integer",
                            "minimum": 1,
                            "description": "Line number to start reading from (1-indexed)",
                        },
                        "limit": {"type": "integer", "minimum": 1, "description": "Maximum number of lines to read"},
                    },
                    "required": ["path"],
                },
            },
        }

    async def execute(
        self,
        path: str,
        offset: int | None = None,
        limit: int | None = None,
        *,
        cancel_token: CancelToken | None = None,
    ) -> list[ContentPart]:
        """Read ``path`` and return its parts.

        Raises:
            OSError: The file is missing or unreadable (from the backend)
            OffsetOutOfRangeError: ``offset`` starts past the end of the file
            asyncio.CancelledError: ``cancel_token`` fired before completion
        """
        return await self.run(ReadRequest(path=path, offset=offset, limit=limit), cancel_token=cancel_token)

    async def run(self, request: ReadRequest, *, cancel_token: CancelToken | None = None) -> list[ContentPart]:
        absolute_path = resolve_read_path(request.path, self.cwd)
        logger.debug("read %s -> %s", request.path, absolute_path)

        await checkpoint(cancel_token, self.operations.access(absolute_path))
        mime_type = await checkpoint(cancel_token, self.operations.detect_image_mime_type(absolute_path))
        data = await checkpoint(cancel_token, self.operations.read_file(absolute_path))

        if mime_type:
            mime_type = self._choose_mime_type(absolute_path, mime_type)
            logger.debug("read %s as image [%s]", absolute_path, mime_type)
            parts = await self._read_image(absolute_path, data, mime_type, cancel_token)
        else:
            parts = [TextPart(self._read_text(request, data))]

        if cancel_token is not None:
            cancel_token.raise_if_cancelled()
        return parts

    # -- images -------------------------------------------------------------

    def _choose_mime_type(self, absolute_path: str, sniffed: str) -> str:
        if self.config.image.mime_source == "extension":
            guessed = mime_type_from_extension(absolute_path)
            if guessed in SUPPORTED_IMAGE_MIME_TYPES and guessed != sniffed:
                logger.debug("MIME mismatch for %s: sniffed %s, using extension %s", absolute_path, sniffed, guessed)
                return guessed
        return sniffed

    async def _read_image(
        self,
        absolute_path: str,
        data: bytes,
        mime_type: str,
        cancel_token: CancelToken | None,
    ) -> list[ContentPart]:
        if not self.config.auto_resize_images:
            return [
                TextPart(f"Read image file [{mime_type}]"),
                ImagePart(image=base64.b64encode(data).decode("ascii"), mime_type=mime_type),
            ]

        image_cfg = self.config.image
        options = ImageResizeOptions(
            max_width=image_cfg.max_width,
            max_height=image_cfg.max_height,
            max_bytes=image_cfg.max_bytes,
            jpeg_quality=image_cfg.jpeg_quality,
        )
        resized = await checkpoint(cancel_token, asyncio.to_thread(resize_image, data, mime_type, options))

        if self.config.debug_assets.enabled:
            await checkpoint(cancel_token, self._save_debug_asset(absolute_path, resized.data))

        text_note = f"Read image file [{resized.mime_type}]"
        dimension_note = format_dimension_note(resized)
        if dimension_note:
            text_note += f"\n{dimension_note}"

        return [
            TextPart(text_note),
            ImagePart(image=base64.b64encode(resized.data).decode("ascii"), mime_type=resized.mime_type),
        ]

    async def _save_debug_asset(self, absolute_path: str, data: bytes) -> None:
        assets_dir = Path(self.cwd) / self.config.debug_assets.directory
        debug_path = assets_dir / f"debug_{os.path.basename(absolute_path)}"
        try:
            await asyncio.to_thread(self._write_bytes, debug_path, data)
        except Exception as e:
            logger.warning("Failed to save debug image %s: %s", debug_path, e)
            return
        logger.debug("Saved debug image to %s", debug_path)

    @staticmethod
    def _write_bytes(path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)

    # -- text ---------------------------------------------------------------

    def _read_text(self, request: ReadRequest, data: bytes) -> str:
        all_lines = data.decode("utf-8", errors="replace").split("\n")
        total_file_lines = len(all_lines)

        start_line = request.start_index
        start_line_display = start_line + 1

        if start_line >= total_file_lines:
            raise OffsetOutOfRangeError(request.offset, total_file_lines)

        user_limited_lines: int | None = None
        limit = request.line_limit
        if limit is not None:
            end_line = min(start_line + limit, total_file_lines)
            selected_content = "\n".join(all_lines[start_line:end_line])
            user_limited_lines = end_line - start_line
        else:
            selected_content = "\n".join(all_lines[start_line:])

        truncation = truncate_head(selected_content)
        logger.debug(
            "truncation: %d/%d lines, truncated_by=%s",
            truncation.output_lines,
            truncation.total_lines,
            truncation.truncated_by,
        )

        if truncation.first_line_exceeds_limit:
            first_line_size = format_size(len(all_lines[start_line].encode("utf-8")))
            return (
                f"[Line {start_line_display} is {first_line_size}, exceeds {format_size(DEFAULT_MAX_BYTES)} limit. "
                f"Use bash: sed -n '{start_line_display}p' {request.path} | head -c {DEFAULT_MAX_BYTES}]"
            )

        if truncation.truncated:
            end_line_display = start_line_display + truncation.output_lines - 1
            next_offset = end_line_display + 1
            if truncation.truncated_by == "lines":
                notice = (
                    f"[Showing lines {start_line_display}-{end_line_display} of {total_file_lines}. "
                    f"Use offset={next_offset} to continue.]"
                )
            else:
                notice = (
                    f"[Showing lines {start_line_display}-{end_line_display} of {total_file_lines} "
                    f"({format_size(DEFAULT_MAX_BYTES)} limit). Use offset={next_offset} to continue.]"
                )
            return f"{truncation.content}\n\n{notice}"

        if user_limited_lines is not None and start_line + user_limited_lines < total_file_lines:
            remaining = total_file_lines - (start_line + user_limited_lines)
            next_offset = start_line + user_limited_lines + 1
            return f"{truncation.content}\n\n[{remaining} more lines in file. Use offset={next_offset} to continue.]"

        return truncation.content
