"""Local filesystem read backend."""

from __future__ import annotations

import asyncio
import errno
import os
from pathlib import Path

from octo.filesystem.backend import ReadOperations
from octo.filesystem.read.mime import detect_supported_image_mime_type_from_file


class LocalBackend(ReadOperations):
    """Backend that reads directly from the local filesystem."""

    async def read_file(self, path: str) -> bytes:
        return await asyncio.to_thread(Path(path).read_bytes)

    async def access(self, path: str) -> None:
        await asyncio.to_thread(self._access_sync, path)

    async def detect_image_mime_type(self, path: str) -> str | None:
        return await asyncio.to_thread(detect_supported_image_mime_type_from_file, path)

    @staticmethod
    def _access_sync(path: str) -> None:
        if not os.path.exists(path):
            raise FileNotFoundError(errno.ENOENT, "No such file or directory", path)
        if not os.access(path, os.R_OK):
            raise PermissionError(errno.EACCES, "Permission denied", path)
