"""Remote read backend over a shell executor.

Bytes travel as base64 on stdout, so any executor that can run a POSIX
shell command (sandbox provider, SSH session) can serve reads.
"""

from __future__ import annotations

import base64
import binascii
import errno
import logging
import shlex
from dataclasses import dataclass
from typing import Protocol

from octo.filesystem.backend import ReadOperations
from octo.filesystem.read.mime import SNIFF_BYTES, detect_image_mime_type

logger = logging.getLogger(__name__)


@dataclass
class ExecuteResult:
    """Result of command execution."""

    exit_code: int
    stdout: str
    stderr: str
    timed_out: bool = False

    @property
    def success(self) -> bool:
        return self.exit_code == 0 and not self.timed_out


class CommandExecutor(Protocol):
    async def execute(self, command: str) -> ExecuteResult: ...


class CommandBackend(ReadOperations):
    """Backend that runs shell commands through an executor.

    Args:
        executor: Object exposing ``async execute(command) -> ExecuteResult``
    """

    is_remote = True

    def __init__(self, executor: CommandExecutor) -> None:
        self._executor = executor

    async def read_file(self, path: str) -> bytes:
        result = await self._executor.execute(f"base64 < {shlex.quote(path)}")
        if not result.success:
            raise OSError(errno.EIO, result.stderr.strip() or "Failed to read file", path)
        return self._decode(result.stdout, path)

    async def access(self, path: str) -> None:
        quoted = shlex.quote(path)
        result = await self._executor.execute(f"test -e {quoted}")
        if not result.success:
            raise FileNotFoundError(errno.ENOENT, "No such file or directory", path)
        result = await self._executor.execute(f"test -r {quoted}")
        if not result.success:
            raise PermissionError(errno.EACCES, "Permission denied", path)

    async def detect_image_mime_type(self, path: str) -> str | None:
        try:
            result = await self._executor.execute(f"head -c {SNIFF_BYTES} {shlex.quote(path)} | base64")
            if not result.success:
                return None
            head = self._decode(result.stdout, path)
        except Exception as e:
            logger.debug("Remote MIME sniff failed for %s: %s", path, e)
            return None
        return detect_image_mime_type(head)

    @staticmethod
    def _decode(stdout: str, path: str) -> bytes:
        payload = "".join(stdout.split())
        try:
            return base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as e:
            raise OSError(errno.EIO, f"Corrupt base64 transfer: {e}", path) from e
