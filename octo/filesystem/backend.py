"""Pluggable file access for the read tool.

Separates I/O mechanism (local disk, remote shell, in-memory) from the
truncation and resize logic, so the latter can be tested without a
filesystem.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class ReadOperations(ABC):
    """Capability set the read tool needs from a filesystem.

    Implementations:
    - LocalBackend: direct local filesystem access
    - CommandBackend: delegates to a shell executor (sandbox / SSH)
    """

    is_remote: bool = False

    @abstractmethod
    async def read_file(self, path: str) -> bytes:
        """Read raw file bytes.

        Args:
            path: Absolute file path

        Raises:
            OSError: If the file cannot be read
        """
        ...

    @abstractmethod
    async def access(self, path: str) -> None:
        """Check that ``path`` exists and is readable.

        Raises:
            FileNotFoundError: If the path does not exist
            PermissionError: If the path is not readable
        """
        ...

    @abstractmethod
    async def detect_image_mime_type(self, path: str) -> str | None:
        """Return a supported image MIME type, or None for anything else.

        Must not raise; unreadable files count as "not an image".
        """
        ...
