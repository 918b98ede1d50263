"""Read pipeline errors.

Missing or unreadable files surface as the backend's own OSError
(FileNotFoundError / PermissionError); only pipeline-specific failures
live here.
"""

from __future__ import annotations


class ReadError(Exception):
    """Base class for read pipeline failures."""


class OffsetOutOfRangeError(ReadError, ValueError):
    """Requested offset starts past the last line of the file."""

    def __init__(self, offset: int | None, total_lines: int):
        self.offset = offset
        self.total_lines = total_lines
        super().__init__(f"Offset {offset} is beyond end of file ({total_lines} lines total)")
