"""File read pipeline and its agent middleware."""

from octo.filesystem.backend import ReadOperations
from octo.filesystem.local_backend import LocalBackend
from octo.filesystem.command_backend import CommandBackend, ExecuteResult
from octo.filesystem.read.tool import ReadTool
from octo.filesystem.middleware import ReadFileMiddleware

__all__ = [
    "CommandBackend",
    "ExecuteResult",
    "LocalBackend",
    "ReadFileMiddleware",
    "ReadOperations",
    "ReadTool",
]
