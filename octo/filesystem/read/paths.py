"""Resolve user-supplied read paths against the working directory."""

from __future__ import annotations

import os
import re

_UNICODE_SPACES = re.compile("[\u00a0\u2000-\u200a\u202f\u205f\u3000]")


def normalize_path_input(path: str) -> str:
    """Undo common model/user quirks: ``@file`` mentions, odd spaces, ``~``."""
    normalized = _UNICODE_SPACES.sub(" ", path.strip())
    if normalized.startswith("@"):
        normalized = normalized[1:]
    if normalized == "~" or normalized.startswith("~/"):
        normalized = os.path.expanduser(normalized)
    return normalized


def resolve_read_path(path: str, cwd: str) -> str:
    """Return an absolute, normalised path. Does not touch the filesystem."""
    expanded = normalize_path_input(path)
    if os.path.isabs(expanded):
        return os.path.normpath(expanded)
    return os.path.normpath(os.path.join(cwd, expanded))
