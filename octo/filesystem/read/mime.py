"""Image type detection by file signature."""

from __future__ import annotations

import logging
import os

logger = logging.getLogger(__name__)

SUPPORTED_IMAGE_MIME_TYPES = frozenset({"image/jpeg", "image/png", "image/gif", "image/webp"})

EXTENSION_MIME_TYPES: dict[str, str] = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
}

# Bytes needed to recognise every supported signature
SNIFF_BYTES = 16


def detect_image_mime_type(head: bytes) -> str | None:
    """Match the leading bytes of a file against known image signatures."""
    if head.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if head.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if head.startswith((b"GIF87a", b"GIF89a")):
        return "image/gif"
    if len(head) >= 12 and head[:4] == b"RIFF" and head[8:12] == b"WEBP":
        return "image/webp"
    return None


def detect_supported_image_mime_type_from_file(path: str) -> str | None:
    """Sniff ``path``; any I/O problem means "not an image"."""
    try:
        with open(path, "rb") as f:
            head = f.read(SNIFF_BYTES)
    except OSError as e:
        logger.debug("MIME sniff skipped for %s: %s", path, e)
        return None
    return detect_image_mime_type(head)


def mime_type_from_extension(path: str) -> str | None:
    return EXTENSION_MIME_TYPES.get(os.path.splitext(path)[1].lower())
