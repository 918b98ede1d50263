"""Read subpackage - bounded text paging and image attachments."""

from octo.filesystem.read.errors import OffsetOutOfRangeError, ReadError
from octo.filesystem.read.image import ImageResizeOptions, format_dimension_note, resize_image
from octo.filesystem.read.mime import detect_image_mime_type, detect_supported_image_mime_type_from_file
from octo.filesystem.read.paths import resolve_read_path
from octo.filesystem.read.truncate import DEFAULT_MAX_BYTES, DEFAULT_MAX_LINES, format_size, truncate_head
from octo.filesystem.read.types import (
    ContentPart,
    ImagePart,
    ReadRequest,
    ResizedImage,
    TextPart,
    TruncationResult,
)

__all__ = [
    "DEFAULT_MAX_BYTES",
    "DEFAULT_MAX_LINES",
    "ContentPart",
    "ImagePart",
    "ImageResizeOptions",
    "OffsetOutOfRangeError",
    "ReadError",
    "ReadRequest",
    "ResizedImage",
    "TextPart",
    "TruncationResult",
    "detect_image_mime_type",
    "detect_supported_image_mime_type_from_file",
    "format_dimension_note",
    "format_size",
    "resize_image",
    "resolve_read_path",
    "truncate_head",
]
