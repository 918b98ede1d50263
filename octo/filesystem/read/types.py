"""Data types for the read pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal, Union

TruncatedBy = Literal["lines", "bytes"]


@dataclass(frozen=True)
class ReadRequest:
    """Arguments of a single read call (offset is 1-indexed)."""

    path: str
    offset: int | None = None
    limit: int | None = None

    @property
    def start_index(self) -> int:
        """0-indexed first line; non-positive offsets clamp to the top."""
        return max(0, self.offset - 1) if self.offset else 0

    @property
    def line_limit(self) -> int | None:
        if self.limit is None:
            return None
        return max(1, self.limit)

    @classmethod
    def from_args(cls, args: dict[str, Any]) -> ReadRequest:
        """Build from raw tool-call arguments, coercing numeric strings/floats."""
        return cls(
            path=str(args.get("path") or args.get("file_path") or ""),
            offset=_as_int(args.get("offset")),
            limit=_as_int(args.get("limit")),
        )


def _as_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    return int(value)


@dataclass(frozen=True)
class TruncationResult:
    """Outcome of truncate_head()."""

    content: str
    truncated: bool
    truncated_by: TruncatedBy | None
    total_lines: int
    total_bytes: int
    output_lines: int
    output_bytes: int
    first_line_exceeds_limit: bool
    max_lines: int
    max_bytes: int


@dataclass(frozen=True)
class TextPart:
    text: str

    def to_dict(self) -> dict[str, Any]:
        return {"type": "text", "text": self.text}

    def to_content_block(self) -> dict[str, Any]:
        return {"type": "text", "text": self.text}


@dataclass(frozen=True)
class ImagePart:
    """Base64-encoded image payload."""

    image: str
    mime_type: str

    def to_dict(self) -> dict[str, Any]:
        return {"type": "image", "image": self.image, "mimeType": self.mime_type}

    def to_content_block(self) -> dict[str, Any]:
        return {"type": "image", "base64": self.image, "mime_type": self.mime_type}


ContentPart = Union[TextPart, ImagePart]


@dataclass(frozen=True)
class ResizedImage:
    """Image bytes after the size policy ran (possibly unchanged)."""

    data: bytes
    mime_type: str
    original_width: int
    original_height: int
    width: int
    height: int
    was_resized: bool
