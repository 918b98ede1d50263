"""Configuration schema for the read tool.

Text caps (line count, byte size) are deliberately absent: they are fixed
constants in octo.filesystem.read.truncate and advertised in the tool
description.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class ImageConfig(BaseModel):
    """Image downsizing thresholds and MIME selection."""

    max_width: int = Field(2000, gt=0, description="Max width in pixels before downsizing")
    max_height: int = Field(2000, gt=0, description="Max height in pixels before downsizing")
    max_bytes: int = Field(4_718_592, gt=0, description="Max encoded size in bytes (4.5MB)")
    jpeg_quality: int = Field(80, ge=1, le=95, description="Initial JPEG quality when re-encoding")
    mime_source: Literal["content", "extension"] = Field(
        "content",
        description="Which MIME type wins when the file signature and extension disagree",
    )


class DebugAssetsConfig(BaseModel):
    """Debug copies of resized images."""

    enabled: bool = True
    directory: str = Field(".octo-run/assets", description="Relative to the working directory")


class ReadToolConfig(BaseModel):
    """Top-level read tool configuration."""

    auto_resize_images: bool = True
    image: ImageConfig = Field(default_factory=ImageConfig)
    debug_assets: DebugAssetsConfig = Field(default_factory=DebugAssetsConfig)
