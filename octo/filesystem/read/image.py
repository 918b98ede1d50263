"""Image downsizing for model attachments.

Oversized images are fitted inside a max width/height box, re-encoded as
PNG and JPEG, and the smaller encoding wins. If that is still above the
byte budget, JPEG quality and then dimensions are stepped down until it
fits. The procedure is deterministic for a given input.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass

from PIL import Image, UnidentifiedImageError

from octo.filesystem.read.types import ResizedImage

logger = logging.getLogger(__name__)

QUALITY_STEPS = (85, 70, 55, 40)
SCALE_STEPS = (1.0, 0.75, 0.5, 0.35, 0.25)
MIN_DIMENSION = 100

_PNG_MODES = frozenset({"1", "L", "LA", "P", "RGB", "RGBA"})


@dataclass(frozen=True)
class ImageResizeOptions:
    max_width: int = 2000
    max_height: int = 2000
    max_bytes: int = 4_718_592
    jpeg_quality: int = 80


@dataclass(frozen=True)
class _Encoded:
    data: bytes
    mime_type: str
    width: int
    height: int


def _fit_within(width: int, height: int, max_width: int, max_height: int) -> tuple[int, int]:
    """Scale down to fit the box, preserving aspect ratio."""
    if width > max_width:
        height = max(1, round(height * max_width / width))
        width = max_width
    if height > max_height:
        width = max(1, round(width * max_height / height))
        height = max_height
    return width, height


def _to_rgb(img: Image.Image) -> Image.Image:
    """Flatten transparency onto white for JPEG."""
    if img.mode in ("RGBA", "LA", "P"):
        rgba = img.convert("RGBA")
        background = Image.new("RGB", rgba.size, (255, 255, 255))
        background.paste(rgba, mask=rgba.split()[-1])
        return background
    if img.mode != "RGB":
        return img.convert("RGB")
    return img


def _encode_smallest(img: Image.Image, width: int, height: int, quality: int) -> _Encoded:
    resized = img.resize((width, height), Image.Resampling.LANCZOS)
    if resized.mode not in _PNG_MODES:
        resized = resized.convert("RGB")

    png_buf = io.BytesIO()
    resized.save(png_buf, format="PNG", optimize=True)

    jpeg_buf = io.BytesIO()
    _to_rgb(resized).save(jpeg_buf, format="JPEG", quality=quality)

    png, jpeg = png_buf.getvalue(), jpeg_buf.getvalue()
    if len(png) <= len(jpeg):
        return _Encoded(png, "image/png", width, height)
    return _Encoded(jpeg, "image/jpeg", width, height)


def _passthrough(data: bytes, mime_type: str, width: int = 0, height: int = 0) -> ResizedImage:
    return ResizedImage(
        data=data,
        mime_type=mime_type,
        original_width=width,
        original_height=height,
        width=width,
        height=height,
        was_resized=False,
    )


def resize_image(
    data: bytes,
    mime_type: str,
    options: ImageResizeOptions | None = None,
) -> ResizedImage:
    """Apply the size policy to raw image bytes.

    Images already within every threshold, and images Pillow cannot decode,
    come back byte-identical with their original MIME type.
    """
    opts = options or ImageResizeOptions()

    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        logger.warning("Cannot decode %s image, passing through unchanged: %s", mime_type, e)
        return _passthrough(data, mime_type)

    with img:
        original_width, original_height = img.size

        if (
            original_width <= opts.max_width
            and original_height <= opts.max_height
            and len(data) <= opts.max_bytes
        ):
            return _passthrough(data, mime_type, original_width, original_height)

        target_width, target_height = _fit_within(
            original_width, original_height, opts.max_width, opts.max_height
        )
        best = _encode_smallest(img, target_width, target_height, opts.jpeg_quality)

        if len(best.data) > opts.max_bytes:
            best = _shrink_to_budget(img, target_width, target_height, opts.max_bytes, best)

    logger.info(
        "Resized image %dx%d -> %dx%d (%d -> %d bytes, %s)",
        original_width,
        original_height,
        best.width,
        best.height,
        len(data),
        len(best.data),
        best.mime_type,
    )
    return ResizedImage(
        data=best.data,
        mime_type=best.mime_type,
        original_width=original_width,
        original_height=original_height,
        width=best.width,
        height=best.height,
        was_resized=True,
    )


def _shrink_to_budget(
    img: Image.Image,
    target_width: int,
    target_height: int,
    max_bytes: int,
    best: _Encoded,
) -> _Encoded:
    for quality in QUALITY_STEPS:
        best = _encode_smallest(img, target_width, target_height, quality)
        if len(best.data) <= max_bytes:
            return best

    for scale in SCALE_STEPS:
        width = round(target_width * scale)
        height = round(target_height * scale)
        if width < MIN_DIMENSION or height < MIN_DIMENSION:
            break
        for quality in QUALITY_STEPS:
            best = _encode_smallest(img, width, height, quality)
            if len(best.data) <= max_bytes:
                return best

    # nothing fit; hand back the last (smallest) attempt
    return best


def format_dimension_note(result: ResizedImage) -> str | None:
    """Describe the resize so coordinates can be mapped back to the original."""
    if not result.was_resized or result.width == 0:
        return None
    scale = result.original_width / result.width
    return (
        f"[Image: original {result.original_width}x{result.original_height}, "
        f"displayed at {result.width}x{result.height}. "
        f"Multiply coordinates by {scale:.2f} to map to original image.]"
    )
