"""
Quality compression for Open Retouch.

Functions:
    jpeg_quality: Map a quality factor in (0, 1] to an encoder quality 1-100
    compress: Lossy JPEG re-encode of a buffer at a quality factor
    create_preview_image: Small PNG thumbnail for batch listings
    format_size_kb: Human-readable size such as '123.4KB'
"""

from typing import Optional

from PIL import Image

from OR_Libs.constants import JPEG_QUALITY_MAX, JPEG_QUALITY_MIN, PREVIEW_MAX_WIDTH
from OR_Libs.ImageEditingLib.geometric_transforms import resample_to
from OR_Libs.ImageEditingLib.image_editing_ops import encode_image
from OR_Libs.ImageEditingLib.raster_buffer import RasterBuffer


def validate_quality(quality: float) -> float:
    """
    Check a quality factor.

    Raises:
        ValueError: If quality is not in (0, 1]
    """
    value = float(quality)
    if not (0.0 < value <= 1.0):
        raise ValueError(f"quality must be 0 < q <= 1, got {quality}")
    return value


def jpeg_quality(quality: float) -> int:
    """Encoder quality for a factor: round(q * 100) clamped to 1-100."""
    value = validate_quality(quality)
    return max(JPEG_QUALITY_MIN, min(JPEG_QUALITY_MAX, int(round(value * 100))))


def compress(buffer: RasterBuffer, quality: float) -> bytes:
    """
    Re-encode a buffer as JPEG at a quality factor.

    For a fixed input, output size does not decrease as quality rises.
    Alpha is dropped.

    Args:
        buffer: Buffer to encode
        quality: Quality factor in (0, 1]

    Returns:
        JPEG bytes

    Raises:
        ValueError: If quality is out of range
    """
    return encode_image(buffer, "JPEG", jpeg_quality(quality))


def create_preview_image(buffer: RasterBuffer, max_width: Optional[int] = PREVIEW_MAX_WIDTH) -> bytes:
    """PNG thumbnail scaled to ``max_width`` keeping the aspect ratio."""
    width = max(1, int(max_width or buffer.width))
    height = max(1, int(buffer.height * width / buffer.width))
    thumbnail = resample_to(buffer, (width, height), Image.Resampling.BILINEAR)
    return encode_image(thumbnail, "PNG")


def format_size_kb(size_bytes: int) -> str:
    return f"{size_bytes / 1024:.1f}KB"
