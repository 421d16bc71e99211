"""
Geometric transform operations for Open Retouch.

Provides rotation with bounding-box growth, horizontal mirroring, uniform
resizing and rectangular cropping. Rotation, resize and crop always return a
freshly allocated buffer; flip returns a new buffer of identical size.

Example:
    >>> rotated = rotate(buffer, 90)
    >>> mirrored = flip_horizontal(buffer)
    >>> half = resize(original, 50)
    >>> region = crop(buffer, CropRect(10, 10, 64, 48))
"""

import math
from typing import Any, Tuple

from PIL import Image

from OR_Libs.constants import NEUTRAL_BACKGROUND, TRANSPARENT
from OR_Libs.errors import EmptySelectionError
from OR_Libs.ImageEditingLib.image_models import CropRect
from OR_Libs.ImageEditingLib.raster_buffer import RasterBuffer

# Snap trig results so right angles map pixel centers exactly
_TRIG_PRECISION = 10
# Tolerance for float noise before truncating a computed dimension
_DIMENSION_EPSILON = 1e-6


def _truncate(value: float) -> int:
    return int(math.floor(value + _DIMENSION_EPSILON))


def rotated_size(width: int, height: int, degrees: float) -> Tuple[int, int]:
    """
    Size of the box enclosing a width x height rectangle rotated by degrees.

    newW = |cos| * w + |sin| * h, newH = |sin| * w + |cos| * h, truncated.
    """
    rad = math.radians(degrees)
    cos_a = abs(round(math.cos(rad), _TRIG_PRECISION))
    sin_a = abs(round(math.sin(rad), _TRIG_PRECISION))
    return (
        _truncate(cos_a * width + sin_a * height),
        _truncate(sin_a * width + cos_a * height),
    )


def rotate(buffer: RasterBuffer, degrees: float) -> RasterBuffer:
    """
    Rotate clockwise about the center into an enlarged bounding box.

    The new buffer is painted white and the rotated source is composited
    on top, so uncovered corners stay white.

    Args:
        buffer: Source buffer
        degrees: Clockwise rotation in degrees (any value)

    Returns:
        New buffer sized to the rotated bounding box
    """
    if not isinstance(buffer, RasterBuffer):
        raise TypeError(f"Expected RasterBuffer, got {type(buffer)}")

    new_width, new_height = rotated_size(buffer.width, buffer.height, degrees)
    background = Image.new("RGBA", (new_width, new_height), NEUTRAL_BACKGROUND)
    if buffer.width == 0 or buffer.height == 0 or new_width == 0 or new_height == 0:
        return RasterBuffer.from_image(background)

    rad = math.radians(degrees)
    cos_a = round(math.cos(rad), _TRIG_PRECISION)
    sin_a = round(math.sin(rad), _TRIG_PRECISION)

    # Inverse mapping: output pixel -> source pixel, both about their centers
    src_cx, src_cy = buffer.width / 2.0, buffer.height / 2.0
    dst_cx, dst_cy = new_width / 2.0, new_height / 2.0
    matrix = (
        cos_a,
        sin_a,
        src_cx - cos_a * dst_cx - sin_a * dst_cy,
        -sin_a,
        cos_a,
        src_cy + sin_a * dst_cx - cos_a * dst_cy,
    )

    right_angle = math.isclose(degrees % 90, 0.0, abs_tol=1e-9) or math.isclose(
        degrees % 90, 90.0, abs_tol=1e-9
    )
    resample = Image.Resampling.NEAREST if right_angle else Image.Resampling.BICUBIC

    rotated = buffer.to_image().transform(
        (new_width, new_height),
        Image.Transform.AFFINE,
        matrix,
        resample=resample,
        fillcolor=TRANSPARENT,
    )
    background.alpha_composite(rotated)
    return RasterBuffer.from_image(background)


def flip_horizontal(buffer: RasterBuffer) -> RasterBuffer:
    """Mirror columns left to right; dimensions are unchanged."""
    if not isinstance(buffer, RasterBuffer):
        raise TypeError(f"Expected RasterBuffer, got {type(buffer)}")
    return RasterBuffer(buffer.data[:, ::-1, :].copy())


def scaled_size(width: int, height: int, scale: float) -> Tuple[int, int]:
    """floor(width * scale) x floor(height * scale), never below 1 pixel."""
    return (
        max(1, _truncate(width * scale)),
        max(1, _truncate(height * scale)),
    )


def resize(original: RasterBuffer, percentage: float) -> RasterBuffer:
    """
    Resize to a percentage of the given buffer.

    Callers pass the pristine source so repeated resizes are not cumulative.
    The result is drawn over a white background like every other
    dimension-changing transform.

    Args:
        original: The buffer to scale from (the originally loaded image)
        percentage: Positive scale in percent (the UI offers 20-100)

    Returns:
        New buffer of floor(w * p / 100) x floor(h * p / 100)

    Raises:
        ValueError: If percentage <= 0
    """
    if not isinstance(original, RasterBuffer):
        raise TypeError(f"Expected RasterBuffer, got {type(original)}")
    if percentage <= 0:
        raise ValueError(f"percentage must be > 0, got {percentage}")

    size = scaled_size(original.width, original.height, percentage / 100.0)
    return resample_to(original, size, Image.Resampling.BILINEAR)


def resample_to(buffer: RasterBuffer, size: Tuple[int, int], resample: Any) -> RasterBuffer:
    """Scale a buffer to an exact size over a white background."""
    scaled = buffer.to_image().resize(size, resample)
    background = Image.new("RGBA", size, NEUTRAL_BACKGROUND)
    background.alpha_composite(scaled)
    return RasterBuffer.from_image(background)


def crop(buffer: RasterBuffer, rect: CropRect) -> RasterBuffer:
    """
    Extract a rectangular region.

    Args:
        buffer: Source buffer
        rect: Non-empty rect fully inside the buffer

    Returns:
        New buffer of exactly rect.width x rect.height

    Raises:
        EmptySelectionError: If the rect has zero width or height
        ValueError: If the rect reaches outside the buffer
    """
    if not isinstance(buffer, RasterBuffer):
        raise TypeError(f"Expected RasterBuffer, got {type(buffer)}")
    if rect.is_empty:
        raise EmptySelectionError(f"Cannot crop to an empty selection: {rect}")
    if not rect.fits(buffer.width, buffer.height):
        raise ValueError(
            f"Crop rect {rect} is outside the {buffer.width}x{buffer.height} buffer"
        )

    region = buffer.data[rect.y:rect.y + rect.height, rect.x:rect.x + rect.width]
    return RasterBuffer(region.copy())
