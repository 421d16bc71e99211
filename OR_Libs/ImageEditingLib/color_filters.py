"""
Color filter operations for Open Retouch.

Every filter maps a RasterBuffer to a new RasterBuffer of the same size
using per-pixel color math on the r, g, b channels; alpha is never touched.
Results are rounded half-to-even and clamped to 0-255 after every step, the
way an 8-bit clamped pixel store behaves, so multi-step passes read the
stored output of the previous step.

Functions:
    apply_filter: Apply one of the named filters
    apply_adjustments: Apply manual adjustments as one combined pass
    combined_pass: Brightness -> contrast -> saturation -> exposure pass
    apply_contrast_factor: Linear contrast around mid-gray with a raw factor
    contrast_factor: Contrast amount to linear factor

Example:
    >>> gray = apply_filter(buffer, "grayscale")
    >>> tuned = apply_adjustments(buffer, Adjustments(brightness=10, contrast=20))
"""

from typing import Callable, Dict

import numpy as np

from OR_Libs.constants import (
    BRIGHTNESS_STEP,
    CHANNEL_MAX,
    CHANNEL_MIN,
    CONTRAST_STEP,
    FILTER_BRIGHTEN,
    FILTER_CONTRAST_LESS,
    FILTER_CONTRAST_MORE,
    FILTER_COOL,
    FILTER_DARKEN,
    FILTER_GRAYSCALE,
    FILTER_SEPIA,
    FILTER_VINTAGE,
    FILTER_WARM,
    LUMA_WEIGHTS,
    SEPIA_MATRIX,
    SUPPORTED_FILTERS,
    TONE_OFFSETS,
)
from OR_Libs.ImageEditingLib.image_models import Adjustments
from OR_Libs.ImageEditingLib.raster_buffer import RasterBuffer

_SEPIA = np.array(SEPIA_MATRIX, dtype=np.float64)
_LUMA = np.array(LUMA_WEIGHTS, dtype=np.float64)


def contrast_factor(amount: float) -> float:
    """
    Linear contrast factor for a contrast amount C.

    factor = 259 * (C + 255) / (255 * (259 - C))

    Args:
        amount: Contrast amount, typically -100..100 (0 = neutral)
    """
    return (259.0 * (amount + 255.0)) / (255.0 * (259.0 - amount))


def _store(values: np.ndarray) -> np.ndarray:
    return np.clip(np.rint(values), CHANNEL_MIN, CHANNEL_MAX)


def _split(buffer: RasterBuffer):
    data = buffer.data
    return data[..., :3].astype(np.float64), data[..., 3:]


def _join(rgb: np.ndarray, alpha: np.ndarray) -> RasterBuffer:
    out = np.concatenate([rgb.astype(np.uint8), alpha], axis=-1)
    return RasterBuffer(out)


# ============================================================================
# Per-step color math on float (h, w, 3) arrays
# ============================================================================

def _brightness(rgb: np.ndarray, amount: float) -> np.ndarray:
    return _store(rgb + amount)


def _contrast(rgb: np.ndarray, factor: float) -> np.ndarray:
    return _store(factor * (rgb - 128.0) + 128.0)


def _saturation(rgb: np.ndarray, factor: float) -> np.ndarray:
    gray = (rgb @ _LUMA)[..., np.newaxis]
    return _store(gray + factor * (rgb - gray))


def _exposure(rgb: np.ndarray, factor: float) -> np.ndarray:
    return _store(rgb * factor)


def combined_pass(
    buffer: RasterBuffer,
    brightness: float = 0.0,
    contrast: float = 1.0,
    saturation: float = 1.0,
    exposure: float = 1.0,
) -> RasterBuffer:
    """
    Apply brightness, contrast, saturation and exposure as one pass.

    Steps run in this fixed order and each reads the previous step's
    clamped output, so the result is not commutative.

    Args:
        buffer: Source buffer
        brightness: Additive offset on r, g, b
        contrast: Linear contrast factor (1.0 = neutral)
        saturation: Multiplier on distance from luma (1.0 = neutral)
        exposure: Multiplier on r, g, b (1.0 = neutral)

    Returns:
        New buffer with the same dimensions
    """
    rgb, alpha = _split(buffer)
    rgb = _brightness(rgb, brightness)
    rgb = _contrast(rgb, contrast)
    rgb = _saturation(rgb, saturation)
    rgb = _exposure(rgb, exposure)
    return _join(rgb, alpha)


def apply_contrast_factor(buffer: RasterBuffer, factor: float) -> RasterBuffer:
    """Linear contrast around 128 with a raw factor."""
    rgb, alpha = _split(buffer)
    return _join(_contrast(rgb, factor), alpha)


def apply_adjustments(buffer: RasterBuffer, adjustments: Adjustments) -> RasterBuffer:
    """
    Apply manual adjustments in a single combined pass.

    Out-of-range settings are clamped to [-100, 100] first. Exposure output
    is clamped to 0-255 like every other step.

    Args:
        buffer: Source buffer
        adjustments: Brightness, contrast, saturation and exposure settings

    Returns:
        New adjusted buffer
    """
    settings = adjustments.clamped()
    return combined_pass(
        buffer,
        brightness=settings.brightness,
        contrast=contrast_factor(settings.contrast),
        saturation=1.0 + settings.saturation / 100.0,
        exposure=2.0 ** (settings.exposure / 100.0),
    )


# ============================================================================
# Named filters
# ============================================================================

def _grayscale(rgb: np.ndarray) -> np.ndarray:
    avg = rgb.sum(axis=-1, keepdims=True) / 3.0
    return _store(np.repeat(avg, 3, axis=-1))


def _sepia(rgb: np.ndarray) -> np.ndarray:
    return _store(rgb @ _SEPIA.T)


def _offset(offsets):
    def apply(rgb: np.ndarray) -> np.ndarray:
        return _store(rgb + np.array(offsets, dtype=np.float64))
    return apply


_FILTERS: Dict[str, Callable[[np.ndarray], np.ndarray]] = {
    FILTER_GRAYSCALE: _grayscale,
    FILTER_BRIGHTEN: lambda rgb: _brightness(rgb, BRIGHTNESS_STEP),
    FILTER_DARKEN: lambda rgb: _brightness(rgb, -BRIGHTNESS_STEP),
    FILTER_CONTRAST_MORE: lambda rgb: _contrast(rgb, contrast_factor(CONTRAST_STEP)),
    FILTER_CONTRAST_LESS: lambda rgb: _contrast(rgb, contrast_factor(-CONTRAST_STEP)),
    FILTER_SEPIA: _sepia,
    FILTER_VINTAGE: _offset(TONE_OFFSETS[FILTER_VINTAGE]),
    FILTER_COOL: _offset(TONE_OFFSETS[FILTER_COOL]),
    FILTER_WARM: _offset(TONE_OFFSETS[FILTER_WARM]),
}


def apply_filter(buffer: RasterBuffer, filter_kind: str) -> RasterBuffer:
    """
    Apply a named color filter.

    Args:
        buffer: Source buffer
        filter_kind: One of grayscale, brighten, darken, contrast-more,
                     contrast-less, sepia, vintage, cool, warm

    Returns:
        New filtered buffer with the same dimensions

    Raises:
        ValueError: If filter_kind is unknown
        TypeError: If buffer is not a RasterBuffer
    """
    if not isinstance(buffer, RasterBuffer):
        raise TypeError(f"Expected RasterBuffer, got {type(buffer)}")

    kind = str(filter_kind).strip().lower()
    if kind not in _FILTERS:
        raise ValueError(
            f"Unknown filter_kind: {filter_kind}. "
            f"Valid kinds: {', '.join(SUPPORTED_FILTERS)}"
        )

    rgb, alpha = _split(buffer)
    return _join(_FILTERS[kind](rgb), alpha)
