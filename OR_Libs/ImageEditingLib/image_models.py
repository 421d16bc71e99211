"""
Image editing data models for Open Retouch.

This module defines the value types passed into the editing engines.

Classes:
    CropRect: Axis-aligned sub-region of a buffer in pixel coordinates
    Adjustments: Manual brightness/contrast/saturation/exposure settings
    BrushSettings: Freehand brush configuration
    TextSettings: Text overlay configuration

Type Aliases:
    RgbaColor: A tuple of 4 integers representing RGBA color values (0-255)
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional, Tuple

from OR_Libs.constants import (
    ADJUSTMENT_MAX,
    ADJUSTMENT_MIN,
    DEFAULT_BRUSH_COLOR,
    DEFAULT_BRUSH_OPACITY,
    DEFAULT_BRUSH_SIZE,
    DEFAULT_TEXT_COLOR,
    DEFAULT_TEXT_SIZE,
)

RgbaColor = Tuple[int, int, int, int]


@dataclass(frozen=True)
class CropRect:
    """Crop rectangle in buffer-pixel coordinates.

    A rect with zero width or height is "empty" and cannot be committed.
    """

    x: int = 0
    y: int = 0
    width: int = 0
    height: int = 0

    @classmethod
    def from_points(cls, anchor: Tuple[float, float], current: Tuple[float, float]) -> "CropRect":
        """Normalized bounding box between two corners dragged in any direction."""
        ax, ay = (int(round(v)) for v in anchor)
        cx, cy = (int(round(v)) for v in current)
        return cls(
            x=min(ax, cx),
            y=min(ay, cy),
            width=abs(cx - ax),
            height=abs(cy - ay),
        )

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    @property
    def box(self) -> Tuple[int, int, int, int]:
        """(left, upper, right, lower) box as PIL expects it."""
        return self.x, self.y, self.x + self.width, self.y + self.height

    def fits(self, buffer_width: int, buffer_height: int) -> bool:
        return (
            self.x >= 0
            and self.y >= 0
            and self.x + self.width <= buffer_width
            and self.y + self.height <= buffer_height
        )

    def clamped(self, buffer_width: int, buffer_height: int) -> "CropRect":
        """Intersect the rect with the buffer bounds."""
        left = max(0, min(self.x, buffer_width))
        top = max(0, min(self.y, buffer_height))
        right = max(left, min(self.x + self.width, buffer_width))
        bottom = max(top, min(self.y + self.height, buffer_height))
        return CropRect(left, top, right - left, bottom - top)


@dataclass(frozen=True)
class Adjustments:
    """Manual adjustment settings, each an integer in [-100, 100] (0 = neutral).

    Attributes:
        brightness: Additive brightness offset
        contrast: Contrast amount fed into the linear contrast factor
        saturation: Percentage change of distance from luma
        exposure: Exposure in hundredths of a stop
    """

    brightness: int = 0
    contrast: int = 0
    saturation: int = 0
    exposure: int = 0

    def clamped(self) -> "Adjustments":
        def clamp(value: Any) -> int:
            return int(max(ADJUSTMENT_MIN, min(ADJUSTMENT_MAX, round(float(value)))))

        return Adjustments(
            brightness=clamp(self.brightness),
            contrast=clamp(self.contrast),
            saturation=clamp(self.saturation),
            exposure=clamp(self.exposure),
        )

    @property
    def is_neutral(self) -> bool:
        return self.clamped() == Adjustments()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Adjustments":
        """Create from dictionary."""
        filtered = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**filtered)


@dataclass(frozen=True)
class BrushSettings:
    """Freehand brush configuration.

    Attributes:
        color: Any color string PIL understands ("#ff0000", "red", ...)
        size: Stroke width in pixels (>= 1)
        opacity: Stroke opacity in [0, 1]
    """

    color: str = DEFAULT_BRUSH_COLOR
    size: int = DEFAULT_BRUSH_SIZE
    opacity: float = DEFAULT_BRUSH_OPACITY

    def __post_init__(self):
        if self.size < 1:
            raise ValueError(f"size must be >= 1, got {self.size}")
        if not (0.0 <= self.opacity <= 1.0):
            raise ValueError(f"opacity must be 0-1, got {self.opacity}")


@dataclass(frozen=True)
class TextSettings:
    """Text overlay configuration.

    Attributes:
        text: Text to draw; empty text draws nothing
        font_size: Font size in pixels
        color: Any color string PIL understands
        x: Horizontal anchor (None = image center)
        y: Vertical anchor (None = image center)
    """

    text: str
    font_size: int = DEFAULT_TEXT_SIZE
    color: str = DEFAULT_TEXT_COLOR
    x: Optional[float] = None
    y: Optional[float] = None

    def __post_init__(self):
        if self.font_size < 1:
            raise ValueError(f"font_size must be >= 1, got {self.font_size}")
