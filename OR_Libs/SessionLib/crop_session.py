"""
Crop interaction state machine for Open Retouch.

A CropSession turns a stream of pointer events into a confirmed CropRect:

    IDLE --begin--> SELECTING --up (non-empty)--> SELECTED --commit--> APPLIED
                        |                             |
                        +-----------cancel------------+---------------> CANCELLED

APPLIED and CANCELLED are outcomes: the session records the outcome, runs
its cleanup callbacks and drops back to IDLE. Pressing again while SELECTED
starts a new gesture with a fresh rect.

The preview overlay (dimmed mask outside the rect plus a dashed outline) is
rendered from the working buffer into a separate image; the buffer itself is
never touched until commit.
"""

import logging
from enum import Enum
from typing import Any, Callable, List, Optional, Tuple

from PIL import Image, ImageDraw

from OR_Libs.constants import (
    CROP_DASH_PATTERN,
    CROP_MASK_COLOR,
    CROP_OUTLINE_COLOR,
    CROP_OUTLINE_WIDTH,
    TRANSPARENT,
)
from OR_Libs.ImageEditingLib.geometric_transforms import crop
from OR_Libs.ImageEditingLib.image_models import CropRect
from OR_Libs.ImageEditingLib.raster_buffer import RasterBuffer
from OR_Libs.SessionLib.pointer_events import PointerEvent

logger = logging.getLogger(__name__)


class CropState(Enum):
    IDLE = "idle"
    SELECTING = "selecting"
    SELECTED = "selected"
    APPLIED = "applied"
    CANCELLED = "cancelled"


class CropSession:
    """
    One crop gesture sequence over a buffer of fixed size.

    Args:
        width: Width of the buffer being cropped
        height: Height of the buffer being cropped
    """

    def __init__(self, width: int, height: int):
        self.width = int(width)
        self.height = int(height)
        self._state = CropState.IDLE
        self._outcome: Optional[CropState] = None
        self._anchor: Optional[Tuple[float, float]] = None
        self._rect = CropRect()
        self._cleanups: List[Callable[[], None]] = []

    # ---- read-only state ----
    @property
    def state(self) -> CropState:
        return self._state

    @property
    def outcome(self) -> Optional[CropState]:
        """APPLIED or CANCELLED once the session has ended, else None."""
        return self._outcome

    @property
    def rect(self) -> CropRect:
        return self._rect

    @property
    def is_active(self) -> bool:
        return self._state in (CropState.SELECTING, CropState.SELECTED)

    @property
    def can_commit(self) -> bool:
        return self._state is CropState.SELECTED and not self._rect.is_empty

    # ---- lifecycle ----
    def begin(self) -> bool:
        """Enter crop mode. A no-op returning False when already active."""
        if self.is_active:
            return False
        self._state = CropState.SELECTING
        self._outcome = None
        self._anchor = None
        self._rect = CropRect()
        return True

    def add_cleanup(self, callback: Callable[[], None]) -> None:
        """Register a callback released when the session applies or cancels."""
        self._cleanups.append(callback)

    def commit(self, buffer: RasterBuffer) -> Optional[RasterBuffer]:
        """
        Crop the buffer to the selected rect and end the session.

        Returns:
            The cropped buffer, or None when there is nothing committable
            (no selection yet or an empty rect); the session stays as it was
        """
        if not self.can_commit:
            logger.warning(f"Ignoring crop commit in state {self._state.value} with rect {self._rect}")
            return None

        result = crop(buffer, self._rect)
        logger.debug(f"Cropped {buffer.width}x{buffer.height} to {self._rect}")
        self._finish(CropState.APPLIED)
        return result

    def cancel(self) -> bool:
        """Discard the selection and end the session. False when not active."""
        if not self.is_active:
            return False
        self._finish(CropState.CANCELLED)
        return True

    def _finish(self, outcome: CropState) -> None:
        self._state = outcome
        self._outcome = outcome
        cleanups, self._cleanups = self._cleanups, []
        for callback in cleanups:
            callback()
        self._anchor = None
        self._rect = CropRect()
        self._state = CropState.IDLE

    def __enter__(self) -> "CropSession":
        self.begin()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cancel()

    # ---- pointer handling ----
    def handle(self, event: PointerEvent) -> None:
        """Dispatch a pointer event."""
        if event.kind == "down":
            self.pointer_down(event.x, event.y)
        elif event.kind == "move":
            self.pointer_move(event.x, event.y, event.pressed)
        else:
            self.pointer_up()

    def pointer_down(self, x: float, y: float) -> None:
        if not self.is_active:
            return
        self._state = CropState.SELECTING
        self._anchor = self._clamp_point(x, y)
        self._rect = CropRect.from_points(self._anchor, self._anchor)

    def pointer_move(self, x: float, y: float, pressed: bool = True) -> None:
        if self._state is not CropState.SELECTING or self._anchor is None or not pressed:
            return
        current = self._clamp_point(x, y)
        self._rect = CropRect.from_points(self._anchor, current).clamped(self.width, self.height)

    def pointer_up(self) -> None:
        if self._state is not CropState.SELECTING or self._anchor is None:
            return
        self._anchor = None
        if not self._rect.is_empty:
            self._state = CropState.SELECTED

    def _clamp_point(self, x: float, y: float) -> Tuple[float, float]:
        return (
            max(0.0, min(float(x), float(self.width))),
            max(0.0, min(float(y), float(self.height))),
        )

    # ---- preview ----
    def render_overlay(self, buffer: RasterBuffer) -> Any:
        """Preview image of the current selection over the buffer."""
        return render_crop_overlay(buffer, self._rect)


def _dashed_segments(start: float, end: float) -> List[Tuple[float, float]]:
    dash, gap = CROP_DASH_PATTERN
    segments = []
    pos = start
    while pos < end:
        segments.append((pos, min(pos + dash, end)))
        pos += dash + gap
    return segments


def render_crop_overlay(buffer: RasterBuffer, rect: CropRect) -> Any:
    """
    Render the crop preview without mutating the buffer.

    Everything outside ``rect`` is dimmed with a 30% black mask and the rect
    is outlined with a red dashed line.

    Returns:
        PIL Image (RGBA) the size of the buffer
    """
    base = buffer.to_image()
    if rect.is_empty:
        return base

    mask = Image.new("RGBA", base.size, CROP_MASK_COLOR)
    mask.paste(TRANSPARENT, rect.box)
    base.alpha_composite(mask)

    draw = ImageDraw.Draw(base)
    left, top, right, bottom = rect.box
    for a, b in _dashed_segments(left, right):
        draw.line([(a, top), (b, top)], fill=CROP_OUTLINE_COLOR, width=CROP_OUTLINE_WIDTH)
        draw.line([(a, bottom), (b, bottom)], fill=CROP_OUTLINE_COLOR, width=CROP_OUTLINE_WIDTH)
    for a, b in _dashed_segments(top, bottom):
        draw.line([(left, a), (left, b)], fill=CROP_OUTLINE_COLOR, width=CROP_OUTLINE_WIDTH)
        draw.line([(right, a), (right, b)], fill=CROP_OUTLINE_COLOR, width=CROP_OUTLINE_WIDTH)
    return base
