"""
Freehand brush state machine for Open Retouch.

A BrushSession collects strokes from pointer events: 'down' opens a stroke,
'move' with the button held extends it, 'up'/'leave' closes it. Nothing is
painted into the working buffer until ``finish`` composites every collected
stroke in one go; ``render_preview`` shows the strokes over a buffer without
touching it.
"""

import logging
from typing import Any, List, Optional, Tuple

from OR_Libs.ImageEditingLib.image_models import BrushSettings
from OR_Libs.ImageEditingLib.paint_tools import apply_brush_strokes, render_stroke_layer
from OR_Libs.ImageEditingLib.raster_buffer import RasterBuffer
from OR_Libs.SessionLib.pointer_events import PointerEvent

logger = logging.getLogger(__name__)

Point = Tuple[float, float]


class BrushSession:
    """Collects freehand strokes for one brush activation."""

    def __init__(self, settings: BrushSettings):
        self.settings = settings
        self._strokes: List[List[Point]] = []
        self._current: Optional[List[Point]] = None
        self._active = True

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def is_drawing(self) -> bool:
        return self._current is not None

    @property
    def strokes(self) -> List[List[Point]]:
        return [list(stroke) for stroke in self._strokes]

    def handle(self, event: PointerEvent) -> None:
        if not self._active:
            return
        if event.kind == "down":
            self._current = [(event.x, event.y)]
            self._strokes.append(self._current)
        elif event.kind == "move":
            if self._current is not None and event.pressed:
                self._current.append((event.x, event.y))
        else:
            self._current = None

    def render_preview(self, buffer: RasterBuffer) -> Any:
        """The buffer with the collected strokes drawn on top (PIL Image)."""
        base = buffer.to_image()
        base.alpha_composite(render_stroke_layer(base.size, self._strokes, self.settings))
        return base

    def finish(self, buffer: RasterBuffer) -> Optional[RasterBuffer]:
        """
        Paint the collected strokes and end the session.

        Returns:
            The painted buffer, or None when no stroke was drawn
        """
        self._active = False
        self._current = None
        if not self._strokes:
            logger.debug("Brush session ended without strokes")
            return None
        logger.debug(f"Painting {len(self._strokes)} brush stroke(s)")
        return apply_brush_strokes(buffer, self._strokes, self.settings)

    def cancel(self) -> None:
        self._active = False
        self._current = None
        self._strokes = []
