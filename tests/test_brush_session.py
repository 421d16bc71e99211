"""
Unit tests for the freehand brush state machine.
"""

from OR_Libs.ImageEditingLib.image_models import BrushSettings
from OR_Libs.ImageEditingLib.raster_buffer import RasterBuffer
from OR_Libs.SessionLib.brush_session import BrushSession
from OR_Libs.SessionLib.pointer_events import PointerEvent


class TestBrushSession:
    """Tests for BrushSession."""

    def test_collects_strokes_per_gesture(self):
        session = BrushSession(BrushSettings())

        session.handle(PointerEvent.down(1, 1))
        session.handle(PointerEvent.move(2, 2))
        session.handle(PointerEvent.up(2, 2))
        session.handle(PointerEvent.down(5, 5))
        session.handle(PointerEvent.up(5, 5))

        assert session.strokes == [[(1, 1), (2, 2)], [(5, 5)]]
        assert not session.is_drawing

    def test_move_without_press_is_ignored(self):
        session = BrushSession(BrushSettings())
        session.handle(PointerEvent.move(3, 3))
        session.handle(PointerEvent.down(1, 1))
        session.handle(PointerEvent.move(4, 4, pressed=False))

        assert session.strokes == [[(1, 1)]]
        assert session.is_drawing

    def test_preview_does_not_touch_buffer(self):
        buffer = RasterBuffer.blank(20, 20)
        before = buffer.copy()
        session = BrushSession(BrushSettings(color="#00ff00", size=4))
        session.handle(PointerEvent.down(2, 10))
        session.handle(PointerEvent.move(18, 10))

        preview = session.render_preview(buffer)

        assert preview.getpixel((10, 10)) == (0, 255, 0, 255)
        assert buffer == before

    def test_finish_paints_and_deactivates(self):
        buffer = RasterBuffer.blank(20, 20)
        session = BrushSession(BrushSettings(color="#00ff00", size=4))
        session.handle(PointerEvent.down(2, 10))
        session.handle(PointerEvent.move(18, 10))

        painted = session.finish(buffer)

        assert painted.pixel(10, 10) == (0, 255, 0, 255)
        assert not session.is_active

    def test_finish_without_strokes(self):
        session = BrushSession(BrushSettings())
        assert session.finish(RasterBuffer.blank(4, 4)) is None

    def test_cancel_drops_strokes(self):
        session = BrushSession(BrushSettings())
        session.handle(PointerEvent.down(1, 1))
        session.cancel()
        session.handle(PointerEvent.down(2, 2))

        assert session.strokes == []
        assert not session.is_active
