"""
Unit tests for paint_tools module.
"""

import pytest

from OR_Libs.ImageEditingLib.image_models import BrushSettings, TextSettings
from OR_Libs.ImageEditingLib.paint_tools import (
    apply_brush_strokes,
    draw_text,
    render_stroke_layer,
)
from OR_Libs.ImageEditingLib.raster_buffer import RasterBuffer

WHITE = (255, 255, 255, 255)


class TestBrushStrokes:
    """Tests for render_stroke_layer and apply_brush_strokes."""

    def test_stroke_paints_along_path(self):
        buffer = RasterBuffer.blank(40, 20)
        settings = BrushSettings(color="#ff0000", size=5)

        result = apply_brush_strokes(buffer, [[(5, 10), (35, 10)]], settings)

        assert result.pixel(20, 10) == (255, 0, 0, 255)
        assert result.pixel(20, 1) == WHITE

    def test_single_point_leaves_dot(self):
        layer = render_stroke_layer((20, 20), [[(10, 10)]], BrushSettings(size=6))
        assert layer.getpixel((10, 10))[3] == 255
        assert layer.getpixel((0, 0))[3] == 0

    def test_opacity_scales_alpha(self):
        layer = render_stroke_layer((20, 20), [[(2, 10), (18, 10)]], BrushSettings(size=4, opacity=0.5))
        assert layer.getpixel((10, 10))[3] == 128

    def test_no_strokes_is_identity(self):
        buffer = RasterBuffer.blank(8, 8, (10, 20, 30, 255))
        assert apply_brush_strokes(buffer, [], BrushSettings()) == buffer

    def test_keeps_size_and_input(self):
        buffer = RasterBuffer.blank(8, 8)
        before = buffer.copy()

        result = apply_brush_strokes(buffer, [[(0, 0), (7, 7)]], BrushSettings())

        assert result.size == (8, 8)
        assert buffer == before

    @pytest.mark.parametrize("kwargs", [{"size": 0}, {"opacity": 1.5}])
    def test_invalid_settings(self, kwargs):
        with pytest.raises(ValueError):
            BrushSettings(**kwargs)


class TestDrawText:
    """Tests for draw_text."""

    def test_draws_in_color(self):
        buffer = RasterBuffer.blank(200, 100)

        result = draw_text(buffer, TextSettings("HELLO", font_size=40, color="#0000ff"))

        colors = set(result.to_colors())
        assert (0, 0, 255, 255) in colors
        assert result.size == buffer.size

    def test_empty_text_is_copy(self):
        buffer = RasterBuffer.blank(10, 10)
        result = draw_text(buffer, TextSettings(""))

        assert result == buffer
        assert result is not buffer

    def test_bad_color(self):
        with pytest.raises(ValueError):
            draw_text(RasterBuffer.blank(10, 10), TextSettings("x", color="not-a-color"))
