"""
Paint operations for Open Retouch: freehand brush strokes and text overlay.

Both operations draw onto a transparent layer with PIL's ImageDraw and
alpha-composite that layer over the buffer, returning a new buffer of the
same size.

Functions:
    apply_brush_strokes: Composite freehand strokes onto a buffer
    draw_text: Draw a text overlay onto a buffer
"""

from typing import Any, Sequence, Tuple

from PIL import Image, ImageColor, ImageDraw, ImageFont

from OR_Libs.constants import TRANSPARENT
from OR_Libs.ImageEditingLib.image_models import BrushSettings, TextSettings
from OR_Libs.ImageEditingLib.raster_buffer import RasterBuffer

Point = Tuple[float, float]


def _opaque_color(color: str) -> Tuple[int, int, int, int]:
    rgb = ImageColor.getrgb(color)
    return rgb[0], rgb[1], rgb[2], 255


def render_stroke_layer(
    size: Tuple[int, int],
    strokes: Sequence[Sequence[Point]],
    settings: BrushSettings,
) -> Any:
    """
    Render strokes onto a transparent RGBA layer.

    Each stroke is a polyline with round caps and joints; a stroke with a
    single point leaves a round dot. The layer's alpha is scaled by the
    brush opacity.

    Args:
        size: (width, height) of the layer
        strokes: Point lists, one per pointer-down/up gesture
        settings: Brush color, size and opacity

    Returns:
        PIL Image (RGBA)
    """
    layer = Image.new("RGBA", size, TRANSPARENT)
    draw = ImageDraw.Draw(layer)
    fill = _opaque_color(settings.color)
    radius = settings.size / 2.0

    for stroke in strokes:
        points = [(float(x), float(y)) for x, y in stroke]
        if not points:
            continue
        if len(points) > 1:
            draw.line(points, fill=fill, width=settings.size, joint="curve")
        for x, y in points:
            draw.ellipse((x - radius, y - radius, x + radius, y + radius), fill=fill)

    if settings.opacity < 1.0:
        alpha = layer.getchannel("A").point(lambda a: int(round(a * settings.opacity)))
        layer.putalpha(alpha)
    return layer


def apply_brush_strokes(
    buffer: RasterBuffer,
    strokes: Sequence[Sequence[Point]],
    settings: BrushSettings,
) -> RasterBuffer:
    """Composite brush strokes over the buffer."""
    if not isinstance(buffer, RasterBuffer):
        raise TypeError(f"Expected RasterBuffer, got {type(buffer)}")

    base = buffer.to_image()
    base.alpha_composite(render_stroke_layer(base.size, strokes, settings))
    return RasterBuffer.from_image(base)


def draw_text(buffer: RasterBuffer, settings: TextSettings) -> RasterBuffer:
    """
    Draw a line of text over the buffer.

    The text is horizontally centered on its anchor with the anchor on the
    baseline. Without explicit coordinates the anchor is the buffer center.

    Args:
        buffer: Source buffer
        settings: Text, font size, color and optional anchor

    Returns:
        New buffer; a copy of the input when the text is empty

    Raises:
        ValueError: If the color string cannot be parsed
    """
    if not isinstance(buffer, RasterBuffer):
        raise TypeError(f"Expected RasterBuffer, got {type(buffer)}")
    if not settings.text:
        return buffer.copy()

    fill = _opaque_color(settings.color)
    x = settings.x if settings.x is not None else buffer.width / 2.0
    y = settings.y if settings.y is not None else buffer.height / 2.0

    layer = Image.new("RGBA", buffer.size, TRANSPARENT)
    font = ImageFont.load_default(size=settings.font_size)
    ImageDraw.Draw(layer).text((x, y), settings.text, fill=fill, font=font, anchor="ms")

    base = buffer.to_image()
    base.alpha_composite(layer)
    return RasterBuffer.from_image(base)
