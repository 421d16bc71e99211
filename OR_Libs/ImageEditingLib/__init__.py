"""
ImageEditingLib - Core image editing functionality

This module provides the raster buffer, pixel filters, geometric transforms,
paint tools and the simulated enhancement engine for the Open Retouch project.
"""

from OR_Libs.ImageEditingLib.raster_buffer import RasterBuffer
from OR_Libs.ImageEditingLib.image_models import (
    Adjustments,
    BrushSettings,
    CropRect,
    RgbaColor,
    TextSettings,
)
from OR_Libs.ImageEditingLib.color_filters import (
    apply_adjustments,
    apply_filter,
    contrast_factor,
)
from OR_Libs.ImageEditingLib.geometric_transforms import (
    crop,
    flip_horizontal,
    resize,
    rotate,
)
from OR_Libs.ImageEditingLib.paint_tools import apply_brush_strokes, draw_text
from OR_Libs.ImageEditingLib.enhancement import (
    EnhancementEngine,
    auto_enhance_pixels,
    upscale_pixels,
)
from OR_Libs.ImageEditingLib.image_editing_ops import (
    decode_image,
    encode_image,
    save_buffer,
)

__all__ = [
    "RasterBuffer",
    "Adjustments",
    "BrushSettings",
    "CropRect",
    "RgbaColor",
    "TextSettings",
    "apply_adjustments",
    "apply_filter",
    "contrast_factor",
    "crop",
    "flip_horizontal",
    "resize",
    "rotate",
    "apply_brush_strokes",
    "draw_text",
    "EnhancementEngine",
    "auto_enhance_pixels",
    "upscale_pixels",
    "decode_image",
    "encode_image",
    "save_buffer",
]
