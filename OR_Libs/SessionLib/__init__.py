"""
SessionLib - Editor session state

This module holds the single-image editing session and the pointer-driven
crop and brush interaction state machines.
"""

from OR_Libs.SessionLib.pointer_events import PointerEvent
from OR_Libs.SessionLib.crop_session import CropSession, CropState, render_crop_overlay
from OR_Libs.SessionLib.brush_session import BrushSession
from OR_Libs.SessionLib.editor_config import EditorConfig
from OR_Libs.SessionLib.editor_session import EditorSession

__all__ = [
    "PointerEvent",
    "CropSession",
    "CropState",
    "render_crop_overlay",
    "BrushSession",
    "EditorConfig",
    "EditorSession",
]
