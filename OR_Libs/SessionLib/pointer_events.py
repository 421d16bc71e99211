"""
Abstract pointer events consumed by the interaction state machines.

The drawing surface never handles events itself; a host (GUI, test, script)
translates its own input into PointerEvents in buffer-pixel coordinates and
feeds them to a CropSession or BrushSession.
"""

from dataclasses import dataclass
from typing import Literal

PointerKind = Literal["down", "move", "up", "leave"]

POINTER_KINDS = ("down", "move", "up", "leave")


@dataclass(frozen=True)
class PointerEvent:
    """A pointer event in buffer-pixel coordinates.

    Attributes:
        kind: 'down', 'move', 'up' or 'leave' (leave ends a drag like 'up')
        x: Horizontal position
        y: Vertical position
        pressed: Whether the primary button is held (relevant for 'move')
    """
    kind: PointerKind
    x: float = 0.0
    y: float = 0.0
    pressed: bool = True

    def __post_init__(self):
        if self.kind not in POINTER_KINDS:
            raise ValueError(f"Unsupported pointer kind: {self.kind}")

    @classmethod
    def down(cls, x: float, y: float) -> "PointerEvent":
        return cls("down", x, y, True)

    @classmethod
    def move(cls, x: float, y: float, pressed: bool = True) -> "PointerEvent":
        return cls("move", x, y, pressed)

    @classmethod
    def up(cls, x: float = 0.0, y: float = 0.0) -> "PointerEvent":
        return cls("up", x, y, False)
