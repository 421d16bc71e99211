"""
Raster buffer for Open Retouch.

A RasterBuffer owns a width x height grid of RGBA8 samples held in a
numpy array of shape (height, width, 4). Every engine in the editor reads
one buffer and produces another; dimension-changing transforms always build
a fresh buffer instead of resizing an existing one.

Example:
    >>> buffer = RasterBuffer.from_pixels(2, 1, [255, 0, 0, 255, 0, 0, 255, 255])
    >>> buffer.pixel(1, 0)
    (0, 0, 255, 255)
    >>> len(buffer.pixels)
    8
"""

from typing import Any, List, Sequence, Tuple

import numpy as np
from PIL import Image

from OR_Libs.constants import CHANNELS, NEUTRAL_BACKGROUND
from OR_Libs.ImageEditingLib.image_models import RgbaColor


class RasterBuffer:
    """RGBA8 pixel grid with its dimensions.

    Invariant: ``len(pixels) == width * height * 4`` at all times.
    """

    __slots__ = ("_data",)

    def __init__(self, data: np.ndarray):
        if not isinstance(data, np.ndarray):
            raise TypeError(f"Expected numpy array, got {type(data)}")
        if data.ndim != 3 or data.shape[2] != CHANNELS:
            raise ValueError(f"Expected array of shape (height, width, 4), got {data.shape}")
        self._data = np.ascontiguousarray(data, dtype=np.uint8)

    @classmethod
    def from_pixels(cls, width: int, height: int, pixels: Any) -> "RasterBuffer":
        """
        Build a buffer from a flat RGBA sample sequence.

        Args:
            width: Buffer width in pixels
            height: Buffer height in pixels
            pixels: bytes or a sequence of ints, length width*height*4

        Raises:
            ValueError: If the sample count does not match the dimensions
        """
        if width < 0 or height < 0:
            raise ValueError(f"Dimensions must be >= 0, got {width}x{height}")

        if isinstance(pixels, (bytes, bytearray, memoryview)):
            flat = np.frombuffer(bytes(pixels), dtype=np.uint8)
        else:
            flat = np.asarray(pixels)
            if flat.size and (flat.min() < 0 or flat.max() > 255):
                raise ValueError("Pixel samples must be in range 0-255")
            flat = flat.astype(np.uint8)

        expected = width * height * CHANNELS
        if flat.size != expected:
            raise ValueError(
                f"Expected {expected} samples for {width}x{height}, got {flat.size}"
            )
        return cls(flat.reshape(height, width, CHANNELS).copy())

    @classmethod
    def from_colors(cls, width: int, height: int, colors: Sequence[RgbaColor]) -> "RasterBuffer":
        """Build a buffer from row-major RGBA tuples."""
        flat = [channel for color in colors for channel in color]
        return cls.from_pixels(width, height, flat)

    @classmethod
    def blank(cls, width: int, height: int, fill: RgbaColor = NEUTRAL_BACKGROUND) -> "RasterBuffer":
        data = np.empty((height, width, CHANNELS), dtype=np.uint8)
        data[:, :] = fill
        return cls(data)

    @classmethod
    def from_image(cls, image: Any) -> "RasterBuffer":
        """Convert a PIL Image (any mode) into a buffer."""
        if not hasattr(image, "convert"):
            raise TypeError(f"Expected PIL Image, got {type(image)}")
        if image.mode != "RGBA":
            image = image.convert("RGBA")
        return cls(np.array(image, dtype=np.uint8))

    def to_image(self) -> Any:
        """Return an RGBA PIL Image holding a copy of the samples."""
        return Image.fromarray(self._data.copy())

    @property
    def data(self) -> np.ndarray:
        """The (height, width, 4) sample array."""
        return self._data

    @property
    def width(self) -> int:
        return int(self._data.shape[1])

    @property
    def height(self) -> int:
        return int(self._data.shape[0])

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    @property
    def pixels(self) -> np.ndarray:
        """Flat RGBA sample view, length width*height*4."""
        return self._data.reshape(-1)

    def pixel(self, x: int, y: int) -> RgbaColor:
        r, g, b, a = (int(v) for v in self._data[y, x])
        return r, g, b, a

    def to_colors(self) -> List[RgbaColor]:
        """Row-major list of RGBA tuples."""
        return [tuple(int(v) for v in px) for px in self._data.reshape(-1, CHANNELS)]

    def tobytes(self) -> bytes:
        return self._data.tobytes()

    def copy(self) -> "RasterBuffer":
        return RasterBuffer(self._data.copy())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RasterBuffer):
            return NotImplemented
        return np.array_equal(self._data, other._data)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"RasterBuffer(width={self.width}, height={self.height})"
