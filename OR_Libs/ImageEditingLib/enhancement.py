"""
Simulated enhancement engine for Open Retouch.

"AI" auto-enhance and upscale are deterministic pixel math built from the
color filter primitives, followed by a fixed artificial latency that stands
in for heavier processing. Each call runs as a task on a thread pool and
returns a concurrent.futures.Future resolving to the new buffer.

The latency is a SimulatedLatency value: a number of time units, the length
of one unit in seconds, and the sleep function used to wait. Tests use a
zero-length unit or a recording sleep function so nothing actually blocks.

Example:
    >>> engine = EnhancementEngine(time_unit_seconds=0)
    >>> enhanced = engine.auto_enhance(buffer).result()
    >>> bigger = engine.upscale(buffer).result()
    >>> engine.shutdown()
"""

import concurrent.futures
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from PIL import Image

from OR_Libs.constants import (
    AUTO_ENHANCE_BRIGHTNESS,
    AUTO_ENHANCE_CONTRAST,
    AUTO_ENHANCE_DELAY_UNITS,
    AUTO_ENHANCE_SATURATION,
    DEFAULT_TIME_UNIT_SECONDS,
    UPSCALE_CONTRAST_FACTOR,
    UPSCALE_DELAY_UNITS,
    UPSCALE_FACTOR,
    UPSCALE_MAX_DIMENSION,
)
from OR_Libs.ImageEditingLib.color_filters import (
    apply_contrast_factor,
    combined_pass,
    contrast_factor,
)
from OR_Libs.ImageEditingLib.geometric_transforms import resample_to
from OR_Libs.ImageEditingLib.raster_buffer import RasterBuffer

logger = logging.getLogger(__name__)

Sleeper = Callable[[float], None]


@dataclass(frozen=True)
class SimulatedLatency:
    """Fixed artificial delay.

    Attributes:
        units: Number of time units to wait
        time_unit_seconds: Length of one unit in seconds (0 = no wait)
        sleep: Function used to wait
    """
    units: float
    time_unit_seconds: float = DEFAULT_TIME_UNIT_SECONDS
    sleep: Sleeper = time.sleep

    @property
    def seconds(self) -> float:
        return max(0.0, self.units * self.time_unit_seconds)

    def wait(self) -> None:
        if self.seconds > 0:
            self.sleep(self.seconds)


def auto_enhance_pixels(buffer: RasterBuffer) -> RasterBuffer:
    """
    Brightness +25, contrast C=30 and saturation x1.4 as one combined pass.
    """
    return combined_pass(
        buffer,
        brightness=AUTO_ENHANCE_BRIGHTNESS,
        contrast=contrast_factor(AUTO_ENHANCE_CONTRAST),
        saturation=AUTO_ENHANCE_SATURATION,
    )


def upscaled_size(
    width: int,
    height: int,
    max_dimension: int = UPSCALE_MAX_DIMENSION,
    factor: float = UPSCALE_FACTOR,
) -> Tuple[int, int]:
    """
    Target size for an upscale.

    Both axes scale by the same factor; the factor shrinks below ``factor``
    when doubling would push either axis past ``max_dimension``. An image
    already at or beyond the cap is never shrunk.

    Examples:
        >>> upscaled_size(900, 900)
        (1800, 1800)
        >>> upscaled_size(1200, 1200)
        (2000, 2000)
        >>> upscaled_size(1200, 600)
        (2000, 1000)
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Cannot upscale an empty {width}x{height} buffer")

    longest = max(width, height)
    scale = min(factor, max_dimension / longest)
    scale = max(scale, 1.0)
    return (
        min(max(width, max_dimension), int(round(width * scale))),
        min(max(height, max_dimension), int(round(height * scale))),
    )


def upscale_pixels(buffer: RasterBuffer, max_dimension: int = UPSCALE_MAX_DIMENSION) -> RasterBuffer:
    """
    Lanczos upscale to ``upscaled_size`` followed by a mild contrast boost.
    """
    size = upscaled_size(buffer.width, buffer.height, max_dimension)
    scaled = resample_to(buffer, size, Image.Resampling.LANCZOS)
    return apply_contrast_factor(scaled, UPSCALE_CONTRAST_FACTOR)


class EnhancementEngine:
    """
    Runs the simulated enhancements as background tasks.

    Pixel math runs on a worker thread, then the task waits out its
    simulated latency before the returned Future resolves. The engine never
    mutates the buffer it is given.
    """

    def __init__(
        self,
        time_unit_seconds: float = DEFAULT_TIME_UNIT_SECONDS,
        sleep: Sleeper = time.sleep,
        auto_enhance_units: float = AUTO_ENHANCE_DELAY_UNITS,
        upscale_units: float = UPSCALE_DELAY_UNITS,
        max_dimension: int = UPSCALE_MAX_DIMENSION,
        executor: Optional[concurrent.futures.Executor] = None,
    ):
        if time_unit_seconds < 0:
            raise ValueError(f"time_unit_seconds must be >= 0, got {time_unit_seconds}")

        self.auto_enhance_latency = SimulatedLatency(auto_enhance_units, time_unit_seconds, sleep)
        self.upscale_latency = SimulatedLatency(upscale_units, time_unit_seconds, sleep)
        self.max_dimension = int(max_dimension)
        self._owns_executor = executor is None
        self._executor = executor or concurrent.futures.ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="enhance"
        )

    def auto_enhance(self, buffer: RasterBuffer) -> "concurrent.futures.Future[RasterBuffer]":
        """Schedule auto-enhance; resolves after the auto-enhance latency."""
        return self._submit("auto-enhance", auto_enhance_pixels, buffer, self.auto_enhance_latency)

    def upscale(self, buffer: RasterBuffer) -> "concurrent.futures.Future[RasterBuffer]":
        """Schedule upscale; resolves after the upscale latency."""
        return self._submit(
            "upscale",
            lambda source: upscale_pixels(source, self.max_dimension),
            buffer,
            self.upscale_latency,
        )

    def _submit(
        self,
        name: str,
        operation: Callable[[RasterBuffer], RasterBuffer],
        buffer: RasterBuffer,
        latency: SimulatedLatency,
    ) -> "concurrent.futures.Future[RasterBuffer]":
        if not isinstance(buffer, RasterBuffer):
            raise TypeError(f"Expected RasterBuffer, got {type(buffer)}")

        source = buffer.copy()

        def task() -> RasterBuffer:
            result = operation(source)
            latency.wait()
            logger.debug(
                f"Simulated {name} finished: {source.width}x{source.height} -> "
                f"{result.width}x{result.height}"
            )
            return result

        return self._executor.submit(task)

    def shutdown(self, wait: bool = True) -> None:
        """Release the worker pool if this engine created it."""
        if self._owns_executor:
            self._executor.shutdown(wait=wait)
