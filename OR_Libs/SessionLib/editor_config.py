"""
Editor session configuration for Open Retouch.

Classes:
    EditorConfig: Capability flag, simulated latency and export settings
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from OR_Libs.constants import (
    AUTO_ENHANCE_DELAY_UNITS,
    DEFAULT_EXPORT_FORMAT,
    DEFAULT_MAX_WORKING_HEIGHT,
    DEFAULT_MAX_WORKING_WIDTH,
    DEFAULT_TIME_UNIT_SECONDS,
    EXPORT_BASENAME,
    UPSCALE_DELAY_UNITS,
    UPSCALE_MAX_DIMENSION,
)


@dataclass
class EditorConfig:
    """Configuration for an editor session.

    Attributes:
        premium: Premium capability; gates upscale, brush and text tools
        time_unit_seconds: Length of one simulated-latency unit (0 = instant)
        auto_enhance_units: Latency of auto-enhance in time units (default: 2)
        upscale_units: Latency of upscale in time units (default: 3)
        upscale_max_dimension: Per-side cap for upscaling (default: 2000)
        max_working_width: Fit freshly loaded images to this width (None = off)
        max_working_height: Fit freshly loaded images to this height (None = off)
        export_format: Single image export format (default: PNG)
        export_basename: Single image export file stem (default: edited_image)
        max_workers: Worker threads for image decode (default: 1)
    """
    premium: bool = False
    time_unit_seconds: float = DEFAULT_TIME_UNIT_SECONDS
    auto_enhance_units: float = AUTO_ENHANCE_DELAY_UNITS
    upscale_units: float = UPSCALE_DELAY_UNITS
    upscale_max_dimension: int = UPSCALE_MAX_DIMENSION
    max_working_width: Optional[int] = DEFAULT_MAX_WORKING_WIDTH
    max_working_height: Optional[int] = DEFAULT_MAX_WORKING_HEIGHT
    export_format: str = DEFAULT_EXPORT_FORMAT
    export_basename: str = EXPORT_BASENAME
    max_workers: int = 1

    def __post_init__(self):
        if self.time_unit_seconds < 0:
            raise ValueError(f"time_unit_seconds must be >= 0, got {self.time_unit_seconds}")
        if self.upscale_max_dimension < 1:
            raise ValueError(f"upscale_max_dimension must be >= 1, got {self.upscale_max_dimension}")
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EditorConfig":
        """Create from dictionary."""
        filtered = {k: v for k, v in data.items()
                   if k in cls.__dataclass_fields__}
        return cls(**filtered)
