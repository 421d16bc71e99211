"""
Constants and configuration values for Open Retouch.

This module centralizes all constant values, magic numbers, and
configuration settings used throughout the editor.
"""

# Pixel layout
CHANNELS = 4
CHANNEL_MIN = 0
CHANNEL_MAX = 255
NEUTRAL_BACKGROUND = (255, 255, 255, 255)
TRANSPARENT = (0, 0, 0, 0)

# Filter kinds
FILTER_GRAYSCALE = "grayscale"
FILTER_BRIGHTEN = "brighten"
FILTER_DARKEN = "darken"
FILTER_CONTRAST_MORE = "contrast-more"
FILTER_CONTRAST_LESS = "contrast-less"
FILTER_SEPIA = "sepia"
FILTER_VINTAGE = "vintage"
FILTER_COOL = "cool"
FILTER_WARM = "warm"

BASIC_FILTERS = (
    FILTER_GRAYSCALE,
    FILTER_BRIGHTEN,
    FILTER_DARKEN,
    FILTER_CONTRAST_MORE,
    FILTER_CONTRAST_LESS,
)
TONE_FILTERS = (FILTER_SEPIA, FILTER_VINTAGE, FILTER_COOL, FILTER_WARM)
SUPPORTED_FILTERS = BASIC_FILTERS + TONE_FILTERS

# Filter parameters
BRIGHTNESS_STEP = 20
CONTRAST_STEP = 20
SEPIA_MATRIX = (
    (0.393, 0.769, 0.189),
    (0.349, 0.686, 0.168),
    (0.272, 0.534, 0.131),
)
# Additive (r, g, b) offsets for the tone filters
TONE_OFFSETS = {
    FILTER_VINTAGE: (30, 20, -10),
    FILTER_COOL: (-10, 10, 20),
    FILTER_WARM: (20, 10, -10),
}
LUMA_WEIGHTS = (0.299, 0.587, 0.114)

# Manual adjustments
ADJUSTMENT_MIN = -100
ADJUSTMENT_MAX = 100

# Simulated enhancement
AUTO_ENHANCE_BRIGHTNESS = 25
AUTO_ENHANCE_CONTRAST = 30
AUTO_ENHANCE_SATURATION = 1.4
AUTO_ENHANCE_DELAY_UNITS = 2
UPSCALE_FACTOR = 2.0
UPSCALE_MAX_DIMENSION = 2000
UPSCALE_CONTRAST_FACTOR = 1.2
UPSCALE_DELAY_UNITS = 3
DEFAULT_TIME_UNIT_SECONDS = 1.0

# Geometry
DEFAULT_ROTATION_DEGREES = 90
RESIZE_PERCENTAGES = (20, 30, 40, 50, 60, 70, 80, 90, 100)

# Crop overlay styling
CROP_OUTLINE_COLOR = (255, 0, 0, 255)
CROP_OUTLINE_WIDTH = 3
CROP_DASH_PATTERN = (5, 5)
CROP_MASK_COLOR = (0, 0, 0, 77)  # 30% black

# Paint tool defaults
DEFAULT_BRUSH_COLOR = "#ff0000"
DEFAULT_BRUSH_SIZE = 5
DEFAULT_BRUSH_OPACITY = 1.0
DEFAULT_TEXT_SIZE = 48
DEFAULT_TEXT_COLOR = "#ff0000"

# Operation labels recorded in the session log
LABEL_GRAYSCALE = "Grayscale"
LABEL_BRIGHTEN = "Brighten"
LABEL_DARKEN = "Darken"
LABEL_CONTRAST_MORE = "More Contrast"
LABEL_CONTRAST_LESS = "Less Contrast"
LABEL_ROTATE_RIGHT = "Rotate Right"
LABEL_ROTATE_LEFT = "Rotate Left"
LABEL_FLIP_HORIZONTAL = "Flip Horizontal"
LABEL_CROP = "Crop"
LABEL_ADJUSTMENTS = "Manual Adjustments"
LABEL_AUTO_ENHANCE = "AI Auto-Enhance"
LABEL_UPSCALE = "AI Upscale"
LABEL_BRUSH = "Brush Tool"
LABEL_TEXT = "Text Tool"

FILTER_LABELS = {
    FILTER_GRAYSCALE: LABEL_GRAYSCALE,
    FILTER_BRIGHTEN: LABEL_BRIGHTEN,
    FILTER_DARKEN: LABEL_DARKEN,
    FILTER_CONTRAST_MORE: LABEL_CONTRAST_MORE,
    FILTER_CONTRAST_LESS: LABEL_CONTRAST_LESS,
}

# Working buffer fit on load (None = keep decoded size)
DEFAULT_MAX_WORKING_WIDTH = None
DEFAULT_MAX_WORKING_HEIGHT = None

# Single image export
EXPORT_BASENAME = "edited_image"
DEFAULT_EXPORT_FORMAT = "PNG"

# Batch compression
BATCH_MAX_FILES = 20
BATCH_DEFAULT_QUALITY = 0.7
BATCH_QUALITY_OPTIONS = (0.9, 0.8, 0.7, 0.6, 0.4, 0.2)
BATCH_MAX_FILE_SIZE_BYTES = 10 * 1024 * 1024
BATCH_ACCEPTED_MIME_TYPES = frozenset({"image/jpeg"})
BATCH_OUTPUT_EXTENSION = ".jpg"
BATCH_ARCHIVE_NAME = "compressed_images.zip"
PREVIEW_MAX_WIDTH = 150
JPEG_QUALITY_MIN = 1
JPEG_QUALITY_MAX = 100

# Supported file formats for single image loading
SUPPORTED_STANDARD_IMAGES = {".png", ".jpg", ".jpeg", ".bmp", ".gif", ".tiff", ".webp"}
