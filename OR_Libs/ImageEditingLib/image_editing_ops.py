"""
Image decode/encode operations for Open Retouch.

This module moves pixels between files or bytes and RasterBuffers.

Functions:
    decode_image: Decode bytes, a path or a binary file object into a buffer
    fit_within: Scale a buffer down to fit a maximum working size
    encode_image: Encode a buffer to PNG/JPEG/... bytes
    export_filename: Deterministic download name for an export format
    save_buffer: Write an encoded buffer into a directory
"""

import io
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from PIL import Image, UnidentifiedImageError

from OR_Libs.constants import (
    DEFAULT_EXPORT_FORMAT,
    EXPORT_BASENAME,
    JPEG_QUALITY_MAX,
    JPEG_QUALITY_MIN,
)
from OR_Libs.errors import DecodeError
from OR_Libs.ImageEditingLib.geometric_transforms import resample_to
from OR_Libs.ImageEditingLib.raster_buffer import RasterBuffer

logger = logging.getLogger(__name__)

_FORMAT_EXTENSIONS = {
    "PNG": ".png",
    "JPEG": ".jpg",
    "WEBP": ".webp",
    "BMP": ".bmp",
    "TIFF": ".tiff",
}


def _normalize_format(save_format: str) -> str:
    # PIL uses "JPEG" not "JPG"
    fmt = str(save_format).strip().upper()
    return "JPEG" if fmt == "JPG" else fmt


def decode_image(source: Any) -> RasterBuffer:
    """
    Decode an image into an RGBA buffer.

    Args:
        source: Raw bytes, a filesystem path, or a binary file object

    Returns:
        RasterBuffer holding the decoded pixels

    Raises:
        DecodeError: If the source cannot be read or decoded
    """
    if isinstance(source, (bytes, bytearray, memoryview)):
        stream: Any = io.BytesIO(bytes(source))
    else:
        stream = source

    try:
        with Image.open(stream) as img:
            img.load()
            return RasterBuffer.from_image(img)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError, SyntaxError) as e:
        raise DecodeError(f"Failed to decode image: {str(e)}") from e


def fit_within(
    buffer: RasterBuffer,
    max_width: Optional[int],
    max_height: Optional[int],
) -> RasterBuffer:
    """
    Scale down (never up) so the buffer fits max_width x max_height.

    Width is fitted first, then height, preserving aspect ratio. A missing
    limit leaves that axis unconstrained.
    """
    width, height = float(buffer.width), float(buffer.height)
    if max_width and width > max_width:
        height = height * max_width / width
        width = float(max_width)
    if max_height and height > max_height:
        width = width * max_height / height
        height = float(max_height)

    size: Tuple[int, int] = (max(1, int(width)), max(1, int(height)))
    if size == buffer.size:
        return buffer
    return resample_to(buffer, size, Image.Resampling.BILINEAR)


def get_save_kwargs(save_format: str, quality: Optional[int] = None) -> Dict[str, Any]:
    """PIL Image.save() kwargs for a format, clamping JPEG/WEBP quality to 1-100."""
    fmt = _normalize_format(save_format)
    kwargs: Dict[str, Any] = {"format": fmt}
    if quality is not None and fmt in ("JPEG", "WEBP"):
        kwargs["quality"] = max(JPEG_QUALITY_MIN, min(JPEG_QUALITY_MAX, int(quality)))
    return kwargs


def encode_image(
    buffer: RasterBuffer,
    save_format: str = DEFAULT_EXPORT_FORMAT,
    quality: Optional[int] = None,
) -> bytes:
    """
    Encode a buffer.

    Args:
        buffer: Buffer to encode
        save_format: PIL format name (PNG, JPEG/JPG, WEBP, ...)
        quality: Encoder quality 1-100 for lossy formats

    Returns:
        Encoded bytes
    """
    kwargs = get_save_kwargs(save_format, quality)
    image = buffer.to_image()
    # JPEG has no alpha channel
    if kwargs["format"] == "JPEG":
        image = image.convert("RGB")

    out = io.BytesIO()
    image.save(out, **kwargs)
    return out.getvalue()


def export_filename(save_format: str = DEFAULT_EXPORT_FORMAT, basename: str = EXPORT_BASENAME) -> str:
    """Download name such as 'edited_image.png'."""
    fmt = _normalize_format(save_format)
    extension = _FORMAT_EXTENSIONS.get(fmt, f".{fmt.lower()}")
    return f"{basename}{extension}"


def save_buffer(
    buffer: RasterBuffer,
    output_dir: Path,
    save_format: str = DEFAULT_EXPORT_FORMAT,
    basename: str = EXPORT_BASENAME,
) -> Path:
    """
    Encode a buffer and write it into a directory.

    Returns:
        Path of the written file

    Raises:
        OSError: If the directory does not exist or the file cannot be written
    """
    output_dir = Path(output_dir)
    if not output_dir.exists():
        raise OSError(f"Output directory does not exist: {output_dir}")

    if not output_dir.is_dir():
        raise OSError(f"Output path is not a directory: {output_dir}")

    save_path = output_dir / export_filename(save_format, basename)
    save_path.write_bytes(encode_image(buffer, save_format))
    logger.info(f"Saved {buffer.width}x{buffer.height} image to {save_path}")
    return save_path
