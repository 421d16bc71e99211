"""
BatchLib - Batch JPEG compression

This module handles quality compression of uploaded JPEG files and
their export as a single zip archive.
"""

from OR_Libs.BatchLib.compression import (
    compress,
    create_preview_image,
    format_size_kb,
    jpeg_quality,
)
from OR_Libs.BatchLib.batch_compressor import (
    BatchCompressor,
    BatchConfig,
    BatchImageEntry,
    UploadedFile,
)

__all__ = [
    "compress",
    "create_preview_image",
    "format_size_kb",
    "jpeg_quality",
    "BatchCompressor",
    "BatchConfig",
    "BatchImageEntry",
    "UploadedFile",
]
