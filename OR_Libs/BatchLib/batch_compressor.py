"""
Batch JPEG compressor for Open Retouch.

Accepts up to 20 JPEG uploads, re-encodes each at an adjustable quality and
packages the results into a single zip archive. Batch entries are
independent of each other and of any editor session.

Upload rules:
    - Only the accepted MIME types (JPEG) are taken; other files are
      silently left out and do not count toward the limit.
    - A group that would push the batch past ``max_files`` is rejected as a
      whole with CapacityExceededError; nothing from it is added.
    - Files larger than ``max_file_size_bytes`` are accepted with a warning
      (the limit is advisory).

Classes:
    BatchConfig: Limits and defaults for a batch
    UploadedFile: Raw upload (name, bytes, declared content type)
    BatchImageEntry: One compressed file with its size bookkeeping
    BatchCompressor: The batch itself

Example:
    >>> batch = BatchCompressor()
    >>> batch.add_files([UploadedFile.from_path(p) for p in photos])
    >>> batch.update_quality(0, 0.4)
    >>> Path("compressed_images.zip").write_bytes(batch.export_zip())
"""

import concurrent.futures
import io
import logging
import mimetypes
import threading
import zipfile
from dataclasses import asdict, dataclass, field, replace
from pathlib import Path
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Optional, Tuple

from OR_Libs.BatchLib.compression import compress, create_preview_image, validate_quality
from OR_Libs.constants import (
    BATCH_ACCEPTED_MIME_TYPES,
    BATCH_ARCHIVE_NAME,
    BATCH_DEFAULT_QUALITY,
    BATCH_MAX_FILE_SIZE_BYTES,
    BATCH_MAX_FILES,
    BATCH_OUTPUT_EXTENSION,
)
from OR_Libs.errors import BatchChangedError, CapacityExceededError, DecodeError, EmptyBatchError
from OR_Libs.ImageEditingLib.image_editing_ops import decode_image

logger = logging.getLogger(__name__)


@dataclass
class BatchConfig:
    """Configuration for a batch compressor.

    Attributes:
        max_files: Hard cap on accepted entries (default: 20)
        default_quality: Quality factor for new entries (default: 0.7)
        max_file_size_bytes: Advisory per-file size limit (default: 10MB)
        accepted_mime_types: MIME types taken into the batch (default: JPEG)
        archive_name: File name used by ``write_zip``
        max_workers: Threads compressing an upload group (None = CPU count)
    """
    max_files: int = BATCH_MAX_FILES
    default_quality: float = BATCH_DEFAULT_QUALITY
    max_file_size_bytes: int = BATCH_MAX_FILE_SIZE_BYTES
    accepted_mime_types: FrozenSet[str] = field(default_factory=lambda: BATCH_ACCEPTED_MIME_TYPES)
    archive_name: str = BATCH_ARCHIVE_NAME
    max_workers: Optional[int] = None

    def __post_init__(self):
        if self.max_files < 1:
            raise ValueError(f"max_files must be >= 1, got {self.max_files}")
        validate_quality(self.default_quality)
        self.accepted_mime_types = frozenset(t.lower() for t in self.accepted_mime_types)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        data = asdict(self)
        data["accepted_mime_types"] = sorted(self.accepted_mime_types)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BatchConfig":
        """Create from dictionary."""
        filtered = {k: v for k, v in data.items()
                   if k in cls.__dataclass_fields__}
        return cls(**filtered)


@dataclass(frozen=True)
class UploadedFile:
    """A file handed to the batch.

    Attributes:
        name: Original file name
        data: Raw file bytes
        content_type: Declared MIME type (guessed from the name when None)
    """
    name: str
    data: bytes = field(repr=False)
    content_type: Optional[str] = None

    @classmethod
    def from_path(cls, path: Path, content_type: Optional[str] = None) -> "UploadedFile":
        path = Path(path)
        return cls(name=path.name, data=path.read_bytes(), content_type=content_type)

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def mime_type(self) -> Optional[str]:
        if self.content_type:
            return self.content_type.lower()
        guessed, _ = mimetypes.guess_type(self.name)
        return guessed


@dataclass(frozen=True)
class BatchImageEntry:
    """One compressed batch file.

    Entries are immutable; a quality change produces a new entry so the
    compressed bytes and both sizes are always replaced together.
    """
    source_name: str
    display_name: str
    source_bytes: bytes = field(repr=False)
    compressed_bytes: bytes = field(repr=False)
    quality: float
    original_size: int
    compressed_size: int

    @property
    def savings_percent(self) -> float:
        if self.original_size == 0:
            return 0.0
        return 100.0 * (self.original_size - self.compressed_size) / self.original_size


def output_name(filename: str) -> str:
    """'holiday.jpeg' -> 'holiday.jpg'."""
    return f"{Path(filename).stem}{BATCH_OUTPUT_EXTENSION}"


def build_entry(upload: UploadedFile, quality: float) -> BatchImageEntry:
    """
    Decode an upload and compress it at ``quality``.

    Raises:
        DecodeError: If the upload is not a decodable image
    """
    compressed = compress(decode_image(upload.data), quality)
    return BatchImageEntry(
        source_name=upload.name,
        display_name=output_name(upload.name),
        source_bytes=upload.data,
        compressed_bytes=compressed,
        quality=float(quality),
        original_size=upload.size,
        compressed_size=len(compressed),
    )


def recompress_entry(entry: BatchImageEntry, quality: float) -> BatchImageEntry:
    """New entry for the same source at a different quality."""
    compressed = compress(decode_image(entry.source_bytes), quality)
    return replace(
        entry,
        compressed_bytes=compressed,
        quality=float(quality),
        compressed_size=len(compressed),
    )


class BatchCompressor:
    """
    Bounded collection of compressed JPEG entries.

    Args:
        config: Batch limits and defaults
        notifier: Receives user-visible messages (default: logging)
    """

    def __init__(
        self,
        config: Optional[BatchConfig] = None,
        notifier: Optional[Callable[[str], None]] = None,
    ):
        self.config = config or BatchConfig()
        self._notifier = notifier
        self._entries: List[BatchImageEntry] = []
        self._lock = threading.Lock()

    def _notify(self, message: str, level: int = logging.INFO) -> None:
        logger.log(level, message)
        if self._notifier is not None:
            self._notifier(message)

    # ---- read-only state ----
    @property
    def entries(self) -> Tuple[BatchImageEntry, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __getitem__(self, index: int) -> BatchImageEntry:
        return self._entries[index]

    @property
    def remaining_capacity(self) -> int:
        return self.config.max_files - len(self._entries)

    @property
    def total_original_size(self) -> int:
        return sum(entry.original_size for entry in self._entries)

    @property
    def total_compressed_size(self) -> int:
        return sum(entry.compressed_size for entry in self._entries)

    def is_accepted(self, upload: UploadedFile) -> bool:
        """Whether an upload's type is one the batch takes."""
        return upload.mime_type in self.config.accepted_mime_types

    # ---- mutation ----
    def add_files(self, uploads: Iterable[UploadedFile]) -> List[BatchImageEntry]:
        """
        Compress and add an upload group.

        Files of other types are excluded without error. Accepted files are
        compressed concurrently at the default quality and appended in
        upload order. Files that claim to be JPEG but do not decode are
        left out with a warning.

        Returns:
            The entries that were added

        Raises:
            CapacityExceededError: If the accepted files would exceed
                                   ``max_files``; the batch is unchanged
        """
        uploads = list(uploads)
        accepted = []
        for upload in uploads:
            if self.is_accepted(upload):
                accepted.append(upload)
            else:
                logger.warning(f"Skipping {upload.name}: unsupported type {upload.mime_type}")

        self._check_capacity(len(accepted))

        for upload in accepted:
            if upload.size > self.config.max_file_size_bytes:
                logger.warning(
                    f"{upload.name} is {upload.size} bytes, above the "
                    f"{self.config.max_file_size_bytes} byte guidance"
                )

        built = self._build_entries(accepted, self.config.default_quality)

        with self._lock:
            self._check_capacity(len(built))
            self._entries.extend(built)

        logger.info(f"Added {len(built)} of {len(uploads)} file(s) to batch ({len(self._entries)} total)")
        return built

    def _check_capacity(self, incoming: int) -> None:
        current = len(self._entries)
        if current + incoming > self.config.max_files:
            self._notify(
                f"Upload limit of {self.config.max_files} images reached.", logging.WARNING
            )
            raise CapacityExceededError(current, incoming, self.config.max_files)

    def _build_entries(self, uploads: List[UploadedFile], quality: float) -> List[BatchImageEntry]:
        if not uploads:
            return []

        results: List[Optional[BatchImageEntry]] = [None] * len(uploads)
        with concurrent.futures.ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
            futures: Dict[concurrent.futures.Future, int] = {
                executor.submit(build_entry, upload, quality): index
                for index, upload in enumerate(uploads)
            }
            for future in concurrent.futures.as_completed(futures):
                index = futures[future]
                try:
                    results[index] = future.result()
                except DecodeError as e:
                    logger.warning(f"Skipping {uploads[index].name}: {e}")

        return [entry for entry in results if entry is not None]

    def update_quality(self, index: int, quality: float) -> BatchImageEntry:
        """
        Re-compress one entry at a new quality.

        The entry is swapped for a new one carrying the new bytes and sizes;
        other entries are untouched.

        Raises:
            IndexError: If index is out of range
            ValueError: If quality is not in (0, 1]
            BatchChangedError: If the entry was removed or replaced meanwhile
        """
        validate_quality(quality)
        current = self._entries[index]
        updated = recompress_entry(current, quality)
        with self._lock:
            in_range = -len(self._entries) <= index < len(self._entries)
            if not in_range or self._entries[index] is not current:
                raise BatchChangedError(f"Batch entry {index} changed during re-compression")
            self._entries[index] = updated
        logger.debug(
            f"{updated.display_name}: quality {current.quality:g} -> {quality:g}, "
            f"{current.compressed_size} -> {updated.compressed_size} bytes"
        )
        return updated

    def remove(self, index: int) -> BatchImageEntry:
        """Remove and return one entry."""
        with self._lock:
            return self._entries.pop(index)

    def clear(self) -> None:
        with self._lock:
            self._entries = []

    # ---- output ----
    def preview(self, index: int) -> bytes:
        """PNG thumbnail of an entry's source image."""
        return create_preview_image(decode_image(self._entries[index].source_bytes))

    def archive_names(self) -> List[str]:
        """Names used inside the archive, de-duplicated in entry order."""
        names: List[str] = []
        seen = set()
        for entry in self._entries:
            name = entry.display_name
            stem = Path(name).stem
            counter = 1
            while name in seen:
                name = f"{stem}_{counter}{BATCH_OUTPUT_EXTENSION}"
                counter += 1
            seen.add(name)
            names.append(name)
        return names

    def export_zip(self) -> bytes:
        """
        Package every entry's compressed bytes into a zip archive.

        Raises:
            EmptyBatchError: If the batch has no entries
        """
        if not self._entries:
            self._notify("No images to download.", logging.WARNING)
            raise EmptyBatchError("No images to download")

        out = io.BytesIO()
        with zipfile.ZipFile(out, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            for name, entry in zip(self.archive_names(), self._entries):
                archive.writestr(name, entry.compressed_bytes)
        return out.getvalue()

    def write_zip(self, output_dir: Path) -> Path:
        """
        Write the archive as ``archive_name`` inside ``output_dir``.

        Raises:
            OSError: If the directory does not exist
            EmptyBatchError: If the batch has no entries
        """
        output_dir = Path(output_dir)
        if not output_dir.is_dir():
            raise OSError(f"Output directory does not exist: {output_dir}")

        archive_path = output_dir / self.config.archive_name
        archive_path.write_bytes(self.export_zip())
        logger.info(f"Exported {len(self._entries)} image(s) to {archive_path}")
        return archive_path
