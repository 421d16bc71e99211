"""
Editor session state for Open Retouch.

An EditorSession owns the originally loaded buffer (never modified after
load), the working buffer every edit replaces, the ordered log of applied
operation labels, and at most one crop or brush sub-session.

Concurrency model:
    Pixel transforms run synchronously on the caller's thread. Image decode
    (``load_image_async``) and the simulated enhancements run as background
    tasks and return Futures. A single busy guard serializes every call that
    replaces the working buffer: while one is pending, any other mutating
    call raises SessionBusyError instead of waiting. The Future returned by
    an asynchronous call resolves only after its result has been committed
    to the session.

User-visible conditions are reported synchronously through ``notifier``
(a callable taking a message; logging by default) and surfaced to the
caller as the matching exception from OR_Libs.errors.

Example:
    >>> session = EditorSession(EditorConfig(premium=True, time_unit_seconds=0))
    >>> session.load_image(Path("photo.png").read_bytes())
    >>> session.apply_filter("grayscale")
    >>> session.rotate(90)
    >>> session.upscale().result()
    >>> session.operation_log
    ('Grayscale', 'Rotate Right', 'AI Upscale')
"""

import concurrent.futures
import logging
import threading
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Iterator, List, Optional, Tuple

from OR_Libs.constants import (
    FILTER_LABELS,
    LABEL_ADJUSTMENTS,
    LABEL_AUTO_ENHANCE,
    LABEL_BRUSH,
    LABEL_CROP,
    LABEL_FLIP_HORIZONTAL,
    LABEL_ROTATE_LEFT,
    LABEL_ROTATE_RIGHT,
    LABEL_TEXT,
    LABEL_UPSCALE,
)
from OR_Libs.errors import (
    DecodeError,
    NoImageLoadedError,
    PermissionDeniedError,
    SessionBusyError,
)
from OR_Libs.ImageEditingLib.color_filters import apply_adjustments, apply_filter
from OR_Libs.ImageEditingLib.enhancement import EnhancementEngine
from OR_Libs.ImageEditingLib.geometric_transforms import flip_horizontal, resize, rotate
from OR_Libs.ImageEditingLib.image_editing_ops import (
    decode_image,
    encode_image,
    export_filename,
    fit_within,
    save_buffer,
)
from OR_Libs.ImageEditingLib.image_models import (
    Adjustments,
    BrushSettings,
    CropRect,
    TextSettings,
)
from OR_Libs.ImageEditingLib.paint_tools import draw_text
from OR_Libs.ImageEditingLib.raster_buffer import RasterBuffer
from OR_Libs.SessionLib.brush_session import BrushSession
from OR_Libs.SessionLib.crop_session import CropSession, CropState
from OR_Libs.SessionLib.editor_config import EditorConfig
from OR_Libs.SessionLib.pointer_events import PointerEvent

logger = logging.getLogger(__name__)

HistoryRecorder = Callable[[str, List[str]], None]
Notifier = Callable[[str], None]


def filter_label(filter_kind: str) -> str:
    """Operation-log label for a named filter."""
    kind = str(filter_kind).strip().lower()
    return FILTER_LABELS.get(kind, f"{kind} filter")


def rotation_label(degrees: float) -> str:
    """Operation-log label for a rotation."""
    normalized = degrees % 360
    if normalized == 90:
        return LABEL_ROTATE_RIGHT
    if normalized == 270:
        return LABEL_ROTATE_LEFT
    return f"Rotate {degrees:g}°"


def resize_label(percentage: float) -> str:
    return f"Resize to {percentage:g}%"


class EditorSession:
    """
    Single-image editing session.

    Args:
        config: Session configuration (premium flag, latency, export settings)
        history_recorder: Called with (image name, operation labels) after a
                          download; failures are logged and never propagated
        notifier: Receives user-visible messages (default: logging)
        enhancement_engine: Engine for the simulated enhancements; built from
                            ``config`` when omitted
        sleep: Sleep function for the default enhancement engine
    """

    def __init__(
        self,
        config: Optional[EditorConfig] = None,
        history_recorder: Optional[HistoryRecorder] = None,
        notifier: Optional[Notifier] = None,
        enhancement_engine: Optional[EnhancementEngine] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = config or EditorConfig()
        self._history_recorder = history_recorder
        self._notifier = notifier

        self._original: Optional[RasterBuffer] = None
        self._working: Optional[RasterBuffer] = None
        self._display_name: Optional[str] = None
        self._operations: List[str] = []
        self._crop: Optional[CropSession] = None
        self._brush: Optional[BrushSession] = None

        # Held for the whole duration of any working-buffer mutation
        self._busy = threading.Lock()

        self._owns_engine = enhancement_engine is None
        self._engine = enhancement_engine or EnhancementEngine(
            time_unit_seconds=self.config.time_unit_seconds,
            sleep=sleep,
            auto_enhance_units=self.config.auto_enhance_units,
            upscale_units=self.config.upscale_units,
            max_dimension=self.config.upscale_max_dimension,
        )
        self._loader = concurrent.futures.ThreadPoolExecutor(
            max_workers=self.config.max_workers, thread_name_prefix="decode"
        )

    # ---- read-only state ----
    @property
    def premium(self) -> bool:
        return bool(self.config.premium)

    @property
    def has_image(self) -> bool:
        return self._working is not None

    @property
    def original(self) -> Optional[RasterBuffer]:
        """Copy of the buffer as it was loaded."""
        return self._original.copy() if self._original is not None else None

    @property
    def working(self) -> Optional[RasterBuffer]:
        """Copy of the current working buffer."""
        return self._working.copy() if self._working is not None else None

    @property
    def size(self) -> Optional[Tuple[int, int]]:
        return self._working.size if self._working is not None else None

    @property
    def display_name(self) -> Optional[str]:
        return self._display_name

    @property
    def operation_log(self) -> Tuple[str, ...]:
        return tuple(self._operations)

    @property
    def is_busy(self) -> bool:
        return self._busy.locked()

    @property
    def is_cropping(self) -> bool:
        return self._crop is not None and self._crop.is_active

    @property
    def crop_session(self) -> Optional[CropSession]:
        return self._crop

    @property
    def crop_state(self) -> CropState:
        return self._crop.state if self._crop is not None else CropState.IDLE

    @property
    def crop_rect(self) -> CropRect:
        return self._crop.rect if self._crop is not None else CropRect()

    @property
    def is_brushing(self) -> bool:
        return self._brush is not None and self._brush.is_active

    # ---- internal helpers ----
    def _notify(self, message: str, level: int = logging.INFO) -> None:
        logger.log(level, message)
        if self._notifier is not None:
            self._notifier(message)

    def _require_image(self) -> RasterBuffer:
        if self._working is None:
            raise NoImageLoadedError("No image loaded")
        return self._working

    def _require_premium(self, operation: str) -> None:
        if not self.premium:
            self._notify(f"{operation} is a premium feature!", logging.WARNING)
            raise PermissionDeniedError(operation)

    def _acquire(self, operation: str) -> None:
        if not self._busy.acquire(blocking=False):
            self._notify(f"Cannot run {operation} while another edit is in progress", logging.WARNING)
            raise SessionBusyError(f"{operation} rejected: session is busy")

    @contextmanager
    def _mutation(self, operation: str) -> Iterator[RasterBuffer]:
        self._acquire(operation)
        try:
            yield self._require_image()
        finally:
            self._busy.release()

    def _commit(self, buffer: RasterBuffer, label: Optional[str]) -> None:
        previous = self._working
        self._working = buffer
        if previous is not None and previous.size != buffer.size and self.is_cropping:
            # Selection coordinates no longer match the buffer
            self._crop.cancel()
        if label:
            self._operations.append(label)
        logger.debug(f"Working buffer is now {buffer.width}x{buffer.height} ({label})")

    def _end_subsessions(self) -> None:
        if self._crop is not None:
            self._crop.cancel()
        if self._brush is not None:
            self._brush.cancel()
            self._brush = None

    # ---- image lifecycle ----
    def load_image(self, source: Any, display_name: Optional[str] = None) -> RasterBuffer:
        """
        Decode an image and make it the session's original and working buffer.

        Clears the operation log and any crop or brush sub-session. On a
        decode failure the session is left exactly as it was.

        Args:
            source: Raw bytes, a path, or a binary file object
            display_name: Name used in notices (defaults to the path's name)

        Returns:
            Copy of the loaded buffer

        Raises:
            DecodeError: If the source cannot be decoded
            SessionBusyError: If an edit is in progress
        """
        self._acquire("load image")
        try:
            try:
                buffer = decode_image(source)
            except DecodeError as e:
                self._notify(f"Could not load image: {e}", logging.WARNING)
                raise

            buffer = fit_within(buffer, self.config.max_working_width, self.config.max_working_height)
            self._end_subsessions()
            self._original = buffer
            self._working = buffer.copy()
            self._operations = []
            if display_name is None and isinstance(source, (str, Path)):
                display_name = Path(source).name
            self._display_name = display_name
        finally:
            self._busy.release()

        logger.info(f"Loaded image {display_name or ''} ({buffer.width}x{buffer.height})")
        return buffer.copy()

    def load_image_async(
        self, source: Any, display_name: Optional[str] = None
    ) -> "concurrent.futures.Future[RasterBuffer]":
        """Decode and load on a background thread; see ``load_image``."""
        return self._loader.submit(self.load_image, source, display_name)

    def remove_image(self) -> None:
        """Drop both buffers, the operation log and any sub-session."""
        self._acquire("remove image")
        try:
            self._end_subsessions()
            self._original = None
            self._working = None
            self._display_name = None
            self._operations = []
        finally:
            self._busy.release()
        logger.info("Image removed from session")

    def reset(self) -> None:
        """Restore the working buffer from the original and leave crop mode."""
        with self._mutation("reset"):
            self._end_subsessions()
            self._working = self._original.copy()
        logger.debug("Working buffer reset to original")

    # ---- color ----
    def apply_filter(self, filter_kind: str) -> None:
        """Apply a named color filter (grayscale, sepia, warm, ...)."""
        with self._mutation(filter_kind) as buffer:
            self._commit(apply_filter(buffer, filter_kind), filter_label(filter_kind))

    def apply_adjustments(self, adjustments: Adjustments) -> None:
        """Apply manual brightness/contrast/saturation/exposure in one pass."""
        with self._mutation(LABEL_ADJUSTMENTS) as buffer:
            self._commit(apply_adjustments(buffer, adjustments), LABEL_ADJUSTMENTS)

    # ---- geometry ----
    def rotate(self, degrees: float = 90) -> None:
        """Rotate clockwise; the buffer grows to the rotated bounding box."""
        with self._mutation("rotate") as buffer:
            self._commit(rotate(buffer, degrees), rotation_label(degrees))

    def flip_horizontal(self) -> None:
        with self._mutation(LABEL_FLIP_HORIZONTAL) as buffer:
            self._commit(flip_horizontal(buffer), LABEL_FLIP_HORIZONTAL)

    def resize(self, percentage: float) -> None:
        """
        Resize to a percentage of the originally loaded image.

        Every call starts from the original, so resize(50) followed by
        resize(80) equals resize(80) alone. Edits made since load are
        replaced by the resized original.
        """
        with self._mutation("resize"):
            resized = resize(self._original, percentage)
            self._commit(resized, resize_label(percentage))
        self._notify(
            f"Image resized to {percentage:g}% of original size "
            f"({resized.width}x{resized.height}px)"
        )

    # ---- crop ----
    def start_crop(self) -> bool:
        """Enter crop mode. Returns False (no-op) when already cropping."""
        buffer = self._require_image()
        if self.is_cropping:
            return False
        if self._brush is not None:
            self._brush.cancel()
            self._brush = None
        crop_session = CropSession(buffer.width, buffer.height)
        crop_session.add_cleanup(lambda: self._release_crop(crop_session))
        self._crop = crop_session
        crop_session.begin()
        return True

    def _release_crop(self, crop_session: CropSession) -> None:
        if self._crop is crop_session:
            self._crop = None

    def crop_pointer(self, event: PointerEvent) -> CropRect:
        """Feed a pointer event to the crop sub-session; returns the live rect."""
        if self._crop is None:
            return CropRect()
        self._crop.handle(event)
        return self._crop.rect

    def crop_overlay(self) -> Any:
        """Preview of the working buffer with the live crop overlay (PIL Image)."""
        buffer = self._require_image()
        if self._crop is None:
            return buffer.to_image()
        return self._crop.render_overlay(buffer)

    def apply_crop(self) -> bool:
        """
        Commit the selected crop rect.

        Returns:
            True when the buffer was cropped; False (no-op) without a
            committable selection
        """
        if self._crop is None or not self._crop.can_commit:
            logger.warning("Crop apply ignored: no non-empty selection")
            return False

        with self._mutation(LABEL_CROP) as buffer:
            cropped = self._crop.commit(buffer)
            self._commit(cropped, LABEL_CROP)
        self._notify("Image cropped successfully!")
        return True

    def cancel_crop(self) -> bool:
        """Discard the selection and leave crop mode without touching the buffer."""
        if self._crop is None:
            return False
        return self._crop.cancel()

    # ---- simulated enhancements ----
    def auto_enhance(self) -> "concurrent.futures.Future[RasterBuffer]":
        """
        Schedule the simulated auto-enhance.

        Returns:
            Future resolving to the enhanced buffer once committed

        Raises:
            SessionBusyError: If another edit is pending
        """
        return self._run_enhancement(LABEL_AUTO_ENHANCE, self._engine.auto_enhance)

    def upscale(self) -> "concurrent.futures.Future[RasterBuffer]":
        """
        Schedule the simulated upscale (premium).

        Raises:
            PermissionDeniedError: Immediately, without premium; nothing changes
            SessionBusyError: If another edit is pending
        """
        self._require_premium(LABEL_UPSCALE)
        return self._run_enhancement(LABEL_UPSCALE, self._engine.upscale)

    def _run_enhancement(
        self,
        label: str,
        start: Callable[[RasterBuffer], "concurrent.futures.Future[RasterBuffer]"],
    ) -> "concurrent.futures.Future[RasterBuffer]":
        self._acquire(label)
        try:
            pending = start(self._require_image())
        except BaseException:
            self._busy.release()
            raise

        self._notify(f"{label} in progress...")
        outcome: "concurrent.futures.Future[RasterBuffer]" = concurrent.futures.Future()

        def finish(task: "concurrent.futures.Future[RasterBuffer]") -> None:
            try:
                result = task.result()
            except BaseException as e:
                self._busy.release()
                self._notify(f"Error during {label}: {e}", logging.ERROR)
                outcome.set_exception(e)
                return
            self._commit(result, label)
            self._busy.release()
            self._notify(f"{label} completed!")
            outcome.set_result(result.copy())

        pending.add_done_callback(finish)
        return outcome

    # ---- paint tools ----
    def start_brush(self, settings: Optional[BrushSettings] = None) -> BrushSession:
        """
        Activate the freehand brush (premium).

        Raises:
            PermissionDeniedError: Without premium
        """
        self._require_premium(LABEL_BRUSH)
        self._require_image()
        if self.is_cropping:
            self.cancel_crop()
        if self._brush is not None:
            self._brush.cancel()
        self._brush = BrushSession(settings or BrushSettings())
        return self._brush

    def brush_pointer(self, event: PointerEvent) -> None:
        if self._brush is not None:
            self._brush.handle(event)

    def finish_brush(self) -> bool:
        """Paint the collected strokes. False when nothing was drawn."""
        if self._brush is None:
            return False
        with self._mutation(LABEL_BRUSH) as buffer:
            painted = self._brush.finish(buffer)
            self._brush = None
            if painted is None:
                return False
            self._commit(painted, LABEL_BRUSH)
        self._notify("Brush tool deactivated.")
        return True

    def cancel_brush(self) -> None:
        if self._brush is not None:
            self._brush.cancel()
            self._brush = None

    def add_text(self, settings: TextSettings) -> bool:
        """
        Draw a text overlay (premium). Empty text is a no-op returning False.

        Raises:
            PermissionDeniedError: Without premium
        """
        self._require_premium(LABEL_TEXT)
        if not settings.text:
            return False
        with self._mutation(LABEL_TEXT) as buffer:
            self._commit(draw_text(buffer, settings), LABEL_TEXT)
        self._notify("Text added to your image!")
        return True

    # ---- export ----
    @property
    def export_name(self) -> str:
        return export_filename(self.config.export_format, self.config.export_basename)

    def export_image(self) -> bytes:
        """Encode the working buffer in the configured (lossless) format."""
        return encode_image(self._require_image(), self.config.export_format)

    def download(self, output_dir: Path) -> Path:
        """
        Write the working buffer as e.g. ``edited_image.png`` and report the
        operation log to the history recorder.

        Returns:
            Path of the written file
        """
        buffer = self._require_image()
        path = save_buffer(
            buffer, Path(output_dir), self.config.export_format, self.config.export_basename
        )
        self._emit_history(path.name)
        return path

    def _emit_history(self, image_name: str) -> None:
        if self._history_recorder is None:
            return
        try:
            self._history_recorder(image_name, list(self._operations))
        except Exception:
            logger.exception(f"History recorder failed for {image_name}")

    def close(self) -> None:
        """Stop background workers."""
        self._end_subsessions()
        self._loader.shutdown(wait=True)
        if self._owns_engine:
            self._engine.shutdown(wait=True)

    def __enter__(self) -> "EditorSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
