"""
Error taxonomy for Open Retouch.

Every condition the editor reports to its caller is one of these classes.
Transform functions themselves only raise ValueError/TypeError for
malformed arguments.
"""


class EditorError(Exception):
    """Base class for all editor conditions."""


class PermissionDeniedError(EditorError):
    """A premium-gated operation was invoked without the premium capability."""

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"{operation} is a premium feature")


class CapacityExceededError(EditorError):
    """Accepting an upload group would push the batch past its limit."""

    def __init__(self, current: int, incoming: int, limit: int):
        self.current = current
        self.incoming = incoming
        self.limit = limit
        super().__init__(
            f"Upload limit of {limit} images reached: "
            f"{current} present, {incoming} incoming"
        )


class DecodeError(EditorError, OSError):
    """Bytes could not be decoded into a raster buffer."""


class EmptySelectionError(EditorError, ValueError):
    """A crop was requested with a zero-width or zero-height rectangle."""


class SessionBusyError(EditorError):
    """A mutating call arrived while another one is still pending."""


class NoImageLoadedError(EditorError):
    """The operation needs an image but the session is empty."""


class EmptyBatchError(EditorError):
    """Export was requested for a batch with no entries."""


class BatchChangedError(EditorError):
    """A batch entry was replaced or removed while it was being re-compressed."""
