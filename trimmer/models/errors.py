class TrimmerError(Exception):
    """Base class for every error raised by the trimmer package."""


class InvalidDimensions(TrimmerError, ValueError):
    """Width/height are non-positive or don't match the buffer length."""


class CapabilityUnavailable(TrimmerError):
    """The host backend cannot rasterize off-screen."""


class RasterizationFailed(TrimmerError, RuntimeError):
    """The rendering backend failed while producing pixels."""


class EmptyTrimError(TrimmerError, ValueError):
    """Refusing to apply a zero-area trim (no opaque pixel was found)."""
