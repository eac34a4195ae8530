"""Exception hierarchy for escape-time rendering."""


class EscapeTimeError(Exception):
    """Base class for all rendering errors."""


class ConfigurationError(EscapeTimeError, ValueError):
    """Raised when a render is configured with unusable parameters."""


class RenderError(EscapeTimeError, RuntimeError):
    """Raised when a render did not populate its image buffer."""


class ImageWriteError(EscapeTimeError, OSError):
    """Raised when an image buffer cannot be encoded or written."""
