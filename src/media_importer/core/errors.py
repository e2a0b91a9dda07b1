"""Exception types raised by the media importer core."""


class MediaImporterError(Exception):
    """Base class for all media importer errors."""


class AccessDeniedError(MediaImporterError, PermissionError):
    """Raised when the root of a scan cannot be read."""


class MetadataIOError(MediaImporterError, OSError):
    """Raised when the basic attributes of a file cannot be read."""


class ProbeFailure(MediaImporterError):
    """Raised when the media inspector cannot open or read a file."""


class DecodeSkip(MediaImporterError):
    """Signals that a single EXIF entry is malformed and should be dropped."""


class EmptySelectionError(MediaImporterError, ValueError):
    """Raised when an import is requested with nothing selected."""


class CopyFailure(MediaImporterError):
    """Raised when a file in an import batch could not be copied."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Error importing {path}: {reason}")
