"""Core functionality for media importer."""

from .errors import (
    AccessDeniedError,
    CopyFailure,
    DecodeSkip,
    EmptySelectionError,
    MediaImporterError,
    MetadataIOError,
    ProbeFailure,
)
from .exif import decode_entry, read_exif_entries, tag_label
from .filesystem import FileSystem
from .importer import ImportExecutor
from .metadata import MetadataDispatcher
from .models import (
    ApplicationConfig,
    ExifEntry,
    ImportResult,
    MetadataEntry,
    MetadataRecord,
    PreviewResult,
    ScanResult,
    TreeNode,
)
from .preview import FfmpegFrameExtractor, FrameExtractor, PreviewGenerator
from .probe import MediaInspector, MediaProbe, PyMediaInfoInspector, StreamKind
from .session import ImportSession, PreviewWorker
from .tree import TreeBuilder, collect_selection, set_checked

__all__ = [
    "AccessDeniedError",
    "ApplicationConfig",
    "CopyFailure",
    "DecodeSkip",
    "EmptySelectionError",
    "ExifEntry",
    "FfmpegFrameExtractor",
    "FileSystem",
    "FrameExtractor",
    "ImportExecutor",
    "ImportResult",
    "ImportSession",
    "MediaImporterError",
    "MediaInspector",
    "MediaProbe",
    "MetadataDispatcher",
    "MetadataEntry",
    "MetadataIOError",
    "MetadataRecord",
    "PreviewGenerator",
    "PreviewResult",
    "PreviewWorker",
    "ProbeFailure",
    "PyMediaInfoInspector",
    "ScanResult",
    "StreamKind",
    "TreeBuilder",
    "TreeNode",
    "collect_selection",
    "decode_entry",
    "read_exif_entries",
    "set_checked",
    "tag_label",
]
