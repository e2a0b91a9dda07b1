"""Pydantic models for the media importer."""

from collections.abc import Generator, Iterable
from datetime import datetime
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .errors import CopyFailure


class TreeNode(BaseModel):
    """A file or directory in the browsable selection tree."""

    name: str = Field(..., description="Display name (last path component)")
    absolute_path: str = Field(..., description="Absolute path on disk")
    is_directory: bool = Field(default=False, description="True for interior nodes")
    checked: bool = Field(default=False, description="Checkbox state")
    children: list["TreeNode"] = Field(default_factory=list, description="Ordered child nodes")

    @property
    def is_file(self) -> bool:
        """True for file leaves."""
        return not self.is_directory

    @property
    def file_count(self) -> int:
        """Number of file leaves in this subtree."""
        return sum(1 for node in self.iter_nodes() if node.is_file)

    @property
    def directory_count(self) -> int:
        """Number of directories below this node (the node itself excluded)."""
        return sum(1 for node in self.iter_nodes() if node.is_directory) - int(self.is_directory)

    def iter_nodes(self) -> Generator["TreeNode", None, None]:
        """Yield this node and all descendants, depth-first pre-order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def find(self, path: str) -> "TreeNode | None":
        """Return the node in this subtree whose absolute path is `path`."""
        for node in self.iter_nodes():
            if node.absolute_path == path:
                return node
        return None

    def __str__(self) -> str:
        kind = "dir" if self.is_directory else "file"
        mark = "x" if self.checked else " "
        return f"[{mark}] {self.name} ({kind})"


class MetadataEntry(BaseModel):
    """A single label/value row of a metadata record."""

    label: str = Field(..., description="Display label")
    value: str = Field(default="", description="Display value, may be empty")


class MetadataRecord(BaseModel):
    """Ordered label/value pairs describing one file, in display order."""

    path: str | None = Field(None, description="File the record describes")
    entries: list[MetadataEntry] = Field(default_factory=list, description="Rows in display order")

    def add(self, label: str, value: Any) -> None:
        """Append a row. `None` values are stored as empty strings."""
        self.entries.append(MetadataEntry(label=label, value="" if value is None else str(value)))

    def extend(self, pairs: Iterable[tuple[str, Any]]) -> None:
        """Append several rows."""
        for label, value in pairs:
            self.add(label, value)

    def with_entries(self, pairs: Iterable[tuple[str, Any]]) -> "MetadataRecord":
        """Return a new record holding this record's rows followed by `pairs`."""
        record = MetadataRecord(path=self.path, entries=list(self.entries))
        record.extend(pairs)
        return record

    def as_pairs(self) -> list[tuple[str, str]]:
        """Rows as (label, value) tuples."""
        return [(entry.label, entry.value) for entry in self.entries]

    def labels(self) -> list[str]:
        """Labels in display order."""
        return [entry.label for entry in self.entries]

    def get(self, label: str, default: str | None = None) -> str | None:
        """Value of the first row with `label`."""
        for entry in self.entries:
            if entry.label == label:
                return entry.value
        return default

    def __len__(self) -> int:
        return len(self.entries)


class ExifEntry(BaseModel):
    """A raw EXIF directory entry as read from the file."""

    tag_id: int = Field(..., ge=0, le=0xFFFF, description="EXIF tag identifier")
    type_code: int = Field(..., ge=0, le=0xFFFF, description="Declared TIFF field type")
    raw_bytes: bytes = Field(default=b"", description="Undecoded value bytes")
    byte_order: str = Field(default="<", description="struct byte order of raw_bytes")

    @field_validator("byte_order")
    @classmethod
    def validate_byte_order(cls, v: str) -> str:
        """Only Intel and Motorola orders exist in TIFF."""
        if v not in ("<", ">"):
            raise ValueError(f"Unsupported byte order: {v!r}")
        return v


class ScanResult(BaseModel):
    """Result of scanning a root directory into a tree."""

    root: TreeNode = Field(..., description="Root of the scanned tree")
    skipped_paths: list[str] = Field(
        default_factory=list, description="Subdirectories skipped because they could not be read"
    )
    scan_duration_seconds: float = Field(default=0.0, ge=0, description="Time taken to scan")
    scan_timestamp: datetime = Field(
        default_factory=datetime.now, description="When the scan was performed"
    )

    @property
    def file_count(self) -> int:
        """Number of supported files in the tree."""
        return self.root.file_count

    @property
    def directory_count(self) -> int:
        """Number of directories below the root."""
        return self.root.directory_count

    def __str__(self) -> str:
        return (
            f"Scan of {self.root.absolute_path}: {self.file_count} media files in "
            f"{self.directory_count} folders, {len(self.skipped_paths)} skipped"
        )


class ImportResult(BaseModel):
    """Outcome of copying a selection to a destination folder."""

    destination: Path = Field(..., description="Destination directory")
    copied: list[str] = Field(default_factory=list, description="Sources copied, in order")
    failed_path: str | None = Field(None, description="Source that stopped the batch")
    error: str | None = Field(None, description="Message of the error that stopped the batch")

    @property
    def success(self) -> bool:
        """True when every selected file was copied."""
        return self.failed_path is None

    def raise_for_failure(self) -> None:
        """Raise CopyFailure if the batch stopped early."""
        if not self.success:
            raise CopyFailure(self.failed_path or "", self.error or "unknown error")

    def __str__(self) -> str:
        if self.success:
            return f"Imported {len(self.copied)} files to {self.destination}"
        return f"Error importing files: {self.error} ({len(self.copied)} copied before failure)"


class PreviewResult(BaseModel):
    """A finished preview, handed from the background worker to the display owner."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    token: int = Field(..., ge=0, description="Selection sequence number")
    path: str = Field(..., description="File the preview was generated for")
    image: Any = Field(None, description="PIL image, or None when no preview is available")
    errors: list[tuple[str, str]] = Field(
        default_factory=list, description="Preview error rows for the metadata record"
    )


class ApplicationConfig(BaseModel):
    """Configuration settings for the application."""

    image_extensions: list[str] = Field(
        default=[".jpg", ".jpeg", ".png", ".gif", ".bmp"],
        description="File extensions treated as images",
    )
    video_extensions: list[str] = Field(
        default=[".mp4", ".mov", ".avi", ".wmv"],
        description="File extensions treated as videos",
    )
    ffmpeg_path: str = Field(default="ffmpeg", description="ffmpeg executable used for frames")
    frame_capture_seconds: float = Field(
        default=0.0, ge=0, description="Timestamp of the frame extracted for video previews"
    )
    frame_timeout_seconds: float = Field(
        default=30.0, gt=0, description="Maximum time allowed for frame extraction"
    )
    datetime_format: str = Field(
        default="%Y-%m-%d %H:%M:%S", description="Format for created/modified timestamps"
    )
    preview_max_size: tuple[int, int] = Field(
        default=(800, 600), description="Largest preview size in pixels (width, height)"
    )
    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator("image_extensions", "video_extensions")
    @classmethod
    def validate_extensions(cls, v: list[str]) -> list[str]:
        """Ensure all extensions start with a dot and are lowercase."""
        return [ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in v]

    @property
    def supported_extensions(self) -> set[str]:
        """Every extension shown in the tree."""
        return set(self.image_extensions) | set(self.video_extensions)

    def media_kind(self, path: str | Path) -> str:
        """Classify a path as "image", "video" or "other" by extension."""
        extension = Path(path).suffix.lower()
        if extension in self.image_extensions:
            return "image"
        if extension in self.video_extensions:
            return "video"
        return "other"

    def is_supported(self, path: str | Path) -> bool:
        """True if the path has an allowlisted extension."""
        return Path(path).suffix.lower() in self.supported_extensions
