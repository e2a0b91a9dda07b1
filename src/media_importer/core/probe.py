"""Video container and stream facts via MediaInfo."""

import logging
import re
from enum import Enum
from pathlib import Path
from typing import Protocol

from pymediainfo import MediaInfo

from .errors import ProbeFailure
from .models import MetadataRecord

logger = logging.getLogger(__name__)


class StreamKind(str, Enum):
    """MediaInfo stream kinds the probe queries."""

    GENERAL = "General"
    VIDEO = "Video"


class MediaInspector(Protocol):
    """Media introspection collaborator."""

    def open(self, path: str | Path) -> bool:
        """Open a file. Returns False if the file cannot be parsed."""
        ...

    def get(self, stream_kind: StreamKind, index: int, field: str) -> str:
        """Return a field of the `index`-th stream of `stream_kind`, or ""."""
        ...

    def inform(self) -> str:
        """Return a full text report of the open file."""
        ...

    def close(self) -> None:
        """Release the open file."""
        ...


_FIELD_PATTERN = re.compile(r"^(?P<name>[A-Za-z_]+)(?:/String(?P<variant>\d*))?$")
_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


class PyMediaInfoInspector:
    """MediaInspector backed by pymediainfo."""

    def __init__(self, library_file: str | None = None):
        """
        Initialize the inspector.

        Args:
            library_file: Explicit path to the MediaInfo shared library
        """
        self.library_file = library_file
        self._path: Path | None = None
        self._media_info: MediaInfo | None = None

    def open(self, path: str | Path) -> bool:
        self.close()
        try:
            self._media_info = MediaInfo.parse(path, library_file=self.library_file, full=True)
        except (OSError, RuntimeError, ValueError) as e:
            logger.warning(f"MediaInfo could not parse {path}: {e}")
            return False
        self._path = Path(path)
        return True

    def get(self, stream_kind: StreamKind, index: int, field: str) -> str:
        if self._media_info is None:
            raise ProbeFailure("No file is open")

        tracks = [
            track for track in self._media_info.tracks if track.track_type == stream_kind.value
        ]
        if index >= len(tracks):
            return ""

        match = _FIELD_PATTERN.match(field)
        if match is None:
            return ""

        attribute = _CAMEL_BOUNDARY.sub("_", match.group("name")).lower()
        track = tracks[index]

        if match.group("variant") is None:
            value = getattr(track, attribute, None)
            return "" if value is None else str(value)

        # "Field/StringN" is the N-th entry of pymediainfo's other_<field> list
        variants = getattr(track, f"other_{attribute}", None) or []
        position = int(match.group("variant") or 0)
        if position < len(variants):
            return str(variants[position])
        return ""

    def inform(self) -> str:
        if self._path is None:
            raise ProbeFailure("No file is open")
        return str(MediaInfo.parse(self._path, library_file=self.library_file, output=""))

    def close(self) -> None:
        self._media_info = None
        self._path = None


# (label, stream kind, MediaInfo field) in display order
VIDEO_FIELDS: list[tuple[str, StreamKind, str]] = [
    ("Format", StreamKind.GENERAL, "Format"),
    ("Duration", StreamKind.GENERAL, "Duration/String3"),
    ("Overall Bitrate", StreamKind.GENERAL, "OverallBitRate/String"),
    ("File Size", StreamKind.GENERAL, "FileSize/String"),
    ("Video Codec", StreamKind.VIDEO, "Format"),
    ("Frame Rate", StreamKind.VIDEO, "FrameRate"),
    ("Frame Count", StreamKind.VIDEO, "FrameCount"),
]

VIDEO_TRACK_FIELDS: list[tuple[str, StreamKind, str]] = [
    ("Bit Depth", StreamKind.VIDEO, "BitDepth"),
    ("Color Space", StreamKind.VIDEO, "ColorSpace"),
    ("Chroma Subsampling", StreamKind.VIDEO, "ChromaSubsampling"),
    ("Video Bitrate", StreamKind.VIDEO, "BitRate/String"),
]


class MediaProbe:
    """Appends container and video-track facts for a file to a metadata record."""

    def __init__(self, inspector: MediaInspector | None = None):
        self.inspector = inspector or PyMediaInfoInspector()

    def describe(self, path: str | Path, record: MetadataRecord) -> None:
        """
        Query the inspector and append one row per fact, in a fixed order.

        Empty answers are appended as empty values. The inspector is
        closed on every exit path.

        Args:
            path: Video file to probe
            record: Record the rows are appended to
        """
        try:
            if not self.inspector.open(path):
                logger.warning(f"MediaInfo could not open {path}")
                record.add("Error", "Could not open file with MediaInfo")
                return

            get = self.inspector.get
            for label, kind, field in VIDEO_FIELDS:
                record.add(label, get(kind, 0, field))

            width = get(StreamKind.VIDEO, 0, "Width")
            height = get(StreamKind.VIDEO, 0, "Height")
            record.add("Resolution", f"{width}x{height}")

            for label, kind, field in VIDEO_TRACK_FIELDS:
                record.add(label, get(kind, 0, field))

            record.add("Raw Info", self.inspector.inform())

        except Exception as e:
            logger.warning(f"MediaInfo failed for {path}: {e}")
            record.add("MediaInfo Error", str(e))
            if e.__cause__ is not None:
                record.add("Inner Error", str(e.__cause__))

        finally:
            self.inspector.close()
