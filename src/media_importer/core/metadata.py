"""Per-file metadata records for the details table."""

import io
import logging
from pathlib import Path

from PIL import Image

from .errors import MetadataIOError
from .exif import decode_entries, read_exif_entries
from .filesystem import FileSystem
from .models import ApplicationConfig, MetadataRecord
from .probe import MediaProbe

logger = logging.getLogger(__name__)

OFFLINE_STATUS = "File is online-only. Download it first to view metadata."


class MetadataDispatcher:
    """Classifies a file and collects its metadata in display order."""

    def __init__(
        self,
        config: ApplicationConfig | None = None,
        filesystem: FileSystem | None = None,
        probe: MediaProbe | None = None,
    ):
        """
        Initialize the dispatcher.

        Args:
            config: Application configuration, defaults to ApplicationConfig()
            filesystem: Filesystem collaborator, defaults to FileSystem()
            probe: Video probe, defaults to a MediaInfo-backed MediaProbe
        """
        self.config = config or ApplicationConfig()
        self.filesystem = filesystem or FileSystem()
        self.probe = probe or MediaProbe()

    def describe(self, path: str | Path) -> MetadataRecord:
        """
        Build the metadata record for a file.

        Args:
            path: File to describe

        Returns:
            MetadataRecord with basic attributes followed by image or video facts

        Raises:
            MetadataIOError: If the file's basic attributes cannot be read
        """
        file_path = Path(path)
        record = MetadataRecord(path=str(file_path))

        try:
            stat_result = self.filesystem.stat(file_path)
        except OSError as e:
            logger.error(f"Error accessing file {file_path}: {e}")
            raise MetadataIOError(f"Cannot read attributes of {file_path}: {e}") from e

        try:
            if self.filesystem.is_offline(file_path, stat_result):
                logger.info(f"Skipping metadata for online-only file {file_path}")
                record.add("Status", OFFLINE_STATUS)
                record.add("File Name", file_path.name)
                return record

            fmt = self.config.datetime_format
            record.add("File Name", file_path.name)
            record.add("Size", f"{stat_result.st_size / 1024.0:,.2f} KB")
            record.add("Created", self.filesystem.created_at(stat_result).strftime(fmt))
            record.add("Modified", self.filesystem.modified_at(stat_result).strftime(fmt))

            kind = self.config.media_kind(file_path)
            if kind == "video":
                self.probe.describe(file_path, record)
            elif kind == "image":
                self._describe_image(file_path, record)

        except Exception as e:
            logger.warning(f"Error reading metadata for {file_path}: {e}")
            record.add("Error", str(e))

        return record

    def _describe_image(self, file_path: Path, record: MetadataRecord) -> None:
        """Append image dimensions, resolution, pixel format and EXIF rows."""
        data = self.filesystem.open_bytes(file_path)
        with Image.open(io.BytesIO(data)) as img:
            width, height = img.size
            record.add("Dimensions", f"{width} x {height}")

            dpi = img.info.get("dpi")
            if dpi:
                record.add("Resolution", f"{float(dpi[0]):g} x {float(dpi[1]):g} DPI")

            record.add("Pixel Format", img.mode)

            exif_bytes = img.info.get("exif")

        entries = read_exif_entries(exif_bytes)
        rows = decode_entries(entries)
        logger.debug(f"Decoded {len(rows)} of {len(entries)} EXIF tags for {file_path.name}")
        record.extend(rows)
