"""Filesystem access used by the scanner, metadata dispatcher, importer and preview."""

import logging
import os
import shutil
import sys
import tempfile
from datetime import datetime
from pathlib import Path

logger = logging.getLogger(__name__)

# Windows file attribute bits marking cloud placeholders that are not on disk
FILE_ATTRIBUTE_OFFLINE = 0x00001000
FILE_ATTRIBUTE_RECALL_ON_OPEN = 0x00040000
FILE_ATTRIBUTE_RECALL_ON_DATA_ACCESS = 0x00400000
_WINDOWS_PLACEHOLDER_MASK = (
    FILE_ATTRIBUTE_OFFLINE | FILE_ATTRIBUTE_RECALL_ON_OPEN | FILE_ATTRIBUTE_RECALL_ON_DATA_ACCESS
)

# macOS st_flags bit for iCloud "dataless" files
SF_DATALESS = 0x40000000


class FileSystem:
    """Thin wrapper over os/shutil so collaborators can be replaced in tests."""

    def stat(self, path: str | Path) -> os.stat_result:
        """Return stat information for `path` (raises OSError)."""
        return os.stat(path)

    def is_offline(self, path: str | Path, stat_result: os.stat_result | None = None) -> bool:
        """
        Check whether a file is a cloud placeholder whose content is not local.

        Args:
            path: File to check
            stat_result: Already-read stat information, if available

        Returns:
            True if reading the file would trigger a download
        """
        st = stat_result if stat_result is not None else self.stat(path)

        attributes = getattr(st, "st_file_attributes", 0)
        if attributes & _WINDOWS_PLACEHOLDER_MASK:
            return True

        flags = getattr(st, "st_flags", 0)
        if sys.platform == "darwin" and flags & SF_DATALESS:
            return True

        return False

    def created_at(self, stat_result: os.stat_result) -> datetime:
        """Creation time, falling back to ctime where there is no birth time."""
        birth = getattr(stat_result, "st_birthtime", None)
        if birth is None:
            birth = stat_result.st_ctime
        return datetime.fromtimestamp(birth)

    def modified_at(self, stat_result: os.stat_result) -> datetime:
        """Last modification time."""
        return datetime.fromtimestamp(stat_result.st_mtime)

    def list_directory(self, path: str | Path) -> tuple[list[Path], list[Path]]:
        """
        List the immediate files and subdirectories of a directory.

        Both lists are sorted by name, case-insensitively.

        Raises:
            PermissionError: If the directory cannot be read
            OSError: For any other listing failure
        """
        files: list[Path] = []
        directories: list[Path] = []
        with os.scandir(path) as entries:
            for entry in entries:
                try:
                    if entry.is_dir(follow_symlinks=False):
                        directories.append(Path(entry.path))
                    elif entry.is_file():
                        files.append(Path(entry.path))
                except OSError as e:
                    logger.debug(f"Skipping unreadable entry {entry.path}: {e}")

        files.sort(key=lambda p: p.name.lower())
        directories.sort(key=lambda p: p.name.lower())
        return files, directories

    def open_bytes(self, path: str | Path) -> bytes:
        """Read the whole file into memory."""
        with open(path, "rb") as f:
            return f.read()

    def copy_file(self, source: str | Path, destination: str | Path) -> None:
        """Copy a file, replacing any existing file at `destination`."""
        shutil.copy2(source, destination)

    def make_temp_file(self, suffix: str = "") -> Path:
        """Create an empty temporary file and return its path."""
        fd, name = tempfile.mkstemp(suffix=suffix, prefix="media_importer_")
        os.close(fd)
        return Path(name)

    def remove(self, path: str | Path) -> None:
        """Delete a file if it exists."""
        try:
            os.remove(path)
        except FileNotFoundError:
            pass
