"""Copying the selected files to a destination folder."""

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from .errors import EmptySelectionError
from .filesystem import FileSystem
from .models import ImportResult

logger = logging.getLogger(__name__)


class ProgressCallback(Protocol):
    """Protocol for progress callback functions."""

    def __call__(self, current: int, total: int | None = None, message: str = "") -> None:
        """Called to report progress during an import."""
        ...


class ImportExecutor:
    """Copies a selection into a destination folder, stopping at the first error."""

    def __init__(self, filesystem: FileSystem | None = None):
        self.filesystem = filesystem or FileSystem()

    def copy(
        self,
        selected_paths: Sequence[str | Path],
        destination_dir: str | Path,
        progress_callback: ProgressCallback | None = None,
    ) -> ImportResult:
        """
        Copy files in order into `destination_dir`, replacing same-named files.

        Files copied before a failure stay in place; files after it are not
        attempted.

        Args:
            selected_paths: Files to copy, in the order they are copied
            destination_dir: Existing destination directory
            progress_callback: Optional callback for progress updates

        Returns:
            ImportResult listing what was copied and what stopped the batch

        Raises:
            EmptySelectionError: If there is nothing to copy
        """
        if not selected_paths:
            raise EmptySelectionError("Please select files to import.")

        destination = Path(destination_dir)
        result = ImportResult(destination=destination)
        total = len(selected_paths)
        logger.info(f"Importing {total} files to {destination}")

        for i, source in enumerate(selected_paths):
            source_path = Path(source)
            target = destination / source_path.name

            if progress_callback:
                progress_callback(i + 1, total, f"Copying {source_path.name}...")

            try:
                self.filesystem.copy_file(source_path, target)
            except OSError as e:
                logger.error(f"Error importing {source_path}: {e}")
                result.failed_path = str(source_path)
                result.error = str(e)
                return result

            result.copied.append(str(source_path))
            logger.debug(f"Copied {source_path} -> {target}")

        logger.info(str(result))
        return result
