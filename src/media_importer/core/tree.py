"""Directory tree scanning and checkbox selection."""

import logging
import time
from pathlib import Path

from .errors import AccessDeniedError
from .filesystem import FileSystem
from .models import ApplicationConfig, ScanResult, TreeNode

logger = logging.getLogger(__name__)


class TreeBuilder:
    """Builds the selectable tree of media files under a root directory."""

    def __init__(self, config: ApplicationConfig | None = None, filesystem: FileSystem | None = None):
        """
        Initialize the builder.

        Args:
            config: Application configuration, defaults to ApplicationConfig()
            filesystem: Filesystem collaborator, defaults to FileSystem()
        """
        self.config = config or ApplicationConfig()
        self.filesystem = filesystem or FileSystem()

    def build(self, root_path: str | Path) -> ScanResult:
        """
        Scan a directory recursively into a tree of unchecked nodes.

        Subdirectories that cannot be read are left out of the tree and
        listed in ScanResult.skipped_paths.

        Args:
            root_path: Directory to scan

        Returns:
            ScanResult holding the tree and the skipped paths

        Raises:
            FileNotFoundError: If the root does not exist
            NotADirectoryError: If the root is not a directory
            AccessDeniedError: If the root itself cannot be read
        """
        root = Path(root_path).absolute()
        if not root.exists():
            raise FileNotFoundError(f"Directory not found: {root}")
        if not root.is_dir():
            raise NotADirectoryError(f"Path is not a directory: {root}")

        start_time = time.time()
        logger.info(f"Building tree for: {root}")

        root_node = TreeNode(name=root.name or str(root), absolute_path=str(root), is_directory=True)
        skipped: list[str] = []
        try:
            self._populate(root_node, skipped)
        except PermissionError as e:
            raise AccessDeniedError(f"Cannot read directory {root}: {e}") from e

        result = ScanResult(
            root=root_node,
            skipped_paths=skipped,
            scan_duration_seconds=time.time() - start_time,
        )
        logger.info(f"Tree complete: {result}")
        return result

    def _populate(self, node: TreeNode, skipped: list[str]) -> None:
        """Fill `node` with its media files, then its subdirectories."""
        files, directories = self.filesystem.list_directory(node.absolute_path)

        for file_path in files:
            if self.config.is_supported(file_path):
                node.children.append(TreeNode(name=file_path.name, absolute_path=str(file_path)))

        for directory in directories:
            child = TreeNode(name=directory.name, absolute_path=str(directory), is_directory=True)
            try:
                self._populate(child, skipped)
            except OSError as e:
                logger.warning(f"Skipping inaccessible directory {directory}: {e}")
                skipped.append(str(directory))
                continue
            node.children.append(child)


def set_checked(node: TreeNode, value: bool) -> None:
    """Assign `value` to a node and every node below it. Ancestors are untouched."""
    for descendant in node.iter_nodes():
        descendant.checked = value


def collect_selection(root: TreeNode) -> list[str]:
    """Absolute paths of checked file leaves, in depth-first order."""
    return [node.absolute_path for node in root.iter_nodes() if node.is_file and node.checked]
