"""Session state shared by the window and the background preview worker."""

import itertools
import logging
import queue
import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from .filesystem import FileSystem
from .importer import ImportExecutor, ProgressCallback
from .metadata import MetadataDispatcher
from .models import (
    ApplicationConfig,
    ImportResult,
    MetadataRecord,
    PreviewResult,
    ScanResult,
    TreeNode,
)
from .preview import PreviewGenerator
from .tree import TreeBuilder, collect_selection, set_checked

logger = logging.getLogger(__name__)


class PreviewWorker:
    """
    Runs preview generation off the display thread.

    Results are queued and collected by the thread that owns the display
    with `poll()`. Only the result for the most recent request is returned;
    results for superseded requests are dropped, whatever order they
    finish in.
    """

    def __init__(self, generator: PreviewGenerator, max_workers: int = 2):
        self.generator = generator
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="preview")
        self._results: queue.Queue[PreviewResult] = queue.Queue()
        self._tokens = itertools.count(1)
        self._latest = 0
        self._lock = threading.Lock()

    @property
    def latest_token(self) -> int:
        """Token of the most recent request."""
        with self._lock:
            return self._latest

    def request(self, path: str | Path) -> int:
        """Queue preview generation for `path` and return its token."""
        with self._lock:
            token = next(self._tokens)
            self._latest = token
        self._executor.submit(self._run, token, str(path))
        return token

    def invalidate(self) -> int:
        """Supersede every outstanding request without starting a new one."""
        with self._lock:
            self._latest = next(self._tokens)
            return self._latest

    def _run(self, token: int, path: str) -> None:
        errors: list[tuple[str, str]] = []
        image = None
        try:
            image = self.generator.generate(path, errors)
        except Exception as e:
            logger.error(f"Preview task failed for {path}: {e}")
            errors.append(("Preview Error", str(e)))
        self._results.put(PreviewResult(token=token, path=path, image=image, errors=errors))

    def poll(self) -> PreviewResult | None:
        """Drain finished previews and return the current one, if it has arrived."""
        current = None
        latest = self.latest_token
        while True:
            try:
                result = self._results.get_nowait()
            except queue.Empty:
                break
            if result.token == latest:
                current = result
            else:
                logger.debug(f"Dropping stale preview for {result.path}")
        return current

    def shutdown(self, wait: bool = False) -> None:
        """Stop accepting work."""
        self._executor.shutdown(wait=wait, cancel_futures=True)


class ImportSession:
    """
    Owns the current tree and the current metadata record.

    Both are replaced wholesale, never edited in place, so readers always
    see a complete snapshot. Mutating calls are meant to come from the
    thread that owns the display.
    """

    def __init__(
        self,
        config: ApplicationConfig | None = None,
        filesystem: FileSystem | None = None,
        tree_builder: TreeBuilder | None = None,
        dispatcher: MetadataDispatcher | None = None,
        preview_generator: PreviewGenerator | None = None,
        importer: ImportExecutor | None = None,
    ):
        self.config = config or ApplicationConfig()
        filesystem = filesystem or FileSystem()
        self.tree_builder = tree_builder or TreeBuilder(self.config, filesystem)
        self.dispatcher = dispatcher or MetadataDispatcher(self.config, filesystem)
        self.preview_worker = PreviewWorker(
            preview_generator or PreviewGenerator(self.config, filesystem)
        )
        self.importer = importer or ImportExecutor(filesystem)

        self.scan_result: ScanResult | None = None
        self.current_record: MetadataRecord | None = None

    @property
    def root(self) -> TreeNode | None:
        """Root of the current tree."""
        return self.scan_result.root if self.scan_result else None

    def open_folder(self, path: str | Path) -> ScanResult:
        """Scan a new root and replace the current tree."""
        result = self.tree_builder.build(path)
        self.scan_result = result
        self.current_record = None
        self.preview_worker.invalidate()
        return result

    def find_node(self, path: str) -> TreeNode | None:
        """Node of the current tree with the given absolute path."""
        root = self.root
        return root.find(path) if root else None

    def set_checked(self, path: str, value: bool) -> TreeNode | None:
        """Check or uncheck a node and everything below it."""
        node = self.find_node(path)
        if node is None:
            logger.warning(f"No tree node for {path}")
            return None
        set_checked(node, value)
        return node

    def selected_files(self) -> list[str]:
        """Checked files of the current tree."""
        root = self.root
        return collect_selection(root) if root else []

    def select_file(self, path: str | Path) -> MetadataRecord:
        """
        Describe a file and start its preview in the background.

        Returns:
            The new current metadata record
        """
        path = str(Path(path))
        try:
            record = self.dispatcher.describe(path)
        except OSError as e:
            record = MetadataRecord(path=path)
            record.add("Error", str(e))
        self.current_record = record
        self.preview_worker.request(path)
        return record

    def poll_preview(self) -> PreviewResult | None:
        """
        Collect the preview of the current selection, if it is ready.

        Preview errors are added to a copy of the current record, which
        then replaces it.
        """
        result = self.preview_worker.poll()
        if result is None:
            return None
        record = self.current_record
        if result.errors and record is not None and record.path == result.path:
            self.current_record = record.with_entries(result.errors)
        return result

    def import_selected(
        self, destination: str | Path, progress_callback: ProgressCallback | None = None
    ) -> ImportResult:
        """Copy the checked files to `destination`."""
        return self.importer.copy(self.selected_files(), destination, progress_callback)

    def close(self) -> None:
        """Release background resources."""
        self.preview_worker.shutdown()
