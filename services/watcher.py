"""
Definition Watcher Service for IndexDrift.

Uses watchdog to monitor a directory of index definitions and runs a
drift check whenever a definition is created or modified.
"""
import os
import time
import logging
from collections import OrderedDict
from pathlib import Path
from typing import Callable, Optional
from datetime import datetime, timezone

from watchdog.observers import Observer
from watchdog.events import FileSystemEventHandler, FileCreatedEvent, FileModifiedEvent

from core import ChangeReport, ParsedDefinition, DefinitionError, NodeStructureError
from core.file_parser import parse_definition_file
from services.drift import DriftChecker
from services.remote import RemoteServiceError

logger = logging.getLogger(__name__)


class DefinitionFileHandler(FileSystemEventHandler):
    """
    Handles file system events for index definition files.

    When a JSON definition is written, it is parsed and handed to the callback.
    """

    max_tracked_files = 1000

    def __init__(self, on_definition: Callable[[ParsedDefinition], None]):
        """
        Initialize handler.

        Args:
            on_definition: Callback for every successfully parsed definition
        """
        self.on_definition = on_definition
        self._processed_files: OrderedDict[str, None] = OrderedDict()  # path:mtime keys, oldest first

    def on_created(self, event: FileCreatedEvent):
        if event.is_directory:
            return

        if self._is_json_file(event.src_path):
            # Small delay to ensure file is fully written
            time.sleep(0.5)
            self.process_file(event.src_path)

    def on_modified(self, event: FileModifiedEvent):
        if event.is_directory:
            return

        if self._is_json_file(event.src_path):
            self.process_file(event.src_path)

    def _is_json_file(self, path: str) -> bool:
        return path.lower().endswith('.json')

    def process_file(self, file_path: str) -> bool:
        """Parse a definition and pass it on. Returns True if the callback ran."""
        abs_path = os.path.abspath(file_path)

        try:
            mtime = os.path.getmtime(abs_path)
        except OSError:
            return False

        file_key = f"{abs_path}:{mtime}"
        if file_key in self._processed_files:
            return False

        logger.info(f"Processing definition: {file_path}")

        try:
            parsed = parse_definition_file(abs_path)
        except DefinitionError as e:
            logger.warning(f"Skipping {file_path}: {e}")
            return False

        self._processed_files[file_key] = None
        while len(self._processed_files) > self.max_tracked_files:
            self._processed_files.popitem(last=False)

        try:
            self.on_definition(parsed)
        except Exception as e:
            logger.error(f"Error processing definition {file_path}: {e}")
            return False
        return True


class DefinitionWatcher:
    """
    Watches a directory for index definition files.

    Usage:
        watcher = DefinitionWatcher("/path/to/definitions", callback)
        watcher.start()
        # ... later
        watcher.stop()
    """

    def __init__(
        self,
        watch_path: str,
        on_definition: Callable[[ParsedDefinition], None],
        recursive: bool = True
    ):
        self.watch_path = Path(watch_path)
        self.recursive = recursive
        self.on_definition = on_definition

        self._observer: Optional[Observer] = None
        self._handler: Optional[DefinitionFileHandler] = None
        self._running = False

    def start(self):
        """Start watching the directory."""
        if self._running:
            logger.warning("Watcher already running")
            return

        if not self.watch_path.exists():
            logger.error(f"Watch path does not exist: {self.watch_path}")
            raise FileNotFoundError(f"Watch path not found: {self.watch_path}")

        logger.info(f"Starting definition watcher on: {self.watch_path}")

        self._handler = DefinitionFileHandler(self.on_definition)
        self._observer = Observer()
        self._observer.schedule(
            self._handler,
            str(self.watch_path),
            recursive=self.recursive
        )
        self._observer.start()
        self._running = True

    def stop(self):
        """Stop watching the directory."""
        if not self._running:
            return

        logger.info("Stopping definition watcher")

        if self._observer:
            self._observer.stop()
            self._observer.join(timeout=5)
            self._observer = None

        self._handler = None
        self._running = False

    def is_running(self) -> bool:
        return self._running

    def scan_existing(self) -> int:
        """
        Check every definition already in the watch directory.
        Returns the number of definitions handed to the callback.
        """
        if not self.watch_path.exists():
            raise FileNotFoundError(f"Watch path not found: {self.watch_path}")

        logger.info(f"Scanning existing definitions in: {self.watch_path}")

        handler = DefinitionFileHandler(self.on_definition)
        pattern = "**/*.json" if self.recursive else "*.json"
        count = 0

        for json_file in sorted(self.watch_path.glob(pattern)):
            if handler.process_file(str(json_file)):
                count += 1

        logger.info(f"Checked {count} existing definitions")
        return count


class DriftWatchService:
    """
    Runs a drift check for every definition the watcher reports
    and keeps the latest report per index.
    """

    def __init__(self, checker: DriftChecker, on_report: Optional[Callable[[ParsedDefinition, ChangeReport], None]] = None):
        self.checker = checker
        self.on_report = on_report
        self.watcher: Optional[DefinitionWatcher] = None
        self.reports: dict[str, ChangeReport] = {}
        self._stats = {
            "definitions_checked": 0,
            "drifted": 0,
            "missing": 0,
            "errors": 0,
            "last_file": None,
            "started_at": None
        }

    def handle_definition(self, definition: ParsedDefinition):
        try:
            report = self.checker.check(definition)
        except (RemoteServiceError, NodeStructureError, DefinitionError) as e:
            logger.error(f"Drift check failed for {definition.filename}: {e}")
            self._stats["errors"] += 1
            return

        self.reports[definition.name] = report
        self._stats["definitions_checked"] += 1
        self._stats["last_file"] = definition.filename

        if not report.exists:
            self._stats["missing"] += 1
        elif report.has_differences:
            self._stats["drifted"] += 1

        if self.on_report:
            self.on_report(definition, report)

    def start(self, watch_path: str):
        """Check existing definitions, then watch for changes."""
        if self.watcher and self.watcher.is_running():
            logger.warning("Watcher already running")
            return

        self.watcher = DefinitionWatcher(
            watch_path=watch_path,
            on_definition=self.handle_definition
        )

        self.watcher.scan_existing()
        self.watcher.start()
        self._stats["started_at"] = datetime.now(timezone.utc).isoformat()

        logger.info(f"Drift watch service started on: {watch_path}")

    def stop(self):
        if self.watcher:
            self.watcher.stop()
            self.watcher = None
            logger.info("Drift watch service stopped")

    def get_stats(self) -> dict:
        return {
            **self._stats,
            "is_running": self.watcher.is_running() if self.watcher else False
        }
