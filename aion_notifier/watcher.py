"""File-change notifications for the chat log.

Events come from watchdog. The game client may buffer its writes, so the
polling observer can be selected instead of the native one.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver
from watchdog.observers.polling import PollingObserver

logger = logging.getLogger(__name__)

POLL_INTERVAL = 1.0  # seconds, polling observer only


class ChatLogEventHandler(FileSystemEventHandler):
    """Forwards write events for one file name, ignoring the rest of the directory."""

    def __init__(self, file_name: str, on_change: Callable[[], None]) -> None:
        super().__init__()
        self._file_name = os.path.normcase(file_name)
        self._on_change = on_change

    def _is_target(self, path: str | bytes) -> bool:
        if isinstance(path, bytes):
            path = os.fsdecode(path)
        return os.path.normcase(os.path.basename(path)) == self._file_name

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory and self._is_target(event.src_path):
            self._on_change()

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory and self._is_target(event.src_path):
            self._on_change()

    def on_moved(self, event: FileSystemEvent) -> None:
        if not event.is_directory and self._is_target(event.dest_path):
            self._on_change()


class ChatLogWatcher:
    """Calls on_change whenever the chat log is written.

    Usage:
        watcher = ChatLogWatcher(Path("Chat.log"), tailer.on_change)
        watcher.start()
        # ... later ...
        watcher.stop()

    Several events may arrive for one write; on_change must be idempotent.
    """

    def __init__(
        self,
        file_path: Path,
        on_change: Callable[[], None],
        use_polling: bool = False,
    ) -> None:
        self._file_path = Path(file_path).resolve()
        self._handler = ChatLogEventHandler(self._file_path.name, self._safe_on_change)
        self._on_change = on_change
        self._use_polling = use_polling
        self._observer: BaseObserver | None = None

    @property
    def is_running(self) -> bool:
        return self._observer is not None and self._observer.is_alive()

    def start(self) -> None:
        """Start watching the chat log directory."""
        if self.is_running:
            return
        if self._use_polling:
            observer = PollingObserver(timeout=POLL_INTERVAL)
        else:
            observer = Observer()
        observer.schedule(self._handler, str(self._file_path.parent), recursive=False)
        observer.daemon = True
        observer.start()
        self._observer = observer
        logger.info(
            "Watching (%s) %s", "poll" if self._use_polling else "events", self._file_path,
        )

    def stop(self) -> None:
        """Stop watching. No events are delivered after this returns."""
        if self._observer is None:
            return
        self._observer.stop()
        self._observer.join(timeout=5)
        self._observer = None
        logger.info("Stopped watching")

    def _safe_on_change(self) -> None:
        # Exceptions must not reach the observer thread
        try:
            self._on_change()
        except Exception:
            logger.exception("Change handler failed for %s", self._file_path)
