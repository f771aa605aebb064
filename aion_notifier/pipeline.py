"""Notifier pipeline: watcher -> tailer -> line queue -> processor -> router."""

from __future__ import annotations

import logging
import queue
import threading
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from aion_notifier.cache import LinkCache
from aion_notifier.classifier import LineClassifier
from aion_notifier.config import AppConfig, resolve_chatlog_path
from aion_notifier.links import LinkRewriter, Resolver
from aion_notifier.processor import LineProcessor
from aion_notifier.resolver import CachedResolver, CodexResolver
from aion_notifier.router import ChannelRouter
from aion_notifier.tailer import DEFAULT_ENCODING, LogTailer, TailError
from aion_notifier.watcher import ChatLogWatcher

logger = logging.getLogger(__name__)

_STOP = object()


@dataclass
class PipelineConfig:
    """Pipeline configuration."""

    chatlog_path: Path = Path("Chat.log")
    encoding: str = DEFAULT_ENCODING
    use_polling: bool = False
    codex_base_url: str = "https://aioncodex.com/en"
    lookup_timeout: float = 10.0
    lookup_retries: int = 2
    item_cache_path: str = ""
    lookup_outage_cooldown: float = 60.0

    @classmethod
    def from_app_config(cls, config: AppConfig) -> PipelineConfig:
        return cls(
            chatlog_path=resolve_chatlog_path(config),
            encoding=config.log_encoding,
            use_polling=config.use_polling,
            codex_base_url=config.codex_base_url,
            lookup_timeout=config.lookup_timeout,
            lookup_retries=config.lookup_retries,
            item_cache_path=config.item_cache_path,
            lookup_outage_cooldown=config.lookup_outage_cooldown,
        )


class NotifierPipeline:
    """Orchestrates the chat notifier.

    Flow: file watcher (observer thread) -> LogTailer under its lock ->
    line queue -> one worker thread running LineProcessor (classification,
    timestamp, link lookup) -> ChannelRouter -> sinks.

    Link lookups happen on the worker, so a slow network never holds the
    tailer lock or delays reading further writes. A single worker keeps
    lines in file order.
    """

    def __init__(
        self,
        config: PipelineConfig,
        router: ChannelRouter,
        resolver: Resolver | None = None,
        on_error: Callable[[TailError], None] | None = None,
    ) -> None:
        self._config = config
        self._on_error = on_error
        self._lines: queue.Queue[object] = queue.Queue()
        self._worker: threading.Thread | None = None
        self._error_reported = False
        self._running = False

        self._cache: LinkCache | None = None
        self._codex: CodexResolver | None = None
        if resolver is None:
            self._cache = LinkCache(db_path=config.item_cache_path or None)
            self._codex = CodexResolver(
                base_url=config.codex_base_url,
                timeout=config.lookup_timeout,
                max_retries=config.lookup_retries,
                outage_cooldown=config.lookup_outage_cooldown,
            )
            resolver = CachedResolver(self._codex, self._cache)

        self._processor = LineProcessor(LineClassifier(), LinkRewriter(resolver), router)
        self._tailer = LogTailer(
            config.chatlog_path,
            self._lines.put,
            encoding=config.encoding,
            on_error=self._report_error,
        )
        self._watcher = ChatLogWatcher(
            config.chatlog_path, self._tailer.on_change, use_polling=config.use_polling,
        )

    @property
    def tailer(self) -> LogTailer:
        return self._tailer

    @property
    def is_running(self) -> bool:
        return self._running

    def start(self) -> bool:
        """Open the chat log and start watching. Returns False if the log cannot be opened."""
        if self._running:
            return True
        try:
            self._tailer.open()
        except TailError as e:
            logger.error("Cannot tail chat log: %s", e)
            self._report_error(e)
            return False

        self._worker = threading.Thread(
            target=self._process_loop, name="line-processor", daemon=True,
        )
        self._worker.start()
        self._watcher.start()
        self._running = True
        logger.info("Pipeline started")
        return True

    def stop(self) -> None:
        """Stop the pipeline. Safe to call more than once."""
        self._watcher.stop()
        if self._worker is not None:
            self._lines.put(_STOP)
            # A lookup in flight may still be waiting on the network
            self._worker.join(timeout=5)
            if self._worker.is_alive():
                logger.warning("Line processor still busy, abandoning it")
            self._worker = None
        self._tailer.close()
        if self._cache is not None:
            self._cache.close()
        if self._codex is not None:
            self._codex.close()
        if self._running:
            logger.info("Pipeline stopped")
        self._running = False

    def _process_loop(self) -> None:
        while True:
            item = self._lines.get()
            if item is _STOP:
                return
            self._processor.process(item)

    def _report_error(self, error: TailError) -> None:
        if self._error_reported:
            return
        self._error_reported = True
        if self._on_error is not None:
            self._on_error(error)
