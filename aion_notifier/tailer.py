"""Incremental reader for the AION Chat.log.

The game appends to the log while we read it. Only complete
newline-terminated records are forwarded; a trailing partial record is kept
until the rest of it is written.
"""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO

logger = logging.getLogger(__name__)

DEFAULT_ENCODING = "cp1252"


class TailError(OSError):
    """The log cannot be tailed. Fatal for the tailer."""


class LogNotFoundError(TailError):
    """The log file does not exist."""


class LogAccessError(TailError):
    """The log file exists but cannot be opened for reading."""


@dataclass
class TailState:
    """Read position in the log. Only touched while LogTailer holds its lock."""

    file_path: Path
    read_offset: int = 0
    handle: BinaryIO | None = None
    inode: int = 0
    pending: bytes = field(default=b"", repr=False)


class LogTailer:
    """Reads lines appended to a file since the last change notification.

    Usage:
        tailer = LogTailer(Path("Chat.log"), queue.put)
        tailer.open()          # skips existing content
        tailer.on_change()     # call on every file-change event
        tailer.close()

    on_line is called while the tailer lock is held, so it must be a quick
    hand-off (queue put, list append), never a blocking operation.
    """

    def __init__(
        self,
        file_path: Path,
        on_line: Callable[[str], None],
        encoding: str = DEFAULT_ENCODING,
        on_error: Callable[[TailError], None] | None = None,
    ) -> None:
        self._state = TailState(file_path=Path(file_path))
        self._on_line = on_line
        self._on_error = on_error
        self._encoding = encoding
        self._lock = threading.Lock()
        self._halted = False

    @property
    def read_offset(self) -> int:
        with self._lock:
            return self._state.read_offset

    @property
    def is_open(self) -> bool:
        return self._state.handle is not None

    def open(self) -> None:
        """Open the log and skip everything already in it.

        Raises:
            LogNotFoundError: the file does not exist.
            LogAccessError: the file cannot be opened for reading.
        """
        with self._lock:
            self._open_handle()
            handle = self._state.handle
            # Discard history once so old lines are not replayed
            handle.seek(0, os.SEEK_END)
            self._state.read_offset = handle.tell()
            self._state.pending = b""
            self._halted = False
        logger.info(
            "Tailing %s from offset %d", self._state.file_path, self._state.read_offset,
        )

    def on_change(self) -> int:
        """Read new complete lines and forward them. Returns the number forwarded."""
        with self._lock:
            if self._halted or self._state.handle is None:
                return 0
            try:
                data = self._read_new_bytes()
            except TailError as e:
                self._halt(e)
                return 0
            if not data:
                return 0
            return self._forward(data)

    def close(self) -> None:
        """Release the file handle. Safe to call more than once."""
        with self._lock:
            self._close_handle()
            self._state.pending = b""

    def _open_handle(self) -> None:
        path = self._state.file_path
        try:
            handle = open(path, "rb")  # noqa: SIM115
        except FileNotFoundError as e:
            raise LogNotFoundError(f"Chat log not found: {path}") from e
        except OSError as e:
            raise LogAccessError(f"Cannot open chat log: {path}: {e}") from e
        self._close_handle()
        self._state.handle = handle
        self._state.inode = os.fstat(handle.fileno()).st_ino

    def _close_handle(self) -> None:
        if self._state.handle is not None:
            self._state.handle.close()
            self._state.handle = None

    def _read_new_bytes(self) -> bytes:
        state = self._state
        try:
            st = state.file_path.stat()
        except FileNotFoundError:
            # Deleted or being recreated; pick it up on the next event
            return b""

        try:
            if st.st_ino != state.inode:
                logger.info("Chat log replaced, reopening %s", state.file_path)
                self._reset()
            elif st.st_size < state.read_offset:
                logger.info("Chat log truncated, resetting position")
                self._reset()
        except LogNotFoundError:
            return b""

        if st.st_size == state.read_offset:
            return b""

        try:
            state.handle.seek(state.read_offset)
            data = state.handle.read()
        except OSError as e:
            raise LogAccessError(f"Cannot read chat log: {e}") from e
        state.read_offset += len(data)
        return data

    def _reset(self) -> None:
        self._open_handle()
        self._state.read_offset = 0
        self._state.pending = b""

    def _forward(self, data: bytes) -> int:
        buffer = self._state.pending + data
        *records, self._state.pending = buffer.split(b"\n")
        count = 0
        for record in records:
            line = record.rstrip(b"\r").decode(self._encoding, errors="replace")
            if not line:
                continue
            self._on_line(line)
            count += 1
        if self._state.pending:
            logger.debug("Holding %d bytes of partial line", len(self._state.pending))
        return count

    def _halt(self, error: TailError) -> None:
        logger.error("Stopped tailing %s: %s", self._state.file_path, error)
        self._halted = True
        self._close_handle()
        if self._on_error is not None:
            self._on_error(error)
