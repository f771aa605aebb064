"""Delivery of processed lines to channel sinks."""

from __future__ import annotations

import logging
import sys
import threading
from typing import TYPE_CHECKING, Protocol, TextIO

from aion_notifier.classifier import Channel, Color

if TYPE_CHECKING:
    from aion_notifier.processor import ProcessedLine

logger = logging.getLogger(__name__)

_ANSI_RESET = "\x1b[0m"


class Sink(Protocol):
    """A display target for colored text."""

    @property
    def ready(self) -> bool: ...

    def write_output(self, text: str, color: Color) -> None: ...

    def clear(self) -> None: ...


class ChannelRouter:
    """Writes every line to the "All" sink and to its own channel sink.

    Sinks that are not ready yet are skipped for that line: nothing is
    queued or retried.
    """

    def __init__(self, sinks: dict[Channel, Sink]) -> None:
        if Channel.ALL not in sinks:
            raise ValueError("A sink for the catch-all channel is required")
        self._sinks = dict(sinks)

    def deliver(self, line: ProcessedLine) -> None:
        targets = [self._sinks[Channel.ALL]]
        channel = line.target_channel
        if channel is not None and not channel.is_catch_all:
            sink = self._sinks.get(channel)
            if sink is not None:
                targets.append(sink)
            else:
                logger.debug("No sink for channel %s", channel.value)

        for sink in targets:
            if not sink.ready:
                continue
            for text, color in line.segments():
                sink.write_output(text, color)

    def clear(self, channel: Channel) -> None:
        sink = self._sinks.get(channel)
        if sink is not None:
            sink.clear()


class StreamSink:
    """Terminal sink: writes colored text to a stream (stdout by default)."""

    def __init__(self, stream: TextIO | None = None, use_color: bool = True) -> None:
        self._stream = stream or sys.stdout
        self._use_color = use_color
        self._lock = threading.Lock()

    @property
    def ready(self) -> bool:
        return not self._stream.closed

    def write_output(self, text: str, color: Color) -> None:
        with self._lock:
            if self._use_color:
                # Keep the newline outside the escape so the reset lands on the same row
                body = text.rstrip("\n")
                tail = text[len(body):]
                self._stream.write(f"{color.ansi()}{body}{_ANSI_RESET}{tail}")
            else:
                self._stream.write(text)
            self._stream.flush()

    def clear(self) -> None:
        with self._lock:
            if self._use_color:
                self._stream.write("\x1b[2J\x1b[H")
                self._stream.flush()
