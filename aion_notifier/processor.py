"""Per-line processing: classify -> strip timestamp -> rewrite links -> deliver."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from aion_notifier.classifier import DIM_GRAY, Channel, Color, LineClassifier
from aion_notifier.links import LinkRewriter
from aion_notifier.router import ChannelRouter
from aion_notifier.timestamp import extract_timestamp, format_timestamp

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ProcessedLine:
    """A chat line ready for display."""

    display_text: str
    color: Color
    timestamp_text: str = ""
    target_channel: Channel | None = None

    def segments(self) -> list[tuple[str, Color]]:
        """Colored pieces in display order: timestamp first, then the message."""
        parts: list[tuple[str, Color]] = []
        if self.timestamp_text:
            parts.append((format_timestamp(self.timestamp_text), DIM_GRAY))
        parts.append((self.display_text + "\n", self.color))
        return parts


class LineProcessor:
    """Turns raw Chat.log lines into ProcessedLine and hands them to the router."""

    def __init__(
        self,
        classifier: LineClassifier,
        rewriter: LinkRewriter,
        router: ChannelRouter,
    ) -> None:
        self._classifier = classifier
        self._rewriter = rewriter
        self._router = router

    def build(self, raw_line: str) -> ProcessedLine:
        classification = self._classifier.classify(raw_line)
        stripped, timestamp = extract_timestamp(raw_line)
        text = self._rewriter.rewrite(stripped, classification.channel)
        return ProcessedLine(
            display_text=text,
            color=classification.color,
            timestamp_text=timestamp,
            target_channel=classification.channel,
        )

    def process(self, raw_line: str) -> ProcessedLine | None:
        """Process and deliver one line. Never raises; returns None on failure."""
        logger.debug("New line: %s", raw_line[:120])
        try:
            line = self.build(raw_line)
            self._router.deliver(line)
        except Exception:
            logger.exception("Failed to process line: %s", raw_line[:150])
            return None
        if line.target_channel is not None:
            logger.info("[%s] %s", line.target_channel.value, line.display_text[:60])
        return line
