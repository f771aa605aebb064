"""Line classifier for AION Chat.log: picks the channel and display color."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Channel(Enum):
    ALL = "All"
    LFG = "LFG"
    PM = "PM"

    @property
    def is_catch_all(self) -> bool:
        return self is Channel.ALL


@dataclass(frozen=True, slots=True)
class Color:
    """RGB display color."""

    r: int
    g: int
    b: int

    @property
    def hex(self) -> str:
        return f"#{self.r:02X}{self.g:02X}{self.b:02X}"

    def ansi(self) -> str:
        """24-bit ANSI foreground escape sequence."""
        return f"\x1b[38;2;{self.r};{self.g};{self.b}m"


LIGHT_RED = Color(255, 176, 176)
LIGHT_GREEN = Color(160, 255, 160)
SIENNA = Color(160, 82, 45)
DARK_GRAY = Color(169, 169, 169)
DIM_GRAY = Color(105, 105, 105)


@dataclass(frozen=True, slots=True)
class Classification:
    """Where a line goes and how it is colored. channel=None means "All" only."""

    channel: Channel | None
    color: Color


@dataclass(frozen=True, slots=True)
class Rule:
    """Substring rule: matches when any of the markers appears in the line."""

    markers: tuple[str, ...]
    channel: Channel | None
    color: Color

    def matches(self, line: str) -> bool:
        return any(marker in line for marker in self.markers)


# Chat.log markers
LFG_TAG = "[3.LFG]"
WHISPER_FROM_MARKER = "Whispers:"
WHISPER_TO_MARKER = "You Whisper to"
SHOUT_MARKER = 'You shout "'

# Order is priority: a whisper quoting an LFG tag still goes to LFG.
DEFAULT_RULES: tuple[Rule, ...] = (
    Rule((LFG_TAG,), Channel.LFG, LIGHT_RED),
    Rule((WHISPER_FROM_MARKER, WHISPER_TO_MARKER), Channel.PM, LIGHT_GREEN),
    Rule((SHOUT_MARKER,), None, SIENNA),
)

DEFAULT_CLASSIFICATION = Classification(channel=None, color=DARK_GRAY)


class LineClassifier:
    """Ordered first-match-wins classifier.

    Usage:
        classifier = LineClassifier()
        result = classifier.classify("... [3.LFG] [charname:Bob;1] needs healer")
        # result.channel == Channel.LFG
    """

    def __init__(
        self,
        rules: tuple[Rule, ...] = DEFAULT_RULES,
        default: Classification = DEFAULT_CLASSIFICATION,
    ) -> None:
        for rule in rules:
            if rule.channel is not None and rule.channel.is_catch_all:
                raise ValueError("Rules cannot target the catch-all channel")
        self._rules = rules
        self._default = default

    def classify(self, line: str) -> Classification:
        for rule in self._rules:
            if rule.matches(line):
                return Classification(channel=rule.channel, color=rule.color)
        return self._default
