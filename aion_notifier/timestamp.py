"""Timestamp extraction for Chat.log lines."""

from __future__ import annotations

import re

# Chat.log format examples:
# 2021.03.14 14:22:10 : [charname:Bob;1.0000 0.6941 0.6941]: [3.LFG] need healer
# 14:22:10 Someone : [3.LFG] [charname:Bob;1] needs healer
_RE_TIME = re.compile(r"\d{2}:\d{2}:\d{2}")

# Everything from line start through the first " : " after the time token
_RE_PREFIX = re.compile(r"^.*?\d{2}:\d{2}:\d{2}.*? : ")


def extract_timestamp(line: str) -> tuple[str, str]:
    """Split a log line into (message, "HH:MM:SS").

    The prefix up to and including the first " : " separator following the
    time token is removed. Lines without a time token come back unchanged
    with an empty timestamp.
    """
    m = _RE_TIME.search(line)
    if m is None:
        return line, ""
    return _RE_PREFIX.sub("", line, count=1), m.group(0)


def format_timestamp(timestamp: str) -> str:
    """Display form of a timestamp: "(HH:MM:SS) "."""
    if not timestamp:
        return ""
    return f"({timestamp}) "
