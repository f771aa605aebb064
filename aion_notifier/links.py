"""Rewriting of [kind:payload] link markup into readable text."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from aion_notifier.classifier import Channel

logger = logging.getLogger(__name__)


class LinkKind(Enum):
    ITEM = "item"
    CHARACTER_NAME = "charname"
    OTHER = "other"

    @classmethod
    def from_prefix(cls, prefix: str) -> LinkKind:
        for kind in (cls.ITEM, cls.CHARACTER_NAME):
            if prefix == kind.value:
                return kind
        return cls.OTHER


class Resolver(Protocol):
    def resolve(self, kind: LinkKind, identifier: str) -> str: ...


# [item:152000001;ver6;jp;0], [charname:Bob;1.0000 0.6941 0.6941]
_RE_LINK = re.compile(r"\[([^\[\]:]+):([^\[\]]*?)\]")


@dataclass(frozen=True, slots=True)
class LinkToken:
    """A bracketed link found in a line."""

    kind: LinkKind
    start: int
    length: int
    raw: str
    payload: str

    @property
    def end(self) -> int:
        return self.start + self.length

    @property
    def identifier(self) -> str:
        """Payload before the first ';'."""
        return self.payload.split(";", 1)[0].strip()

    @property
    def is_well_formed(self) -> bool:
        if not self.identifier:
            return False
        if self.kind is LinkKind.ITEM:
            return self.identifier.isdigit()
        return True


def find_links(line: str) -> list[LinkToken]:
    """Return all link tokens in left-to-right order."""
    return [
        LinkToken(
            kind=LinkKind.from_prefix(m.group(1).strip().lower()),
            start=m.start(),
            length=m.end() - m.start(),
            raw=m.group(0),
            payload=m.group(2),
        )
        for m in _RE_LINK.finditer(line)
    ]


class LinkRewriter:
    """Replaces item and character links with display text.

    Items become "<Item Name>" (looked up through the resolver), character
    names become the bare name. Anything that cannot be resolved stays as
    the raw bracketed text.
    """

    def __init__(self, resolver: Resolver) -> None:
        self._resolver = resolver

    def rewrite(self, line: str, channel: Channel | None = None) -> str:
        tokens = find_links(line)
        if not tokens:
            return line

        parts: list[str] = []
        pos = 0
        for token in tokens:
            parts.append(line[pos:token.start])
            parts.append(self._replacement(token, channel))
            pos = token.end
        parts.append(line[pos:])
        return "".join(parts)

    def _replacement(self, token: LinkToken, channel: Channel | None) -> str:
        if token.kind is LinkKind.OTHER or not token.is_well_formed:
            return token.raw

        if token.kind is LinkKind.CHARACTER_NAME:
            return token.identifier

        try:
            name = self._resolver.resolve(token.kind, token.identifier)
        except LookupError as e:
            logger.warning(
                "Cannot resolve %s (%s): %s",
                token.raw, channel.value if channel else "All", e,
            )
            return token.raw
        except Exception:
            logger.exception("Unexpected error resolving %s", token.raw)
            return token.raw
        return f"<{name}>"
