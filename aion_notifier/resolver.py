"""Item name lookup against Aion Codex."""

from __future__ import annotations

import logging
import time

import requests
from bs4 import BeautifulSoup

from aion_notifier.cache import LinkCache
from aion_notifier.links import LinkKind, Resolver

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://aioncodex.com/en"
DEFAULT_TIMEOUT = 10.0
DEFAULT_OUTAGE_COOLDOWN = 60.0  # seconds without lookups after a transport failure
TITLE_SUFFIX = " - Aion Codex"


class LinkLookupError(LookupError):
    """A link could not be resolved. Always recoverable."""


class CodexResolver:
    """Resolves item ids to names by reading the Aion Codex page title.

    Usage:
        resolver = CodexResolver()
        name = resolver.resolve(LinkKind.ITEM, "152000001")
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        max_retries: int = 2,
        retry_delay: float = 0.5,
        outage_cooldown: float = DEFAULT_OUTAGE_COOLDOWN,
        session: requests.Session | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._max_retries = max(1, max_retries)
        self._retry_delay = retry_delay
        self._outage_cooldown = outage_cooldown
        self._session = session or requests.Session()
        # Item ids Codex answered 4xx for; not retried this session
        self._missing: set[str] = set()
        self._offline_until = 0.0

    def resolve(self, kind: LinkKind, identifier: str) -> str:
        if kind is LinkKind.CHARACTER_NAME:
            return identifier
        if kind is not LinkKind.ITEM:
            raise LinkLookupError(f"no lookup for link kind {kind.value!r}")
        return self._item_name(identifier)

    def _item_name(self, item_id: str) -> str:
        if item_id in self._missing:
            raise LinkLookupError(f"item {item_id} not on Codex")
        if time.monotonic() < self._offline_until:
            raise LinkLookupError("Codex unreachable, lookups paused")

        url = f"{self._base_url}/item/{item_id}"
        html = self._fetch(url, item_id)
        return parse_item_title(html)

    def _fetch(self, url: str, item_id: str) -> str:
        last_error: Exception | None = None
        for attempt in range(self._max_retries):
            try:
                response = self._session.get(url, timeout=self._timeout)
                response.raise_for_status()
                return response.text
            except requests.HTTPError as e:
                # 4xx will not get better on retry
                status = e.response.status_code if e.response is not None else 0
                if 400 <= status < 500:
                    self._missing.add(item_id)
                    raise LinkLookupError(f"{url}: HTTP {status}") from e
                last_error = e
            except requests.RequestException as e:
                last_error = e
            logger.warning(
                "Codex lookup failed (attempt %d/%d): %s",
                attempt + 1, self._max_retries, last_error,
            )
            if attempt < self._max_retries - 1:
                time.sleep(self._retry_delay * (2 ** attempt))

        self._offline_until = time.monotonic() + self._outage_cooldown
        logger.warning("Pausing Codex lookups for %.0fs", self._outage_cooldown)
        raise LinkLookupError(f"{url}: {last_error}") from last_error

    def close(self) -> None:
        self._session.close()


def parse_item_title(html: str) -> str:
    """Extract the item name from a Codex page: <title>Name - Aion Codex</title>."""
    soup = BeautifulSoup(html, "html.parser")
    title = soup.select_one("html > head > title") or soup.title
    if title is None:
        raise LinkLookupError("page has no title")
    name = title.get_text().strip()
    suffix = TITLE_SUFFIX.strip()
    if name.endswith(suffix):
        name = name[: -len(suffix)].strip()
    if not name:
        raise LinkLookupError("page title is empty")
    return name


class CachedResolver:
    """Resolver wrapper that consults a LinkCache first and stores successes only."""

    def __init__(self, resolver: Resolver, cache: LinkCache) -> None:
        self._resolver = resolver
        self._cache = cache

    def resolve(self, kind: LinkKind, identifier: str) -> str:
        cached = self._cache.get(kind.value, identifier)
        if cached is not None:
            return cached
        text = self._resolver.resolve(kind, identifier)
        self._cache.put(kind.value, identifier, text)
        return text
