"""Tests for Codex item lookup."""

from unittest.mock import MagicMock

import pytest
import requests

from aion_notifier.cache import LinkCache
from aion_notifier.links import LinkKind
from aion_notifier.resolver import (
    CachedResolver,
    CodexResolver,
    LinkLookupError,
    parse_item_title,
)

PAGE = (
    "<html><head><title>Greater Healing Potion - Aion Codex</title></head>"
    "<body><h1>Greater Healing Potion</h1></body></html>"
)


def _response(text="", status=200):
    response = MagicMock()
    response.text = text
    response.status_code = status
    if status >= 400:
        error = requests.HTTPError(f"{status}")
        error.response = response
        response.raise_for_status.side_effect = error
    return response


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


class TestParseItemTitle:
    """Test title extraction."""

    def test_suffix_removed(self):
        assert parse_item_title(PAGE) == "Greater Healing Potion"

    def test_no_suffix(self):
        assert parse_item_title("<html><head><title>Sword</title></head></html>") == "Sword"

    def test_missing_title(self):
        with pytest.raises(LinkLookupError):
            parse_item_title("<html><body>nothing</body></html>")

    def test_empty_title(self):
        with pytest.raises(LinkLookupError):
            parse_item_title("<html><head><title> - Aion Codex</title></head></html>")


class TestCodexResolver:
    """Test network resolution with a mocked session."""

    def test_item_lookup(self, session):
        session.get.return_value = _response(PAGE)
        resolver = CodexResolver(base_url="https://codex.test/en/", session=session, timeout=3)
        assert resolver.resolve(LinkKind.ITEM, "152000001") == "Greater Healing Potion"
        session.get.assert_called_once_with("https://codex.test/en/item/152000001", timeout=3)

    def test_charname_needs_no_network(self, session):
        resolver = CodexResolver(session=session)
        assert resolver.resolve(LinkKind.CHARACTER_NAME, "Bob") == "Bob"
        session.get.assert_not_called()

    def test_other_kind_fails(self, session):
        with pytest.raises(LinkLookupError):
            CodexResolver(session=session).resolve(LinkKind.OTHER, "1")

    def test_not_found_no_retry(self, session):
        session.get.return_value = _response(status=404)
        resolver = CodexResolver(session=session, max_retries=3, retry_delay=0)
        with pytest.raises(LinkLookupError):
            resolver.resolve(LinkKind.ITEM, "1")
        assert session.get.call_count == 1

    def test_timeout_retried_then_fails(self, session):
        session.get.side_effect = requests.Timeout("slow")
        resolver = CodexResolver(session=session, max_retries=2, retry_delay=0)
        with pytest.raises(LinkLookupError):
            resolver.resolve(LinkKind.ITEM, "1")
        assert session.get.call_count == 2

    def test_server_error_then_success(self, session):
        session.get.side_effect = [_response(status=503), _response(PAGE)]
        resolver = CodexResolver(session=session, max_retries=2, retry_delay=0)
        assert resolver.resolve(LinkKind.ITEM, "1") == "Greater Healing Potion"

    def test_lookup_error_is_builtin_lookup_error(self):
        assert issubclass(LinkLookupError, LookupError)

    def test_close_releases_session(self, session):
        CodexResolver(session=session).close()
        session.close.assert_called_once()


class TestCodexOutage:
    """Repeated failures must not cost a network round trip per line."""

    def test_not_found_remembered(self, session):
        session.get.return_value = _response(status=404)
        resolver = CodexResolver(session=session, retry_delay=0)
        for _ in range(3):
            with pytest.raises(LinkLookupError):
                resolver.resolve(LinkKind.ITEM, "999")
        assert session.get.call_count == 1

    def test_not_found_does_not_block_other_items(self, session):
        session.get.side_effect = [_response(status=404), _response(PAGE)]
        resolver = CodexResolver(session=session, retry_delay=0)
        with pytest.raises(LinkLookupError):
            resolver.resolve(LinkKind.ITEM, "999")
        assert resolver.resolve(LinkKind.ITEM, "1") == "Greater Healing Potion"

    def test_transport_failure_pauses_lookups(self, session):
        session.get.side_effect = requests.ConnectionError("down")
        resolver = CodexResolver(
            session=session, max_retries=2, retry_delay=0, outage_cooldown=60,
        )
        with pytest.raises(LinkLookupError):
            resolver.resolve(LinkKind.ITEM, "1")
        assert session.get.call_count == 2

        with pytest.raises(LinkLookupError):
            resolver.resolve(LinkKind.ITEM, "2")
        assert session.get.call_count == 2

    def test_lookups_resume_after_cooldown(self, session):
        session.get.side_effect = [requests.ConnectionError("down"), _response(PAGE)]
        resolver = CodexResolver(
            session=session, max_retries=1, retry_delay=0, outage_cooldown=0,
        )
        with pytest.raises(LinkLookupError):
            resolver.resolve(LinkKind.ITEM, "1")
        assert resolver.resolve(LinkKind.ITEM, "1") == "Greater Healing Potion"

    def test_server_errors_pause_lookups(self, session):
        session.get.return_value = _response(status=503)
        resolver = CodexResolver(session=session, max_retries=2, retry_delay=0)
        with pytest.raises(LinkLookupError):
            resolver.resolve(LinkKind.ITEM, "1")
        with pytest.raises(LinkLookupError):
            resolver.resolve(LinkKind.ITEM, "2")
        assert session.get.call_count == 2


class TestCachedResolver:
    """Test cache consultation."""

    def test_second_lookup_from_cache(self):
        inner = MagicMock()
        inner.resolve.return_value = "Sword"
        resolver = CachedResolver(inner, LinkCache())
        assert resolver.resolve(LinkKind.ITEM, "1") == "Sword"
        assert resolver.resolve(LinkKind.ITEM, "1") == "Sword"
        assert inner.resolve.call_count == 1

    def test_failures_not_cached(self):
        inner = MagicMock()
        inner.resolve.side_effect = [LinkLookupError("down"), "Sword"]
        cache = LinkCache()
        resolver = CachedResolver(inner, cache)
        with pytest.raises(LinkLookupError):
            resolver.resolve(LinkKind.ITEM, "1")
        assert cache.get("item", "1") is None
        assert resolver.resolve(LinkKind.ITEM, "1") == "Sword"
        assert inner.resolve.call_count == 2
