"""Tests for the content fetcher and its response cache.

Mocking strategy:
- ``respx`` patches ``httpx`` at the transport layer so no real network
  calls are made.
- The fetcher takes an injectable cache timer, so expiry is tested without sleeping.
"""

from __future__ import annotations

import httpx
import pytest
import respx

from chviewer.errors import TransportFailure
from chviewer.models import FetchResult
from chviewer.scraper.fetcher import ContentFetcher

_URL = "https://mi.5ch.net/news4vip/subject.txt"


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture()
def http_client():
    with httpx.Client() as client:
        yield client


def _fetcher(client: httpx.Client, relay_url: str = "", timer=None) -> ContentFetcher:
    kwargs = {"timer": timer} if timer is not None else {}
    return ContentFetcher(
        client, relay_url=relay_url, user_agent="test-agent", cache_ttl=90, **kwargs
    )


# ---------------------------------------------------------------------------
# Response cache
# ---------------------------------------------------------------------------

class TestResponseCache:
    def test_entry_served_within_ttl(self, http_client) -> None:
        clock = FakeClock()
        fetcher = _fetcher(http_client, timer=clock)
        with respx.mock:
            route = respx.get(_URL).mock(return_value=httpx.Response(200, content=b"x"))
            fetcher.fetch(_URL)
            clock.now += 89
            fetcher.fetch(_URL)

        assert route.call_count == 1

    def test_entry_refetched_after_ttl(self, http_client) -> None:
        clock = FakeClock()
        fetcher = _fetcher(http_client, timer=clock)
        with respx.mock:
            route = respx.get(_URL).mock(return_value=httpx.Response(200, content=b"x"))
            fetcher.fetch(_URL)
            clock.now += 90
            fetcher.fetch(_URL)

        assert route.call_count == 2

    def test_expired_entries_are_evicted_on_insert(self, http_client) -> None:
        clock = FakeClock()
        fetcher = _fetcher(http_client, timer=clock)
        with respx.mock:
            respx.get(url__startswith="https://mi.5ch.net/").mock(
                return_value=httpx.Response(200, content=b"x")
            )
            for i in range(50):
                fetcher.fetch(f"https://mi.5ch.net/b{i}/subject.txt")
            clock.now += 1000
            fetcher.fetch("https://mi.5ch.net/last/subject.txt")

        assert len(fetcher.cache) == 1

    def test_size_is_bounded(self, http_client) -> None:
        fetcher = ContentFetcher(http_client, cache_size=3)
        with respx.mock:
            respx.get(url__startswith="https://mi.5ch.net/").mock(
                return_value=httpx.Response(200, content=b"x")
            )
            for i in range(10):
                fetcher.fetch(f"https://mi.5ch.net/b{i}/subject.txt")

        assert len(fetcher.cache) == 3

    def test_clear_cache(self, http_client) -> None:
        fetcher = _fetcher(http_client)
        with respx.mock:
            respx.get(_URL).mock(return_value=httpx.Response(200, content=b"x"))
            fetcher.fetch(_URL)
        assert fetcher.cached_count() == 1
        fetcher.clear_cache()
        assert fetcher.cached_count() == 0


# ---------------------------------------------------------------------------
# Relay wrapping
# ---------------------------------------------------------------------------

class TestTargetFor:
    def test_direct_when_no_relay(self, http_client) -> None:
        assert _fetcher(http_client).target_for(_URL) == _URL

    def test_relay_wraps_url_as_query_parameter(self, http_client) -> None:
        fetcher = _fetcher(http_client, relay_url="https://relay.example/raw")
        assert fetcher.target_for(_URL) == (
            "https://relay.example/raw?url=https%3A%2F%2Fmi.5ch.net%2Fnews4vip%2Fsubject.txt"
        )

    def test_relay_with_existing_query(self, http_client) -> None:
        fetcher = _fetcher(http_client, relay_url="https://relay.example/p?key=1")
        assert fetcher.target_for(_URL).startswith("https://relay.example/p?key=1&url=https%3A")

    def test_relay_ending_in_question_mark(self, http_client) -> None:
        fetcher = _fetcher(http_client, relay_url="https://relay.example/?")
        assert fetcher.target_for(_URL).startswith("https://relay.example/?url=https%3A")


# ---------------------------------------------------------------------------
# fetch()
# ---------------------------------------------------------------------------

class TestFetch:
    def test_returns_binary_result(self, http_client) -> None:
        with respx.mock:
            respx.get(_URL).mock(
                return_value=httpx.Response(
                    200, content=b"1.dat<>A (1)\n", headers={"content-type": "text/plain"}
                )
            )
            result = _fetcher(http_client).fetch(_URL)

        assert isinstance(result, FetchResult)
        assert result.status == 200
        assert result.ok
        assert result.body == b"1.dat<>A (1)\n"
        assert result.headers["content-type"] == "text/plain"

    def test_text_mode_returns_str(self, http_client) -> None:
        with respx.mock:
            respx.get(_URL).mock(return_value=httpx.Response(200, text="hello"))
            result = _fetcher(http_client).fetch(_URL, as_binary=False)
        assert result.body == "hello"

    def test_sends_user_agent_and_referer(self, http_client) -> None:
        with respx.mock:
            route = respx.get(_URL).mock(return_value=httpx.Response(200, content=b""))
            _fetcher(http_client).fetch(_URL, referer="https://mi.5ch.net/news4vip/")

        request = route.calls.last.request
        assert request.headers["user-agent"] == "test-agent"
        assert request.headers["referer"] == "https://mi.5ch.net/news4vip/"

    def test_error_status_is_returned_not_raised(self, http_client) -> None:
        with respx.mock:
            respx.get(_URL).mock(return_value=httpx.Response(503, content=b"busy"))
            result = _fetcher(http_client).fetch(_URL)
        assert result.status == 503
        assert not result.ok

    def test_second_fetch_within_ttl_hits_cache(self, http_client) -> None:
        fetcher = _fetcher(http_client)
        with respx.mock:
            route = respx.get(_URL).mock(return_value=httpx.Response(200, content=b"x"))
            first = fetcher.fetch(_URL)
            second = fetcher.fetch(_URL)

        assert route.call_count == 1
        assert first == second

    def test_non_200_is_never_cached(self, http_client) -> None:
        fetcher = _fetcher(http_client)
        with respx.mock:
            route = respx.get(_URL).mock(return_value=httpx.Response(404))
            fetcher.fetch(_URL)
            fetcher.fetch(_URL)

        assert route.call_count == 2
        assert fetcher.cached_count() == 0

    def test_cache_key_includes_mode(self, http_client) -> None:
        fetcher = _fetcher(http_client)
        with respx.mock:
            route = respx.get(_URL).mock(return_value=httpx.Response(200, text="x"))
            fetcher.fetch(_URL, as_binary=True)
            fetcher.fetch(_URL, as_binary=False)

        assert route.call_count == 2

    def test_relay_target_is_requested(self, http_client) -> None:
        fetcher = _fetcher(http_client, relay_url="https://relay.example/raw")
        with respx.mock:
            route = respx.get("https://relay.example/raw", params={"url": _URL}).mock(
                return_value=httpx.Response(200, content=b"via relay")
            )
            result = fetcher.fetch(_URL)

        assert route.called
        assert result.body == b"via relay"

    def test_connect_error_raises_transport_failure(self, http_client) -> None:
        with respx.mock:
            respx.get(_URL).mock(side_effect=httpx.ConnectError("connection refused"))
            with pytest.raises(TransportFailure) as excinfo:
                _fetcher(http_client).fetch(_URL)

        assert excinfo.value.url == _URL
        assert isinstance(excinfo.value.__cause__, httpx.ConnectError)

    def test_timeout_raises_transport_failure(self, http_client) -> None:
        with respx.mock:
            respx.get(_URL).mock(side_effect=httpx.ReadTimeout("timed out"))
            with pytest.raises(TransportFailure):
                _fetcher(http_client).fetch(_URL, timeout=0.1)
