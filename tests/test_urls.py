"""Tests for board / thread URL construction and parsing."""

from __future__ import annotations

import pytest

from chviewer.errors import MalformedInput
from chviewer.scraper.urls import (
    board_short_name,
    dat_url,
    fallback_url,
    join_url,
    normalize_base,
    split_thread_url,
    strip_filename,
    subject_url,
    thread_id_from_filename,
    validate_thread_id,
)


class TestJoinUrl:
    @pytest.mark.parametrize(
        "base",
        [
            "https://mi.5ch.net/news4vip",
            "https://mi.5ch.net/news4vip/",
            "https://mi.5ch.net/news4vip//",
        ],
    )
    def test_round_trip_through_strip_filename(self, base: str) -> None:
        joined = join_url(base, "subject.txt")
        assert joined == "https://mi.5ch.net/news4vip/subject.txt"
        assert strip_filename(joined) == normalize_base(base)

    def test_leading_slash_on_path(self) -> None:
        assert join_url("https://a.example/b/", "/dat/1.dat") == "https://a.example/b/dat/1.dat"

    def test_subject_and_dat_urls(self) -> None:
        base = "https://mi.5ch.net/news4vip/"
        assert subject_url(base) == "https://mi.5ch.net/news4vip/subject.txt"
        assert dat_url(base, "1700000000") == "https://mi.5ch.net/news4vip/dat/1700000000.dat"

    def test_thread_id_round_trips_through_filename(self) -> None:
        url = dat_url("https://mi.5ch.net/news4vip/", thread_id_from_filename("1700000000.dat"))
        assert url.endswith("/dat/1700000000.dat")


class TestFallbackUrl:
    def test_board_short_name(self) -> None:
        assert board_short_name("https://mi.5ch.net/news4vip/") == "news4vip"
        assert board_short_name("https://mi.5ch.net/a/news4vip") == "news4vip"

    def test_board_short_name_requires_a_segment(self) -> None:
        with pytest.raises(MalformedInput):
            board_short_name("https://mi.5ch.net/")

    def test_fallback_url(self) -> None:
        assert (
            fallback_url("https://mi.5ch.net/news4vip/", "1700000000")
            == "https://mi.5ch.net/test/read.cgi/news4vip/1700000000/"
        )


class TestSplitThreadUrl:
    def test_dat_url(self) -> None:
        assert split_thread_url("https://mi.5ch.net/news4vip/dat/1700000000.dat") == (
            "https://mi.5ch.net/news4vip/",
            "1700000000",
        )

    def test_read_cgi_url(self) -> None:
        assert split_thread_url("https://mi.5ch.net/test/read.cgi/news4vip/1700000000/l50") == (
            "https://mi.5ch.net/news4vip/",
            "1700000000",
        )

    def test_mobile_itest_url(self) -> None:
        assert split_thread_url(
            "https://itest.5ch.net/lavender/test/read.cgi/keiba/1700000000/"
        ) == ("https://lavender.5ch.net/keiba/", "1700000000")

    @pytest.mark.parametrize(
        "url",
        ["", "not a url", "ftp://mi.5ch.net/news4vip/dat/1.dat", "https://mi.5ch.net/news4vip/"],
    )
    def test_rejects_unrecognised(self, url: str) -> None:
        with pytest.raises(MalformedInput):
            split_thread_url(url)


class TestValidateThreadId:
    def test_accepts_digits(self) -> None:
        assert validate_thread_id(" 1700000000 ") == "1700000000"

    @pytest.mark.parametrize("value", ["", "abc", "../1", "1.dat"])
    def test_rejects_non_digits(self, value: str) -> None:
        with pytest.raises(MalformedInput):
            validate_thread_id(value)
