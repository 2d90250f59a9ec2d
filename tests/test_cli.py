"""Tests for the chviewer CLI commands.

Uses ``typer.testing.CliRunner``; upstream traffic is mocked with ``respx``.
``uvicorn.run`` is patched for the ``serve`` command.
"""

from __future__ import annotations

from unittest.mock import patch

import httpx
import respx
from typer.testing import CliRunner

from cli.main import app

runner = CliRunner()

BASE = "https://mi.5ch.net/news4vip/"
SUBJECT = "https://mi.5ch.net/news4vip/subject.txt"
DAT = "https://mi.5ch.net/news4vip/dat/1700000000.dat"
READ = "https://mi.5ch.net/test/read.cgi/news4vip/1700000000/"


class TestBoardCommand:
    def test_lists_threads(self):
        with respx.mock:
            respx.get(SUBJECT).mock(
                return_value=httpx.Response(200, content="1700000000.dat<>テスト (5)\n".encode("cp932"))
            )
            result = runner.invoke(app, ["board", "--url", BASE])

        assert result.exit_code == 0, result.output
        assert "1700000000  テスト (5)" in result.output

    def test_upstream_error_exits_1(self):
        with respx.mock:
            respx.get(SUBJECT).mock(return_value=httpx.Response(404))
            result = runner.invoke(app, ["board", "--url", BASE])
        assert result.exit_code == 1
        assert "[board] Failed" in result.output


class TestThreadCommand:
    def test_prints_posts_without_markup(self):
        with respx.mock:
            respx.get(DAT).mock(
                return_value=httpx.Response(200, content=b"Anon<><>2024/01/01<>Hello >>1<>T\n")
            )
            result = runner.invoke(app, ["thread", "--base", BASE, "--dat", "1700000000"])

        assert result.exit_code == 0, result.output
        assert "source=dat" in result.output
        assert "1 Anon [2024/01/01]" in result.output
        assert "Hello >>1" in result.output
        assert "<a " not in result.output

    def test_requires_arguments(self):
        result = runner.invoke(app, ["thread", "--base", BASE])
        assert result.exit_code == 1

    def test_not_found_exits_1(self):
        with respx.mock:
            respx.get(DAT).mock(return_value=httpx.Response(403))
            respx.get(READ).mock(return_value=httpx.Response(404))
            result = runner.invoke(app, ["thread", "--url", READ])
        assert result.exit_code == 1
        assert "404" in result.output


class TestDiagCommand:
    def test_prints_probe_statuses(self):
        with respx.mock:
            respx.get(SUBJECT).mock(return_value=httpx.Response(200, content=b""))
            respx.get(DAT).mock(return_value=httpx.Response(403))
            respx.get(READ).mock(side_effect=httpx.ConnectError("refused"))
            result = runner.invoke(app, ["diag", "--base", BASE, "--dat", "1700000000"])

        assert result.exit_code == 0, result.output
        assert "subject  200" in result.output
        assert "dat      403" in result.output
        assert "read     error:" in result.output


class TestServeCommand:
    def test_runs_uvicorn(self):
        with patch("uvicorn.run") as mock_run:
            result = runner.invoke(app, ["serve", "--port", "8123"])
        assert result.exit_code == 0, result.output
        mock_run.assert_called_once()
        assert mock_run.call_args.kwargs["port"] == 8123
