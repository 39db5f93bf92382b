"""Unit tests for kraken_scaffold.utils."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from kraken_scaffold.utils import (
    format_duration,
    print_debug,
    print_error,
    run_command,
    set_debug,
)


pytestmark = pytest.mark.unit


class TestFormatDuration:
    def test_seconds(self):
        assert format_duration(3.74) == "3.7s"

    def test_minutes(self):
        assert format_duration(65.2) == "1m 5s"

    def test_negative_clamped(self):
        assert format_duration(-1) == "0.0s"


class TestRunCommand:
    @pytest.mark.asyncio
    async def test_captures_stdout(self, tmp_path: Path):
        rc, out, err = await run_command(
            [sys.executable, "-c", "import os; print(os.getcwd())"], cwd=tmp_path
        )
        assert rc == 0
        assert Path(out).resolve() == tmp_path.resolve()
        assert err == ""

    @pytest.mark.asyncio
    async def test_nonzero_exit_and_stderr(self):
        rc, _, err = await run_command(
            [sys.executable, "-c", "import sys; sys.stderr.write('boom'); sys.exit(3)"]
        )
        assert rc == 3
        assert err == "boom"

    @pytest.mark.asyncio
    async def test_extra_env_merged(self):
        rc, out, _ = await run_command(
            [sys.executable, "-c", "import os; print(os.environ['KRAKEN_TEST_VALUE'])"],
            env={"KRAKEN_TEST_VALUE": "merged"},
        )
        assert (rc, out) == (0, "merged")

    @pytest.mark.asyncio
    async def test_timeout_reports_minus_one(self):
        rc, _, err = await run_command(
            [sys.executable, "-c", "import time; time.sleep(5)"], timeout=0.2
        )
        assert rc == -1
        assert "timed out" in err


class TestOutput:
    def test_debug_silent_by_default(self, capsys):
        print_debug("hidden")
        assert "hidden" not in capsys.readouterr().out

    def test_debug_enabled(self, capsys):
        set_debug(True)
        print_debug("visible")
        assert "kraken-scaffold visible" in capsys.readouterr().out

    def test_errors_go_to_stderr(self, capsys):
        print_error("bad thing")
        captured = capsys.readouterr()
        assert "bad thing" in captured.err
        assert "bad thing" not in captured.out

    def test_markup_in_messages_printed_literally(self, capsys):
        set_debug(True)
        print_error("bad key x[/y]")
        print_debug("installing [bold]pkg")
        captured = capsys.readouterr()
        assert "bad key x[/y]" in captured.err
        assert "installing [bold]pkg" in captured.out
