from __future__ import annotations

import io
import sys
from typing import Iterator
from unittest.mock import patch

import pytest
from rich.console import Console

from bundlekeeper.utils.console import (
    BUNDLEKEEPER_THEME,
    _get_console,
    _should_use_color,
    colorize_status,
    print_error,
    print_info,
    print_success,
    print_table,
    print_warning,
    reconfigure_console,
)


@pytest.fixture(autouse=True)
def reset_console() -> Iterator[None]:
    """Reset the console singleton around each test."""
    reconfigure_console()
    yield
    reconfigure_console()


@pytest.fixture
def output() -> Iterator[io.StringIO]:
    """Route console output into a buffer."""
    buffer = io.StringIO()
    console = Console(file=buffer, theme=BUNDLEKEEPER_THEME, no_color=True, width=120)
    with patch("bundlekeeper.utils.console._get_console", return_value=console):
        yield buffer


@pytest.mark.unit
class TestConsoleLifecycle:
    """Tests for console creation and color detection."""

    def test_singleton(self) -> None:
        assert _get_console() is _get_console()

    def test_reconfigure_creates_new_instance(self) -> None:
        first = _get_console()
        reconfigure_console()

        assert _get_console() is not first

    def test_no_color_env_disables_color(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("NO_COLOR", "1")

        assert _should_use_color() is False

    def test_ci_env_disables_color(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("CI", "true")

        assert _should_use_color() is False

    def test_tty_enables_color(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("CI", raising=False)

        with patch.object(sys.stdout, "isatty", return_value=True):
            assert _should_use_color() is True


@pytest.mark.unit
class TestMessages:
    """Tests for status message helpers."""

    def test_prefixes(self, output: io.StringIO) -> None:
        print_success("done")
        print_error("failed")
        print_warning("careful")
        print_info("note")

        lines = output.getvalue().splitlines()
        assert lines == ["[OK] done", "[ERROR] failed", "[WARNING] careful", "note"]

    def test_messages_are_not_markup(self, output: io.StringIO) -> None:
        print_error("Unknown keys in [bundlekeeper]: x")

        assert output.getvalue().strip() == "[ERROR] Unknown keys in [bundlekeeper]: x"

    def test_custom_prefix(self, output: io.StringIO) -> None:
        print_success("done", prefix=">>")

        assert output.getvalue().strip() == ">> done"


@pytest.mark.unit
class TestPrintTable:
    """Tests for print_table()."""

    def test_renders_headers_and_rows(self, output: io.StringIO) -> None:
        print_table(
            [{"Bundle": "osgi:org.a:jar:1.0.0", "Status": "installed"}],
            title="Report",
        )

        rendered = output.getvalue()
        assert "Report" in rendered
        assert "Bundle" in rendered
        assert "osgi:org.a:jar:1.0.0" in rendered

    def test_explicit_header_order(self, output: io.StringIO) -> None:
        print_table([{"A": "1", "B": "2"}], headers=["B"])

        rendered = output.getvalue()
        assert "2" in rendered
        assert "1" not in rendered

    def test_column_styles_and_status_markup(self, output: io.StringIO) -> None:
        print_table(
            [{"Bundle": "osgi:org.a:jar:1.0.0", "Status": colorize_status("failed")}],
            column_styles={"Bundle": {"style": "bold cyan", "no_wrap": True}},
        )

        rendered = output.getvalue()
        assert "osgi:org.a:jar:1.0.0" in rendered
        assert "failed" in rendered
        assert "[red]" not in rendered

    def test_empty_data_prints_nothing(self, output: io.StringIO) -> None:
        print_table([])

        assert output.getvalue() == ""


@pytest.mark.unit
class TestColorizeStatus:
    """Tests for colorize_status()."""

    @pytest.mark.parametrize(
        "status, expected",
        [
            ("installed", "[green]installed[/green]"),
            ("uploaded", "[green]uploaded[/green]"),
            ("failed", "[red]failed[/red]"),
            ("FAILED", "[red]FAILED[/red]"),
            ("skipped", "skipped"),
        ],
    )
    def test_colors(self, status: str, expected: str) -> None:
        assert colorize_status(status) == expected
