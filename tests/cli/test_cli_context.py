"""Tests for per-invocation CLI state and error handling."""

import logging

import pytest
import typer
from rich.logging import RichHandler

from toolentry_cli.cli.context import PACKAGE_LOGGER, CLIContext, handle_errors
from toolentry_cli.errors import ClientNotFoundError, ToolentryError


class TestCLIContext:
    """Test verbosity and settings on the context object."""

    def test_log_levels(self):
        assert CLIContext().log_level == logging.WARNING
        assert CLIContext(verbose=True).log_level == logging.INFO
        assert CLIContext(verbose=True, debug=True).log_level == logging.DEBUG

    def test_configure_logging_replaces_handler(self):
        logger = logging.getLogger(PACKAGE_LOGGER)

        CLIContext(verbose=True).configure_logging()
        CLIContext(debug=True).configure_logging()

        rich_handlers = [h for h in logger.handlers if isinstance(h, RichHandler)]
        assert len(rich_handlers) == 1
        assert logger.level == logging.DEBUG

    def test_settings_loaded_lazily(self, toolentry_home, monkeypatch):
        monkeypatch.setenv("TOOLENTRY_EXEC_TIMEOUT", "1234")

        assert CLIContext().settings.exec_timeout_ms == 1234
        assert CLIContext().settings.lock_dir == toolentry_home / "locks"

    def test_invalid_settings_become_toolentry_error(self, monkeypatch):
        monkeypatch.setenv("TOOLENTRY_TEST_TIMEOUT", "later")

        with pytest.raises(ToolentryError, match="Configuration error"):
            CLIContext().settings


class TestHandleErrors:
    """Test conversion of library errors into exit codes."""

    def test_library_error_exits_1(self):
        @handle_errors
        def command():
            raise ClientNotFoundError("notepad")

        with pytest.raises(typer.Exit) as exc_info:
            command()

        assert exc_info.value.exit_code == 1

    def test_unexpected_error_exits_1(self):
        @handle_errors
        def command():
            raise KeyError("surprise")

        with pytest.raises(typer.Exit) as exc_info:
            command()

        assert exc_info.value.exit_code == 1

    def test_exit_passes_through(self):
        @handle_errors
        def command():
            raise typer.Exit(3)

        with pytest.raises(typer.Exit) as exc_info:
            command()

        assert exc_info.value.exit_code == 3

    def test_return_value_kept(self):
        @handle_errors
        def command(value):
            return value * 2

        assert command(21) == 42
