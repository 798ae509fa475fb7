"""Per-invocation CLI state and console output helpers.

Verbosity lives on a CLIContext stored in ``typer.Context.obj`` instead of
module globals, so library code (the probe, the store) never reads it.
"""

import logging
from dataclasses import dataclass, field
from functools import wraps
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from toolentry_cli.config.settings import ToolentrySettings
from toolentry_cli.errors import ToolentryError
from toolentry_cli.store.locking import LockTimeout

console = Console(soft_wrap=True)
err_console = Console(stderr=True, soft_wrap=True)

PACKAGE_LOGGER = "toolentry_cli"

logger = logging.getLogger(__name__)


@dataclass
class CLIContext:
    """
    Options shared by every subcommand of one invocation.

    Attributes:
        verbose: Show progress details (INFO logs)
        debug: Show internals and tracebacks (DEBUG logs)
    """

    verbose: bool = False
    debug: bool = False
    _settings: Optional[ToolentrySettings] = field(default=None, init=False, repr=False)

    @property
    def log_level(self) -> int:
        if self.debug:
            return logging.DEBUG
        if self.verbose:
            return logging.INFO
        return logging.WARNING

    def configure_logging(self):
        """Route package logs to stderr through rich at this context's level."""
        logger = logging.getLogger(PACKAGE_LOGGER)
        for handler in list(logger.handlers):
            if isinstance(handler, RichHandler):
                logger.removeHandler(handler)

        handler = RichHandler(
            console=err_console,
            show_time=False,
            show_path=self.debug,
            markup=False,
            rich_tracebacks=self.debug,
        )
        logger.addHandler(handler)
        logger.setLevel(self.log_level)

    @property
    def settings(self) -> ToolentrySettings:
        """User settings, loaded on first access.

        Raises:
            ToolentryError: If ~/.toolentry/config.yaml or an override is invalid
        """
        if self._settings is None:
            try:
                self._settings = ToolentrySettings.load()
            except ValueError as e:
                raise ToolentryError(f"Configuration error: {e}") from e
        return self._settings


def get_state(ctx: typer.Context) -> CLIContext:
    """Return the invocation's CLIContext (a default one outside the root app)."""
    if not isinstance(ctx.obj, CLIContext):
        ctx.obj = CLIContext()
    return ctx.obj


def print_success(message: str):
    console.print(f"[green]✓[/green] {escape(message)}")


def print_info(message: str):
    console.print(escape(message))


def print_warning(message: str):
    err_console.print(f"[yellow]⚠[/yellow] {escape(message)}")


def print_error(message: str):
    err_console.print(f"[red]✗[/red] {escape(message)}")


def print_hint(message: str):
    err_console.print(escape(message), style="dim")


def handle_errors(command):
    """Decorator converting library errors into a red message and exit code 1."""
    @wraps(command)
    def wrapper(*args, **kwargs):
        try:
            return command(*args, **kwargs)
        except (typer.Exit, typer.Abort):
            raise
        except (ToolentryError, LockTimeout) as e:
            print_error(str(e))
            raise typer.Exit(1)
        except Exception as e:
            logger.debug(f"Unhandled error in {command.__name__}", exc_info=True)
            print_error(f"Unexpected error: {e}")
            raise typer.Exit(1)
    return wrapper
