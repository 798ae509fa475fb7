"""Command-line entry point for toolentry."""

import typer

from toolentry_cli import __version__

from .commands import autoinstall, clients, read, server_test, shell_exec, templates, write
from .context import CLIContext

app = typer.Typer(
    name="toolentry",
    help="Manage and test MCP server configurations of AI clients.",
    no_args_is_help=True,
    add_completion=False,
)


def _version_callback(value: bool):
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@app.callback()
def root(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show progress details on stderr"),
    debug: bool = typer.Option(False, "--debug", "-d", help="Show internal details and tracebacks"),
    version: bool = typer.Option(
        False, "--version", "-V", callback=_version_callback, is_eager=True, help="Show version and exit"
    ),
):
    """
    Manage and test MCP server configurations of AI clients.

    Logs go to stderr; command results (JSON) go to stdout.
    """
    state = CLIContext(verbose=verbose, debug=debug)
    state.configure_logging()
    ctx.obj = state


app.command("read")(read.read_command)
app.command("write")(write.write_command)
app.command("autoinstall")(autoinstall.autoinstall_command)
app.command(
    "exec",
    context_settings={"allow_extra_args": True, "ignore_unknown_options": True},
)(shell_exec.exec_command)
app.command("test")(server_test.server_test_command)
app.add_typer(clients.app, name="clients")
app.add_typer(templates.app, name="templates")


def main():
    app()
