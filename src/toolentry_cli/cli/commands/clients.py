"""`toolentry clients`: list supported clients and where their configs live."""

import typer
from rich.table import Table

from toolentry_cli.config import CLIENT_CONFIGS, PlatformPaths, resolve_path
from toolentry_cli.errors import PlatformError

from ..context import console, handle_errors

app = typer.Typer(help="Supported AI clients and their config locations")


@app.command("list")
@handle_errors
def list_command():
    """
    List every supported client with its config path on this platform.
    """
    paths = PlatformPaths.detect()

    table = Table(title=f"Supported clients ({paths.platform})")
    table.add_column("Client", style="cyan", no_wrap=True)
    table.add_column("Format")
    table.add_column("Config path")
    table.add_column("Exists", justify="center")

    for client in CLIENT_CONFIGS:
        try:
            config_path = client.path_for(paths)
        except PlatformError:
            table.add_row(client.name, client.config_type, "[dim]not available[/dim]", "")
            continue
        exists = "[green]yes[/green]" if config_path.exists() else "[dim]no[/dim]"
        table.add_row(client.name, client.config_type, str(config_path), exists)

    console.print(table)


@app.command("path")
@handle_errors
def path_command(
    client: str = typer.Argument(..., help="Client name (e.g. claude-desktop)"),
):
    """
    Print the config file path of one client.

    Examples:
        toolentry clients path cursor
    """
    typer.echo(str(resolve_path(client)))
