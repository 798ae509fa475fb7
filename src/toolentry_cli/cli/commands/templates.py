"""`toolentry templates`: browse predefined server configurations."""

import json
from typing import Optional

import typer
from rich.table import Table

from toolentry_cli.templates import SERVER_TEMPLATES, get_template, template_help

from ..context import console, handle_errors, print_error, print_hint

app = typer.Typer(help="Predefined MCP server configurations")


@app.command("list")
def list_command():
    """List available templates."""
    table = Table(title="Server templates")
    table.add_column("Template", style="cyan", no_wrap=True)
    table.add_column("Name")
    table.add_column("Description")

    for key, template in SERVER_TEMPLATES.items():
        table.add_row(key, template.name, template.description)

    console.print(table)


@app.command("show")
@handle_errors
def show_command(
    name: str = typer.Argument(..., help="Template key (e.g. filesystem)"),
    client: Optional[str] = typer.Option(None, "--client", help="Client the server would be installed into"),
    path: Optional[str] = typer.Option(None, "--path", "-p", help="Custom config path the server would be installed into"),
):
    """
    Print the server entry a template generates, as JSON.

    The output can be passed straight to `toolentry autoinstall`.
    """
    template = get_template(name)
    if template is None:
        print_error(f"Unknown template: {name}")
        print_hint(f"Available templates:\n{template_help()}")
        raise typer.Exit(1)

    fragment = template.generate(client=client, custom_path=path)
    typer.echo(json.dumps(fragment, indent=2, ensure_ascii=False))
