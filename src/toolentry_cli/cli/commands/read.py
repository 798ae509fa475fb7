"""`toolentry read`: print a client's MCP configuration as JSON."""

import json
import logging
from pathlib import Path
from typing import Optional

import typer

from toolentry_cli.store import read_config

from ..context import get_state, handle_errors, print_error
from ..targets import resolve_target

logger = logging.getLogger(__name__)


@handle_errors
def read_command(
    ctx: typer.Context,
    client: Optional[str] = typer.Argument(None, help="Client name (e.g. claude-desktop, cursor)"),
    path: Optional[Path] = typer.Option(None, "--path", "-p", help="Custom configuration file path"),
):
    """
    Read the configuration file of a client or a custom path.

    YAML files are converted, so the output is always JSON.

    Examples:
        toolentry read claude-desktop
        toolentry read --path ~/.cursor/mcp.json
    """
    get_state(ctx)
    config_path, config_type = resolve_target(client, path)

    logger.info(f"Reading config from: {config_path}")
    document = read_config(config_path, config_type)
    if document is None:
        print_error(f"Configuration file not found: {config_path}")
        raise typer.Exit(1)

    typer.echo(json.dumps(document, indent=2, ensure_ascii=False))
