"""`toolentry write`: replace (or deep-merge into) a client's MCP configuration."""

import json
import logging
from pathlib import Path
from typing import List, Optional

import typer

from toolentry_cli.store import backup_config, config_lock, deep_merge, read_config, write_config

from ..context import get_state, handle_errors, print_error, print_info, print_success
from ..targets import resolve_target

logger = logging.getLogger(__name__)


@handle_errors
def write_command(
    ctx: typer.Context,
    args: List[str] = typer.Argument(
        ..., help='"<client> <config-json>", or "<config-json>" together with --path'
    ),
    path: Optional[Path] = typer.Option(None, "--path", "-p", help="Custom configuration file path"),
    force: bool = typer.Option(False, "--force", "-f", help="Create missing parent directories"),
    merge: bool = typer.Option(False, "--merge", "-m", help="Deep-merge into the existing document instead of replacing it"),
    backup: Optional[bool] = typer.Option(
        None, "--backup/--no-backup", help="Back up the existing file first (default from settings)"
    ),
):
    """
    Write a configuration document to a client or a custom path.

    Examples:
        toolentry write claude-desktop '{"mcpServers": {}}'
        toolentry write --path ./mcp.json '{"mcpServers": {}}'
        toolentry write cursor --merge '{"mcpServers": {"git": {"command": "npx", "args": []}}}'
    """
    state = get_state(ctx)

    if path is not None:
        client, config_json = None, " ".join(args)
    elif len(args) >= 2:
        client, config_json = args[0], " ".join(args[1:])
    else:
        print_error("Both <client> and <config-json> are required when --path is not given")
        raise typer.Exit(1)

    config_path, config_type = resolve_target(client, path)

    try:
        document = json.loads(config_json)
    except ValueError as e:
        logger.debug(f"JSON parse error: {e}")
        print_error("Invalid JSON configuration provided")
        raise typer.Exit(1)

    settings = state.settings
    do_backup = settings.backup_on_write if backup is None else backup

    with config_lock(config_path, settings.lock_dir):
        if merge:
            existing = read_config(config_path, config_type)
            if existing is None:
                existing = {}
            if not isinstance(existing, dict) or not isinstance(document, dict):
                print_error("--merge needs both the existing and the new document to be objects")
                raise typer.Exit(1)
            document = deep_merge(existing, document)

        if do_backup and config_path.exists():
            backup_path = backup_config(config_path)
            print_info(f"Backup created: {backup_path}")

        write_config(config_path, document, config_type, create_dirs=force)

    print_success(f"Configuration written successfully to: {config_path}")
