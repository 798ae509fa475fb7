"""`toolentry autoinstall`: add MCP servers to a client without touching the rest."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer

from toolentry_cli.store import backup_config, config_lock, get_servers_key, merge_servers, read_config, write_config
from toolentry_cli.templates import get_template, list_templates, template_help

from ..context import get_state, handle_errors, print_error, print_hint, print_info, print_success
from ..targets import resolve_target

logger = logging.getLogger(__name__)


def _parse_servers(config_json: str) -> Dict[str, Any]:
    """Validate a ``{name: {command, args, ...}}`` map, exiting on bad input."""
    try:
        servers = json.loads(config_json)
    except ValueError as e:
        logger.debug(f"JSON parse error: {e}")
        print_error("Invalid JSON configuration provided")
        raise typer.Exit(1)

    if not isinstance(servers, dict):
        print_error("Server configuration must be a JSON object of named servers")
        raise typer.Exit(1)

    if "command" in servers:
        print_error("Single server config must be wrapped with a server name")
        print_hint('Example: {"my-server": {"command": "npx", "args": ["my-mcp-server"]}}')
        raise typer.Exit(1)

    if not servers:
        print_error("No servers provided in configuration")
        raise typer.Exit(1)

    for name, server in servers.items():
        if not isinstance(server, dict):
            print_error(f"Server '{name}' must be a JSON object")
            raise typer.Exit(1)

    return servers


@handle_errors
def autoinstall_command(
    ctx: typer.Context,
    args: Optional[List[str]] = typer.Argument(
        None, help='"[client] <servers-json>"; the JSON is omitted when --template is used'
    ),
    path: Optional[Path] = typer.Option(None, "--path", "-p", help="Custom configuration file path"),
    force: bool = typer.Option(False, "--force", "-f", help="Create missing parent directories"),
    backup: bool = typer.Option(False, "--backup", "-b", help="Back up the existing file first"),
    template: Optional[str] = typer.Option(
        None, "--template", "-T", help="Install a predefined server (see 'toolentry templates list')"
    ),
):
    """
    Merge MCP servers into a client configuration.

    Existing servers with other names and every non-server key are kept.

    Examples:
        toolentry autoinstall cursor '{"git": {"command": "npx", "args": ["@modelcontextprotocol/server-git"]}}'
        toolentry autoinstall claude-desktop --template filesystem
        toolentry autoinstall --path ./mcp.json --template toolentry
    """
    state = get_state(ctx)
    args = list(args or [])

    if template:
        if len(args) > 1:
            print_error("Server JSON cannot be combined with --template")
            raise typer.Exit(1)
        client = args[0] if args and path is None else None
    elif path is not None:
        client = None
        if len(args) != 1:
            print_error("Exactly one <servers-json> argument is required with --path")
            raise typer.Exit(1)
    elif len(args) == 2:
        client = args[0]
    else:
        print_error("Usage: toolentry autoinstall <client> <servers-json>")
        raise typer.Exit(1)

    config_path, config_type = resolve_target(client, path)

    if template:
        server_template = get_template(template)
        if server_template is None:
            print_error(f"Unknown template: {template}")
            print_hint(f"Available templates:\n{template_help()}")
            raise typer.Exit(1)
        new_servers = server_template.generate(
            client=client, custom_path=str(path) if path is not None else None
        )
        logger.info(f"Using template '{template}' ({', '.join(list_templates())} available)")
    else:
        new_servers = _parse_servers(args[-1])

    settings = state.settings

    with config_lock(config_path, settings.lock_dir):
        existing = read_config(config_path, config_type)
        if existing is None:
            logger.info("No existing configuration found, creating a new one")
        else:
            logger.info("Existing configuration found, merging")
            if backup:
                backup_path = backup_config(config_path)
                print_info(f"Backup created: {backup_path}")

        merged = merge_servers(existing, new_servers)
        write_config(config_path, merged, config_type, create_dirs=force)

    names = list(new_servers)
    print_success(f"Successfully installed {len(names)} server(s) to {config_path}")
    print_info(f"Installed servers: {', '.join(names)}")
    logger.info(f"Total servers in config: {len(merged[get_servers_key(merged)])}")
