"""Resolve which config file a command operates on."""

import logging
from pathlib import Path
from typing import Optional, Tuple

import typer

from toolentry_cli.config import SUPPORTED_CLIENTS, ConfigType, get_client_config, resolve_path
from toolentry_cli.store import infer_config_type

from .context import print_error, print_hint, print_warning

logger = logging.getLogger(__name__)


def resolve_target(client: Optional[str], path: Optional[Path]) -> Tuple[Path, ConfigType]:
    """
    Pick the target file from a client name or an explicit ``--path``.

    ``--path`` wins when both are given. The format of a custom path is
    inferred from its extension.

    Raises:
        typer.Exit: If neither is given or the client is unknown
        PlatformError: If the client has no path on this platform
    """
    if not client and path is None:
        print_error("Either <client> or --path must be provided")
        print_hint(f"Supported clients: {', '.join(SUPPORTED_CLIENTS)}")
        raise typer.Exit(1)

    if path is not None:
        if client:
            print_warning("Both client and --path provided, using custom path")
        target = path.expanduser()
        logger.info(f"Using custom path: {target}")
        return target, infer_config_type(target)

    if client not in SUPPORTED_CLIENTS:
        print_error(f"Unsupported client: {client}")
        print_hint(f"Supported clients: {', '.join(SUPPORTED_CLIENTS)}")
        raise typer.Exit(1)

    target = resolve_path(client)
    logger.info(f"Using {client} config: {target}")
    return target, get_client_config(client).config_type
