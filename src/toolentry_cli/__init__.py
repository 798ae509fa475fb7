"""Toolentry CLI - MCP server configuration management.

Reads, writes and merges the MCP configuration files of AI-assistant
clients, runs shell commands on behalf of agents, and smoke-tests MCP
server launch commands.

Architecture:
- config/: client registry, platform paths and CLI settings
- store/: config file read/write/merge with locking and backups
- probe/: server liveness and JSON-RPC handshake probe
- shell.py: shell command runner used by `toolentry exec`
- templates.py: catalog of named server configuration fragments
- cli/: typer application and subcommands
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
