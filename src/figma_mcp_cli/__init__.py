"""Command-line client for the Figma Desktop MCP server."""

from figma_mcp_cli.config import ClientSettings, __version__, load_settings
from figma_mcp_cli.errors import (
    CLIError,
    DiscoveryError,
    ErrorKind,
    InvocationError,
    ProviderConnectionError,
)
from figma_mcp_cli.registry import CommandEntry, CommandRegistry, discover
from figma_mcp_cli.session import ProviderSession, SessionState

__all__ = [
    "CLIError",
    "ClientSettings",
    "CommandEntry",
    "CommandRegistry",
    "DiscoveryError",
    "ErrorKind",
    "InvocationError",
    "ProviderConnectionError",
    "ProviderSession",
    "SessionState",
    "__version__",
    "discover",
    "load_settings",
]
