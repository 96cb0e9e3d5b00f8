"""User-facing text for the Figma MCP client."""

from __future__ import annotations

from rich.console import Console

from figma_mcp_cli.config import DEFAULT_SERVER_URL, __version__
from figma_mcp_cli.errors import CLIError, ErrorKind
from figma_mcp_cli.registry import CommandRegistry

NOT_CONNECTED = "No commands available (not connected)"

# Tool output is JSON and help text; print it verbatim, unwrapped.
console = Console(soft_wrap=True, markup=False, highlight=False, emoji=False)
error_console = Console(
    stderr=True, soft_wrap=True, markup=False, highlight=False, emoji=False
)

_USAGE = """\
Usage:

commands         list all the available commands
<command> -h     quick help on <command>
<command> <arg>  run <command> with argument
clear            clear the screen
exit, quit, q    exit the CLI"""

_NOTE = """\
Note: Make sure Figma Desktop app is running with MCP server enabled in Dev Mode.
Select a frame/layer in Figma before using commands that require selections."""

_CLI_USAGE = """\
Usage: figma-mcp-cli [options] [<command> [<json-args>]]

Without a command, starts an interactive session.

Options:
  <command> <json-args>  run one command and exit
  <command> -h           show parameters and an example for <command>
  --commands             list the commands exposed by the server
  -h, --help             show this help
  -v, --version          show the version
  --verbose              enable debug logging

Example:
  figma-mcp-cli navigate_page '{"pageId":"123:456"}'"""


def render_help_screen(registry: CommandRegistry) -> str:
    """Render the interactive help screen with the discovered command names."""
    command_list = ", ".join(registry.names) if len(registry) else NOT_CONNECTED
    return (
        f"\nFigma Desktop MCP CLI v{__version__}\n\n"
        f"{_USAGE}\n\n"
        f"All commands:\n\n{command_list}\n\n"
        f"{_NOTE}\n"
    )


def render_usage() -> str:
    """Render the command-line usage text."""
    return f"Figma Desktop MCP CLI v{__version__}\n\n{_CLI_USAGE}\n"


def render_command_list(registry: CommandRegistry) -> str:
    """Render a numbered listing of every discovered command."""
    lines = ["Available commands:"]
    if not len(registry):
        lines.append(NOT_CONNECTED)
    for index, entry in enumerate(registry, start=1):
        lines.append(f"{index}. {entry.name} - {entry.description}")
    return "\n".join(lines)


def render_command_detail(registry: CommandRegistry, name: str) -> str:
    """Render detailed help for one command.

    Unknown or blank names produce a notice followed by the full listing rather
    than an error.
    """
    name = name.strip()
    if not name:
        return f"Please provide a command name\n\n{render_command_list(registry)}"

    entry = registry.get(name)
    if entry is None:
        return f"Unknown command: {name}\n\n{render_command_list(registry)}"
    return f"{entry.name}: {entry.description}\n\n{entry.rendered_help}"


def render_error(error: CLIError, server_url: str = DEFAULT_SERVER_URL) -> str:
    """Render a failure for the user.

    Malformed arguments and configuration problems show the error alone; other
    failures are followed by the remediation checklist.
    """
    if error.kind in (ErrorKind.CONNECTION_FAILED, ErrorKind.DISCOVERY_FAILED):
        headline = error.message
        if error.details:
            headline = f"{headline}: {error.details}"
    elif error.kind is ErrorKind.MALFORMED_ARGUMENTS:
        headline = f"Error running command: Invalid JSON arguments: {error.message}"
    elif error.kind is ErrorKind.INVALID_CONFIGURATION:
        return f"{error.message}: {error.details}"
    else:
        headline = f"Error running command: {error.message}"

    if error.kind is ErrorKind.MALFORMED_ARGUMENTS:
        return headline
    return f"{headline}\n{render_remediation(server_url)}"


def render_remediation(server_url: str = DEFAULT_SERVER_URL) -> str:
    """Render the checklist shown after provider failures."""
    return (
        "\nMake sure:\n"
        "1. Figma Desktop app is running\n"
        '2. "Desktop MCP server" is enabled in Dev Mode and listening at '
        f"{server_url}\n"
        "3. A frame or layer is selected in Figma for commands that need a selection"
    )
