"""Command-line interface for the Figma Desktop MCP client."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from rich.logging import RichHandler

from figma_mcp_cli.config import __version__, load_settings
from figma_mcp_cli.errors import ConfigurationError
from figma_mcp_cli.runner import describe_command, list_commands, run_command
from figma_mcp_cli.screens import (
    console,
    error_console,
    render_error,
    render_usage,
)
from figma_mcp_cli.shell import InteractiveShell

LOG_FORMAT = "%(name)s: %(message)s"


class _ArgumentParser(argparse.ArgumentParser):
    """Parser that reports usage errors as exit status 1."""

    def error(self, message: str) -> None:  # type: ignore[override]
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI.

    ``-h`` is handled by hand so that ``<command> -h`` can show command help.
    """
    parser = _ArgumentParser(
        prog="figma-mcp-cli",
        description="Run Figma Desktop MCP server tools.",
        add_help=False,
    )
    parser.add_argument("command", nargs="?", help="Tool to run.")
    parser.add_argument("arguments", nargs="?", help="JSON object of tool arguments.")
    parser.add_argument("flag", nargs="?", help="Reserved for future use.")
    parser.add_argument("-h", "--help", action="store_true", help="Show help.")
    parser.add_argument(
        "-v", "--version", action="store_true", help="Show the version."
    )
    parser.add_argument(
        "--commands",
        action="store_true",
        help="List the commands exposed by the server.",
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Enable debug logging."
    )
    return parser


def configure_logging(verbose: bool) -> None:
    """Send log records to stderr, at debug level when ``verbose``."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        handlers=[
            RichHandler(console=error_console, show_time=False, show_path=False)
        ],
    )


def main(argv: list[str] | None = None) -> int:
    """Entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    if args.version:
        console.print(__version__)
        return 0
    if args.help and args.command is None:
        console.print(render_usage())
        return 0

    try:
        settings = load_settings()
    except ConfigurationError as error:
        error_console.print(render_error(error))
        return 1

    if args.commands:
        return asyncio.run(list_commands(settings))
    if args.command is None:
        try:
            return asyncio.run(InteractiveShell(settings).run())
        except KeyboardInterrupt:
            return 0
    if args.help:
        return asyncio.run(describe_command(args.command, settings))
    return asyncio.run(
        run_command(args.command, args.arguments, args.flag, settings=settings)
    )


if __name__ == "__main__":
    raise SystemExit(main())
