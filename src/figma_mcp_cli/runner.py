"""Headless helpers: run one command, or answer a discovery question, then exit."""

from __future__ import annotations

import logging
from collections.abc import Callable

from figma_mcp_cli.config import HEADLESS_CLIENT_NAME, ClientSettings
from figma_mcp_cli.dispatcher import echo_invocation, format_result, invoke
from figma_mcp_cli.errors import CLIError
from figma_mcp_cli.registry import CommandRegistry, discover
from figma_mcp_cli.screens import (
    console,
    error_console,
    render_command_detail,
    render_command_list,
    render_error,
)
from figma_mcp_cli.session import ProviderSession

logger = logging.getLogger(__name__)

SessionFactory = Callable[[ClientSettings], ProviderSession]


def headless_session(settings: ClientSettings) -> ProviderSession:
    """Create a session identifying itself as the headless client."""
    return ProviderSession(settings, client_name=HEADLESS_CLIENT_NAME)


async def run_command(
    name: str,
    raw_arguments: str | None,
    flag: str | None,
    *,
    settings: ClientSettings,
    session_factory: SessionFactory = headless_session,
) -> int:
    """Connect, run one tool, print its result and disconnect.

    Args:
        name: Tool name.
        raw_arguments: JSON object text, or ``None``/blank for no arguments.
        flag: Accepted for forward compatibility; only echoed.
        settings: Connection settings.
        session_factory: Builds the provider session.

    Returns:
        Process exit status: ``0`` on success, ``1`` on any failure.
    """
    console.print(echo_invocation(name, raw_arguments, flag))
    try:
        async with session_factory(settings) as session:
            result = await invoke(session, name, raw_arguments)
            console.print(format_result(result))
    except CLIError as error:
        logger.debug("Command %s failed: %s", name, error.to_dict())
        error_console.print(render_error(error, settings.server_url))
        return 1
    return 0


async def list_commands(
    settings: ClientSettings, *, session_factory: SessionFactory = headless_session
) -> int:
    """Print the numbered command listing from a fresh discovery round."""
    registry = await _discover_once(settings, session_factory)
    if registry is None:
        return 1
    console.print(render_command_list(registry))
    return 0


async def describe_command(
    name: str,
    settings: ClientSettings,
    *,
    session_factory: SessionFactory = headless_session,
) -> int:
    """Print detailed help for ``name`` from a fresh discovery round."""
    registry = await _discover_once(settings, session_factory)
    if registry is None:
        return 1
    console.print(render_command_detail(registry, name))
    return 0


async def _discover_once(
    settings: ClientSettings, session_factory: SessionFactory
) -> CommandRegistry | None:
    registry = CommandRegistry()
    try:
        async with session_factory(settings) as session:
            await discover(session, registry)
    except CLIError as error:
        error_console.print(render_error(error, settings.server_url))
        return None
    return registry
