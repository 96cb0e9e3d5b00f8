"""Interactive read-eval-print loop over one provider session."""

from __future__ import annotations

import asyncio
import logging
import signal
from collections.abc import Callable
from typing import Protocol

from prompt_toolkit import PromptSession
from prompt_toolkit.history import InMemoryHistory

from figma_mcp_cli.config import INTERACTIVE_CLIENT_NAME, PROMPT, ClientSettings
from figma_mcp_cli.dispatcher import echo_invocation, format_result, invoke
from figma_mcp_cli.errors import (
    DiscoveryError,
    InvocationError,
    ProviderConnectionError,
)
from figma_mcp_cli.registry import CommandRegistry, discover
from figma_mcp_cli.screens import (
    console,
    error_console,
    render_command_detail,
    render_command_list,
    render_error,
    render_help_screen,
    render_remediation,
)
from figma_mcp_cli.session import ProviderSession

logger = logging.getLogger(__name__)

EXIT_COMMANDS = frozenset({"exit", "quit", "q"})
HELP_COMMANDS = frozenset({"help", "?"})
DETAIL_FLAG = "-h"


class LineReader(Protocol):
    """Source of input lines for the shell."""

    async def read(self, prompt: str) -> str | None:
        """Return the next line, or ``None`` at end of input."""
        ...


class PromptLineReader:
    """Read lines with prompt_toolkit, keeping line editing and history.

    Ctrl-D and Ctrl-C at the prompt both end input. SIGINT is left to the
    shell's own handler so an interrupt during dispatch still stops it.
    """

    def __init__(self, session: PromptSession[str] | None = None) -> None:
        """Use ``session``, or build one with in-memory history on first read."""
        self._session = session

    async def read(self, prompt: str) -> str | None:
        """Prompt and wait for one line."""
        if self._session is None:
            self._session = PromptSession(history=InMemoryHistory())
        try:
            line = await self._session.prompt_async(prompt, handle_sigint=False)
        except (EOFError, KeyboardInterrupt):
            return None
        # undecodable input bytes arrive as lone surrogates
        return line.encode("utf-8", "surrogateescape").decode("utf-8", "replace")


class InteractiveShell:
    """Prompt loop dispatching each line against the discovered commands.

    The shell owns its session and command registry. Every exit path (the exit
    commands, end of input, SIGINT and SIGTERM) goes through :meth:`shutdown`,
    which releases the session at most once.
    """

    def __init__(
        self,
        settings: ClientSettings,
        *,
        reader: LineReader | None = None,
        session_factory: Callable[[ClientSettings], ProviderSession] | None = None,
        handle_signals: bool = True,
    ) -> None:
        """Create a shell.

        Args:
            settings: Connection settings.
            reader: Line source; defaults to a :class:`PromptLineReader`.
            session_factory: Builds the provider session from ``settings``.
            handle_signals: Install SIGINT/SIGTERM handlers while running.
        """
        self.settings = settings
        self.registry = CommandRegistry()
        self.reader = reader or PromptLineReader()
        factory = session_factory or _interactive_session
        self.session = factory(settings)
        self._handle_signals = handle_signals
        self._installed_signals: list[signal.Signals] = []
        self._task: asyncio.Task[int] | None = None
        self._shutdown_requested = False
        self._closing = False

    async def run(self) -> int:
        """Connect, discover and serve input until exit.

        Returns:
            ``1`` if the provider could not be reached, otherwise ``0``.
        """
        self._task = asyncio.current_task()  # type: ignore[assignment]
        self._install_signal_handlers()
        try:
            try:
                await self.session.connect()
            except ProviderConnectionError as error:
                error_console.print(render_error(error, self.settings.server_url))
                return 1

            await self._discover()
            console.print(render_help_screen(self.registry))
            await self._serve()
        except asyncio.CancelledError:
            if not self._shutdown_requested:
                raise
            if self._task is not None:
                self._task.uncancel()
            logger.debug("Interrupted, shutting down")
        finally:
            await self.shutdown()
            self._remove_signal_handlers()
        return 0

    async def handle_line(self, line: str) -> bool:
        """Handle one input line.

        Returns:
            ``False`` when the line asks to leave the shell.
        """
        trimmed = line.strip()
        if not trimmed:
            return True
        if trimmed in EXIT_COMMANDS:
            return False
        if trimmed in HELP_COMMANDS:
            console.print(render_help_screen(self.registry))
            return True
        if trimmed == "commands":
            console.print(render_command_list(self.registry))
            return True
        if trimmed == "clear":
            console.clear()
            return True

        parts = trimmed.split(maxsplit=1)
        command = parts[0]
        argument = parts[1] if len(parts) > 1 else None
        if argument is not None and argument.split()[0] == DETAIL_FLAG:
            console.print(render_command_detail(self.registry, command))
            return True

        await self._run_command(command, argument)
        return True

    def request_shutdown(self) -> None:
        """Stop the shell from a signal handler, even mid-dispatch."""
        if self._shutdown_requested or self._closing:
            return
        self._shutdown_requested = True
        if self._task is not None and not self._task.done():
            self._task.cancel()

    async def shutdown(self) -> None:
        """Release the session once; later calls return immediately."""
        if self._closing:
            return
        self._closing = True
        try:
            async with asyncio.timeout(self.settings.shutdown_timeout):
                await self.session.disconnect()
        except TimeoutError:
            logger.warning("Timed out releasing the MCP session")

    async def _serve(self) -> None:
        while True:
            try:
                line = await self.reader.read(PROMPT)
            except UnicodeError as error:
                error_console.print(f"Could not read input: {error}")
                continue
            if line is None:
                console.print()
                return
            if not await self.handle_line(line):
                return

    async def _discover(self) -> None:
        try:
            entries = await discover(self.session, self.registry)
        except DiscoveryError as error:
            logger.warning(
                "Could not discover tools from server: %s",
                error.details or error.message,
            )
            error_console.print(render_remediation(self.settings.server_url))
            return
        console.print(f"\nDiscovered {len(entries)} tools from Figma MCP server")

    async def _run_command(self, command: str, argument: str | None) -> None:
        console.print(echo_invocation(command, argument))
        try:
            result = await invoke(self.session, command, argument)
        except InvocationError as error:
            error_console.print(render_error(error, self.settings.server_url))
            return
        console.print(format_result(result))

    def _install_signal_handlers(self) -> None:
        if not self._handle_signals:
            return
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self.request_shutdown)
            except (NotImplementedError, RuntimeError, ValueError):
                logger.debug("Signal handler for %s unavailable", sig.name)
            else:
                self._installed_signals.append(sig)

    def _remove_signal_handlers(self) -> None:
        loop = asyncio.get_running_loop()
        while self._installed_signals:
            loop.remove_signal_handler(self._installed_signals.pop())


def _interactive_session(settings: ClientSettings) -> ProviderSession:
    return ProviderSession(settings, client_name=INTERACTIVE_CLIENT_NAME)
