"""Session handling for the Figma Desktop MCP provider."""

from __future__ import annotations

import asyncio
import logging
from contextlib import AsyncExitStack
from enum import Enum
from typing import Any

from fastmcp import Client, FastMCP
from fastmcp.client.transports import (
    ClientTransport,
    SSETransport,
    StreamableHttpTransport,
)
from mcp.types import CallToolResult, Implementation, TextContent

from figma_mcp_cli.config import INTERACTIVE_CLIENT_NAME, ClientSettings, __version__
from figma_mcp_cli.errors import (
    DiscoveryError,
    InvocationError,
    ProviderConnectionError,
)

logger = logging.getLogger(__name__)


class SessionState(Enum):
    """Lifecycle of a :class:`ProviderSession`."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    READY = "ready"
    CLOSING = "closing"
    CLOSED = "closed"


def build_transport(settings: ClientSettings) -> ClientTransport:
    """Create the network transport selected by ``settings.transport``."""
    if settings.transport == "http":
        return StreamableHttpTransport(settings.server_url)
    return SSETransport(settings.server_url)


class ProviderSession:
    """Owns one MCP client connection to the provider.

    The session moves through :class:`SessionState` exactly once: it can be
    connected a single time and, once closed, stays closed. Discovery and tool
    calls are only accepted while ``READY``.
    """

    def __init__(
        self,
        settings: ClientSettings,
        *,
        client_name: str = INTERACTIVE_CLIENT_NAME,
        transport: ClientTransport | FastMCP | None = None,
    ) -> None:
        """Prepare a disconnected session.

        Args:
            settings: Endpoint and timeout configuration.
            client_name: Name reported to the provider during the handshake.
            transport: Optional transport replacing the one derived from
                ``settings``, for example an in-process ``FastMCP`` app.
        """
        self.settings = settings
        self.client_name = client_name
        self.state = SessionState.DISCONNECTED
        self._transport = transport
        self._client: Client | None = None
        self._stack: AsyncExitStack | None = None

    @property
    def is_ready(self) -> bool:
        """Whether discovery and invocation are currently allowed."""
        return self.state is SessionState.READY

    async def connect(self) -> ProviderSession:
        """Open the transport and perform the MCP initialize handshake.

        Raises:
            ProviderConnectionError: If the session was already used, the
                endpoint is unreachable, or the handshake fails.

        Returns:
            The session itself, now ``READY``.
        """
        if self.state is not SessionState.DISCONNECTED:
            raise ProviderConnectionError(
                f"Session cannot be opened from state '{self.state.value}'"
            )

        self.state = SessionState.CONNECTING
        transport = self._transport or build_transport(self.settings)
        client = Client(
            transport,
            client_info=Implementation(name=self.client_name, version=__version__),
            timeout=self.settings.request_timeout,
            init_timeout=self.settings.connect_timeout,
        )
        stack = AsyncExitStack()
        logger.debug(
            "Connecting to %s as %s", self.settings.server_url, self.client_name
        )
        try:
            await stack.enter_async_context(client)
        except asyncio.CancelledError:
            self.state = SessionState.CLOSED
            raise
        except Exception as exc:
            self.state = SessionState.CLOSED
            await _close_quietly(stack)
            raise ProviderConnectionError(
                "Failed to connect to Figma Desktop MCP server", details=str(exc)
            ) from exc

        self._client = client
        self._stack = stack
        self.state = SessionState.READY
        logger.debug("Session ready")
        return self

    async def list_capabilities(self) -> list[dict[str, Any]]:
        """Request the provider's tool list.

        Raises:
            DiscoveryError: If the session is not ready or the request fails.

        Returns:
            One JSON-style mapping per tool with ``name``, ``description`` and
            ``inputSchema`` keys when the provider supplied them.
        """
        client = self._require_client(DiscoveryError)
        try:
            tools = await client.list_tools()
        except Exception as exc:
            raise DiscoveryError(
                "Could not discover tools from server", details=str(exc)
            ) from exc
        return [
            tool.model_dump(mode="json", by_alias=True, exclude_none=True)
            for tool in tools
        ]

    async def call(self, name: str, arguments: dict[str, Any]) -> dict[str, Any]:
        """Invoke one tool and return its result as JSON-compatible data.

        Args:
            name: Tool name as known to the provider.
            arguments: JSON object of tool arguments.

        Raises:
            InvocationError: If the session is not ready, the transport fails or
                the provider flags the result as an error.

        Returns:
            The MCP ``CallToolResult`` as a dictionary.
        """
        client = self._require_client(InvocationError)
        try:
            result = await client.call_tool_mcp(name=name, arguments=arguments)
        except Exception as exc:
            message = str(exc) or type(exc).__name__
            raise InvocationError.execution_failed(message) from exc

        payload = result.model_dump(mode="json", by_alias=True, exclude_none=True)
        if result.isError:
            raise InvocationError.execution_failed(
                _error_text(result), details=payload
            )
        return payload

    async def disconnect(self) -> None:
        """Release the transport; safe to call repeatedly and never raises."""
        if self.state in (SessionState.CLOSING, SessionState.CLOSED):
            return
        if self.state is SessionState.DISCONNECTED:
            self.state = SessionState.CLOSED
            return

        self.state = SessionState.CLOSING
        stack, self._stack, self._client = self._stack, None, None
        try:
            if stack is not None:
                await _close_quietly(stack)
        finally:
            self.state = SessionState.CLOSED
            logger.debug("Session closed")

    async def __aenter__(self) -> ProviderSession:
        """Connect on context entry."""
        return await self.connect()

    async def __aexit__(self, *exc_info: object) -> None:
        """Disconnect on context exit."""
        await self.disconnect()

    def _require_client(
        self, error_type: type[DiscoveryError] | type[InvocationError]
    ) -> Client:
        if self._client is None or not self.is_ready:
            raise error_type("MCP server not available!")
        return self._client


async def _close_quietly(stack: AsyncExitStack) -> None:
    try:
        await stack.aclose()
    except Exception as exc:
        logger.debug("Ignoring error while releasing MCP transport: %s", exc)


def _error_text(result: CallToolResult) -> str:
    texts = [block.text for block in result.content if isinstance(block, TextContent)]
    return "\n".join(texts) or "Tool reported an error without a message"
