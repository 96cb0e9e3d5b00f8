"""Shared test fixtures."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from typing import Annotated, Any

import pytest
from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from pydantic import Field

from figma_mcp_cli.config import ClientSettings
from figma_mcp_cli.errors import (
    DiscoveryError,
    InvocationError,
    ProviderConnectionError,
)
from figma_mcp_cli.session import ProviderSession, SessionState

SAMPLE_CAPABILITIES: list[dict[str, Any]] = [
    {
        "name": "get_current_page",
        "description": "Gets information about the current page",
    },
    {
        "name": "navigate_page",
        "description": "Navigates to a specific page",
        "inputSchema": {
            "type": "object",
            "properties": {
                "pageId": {
                    "type": "string",
                    "description": "The ID of the page to navigate to",
                }
            },
            "required": ["pageId"],
        },
    },
]


@pytest.fixture()
def anyio_backend() -> str:
    """Run async tests on asyncio only."""
    return "asyncio"


@pytest.fixture()
def settings() -> ClientSettings:
    """Settings with a short shutdown bound."""
    return ClientSettings(shutdown_timeout=0.5)


@pytest.fixture()
def provider_app() -> FastMCP:
    """Provide an in-process stand-in for the Figma Desktop MCP server."""
    app = FastMCP(name="figma-desktop-fake")

    @app.tool()
    def get_current_page() -> dict[str, str]:
        """Gets information about the current page."""
        return {"id": "0:1", "name": "Cover"}

    @app.tool()
    def navigate_page(
        pageId: Annotated[  # noqa: N803
            str, Field(description="The ID of the page to navigate to")
        ],
    ) -> dict[str, str]:
        """Navigates to a specific page."""
        return {"navigatedTo": pageId}

    @app.tool()
    def get_selection() -> dict[str, str]:
        """Returns the nodes currently selected."""
        raise ToolError("Nothing is selected")

    return app


@pytest.fixture()
def provider_session_factory(provider_app: FastMCP):
    """Build sessions bound to the in-process provider."""

    def factory(settings: ClientSettings) -> ProviderSession:
        return ProviderSession(settings, transport=provider_app)

    return factory


class FakeSession:
    """Scriptable session recording every interaction."""

    def __init__(
        self,
        capabilities: Iterable[dict[str, Any]] = (),
        *,
        fail_connect: bool = False,
        fail_discovery: bool = False,
        errors: dict[str, str] | None = None,
        block_calls: bool = False,
    ) -> None:
        self.capabilities = list(capabilities)
        self.fail_connect = fail_connect
        self.fail_discovery = fail_discovery
        self.errors = errors or {}
        self.block_calls = block_calls
        self.state = SessionState.DISCONNECTED
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.call_started = asyncio.Event()
        self.releases = 0
        self.disconnect_calls = 0

    @property
    def is_ready(self) -> bool:
        return self.state is SessionState.READY

    async def connect(self) -> FakeSession:
        if self.fail_connect:
            self.state = SessionState.CLOSED
            raise ProviderConnectionError(
                "Failed to connect to Figma Desktop MCP server",
                details="Connection refused",
            )
        self.state = SessionState.READY
        return self

    async def list_capabilities(self) -> list[dict[str, Any]]:
        if self.fail_discovery:
            raise DiscoveryError(
                "Could not discover tools from server", details="boom"
            )
        return list(self.capabilities)

    async def call(self, name: str, arguments: dict[str, Any]) -> dict[str, Any]:
        self.calls.append((name, arguments))
        self.call_started.set()
        if self.block_calls:
            await asyncio.Event().wait()
        if name in self.errors:
            raise InvocationError.execution_failed(self.errors[name])
        return {
            "content": [{"type": "text", "text": f"{name} done"}],
            "isError": False,
        }

    async def disconnect(self) -> None:
        self.disconnect_calls += 1
        if self.state is SessionState.CLOSED:
            return
        self.state = SessionState.CLOSED
        self.releases += 1

    async def __aenter__(self) -> FakeSession:
        return await self.connect()

    async def __aexit__(self, *exc_info: object) -> None:
        await self.disconnect()


class ScriptedReader:
    """Line reader replaying a fixed script, then reporting end of input."""

    def __init__(self, lines: Iterable[str]) -> None:
        self.lines = list(lines)
        self.prompts: list[str] = []

    async def read(self, prompt: str) -> str | None:
        self.prompts.append(prompt)
        if not self.lines:
            return None
        return self.lines.pop(0)
