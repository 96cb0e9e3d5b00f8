"""Runtime configuration for the Figma Desktop MCP client.

The provider endpoint is fixed by the Figma Desktop app; the overrides read by
:func:`load_settings` exist for non-default installs and for testing against a
local server.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from figma_mcp_cli.errors import ConfigurationError

__version__ = "1.0.0"

DEFAULT_SERVER_URL = "http://127.0.0.1:3845/mcp"
INTERACTIVE_CLIENT_NAME = "figma-desktop-cli"
HEADLESS_CLIENT_NAME = "figma-desktop-cli-headless"
PROMPT = "figma> "

ENV_PREFIX = "FIGMA_MCP_"
_ENV_FIELDS = {
    "SERVER_URL": "server_url",
    "TRANSPORT": "transport",
    "CONNECT_TIMEOUT": "connect_timeout",
    "REQUEST_TIMEOUT": "request_timeout",
}


class ClientSettings(BaseModel):
    """Connection settings shared by the interactive shell and one-shot runner.

    Attributes:
        server_url: URL of the provider's MCP endpoint.
        transport: ``"sse"`` for Server-Sent Events or ``"http"`` for streamable
            HTTP.
        connect_timeout: Seconds allowed for the MCP initialize handshake.
        request_timeout: Seconds allowed per request; ``None`` waits forever.
        shutdown_timeout: Seconds allowed for releasing the session on exit.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    server_url: str = DEFAULT_SERVER_URL
    transport: Literal["sse", "http"] = "sse"
    connect_timeout: float = Field(default=10.0, gt=0)
    request_timeout: float | None = Field(default=None, gt=0)
    shutdown_timeout: float = Field(default=2.0, gt=0)


def load_settings(environ: Mapping[str, str] | None = None) -> ClientSettings:
    """Build settings from defaults plus ``FIGMA_MCP_*`` environment overrides.

    Args:
        environ: Environment mapping to read; defaults to ``os.environ``.

    Raises:
        ConfigurationError: If an override does not validate.

    Returns:
        Frozen settings instance.
    """
    source = os.environ if environ is None else environ
    overrides: dict[str, str] = {}
    for suffix, field_name in _ENV_FIELDS.items():
        value = source.get(ENV_PREFIX + suffix)
        if value is not None and value.strip():
            overrides[field_name] = value.strip()

    try:
        return ClientSettings.model_validate(overrides)
    except ValidationError as error:
        raise ConfigurationError(
            "Invalid FIGMA_MCP_* environment configuration",
            details=error.errors(include_url=False),
        ) from error
