"""Argument parsing and tool invocation."""

from __future__ import annotations

import json
import logging
from typing import Any, Protocol

from figma_mcp_cli.errors import InvocationError

logger = logging.getLogger(__name__)


class ToolCaller(Protocol):
    """The part of a provider session the dispatcher needs."""

    @property
    def is_ready(self) -> bool:
        """Whether the session accepts calls."""
        ...

    async def call(self, name: str, arguments: dict[str, Any]) -> dict[str, Any]:
        """Invoke a tool on the provider."""
        ...


def parse_arguments(raw: str | None) -> dict[str, Any]:
    """Turn a raw argument string into a JSON object.

    Args:
        raw: JSON text, or ``None``/blank for no arguments.

    Raises:
        InvocationError: With kind ``MalformedArguments`` if ``raw`` is not a
            single JSON object.

    Returns:
        Parsed argument mapping, ``{}`` for blank input.
    """
    if raw is None or not raw.strip():
        return {}
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as error:
        raise InvocationError.malformed(str(error), details=raw) from error
    if not isinstance(value, dict):
        raise InvocationError.malformed(
            f"Expected a JSON object, got {type(value).__name__}", details=raw
        )
    return value


async def invoke(session: ToolCaller, name: str, raw: str | None) -> dict[str, Any]:
    """Validate arguments and run one tool on the provider.

    The command table is not consulted; the provider decides whether ``name``
    exists.

    Raises:
        InvocationError: ``MalformedArguments`` before any provider call, or
            ``ExecutionFailed`` if the session is unavailable or the call fails.
    """
    arguments = parse_arguments(raw)
    if not session.is_ready:
        raise InvocationError.execution_failed("MCP server not available!")
    logger.debug("Calling %s with %s", name, arguments)
    return await session.call(name, arguments)


def format_result(result: dict[str, Any]) -> str:
    """Pretty-print a tool result."""
    return json.dumps(result, indent=2, ensure_ascii=False)


def echo_invocation(*parts: str | None) -> str:
    """Join the non-empty parts of an invocation for display."""
    return " ".join(part for part in parts if part)
