"""Tests for argument parsing and tool invocation."""

from __future__ import annotations

import json

import pytest
from conftest import FakeSession

from figma_mcp_cli.dispatcher import (
    echo_invocation,
    format_result,
    invoke,
    parse_arguments,
)
from figma_mcp_cli.errors import ErrorKind, InvocationError


@pytest.mark.parametrize("raw", [None, "", "   ", "{}", " {} "])
def test_blank_arguments_mean_empty_object(raw: str | None) -> None:
    """Missing, blank and empty-object payloads are all ``{}``."""
    assert parse_arguments(raw) == {}


def test_parses_json_object() -> None:
    """A JSON object payload is returned as a dictionary."""
    assert parse_arguments('{"pageId": "123:456"}') == {"pageId": "123:456"}


@pytest.mark.parametrize("raw", ["not json", "{pageId: 1}", "[1, 2]", '"text"', "3"])
def test_rejects_non_object_payloads(raw: str) -> None:
    """Anything other than a single JSON object is malformed."""
    with pytest.raises(InvocationError) as excinfo:
        parse_arguments(raw)

    assert excinfo.value.kind is ErrorKind.MALFORMED_ARGUMENTS
    assert excinfo.value.details == raw


@pytest.mark.anyio()
@pytest.mark.parametrize("raw", [None, "", "   ", "{}"])
async def test_blank_invocations_send_empty_arguments(raw: str | None) -> None:
    """Every blank form reaches the provider as an empty object."""
    # Arrange
    session = FakeSession()
    await session.connect()

    # Act
    await invoke(session, "get_current_page", raw)

    # Assert
    assert session.calls == [("get_current_page", {})]


@pytest.mark.anyio()
async def test_invoke_sends_name_and_arguments() -> None:
    """The parsed payload is forwarded with the command name."""
    # Arrange
    session = FakeSession()
    await session.connect()

    # Act
    result = await invoke(session, "navigate_page", '{"pageId":"123:456"}')

    # Assert
    assert session.calls == [("navigate_page", {"pageId": "123:456"})]
    assert result["isError"] is False


@pytest.mark.anyio()
async def test_malformed_arguments_never_reach_provider() -> None:
    """Parse failures stop before the provider call."""
    # Arrange
    session = FakeSession()
    await session.connect()

    # Act / Assert
    with pytest.raises(InvocationError) as excinfo:
        await invoke(session, "navigate_page", "not json")
    assert excinfo.value.kind is ErrorKind.MALFORMED_ARGUMENTS
    assert session.calls == []


@pytest.mark.anyio()
async def test_unknown_names_are_left_to_the_provider() -> None:
    """Dispatch does not consult the command table."""
    # Arrange
    session = FakeSession(capabilities=[])
    await session.connect()

    # Act
    await invoke(session, "not_discovered_yet", None)

    # Assert
    assert session.calls == [("not_discovered_yet", {})]


@pytest.mark.anyio()
async def test_invoke_requires_ready_session() -> None:
    """A session that is not connected reports the server as unavailable."""
    # Arrange
    session = FakeSession()

    # Act / Assert
    with pytest.raises(InvocationError) as excinfo:
        await invoke(session, "get_current_page", None)
    assert excinfo.value.kind is ErrorKind.EXECUTION_FAILED
    assert "MCP server not available" in str(excinfo.value)


@pytest.mark.anyio()
async def test_provider_failures_are_execution_errors() -> None:
    """Errors raised by the session keep their execution-failed kind."""
    # Arrange
    session = FakeSession(errors={"get_selection": "Nothing is selected"})
    await session.connect()

    # Act / Assert
    with pytest.raises(InvocationError) as excinfo:
        await invoke(session, "get_selection", None)
    assert excinfo.value.kind is ErrorKind.EXECUTION_FAILED
    assert excinfo.value.message == "Nothing is selected"


def test_format_result_pretty_prints() -> None:
    """Results are rendered as indented JSON."""
    result = {"content": [{"type": "text", "text": "Página"}], "isError": False}

    rendered = format_result(result)

    assert json.loads(rendered) == result
    assert "\n  " in rendered
    assert "Página" in rendered


def test_echo_skips_missing_parts() -> None:
    """Only the parts that were supplied are echoed."""
    assert echo_invocation("navigate_page", '{"pageId":"1:2"}', None) == (
        'navigate_page {"pageId":"1:2"}'
    )
    assert echo_invocation("get_current_page", None, None) == "get_current_page"
