"""Discovered command table for a provider session.

Tool descriptions arrive as untyped JSON controlled by the provider. They are
resolved into :class:`CommandEntry` values once, at discovery time, and held by a
:class:`CommandRegistry` that is replaced wholesale on every discovery round.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

logger = logging.getLogger(__name__)

NO_DESCRIPTION = "No description available"
NO_PARAMETERS = "No parameters required"
COMMAND_NAME_PATTERN = re.compile(r"^[a-z0-9_-]+$")


class InputSchema(BaseModel):
    """The subset of a tool's JSON Schema used to describe its arguments."""

    model_config = ConfigDict(extra="allow")

    properties: dict[str, Any]
    required: list[Any] = []

    @field_validator("required", mode="before")
    @classmethod
    def _ignore_malformed_required(cls, value: object) -> object:
        return value if isinstance(value, list) else []


@dataclass(frozen=True)
class ParameterSpec:
    """One argument accepted by a command."""

    name: str
    type: str = "any"
    required: bool = False
    description: str = ""

    def render(self) -> str:
        """Format the parameter as a help line."""
        flag = "required" if self.required else "optional"
        return f"- {self.name} ({flag}): {self.type} - {self.description}"


@dataclass(frozen=True)
class CommandEntry:
    """A tool discovered on the provider.

    Attributes:
        name: Tool name, unique within a session.
        description: Provider description or :data:`NO_DESCRIPTION`.
        parameters: Declared arguments in the provider's order.
        rendered_help: Parameter listing and example invocation.
    """

    name: str
    description: str = NO_DESCRIPTION
    parameters: tuple[ParameterSpec, ...] = ()
    rendered_help: str = field(default="", compare=False)

    def __post_init__(self) -> None:
        """Derive the help text from the name and parameters."""
        if not self.rendered_help:
            object.__setattr__(
                self, "rendered_help", render_help(self.name, self.parameters)
            )

    @classmethod
    def from_capability(cls, capability: Mapping[str, Any]) -> CommandEntry:
        """Build an entry from one item of the provider's tool list.

        Args:
            capability: Mapping with ``name`` and optional ``description`` and
                ``inputSchema`` keys.

        Raises:
            ValueError: If the name is missing or not a valid command name.

        Returns:
            Entry with defaults applied for every absent field.
        """
        name = capability.get("name")
        if not isinstance(name, str) or not COMMAND_NAME_PATTERN.match(name):
            raise ValueError(f"Invalid command name {name!r}")

        description = capability.get("description")
        if not isinstance(description, str) or not description:
            description = NO_DESCRIPTION

        return cls(
            name=name,
            description=description,
            parameters=parse_parameters(capability.get("inputSchema")),
        )


def parse_parameters(schema: object) -> tuple[ParameterSpec, ...]:
    """Extract parameters from a tool input schema.

    A schema without a ``properties`` object yields no parameters. Each property
    is read on its own, so a boolean or otherwise odd subschema only loses its
    type and description.
    """
    if not isinstance(schema, Mapping):
        return ()
    try:
        parsed = InputSchema.model_validate(schema)
    except ValidationError:
        logger.debug("Ignoring malformed input schema: %r", schema)
        return ()

    required = {item for item in parsed.required if isinstance(item, str)}
    return tuple(
        _parameter(key, spec, key in required)
        for key, spec in parsed.properties.items()
    )


def _parameter(name: str, spec: object, required: bool) -> ParameterSpec:
    if not isinstance(spec, Mapping):
        return ParameterSpec(name=name, required=required)
    return ParameterSpec(
        name=name,
        type=_type_tag(spec.get("type")),
        required=required,
        description=str(spec.get("description") or ""),
    )


def _type_tag(value: object) -> str:
    if isinstance(value, str) and value:
        return value
    if isinstance(value, list) and value:
        return "|".join(str(item) for item in value)
    return "any"


def render_help(name: str, parameters: Sequence[ParameterSpec]) -> str:
    """Render the parameter listing and example invocation for a command."""
    lines = ["Parameters:"]
    if parameters:
        lines.extend(parameter.render() for parameter in parameters)
    else:
        lines.append(NO_PARAMETERS)

    example = {parameter.name: f"<{parameter.name}>" for parameter in parameters}
    lines.append("Example:")
    compact = json.dumps(example, separators=(",", ":"), ensure_ascii=False)
    lines.append(f"{name} {compact}")
    return "\n".join(lines) + "\n"


class CommandRegistry:
    """Ordered command table with index-aligned name, description and help views."""

    def __init__(self, entries: Iterable[CommandEntry] = ()) -> None:
        """Create a registry, empty unless entries are given."""
        self._entries: tuple[CommandEntry, ...] = tuple(entries)

    def replace(self, entries: Iterable[CommandEntry]) -> None:
        """Swap the whole table for ``entries``."""
        self._entries = tuple(entries)

    @property
    def entries(self) -> tuple[CommandEntry, ...]:
        """All entries in discovery order."""
        return self._entries

    @property
    def names(self) -> list[str]:
        """Command names in discovery order."""
        return [entry.name for entry in self._entries]

    @property
    def descriptions(self) -> list[str]:
        """Descriptions aligned with :attr:`names`."""
        return [entry.description for entry in self._entries]

    @property
    def details(self) -> list[str]:
        """Rendered help aligned with :attr:`names`."""
        return [entry.rendered_help for entry in self._entries]

    def get(self, name: str) -> CommandEntry | None:
        """Look up an entry by name."""
        for entry in self._entries:
            if entry.name == name:
                return entry
        return None

    def __contains__(self, name: object) -> bool:
        return any(entry.name == name for entry in self._entries)

    def __iter__(self) -> Iterator[CommandEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


class CapabilitySource(Protocol):
    """Anything able to list the provider's tools."""

    async def list_capabilities(self) -> list[dict[str, Any]]:
        """Return the provider's tool list."""
        ...


def build_entries(capabilities: Iterable[Mapping[str, Any]]) -> list[CommandEntry]:
    """Convert raw capabilities into entries, skipping unusable ones."""
    entries: list[CommandEntry] = []
    for capability in capabilities:
        try:
            entries.append(CommandEntry.from_capability(capability))
        except ValueError as error:
            logger.warning("Skipping tool from server: %s", error)
    return entries


async def discover(
    session: CapabilitySource, registry: CommandRegistry
) -> tuple[CommandEntry, ...]:
    """Run one discovery round and replace the registry contents.

    Args:
        session: Ready provider session.
        registry: Registry to overwrite on success.

    Raises:
        DiscoveryError: If listing tools fails; the registry is left untouched.

    Returns:
        The entries now held by the registry.
    """
    capabilities = await session.list_capabilities()
    registry.replace(build_entries(capabilities))
    logger.debug("Registry holds %d commands", len(registry))
    return registry.entries
