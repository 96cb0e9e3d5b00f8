"""Error taxonomy for the Figma MCP client."""

from __future__ import annotations

from enum import Enum
from typing import ClassVar, TypedDict


class ErrorKind(str, Enum):
    """Discriminator shared by every :class:`CLIError`."""

    CONNECTION_FAILED = "ConnectionFailed"
    DISCOVERY_FAILED = "DiscoveryFailed"
    MALFORMED_ARGUMENTS = "MalformedArguments"
    EXECUTION_FAILED = "ExecutionFailed"
    INVALID_CONFIGURATION = "InvalidConfiguration"


class CLIErrorPayload(TypedDict):
    """Structured JSON payload for client errors."""

    error: dict[str, object | None]


class CLIError(Exception):
    """Structured client error tagged with an :class:`ErrorKind`."""

    default_kind: ClassVar[ErrorKind]

    def __init__(
        self,
        message: str,
        details: object | None = None,
        *,
        kind: ErrorKind | None = None,
    ) -> None:
        """Create an error with a message and optional details."""
        super().__init__(message)
        self.kind = kind if kind is not None else self.default_kind
        self.message = message
        self.details = details

    def to_dict(self) -> CLIErrorPayload:
        """Return the structured error payload."""
        return {
            "error": {
                "type": self.kind.value,
                "message": self.message,
                "details": self.details,
            }
        }


class ProviderConnectionError(CLIError):
    """The provider endpoint could not be reached or rejected the handshake."""

    default_kind = ErrorKind.CONNECTION_FAILED


class DiscoveryError(CLIError):
    """Listing the provider's tools failed."""

    default_kind = ErrorKind.DISCOVERY_FAILED


class InvocationError(CLIError):
    """A single tool invocation failed before or at the provider."""

    default_kind = ErrorKind.EXECUTION_FAILED

    @classmethod
    def malformed(cls, message: str, details: object | None = None) -> InvocationError:
        """Build an error for an argument payload that is not a JSON object."""
        return cls(message, details, kind=ErrorKind.MALFORMED_ARGUMENTS)

    @classmethod
    def execution_failed(
        cls, message: str, details: object | None = None
    ) -> InvocationError:
        """Build an error for a call the provider rejected or failed."""
        return cls(message, details, kind=ErrorKind.EXECUTION_FAILED)


class ConfigurationError(CLIError):
    """Settings overrides did not validate."""

    default_kind = ErrorKind.INVALID_CONFIGURATION
