"""Abstract base class for command service transports.

The remote session talks to the external command service only through
this interface, so the HTTP transport can be swapped for a scripted one
in tests without changing the session.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

logger = logging.getLogger(__name__)


class CommandTransport(ABC):
    """Abstract interface for sending commands to the external service.

    Exactly one response is expected per request. Implementations
    return the decoded response payload and translate every failure
    into a SessionError subclass.

    Example usage::

        async with HttpCommandTransport(endpoint_url=url) as transport:
            await transport.request("reset")
            payload = await transport.request("next")
    """

    @abstractmethod
    async def connect(self) -> None:
        """Prepare the transport for requests.

        Raises:
            ConfigurationMissing: If no capability endpoint was supplied.
        """
        ...

    @abstractmethod
    async def disconnect(self) -> None:
        """Release transport resources. Safe to call multiple times."""
        ...

    @abstractmethod
    async def request(self, command: str, args: str | None = None) -> Any:
        """Send one command and wait for its response.

        Args:
            command: Command identifier (e.g. 'reset', 'next', 'echo').
            args: Optional argument string for the command.

        Returns:
            The structured response payload (parsed JSON).

        Raises:
            TransportFailure: If the service cannot be reached.
            ProtocolFailure: If the service answers with a non-success
                status or a body that is not valid JSON.
        """
        ...

    async def __aenter__(self) -> CommandTransport:
        await self.connect()
        return self

    async def __aexit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: object) -> None:
        await self.disconnect()


class SessionError(Exception):
    """Base class for failures reported by the remote session."""


class ConfigurationMissing(SessionError):
    """Raised when no capability endpoint was supplied by the host."""


class TransportFailure(SessionError):
    """Raised when the command service cannot be reached."""


class ProtocolFailure(SessionError):
    """Raised on a non-success status or an unexpected response shape."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
