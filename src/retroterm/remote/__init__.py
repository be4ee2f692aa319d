"""Remote session module for retroterm.

Talks to the external command service: pulls the boot script, decodes
replies into grid writes, and sends submitted input lines as commands.

Public API:
    RemoteSession -- The protocol state machine
    CommandTransport -- Abstract base class for transports
    HttpCommandTransport -- HTTP transport for the capability endpoint
    SessionError and its subclasses -- Reported failures
"""

from retroterm.remote.base import (
    CommandTransport,
    ConfigurationMissing,
    ProtocolFailure,
    SessionError,
    TransportFailure,
)
from retroterm.remote.protocol import decode_reply
from retroterm.remote.session import RemoteSession

__all__ = [
    "CommandTransport",
    "ConfigurationMissing",
    "HttpCommandTransport",
    "ProtocolFailure",
    "RemoteSession",
    "SessionError",
    "TransportFailure",
    "decode_reply",
]


def __getattr__(name: str) -> type:
    """Lazy import for the transport that requires httpx."""
    if name == "HttpCommandTransport":
        from retroterm.remote.http_transport import HttpCommandTransport
        return HttpCommandTransport
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
