"""Decoding of command service responses.

The service answers either with an ordered batch of messages or, when
the terminal is pulling its boot script, with a single message that may
be the completion sentinel.
"""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from retroterm.domain.models import MessageBatch, ServiceReply, SingleMessage
from retroterm.remote.base import ProtocolFailure

DEFAULT_SENTINEL = "END"


def decode_reply(payload: Any, sentinel: str = DEFAULT_SENTINEL) -> ServiceReply:
    """Turn a parsed response payload into a ServiceReply.

    Accepted shapes are ``{"messages": [...]}``, ``{"message": "..."}``
    and a bare string. An empty batch or a message equal to ``sentinel``
    marks the reply as complete.

    Raises:
        ProtocolFailure: If the payload matches none of the shapes.
    """
    if isinstance(payload, str):
        return _single(payload, sentinel)

    if isinstance(payload, dict):
        try:
            if "messages" in payload:
                batch = MessageBatch.model_validate(payload)
                if sentinel in batch.messages:
                    end = batch.messages.index(sentinel)
                    return ServiceReply(messages=batch.messages[:end], complete=True)
                return ServiceReply(messages=batch.messages, complete=not batch.messages)
            if "message" in payload:
                return _single(SingleMessage.model_validate(payload).message, sentinel)
        except ValidationError as e:
            raise ProtocolFailure(f"Malformed response: {e.error_count()} invalid field(s)") from e

    raise ProtocolFailure(f"Unexpected response: {str(payload)[:60]}")


def _single(message: str, sentinel: str) -> ServiceReply:
    if message == sentinel:
        return ServiceReply(complete=True)
    return ServiceReply(messages=[message])
