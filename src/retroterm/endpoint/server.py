"""FastAPI demo command service.

A local stand-in for the external command service the terminal talks
to. Serves a scripted boot sequence one message per ``next`` command
and answers a handful of interactive commands with message batches.
"""

from __future__ import annotations

import logging

import uvicorn
from fastapi import FastAPI, Header, Request
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DEFAULT_SENTINEL = "END"

BOOT_SCRIPT = [
    "RETROTERM BASIC V1.0",
    "(C) RETROTERM SYSTEMS",
    "",
    "MEMORY CHECK ... 65536 BYTES OK",
    "LINK TO COMMAND SERVICE ... OK",
    "",
    "TYPE 'HELP' FOR A LIST OF COMMANDS.",
    "READY.",
]

HELP_TEXT = [
    "AVAILABLE COMMANDS:",
    "  HELP         SHOW THIS LIST",
    "  ECHO <TEXT>  REPEAT TEXT BACK",
    "  ABOUT        DESCRIBE THIS SERVICE",
]


class HealthStatus(BaseModel):
    status: str = "ok"
    script_position: int = 0
    script_length: int = 0


class MessageBatchResponse(BaseModel):
    messages: list[str] = Field(description="Lines for the terminal, in order")


class SingleMessageResponse(BaseModel):
    message: str = Field(description="One boot line, or the completion sentinel")


class DemoScript:
    """Cursor over the boot script lines served by ``next``."""

    def __init__(self, lines: list[str], sentinel: str = DEFAULT_SENTINEL) -> None:
        self._lines = list(lines)
        self._sentinel = sentinel
        self._position = 0

    @property
    def position(self) -> int:
        return self._position

    def __len__(self) -> int:
        return len(self._lines)

    def reset(self) -> None:
        self._position = 0

    def next_line(self) -> str:
        if self._position >= len(self._lines):
            return self._sentinel
        line = self._lines[self._position]
        self._position += 1
        return line


def create_app(
    script: DemoScript | None = None,
    recipient_header: str = "X-Recipient-Id",
) -> FastAPI:
    """Create and configure the demo service application."""
    app = FastAPI(
        title="retroterm demo service",
        description="Scripted command service for the retroterm terminal",
        version="0.1.0",
    )
    app.state.script = script or DemoScript(BOOT_SCRIPT)

    @app.get("/health")
    async def health_check() -> HealthStatus:
        s: DemoScript = app.state.script
        return HealthStatus(status="ok", script_position=s.position, script_length=len(s))

    async def dispatch(
        recipient: str, command: str, args: str, header_recipient: str | None
    ):
        if header_recipient is not None and header_recipient != recipient:
            logger.warning("Recipient mismatch: %s != %s", header_recipient, recipient)
            return PlainTextResponse("recipient mismatch", status_code=403)

        s: DemoScript = app.state.script
        name = command.lower()
        logger.debug("Command %s(%r) for %s", name, args, recipient)
        if name == "reset":
            s.reset()
            return MessageBatchResponse(messages=[])
        if name == "next":
            return SingleMessageResponse(message=s.next_line())
        if name == "help":
            return MessageBatchResponse(messages=HELP_TEXT)
        if name == "echo":
            return MessageBatchResponse(messages=[args])
        if name == "about":
            return MessageBatchResponse(
                messages=[
                    "RETROTERM DEMO SERVICE 0.1.0",
                    f"RECIPIENT: {recipient}",
                ]
            )
        return PlainTextResponse(f"unknown command: {command}", status_code=400)

    @app.get("/{recipient}", response_model=None)
    async def receive_get(
        recipient: str,
        command: str,
        args: str = "",
        x_recipient_id: str | None = Header(default=None, alias=recipient_header),
    ):
        return await dispatch(recipient, command, args, x_recipient_id)

    @app.post("/{recipient}", response_model=None)
    async def receive_post(
        recipient: str,
        command: str,
        request: Request,
        x_recipient_id: str | None = Header(default=None, alias=recipient_header),
    ):
        body = (await request.body()).decode("utf-8", errors="replace")
        return await dispatch(recipient, command, body, x_recipient_id)

    return app


def main(host: str = "127.0.0.1", port: int = 8080) -> None:
    """Entry point for running the demo service standalone."""
    app = create_app()
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
