"""Remote session: the protocol state machine of the terminal.

Pulls the boot script from the command service, writes every reply into
the grid in arrival order, and turns submitted input lines into
outgoing commands. At most one request is ever in flight.
"""

from __future__ import annotations

import asyncio
import logging

from retroterm.domain.models import InputLine, ServiceReply, SessionState
from retroterm.grid.writer import TextWriter
from retroterm.remote.base import (
    CommandTransport,
    ConfigurationMissing,
    ProtocolFailure,
    TransportFailure,
)
from retroterm.remote.protocol import DEFAULT_SENTINEL, decode_reply

logger = logging.getLogger(__name__)


class RemoteSession:
    """Drives the terminal from the external command service.

    States move IDLE -> AWAITING_RESPONSE -> ACCEPTING_INPUT on boot, and
    ACCEPTING_INPUT -> AWAITING_RESPONSE -> ACCEPTING_INPUT for each
    submitted command. The state check in ``start`` and
    ``submit_command`` is the admission guard; the lock serializes the
    exchanges themselves.
    """

    def __init__(
        self,
        writer: TextWriter,
        transport: CommandTransport,
        input_line: InputLine | None = None,
        prompt_prefix: str = "> ",
        text_color: str | None = None,
        error_color: str = "red",
        demo_delay: float = 0.5,
        reset_command: str = "reset",
        next_command: str = "next",
        sentinel: str = DEFAULT_SENTINEL,
    ) -> None:
        self._writer = writer
        self._transport = transport
        self._input_line = input_line if input_line is not None else InputLine()
        self._prompt_prefix = prompt_prefix
        self._text_color = text_color or writer.store.default_color
        self._error_color = error_color
        self._demo_delay = demo_delay
        self._reset_command = reset_command
        self._next_command = next_command
        self._sentinel = sentinel
        self._state = SessionState.IDLE
        self._lock = asyncio.Lock()
        self._prompt_cursor: tuple[int, int] = (0, 0)

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def input_line(self) -> InputLine:
        return self._input_line

    @property
    def prompt_cursor(self) -> tuple[int, int]:
        """Cell just after the visible prompt text, for the blinking cursor."""
        return self._prompt_cursor

    @property
    def max_input_length(self) -> int:
        """Longest input that still fits on the prompt row with the cursor."""
        return max(0, self._writer.store.cols - len(self._prompt_prefix) - 1)

    async def start(self) -> None:
        """Boot the session by pulling the scripted messages.

        Sends the reset command, then the next command repeatedly until
        the completion sentinel arrives. Boot failures are reported on
        the terminal and leave the session IDLE; nothing is retried.
        """
        if self._state is not SessionState.IDLE:
            logger.warning("Ignoring start() while session is %s", self._state.value)
            return
        self._state = SessionState.AWAITING_RESPONSE

        try:
            await self._boot()
        finally:
            # failed or cancelled boot
            if self._state is SessionState.AWAITING_RESPONSE:
                self._state = SessionState.IDLE


    def submit_command(self, text: str) -> asyncio.Task[None] | None:
        """Echo ``text`` and send it to the service as a command.

        Only valid while ACCEPTING_INPUT. Must be called from inside the
        running event loop.

        Returns:
            The task carrying the request, or None if the submit was
            rejected or the line was blank.
        """
        if self._state is not SessionState.ACCEPTING_INPUT:
            logger.debug("Rejected command while session is %s", self._state.value)
            return None

        self._writer.write_line(self._prompt_prefix + text, self._text_color)
        self._input_line.clear()

        if not text.strip():
            self.render_prompt()
            return None

        self._state = SessionState.AWAITING_RESPONSE
        return asyncio.create_task(self._run_command(text))

    def render_prompt(self) -> None:
        """Draw the prompt prefix and pending input on the cursor row.

        The cursor is not advanced, so every redraw overwrites the same
        row until the line is submitted.
        """
        store = self._writer.store
        cursor = store.cursor
        if cursor.row >= store.rows:
            self._writer.scroll()
            cursor.row = store.rows - 1
        self._writer.clear_line(cursor.row)
        self._prompt_cursor = self._writer.put_string(
            self._prompt_prefix + self._input_line.text,
            0,
            cursor.row,
            self._text_color,
        )

    async def close(self) -> None:
        await self._transport.disconnect()

    async def _boot(self) -> None:
        async with self._lock:
            try:
                await self._transport.connect()
            except ConfigurationMissing as e:
                logger.error("Cannot start session: %s", e)
                self._writer.write_line("Error: command endpoint not configured.", self._error_color)
                self._writer.write_line("Check the log for details.", self._error_color)
                return

            try:
                reply = await self._exchange(self._reset_command)
                self._write_messages(reply)
                while True:
                    reply = await self._exchange(self._next_command)
                    self._write_messages(reply)
                    if reply.complete:
                        break
                    await asyncio.sleep(self._demo_delay)
            except (TransportFailure, ProtocolFailure) as e:
                logger.error("Boot sequence failed: %s", e)
                self._write_error(e)
                return

        logger.info("Boot sequence complete")
        self._accept_input()

    async def _run_command(self, text: str) -> None:
        command, _, args = text.strip().partition(" ")
        try:
            async with self._lock:
                try:
                    reply = await self._exchange(command, args.strip() or None)
                    self._write_messages(reply)
                except (TransportFailure, ProtocolFailure) as e:
                    logger.warning("Command '%s' failed: %s", command, e)
                    self._write_error(e)
        finally:
            self._accept_input()

    async def _exchange(self, command: str, args: str | None = None) -> ServiceReply:
        payload = await self._transport.request(command, args)
        return decode_reply(payload, self._sentinel)

    def _write_messages(self, reply: ServiceReply) -> None:
        for message in reply.messages:
            self._writer.write_line(message, self._text_color)

    def _write_error(self, error: Exception) -> None:
        self._writer.write_line(f"Error: {error}", self._error_color)

    def _accept_input(self) -> None:
        self._state = SessionState.ACCEPTING_INPUT
        self.render_prompt()
