"""Tests for the RemoteSession state machine."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, call, patch

import pytest

from retroterm.domain.models import SessionState
from retroterm.grid.store import GridStore
from retroterm.grid.writer import TextWriter
from retroterm.keyboard.router import InputRouter
from retroterm.remote.base import (
    ConfigurationMissing,
    ProtocolFailure,
    TransportFailure,
)
from retroterm.remote.http_transport import HttpCommandTransport
from retroterm.remote.session import RemoteSession


def red_rows(store: GridStore) -> list[int]:
    return [
        row
        for row in range(store.rows)
        if any(cell.color == "red" for cell in store.row_cells(row))
    ]


async def boot(session: RemoteSession, transport: AsyncMock) -> None:
    transport.request.side_effect = [{"messages": []}, {"message": "END"}]
    await session.start()
    assert session.state is SessionState.ACCEPTING_INPUT


class TestSessionBoot:
    def test_initial_state(self, session: RemoteSession) -> None:
        assert session.state is SessionState.IDLE
        assert session.input_line.text == ""

    @pytest.mark.asyncio
    async def test_boot_writes_messages_in_order_then_prompts(
        self, session: RemoteSession, mock_transport: AsyncMock, store: GridStore, lines_of
    ) -> None:
        mock_transport.request.side_effect = [
            {"messages": []},
            {"messages": ["m1", "m2"]},
            {"messages": ["m3", "m4"]},
            {"messages": ["m5", "m6"]},
            {"message": "END"},
        ]
        await session.start()

        assert lines_of(store) == ["m1", "m2", "m3", "m4", "m5", "m6", ">"]
        assert session.state is SessionState.ACCEPTING_INPUT
        assert mock_transport.request.call_args_list == [
            call("reset", None),
            call("next", None),
            call("next", None),
            call("next", None),
            call("next", None),
        ]
        mock_transport.connect.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_boot_stops_on_empty_batch(
        self, session: RemoteSession, mock_transport: AsyncMock, store: GridStore, lines_of
    ) -> None:
        mock_transport.request.side_effect = [
            {"messages": []},
            {"message": "READY."},
            {"messages": []},
        ]
        await session.start()
        assert lines_of(store) == ["READY.", ">"]
        assert session.state is SessionState.ACCEPTING_INPUT

    @pytest.mark.asyncio
    async def test_boot_waits_between_requests(
        self, writer: TextWriter, mock_transport: AsyncMock
    ) -> None:
        session = RemoteSession(writer=writer, transport=mock_transport, demo_delay=0.5)
        mock_transport.request.side_effect = [
            {"messages": []},
            {"message": "a"},
            {"message": "b"},
            {"message": "END"},
        ]
        with patch("retroterm.remote.session.asyncio.sleep", new=AsyncMock()) as sleep:
            await session.start()
        assert sleep.await_args_list == [call(0.5), call(0.5)]

    @pytest.mark.asyncio
    async def test_reset_messages_are_written(
        self, session: RemoteSession, mock_transport: AsyncMock, store: GridStore, lines_of
    ) -> None:
        mock_transport.request.side_effect = [{"messages": ["rewound"]}, "END"]
        await session.start()
        assert lines_of(store) == ["rewound", ">"]

    @pytest.mark.asyncio
    async def test_missing_endpoint_reports_and_stays_idle(
        self, session: RemoteSession, mock_transport: AsyncMock, store: GridStore
    ) -> None:
        mock_transport.connect.side_effect = ConfigurationMissing("no endpoint")
        await session.start()

        assert session.state is SessionState.IDLE
        assert red_rows(store) == [0, 1]
        assert store.lines()[0].startswith("Error: command endpoint not configured.")
        mock_transport.request.assert_not_called()

    @pytest.mark.asyncio
    async def test_boot_transport_failure_is_terminal(
        self, session: RemoteSession, mock_transport: AsyncMock, store: GridStore, lines_of
    ) -> None:
        mock_transport.request.side_effect = [
            {"messages": []},
            {"message": "line one"},
            TransportFailure("connection refused"),
        ]
        await session.start()

        assert session.state is SessionState.IDLE
        assert lines_of(store) == ["line one", "Error: connection refused"]
        assert red_rows(store) == [1]
        assert mock_transport.request.call_count == 3

    @pytest.mark.asyncio
    async def test_boot_malformed_reply_is_terminal(
        self, session: RemoteSession, mock_transport: AsyncMock, store: GridStore
    ) -> None:
        mock_transport.request.side_effect = [{"messages": []}, {"unexpected": True}]
        await session.start()
        assert session.state is SessionState.IDLE
        assert red_rows(store) == [0]

    @pytest.mark.asyncio
    async def test_boot_can_be_started_again_after_failure(
        self, session: RemoteSession, mock_transport: AsyncMock
    ) -> None:
        mock_transport.request.side_effect = [ProtocolFailure("status 503, body 'busy'")]
        await session.start()
        assert session.state is SessionState.IDLE

        await boot(session, mock_transport)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("endpoint", ["http://host:abc/x", "http://[::1/abc"])
    async def test_malformed_endpoint_reports_and_stays_idle(
        self, writer: TextWriter, store: GridStore, endpoint: str
    ) -> None:
        transport = HttpCommandTransport(endpoint_url=endpoint)
        session = RemoteSession(writer=writer, transport=transport, demo_delay=0)
        await session.start()
        await session.close()

        assert session.state is SessionState.IDLE
        assert red_rows(store) == [0]
        assert store.lines()[0].startswith("Error: Invalid command endpoint")

    @pytest.mark.asyncio
    async def test_unexpected_boot_error_leaves_session_idle(
        self, session: RemoteSession, mock_transport: AsyncMock
    ) -> None:
        mock_transport.request.side_effect = RuntimeError("boom")
        with pytest.raises(RuntimeError):
            await session.start()
        assert session.state is SessionState.IDLE

        await boot(session, mock_transport)

    @pytest.mark.asyncio
    async def test_start_ignored_when_not_idle(
        self, session: RemoteSession, mock_transport: AsyncMock
    ) -> None:
        await boot(session, mock_transport)
        mock_transport.request.reset_mock()
        await session.start()
        mock_transport.request.assert_not_called()
        assert session.state is SessionState.ACCEPTING_INPUT


class TestSessionCommands:
    @pytest.mark.asyncio
    async def test_submit_echoes_and_writes_reply(
        self, session: RemoteSession, mock_transport: AsyncMock, store: GridStore, lines_of
    ) -> None:
        await boot(session, mock_transport)
        mock_transport.request.side_effect = [{"messages": ["hello world", "bye"]}]

        task = session.submit_command("echo hello world")
        assert task is not None
        assert session.state is SessionState.AWAITING_RESPONSE
        await task

        mock_transport.request.assert_awaited_with("echo", "hello world")
        assert lines_of(store) == ["> echo hello world", "hello world", "bye", ">"]
        assert session.state is SessionState.ACCEPTING_INPUT

    @pytest.mark.asyncio
    async def test_command_without_args(
        self, session: RemoteSession, mock_transport: AsyncMock
    ) -> None:
        await boot(session, mock_transport)
        mock_transport.request.side_effect = [{"messages": []}]
        await session.submit_command("  help  ")
        mock_transport.request.assert_awaited_with("help", None)
        assert session.state is SessionState.ACCEPTING_INPUT

    @pytest.mark.asyncio
    async def test_submit_clears_input_line(
        self, session: RemoteSession, mock_transport: AsyncMock
    ) -> None:
        await boot(session, mock_transport)
        mock_transport.request.side_effect = [{"messages": []}]
        session.input_line.text = "help"
        await session.submit_command("help")
        assert session.input_line.text == ""

    @pytest.mark.asyncio
    async def test_blank_submit_sends_nothing(
        self, session: RemoteSession, mock_transport: AsyncMock, store: GridStore, lines_of
    ) -> None:
        await boot(session, mock_transport)
        mock_transport.request.reset_mock()
        assert session.submit_command("   ") is None
        mock_transport.request.assert_not_called()
        assert session.state is SessionState.ACCEPTING_INPUT
        assert lines_of(store) == [">", ">"]

    @pytest.mark.asyncio
    async def test_submit_rejected_when_idle(
        self, session: RemoteSession, mock_transport: AsyncMock, store: GridStore
    ) -> None:
        before = store.snapshot()
        assert session.submit_command("help") is None
        mock_transport.request.assert_not_called()
        assert store.snapshot() == before

    @pytest.mark.asyncio
    async def test_submit_rejected_while_awaiting(
        self, session: RemoteSession, mock_transport: AsyncMock
    ) -> None:
        await boot(session, mock_transport)
        release = asyncio.Event()

        async def slow_reply(command: str, args: str | None) -> dict:
            await release.wait()
            return {"messages": ["done"]}

        mock_transport.request.side_effect = slow_reply
        task = session.submit_command("first")
        assert session.submit_command("second") is None

        release.set()
        await task
        assert mock_transport.request.await_args_list[-1] == call("first", None)
        assert mock_transport.request.await_count == 3

    @pytest.mark.asyncio
    async def test_interactive_failure_returns_to_prompt(
        self, session: RemoteSession, mock_transport: AsyncMock, store: GridStore, lines_of
    ) -> None:
        await boot(session, mock_transport)
        mock_transport.request.side_effect = [
            ProtocolFailure("status 500, body 'server error'", status_code=500)
        ]
        session.input_line.text = "help"
        await session.submit_command("help")

        assert len(red_rows(store)) == 1
        assert "status 500, body 'server error'" in lines_of(store)[1]
        assert session.input_line.text == ""
        assert session.state is SessionState.ACCEPTING_INPUT
        assert lines_of(store)[-1] == ">"

    @pytest.mark.asyncio
    async def test_interactive_transport_failure(
        self, session: RemoteSession, mock_transport: AsyncMock, store: GridStore
    ) -> None:
        await boot(session, mock_transport)
        mock_transport.request.side_effect = [TransportFailure("timed out")]
        await session.submit_command("help")
        assert len(red_rows(store)) == 1
        assert session.state is SessionState.ACCEPTING_INPUT

    @pytest.mark.asyncio
    async def test_unexpected_command_error_still_returns_prompt(
        self, session: RemoteSession, mock_transport: AsyncMock, store: GridStore, lines_of
    ) -> None:
        await boot(session, mock_transport)
        mock_transport.request.side_effect = RuntimeError("boom")
        task = session.submit_command("help")
        with pytest.raises(RuntimeError):
            await task
        assert session.state is SessionState.ACCEPTING_INPUT
        assert lines_of(store)[-1] == ">"

    @pytest.mark.asyncio
    async def test_close_disconnects(
        self, session: RemoteSession, mock_transport: AsyncMock
    ) -> None:
        await session.close()
        mock_transport.disconnect.assert_awaited_once()


class TestPrompt:
    def test_prompt_shows_pending_input(self, session: RemoteSession, store: GridStore) -> None:
        session.input_line.text = "dir"
        session.render_prompt()
        assert store.lines()[0].rstrip() == "> dir"
        assert session.prompt_cursor == (5, 0)
        assert store.cursor.as_tuple() == (0, 0)

    def test_prompt_redraw_overwrites_row(self, session: RemoteSession, store: GridStore) -> None:
        session.input_line.text = "long command"
        session.render_prompt()
        session.input_line.text = "ls"
        session.render_prompt()
        assert store.lines()[0].rstrip() == "> ls"

    def test_prompt_scrolls_at_bottom(self, small_store: GridStore, mock_transport: AsyncMock) -> None:
        writer = TextWriter(small_store)
        session = RemoteSession(writer=writer, transport=mock_transport)
        for ch in "ABCD":
            writer.write_line(ch)
        session.render_prompt()
        assert [line.rstrip() for line in small_store.lines()] == ["B", "C", "D", ">"]
        assert small_store.cursor.row == 3
        assert session.prompt_cursor == (2, 3)

    def test_max_input_length(self, session: RemoteSession) -> None:
        assert session.max_input_length == 80 - 2 - 1


class TestSessionWithRouter:
    @pytest.mark.asyncio
    async def test_typed_command_round_trip(
        self, session: RemoteSession, mock_transport: AsyncMock, store: GridStore, lines_of
    ) -> None:
        await boot(session, mock_transport)
        router = InputRouter(session)
        mock_transport.request.side_effect = [{"messages": ["HI"]}]

        for key in "echo hi":
            router.handle_key(key)
        assert lines_of(store) == ["> echo hi"]

        task = router.handle_key("Enter")
        await task
        mock_transport.request.assert_awaited_with("echo", "hi")
        assert lines_of(store) == ["> echo hi", "HI", ">"]
        assert router.pending == ""
