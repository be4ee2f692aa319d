"""Shared test fixtures for the retroterm test suite.

Provides common fixtures used across unit tests: a small grid with its
writer, a scripted command transport, a mock drawing surface, and a
remote session wired to them.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from retroterm.grid.store import GridStore
from retroterm.grid.writer import TextWriter
from retroterm.remote.base import CommandTransport
from retroterm.remote.session import RemoteSession
from retroterm.render.base import Surface


# ---------------------------------------------------------------------------
# Grid Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def store() -> GridStore:
    """A standard 80x25 grid."""
    return GridStore(cols=80, rows=25)


@pytest.fixture
def writer(store: GridStore) -> TextWriter:
    return TextWriter(store)


@pytest.fixture
def small_store() -> GridStore:
    """A 10x4 grid, small enough to reason about scrolling by hand."""
    return GridStore(cols=10, rows=4)


@pytest.fixture
def small_writer(small_store: GridStore) -> TextWriter:
    return TextWriter(small_store)


# ---------------------------------------------------------------------------
# Mock Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_transport() -> AsyncMock:
    """A mock CommandTransport. Set ``request.side_effect`` to script replies."""
    transport = AsyncMock(spec=CommandTransport)
    transport.request.return_value = {"messages": []}
    return transport


@pytest.fixture
def mock_surface() -> MagicMock:
    """A 800x500 mock Surface (10x20 pixel cells on an 80x25 grid)."""
    surface = MagicMock(spec=Surface)
    surface.width = 800
    surface.height = 500
    return surface


@pytest.fixture
def session(writer: TextWriter, mock_transport: AsyncMock) -> RemoteSession:
    """A session on the standard grid with no delay between boot requests."""
    return RemoteSession(writer=writer, transport=mock_transport, demo_delay=0)


def visible_lines(store: GridStore) -> list[str]:
    """Grid rows with trailing spaces and trailing blank rows removed."""
    lines = [line.rstrip() for line in store.lines()]
    while lines and not lines[-1]:
        lines.pop()
    return lines


@pytest.fixture
def lines_of():
    return visible_lines
