"""Text placement operations on the grid.

All mutation of the GridStore goes through the TextWriter. None of these
operations raise on malformed input: out-of-range coordinates are
no-ops and overlong text is truncated.
"""

from __future__ import annotations

import logging

from retroterm.grid.store import GridStore

logger = logging.getLogger(__name__)

REPLACEMENT_CHAR = "?"


def printable(ch: str) -> str:
    """Map control and other non-printable characters to REPLACEMENT_CHAR."""
    return ch if ch.isprintable() else REPLACEMENT_CHAR


class TextWriter:
    """Writes characters, strings and lines into a GridStore.

    ``put_string`` never wraps to the next row; ``write_line`` is the
    entry point for ordinary output and scrolls instead of dropping
    lines once the cursor passes the bottom of the grid.
    """

    def __init__(self, store: GridStore) -> None:
        self._store = store

    @property
    def store(self) -> GridStore:
        return self._store

    def _color(self, color: str | None) -> str:
        return color or self._store.default_color

    def put_char(self, ch: str, col: int, row: int, color: str | None = None) -> None:
        if not ch:
            return
        self._store.set(col, row, printable(ch[0]), self._color(color))

    def put_string(
        self, text: str, col: int, row: int, color: str | None = None
    ) -> tuple[int, int]:
        """Place ``text`` left to right starting at (col, row).

        Characters falling past the right edge are dropped. Non-printable
        characters are stored as REPLACEMENT_CHAR.

        Returns:
            The position one past the last character written, clamped
            to the right edge of the grid.
        """
        color = self._color(color)
        for offset, ch in enumerate(text):
            self._store.set(col + offset, row, printable(ch), color)
        return min(col + len(text), self._store.cols), row

    def write_line(self, text: str, color: str | None = None) -> None:
        """Write ``text`` on the cursor row and move the cursor to the next row."""
        cursor = self._store.cursor
        if cursor.row >= self._store.rows:
            self.scroll()
            cursor.row = self._store.rows - 1
        row = cursor.row
        self.clear_line(row)
        self.put_string(text[: self._store.cols], 0, row, color)
        cursor.move_to(0, row + 1)
        logger.debug("Wrote line %d: %s", row, text[:40])

    def scroll(self) -> None:
        """Shift every row up by one and blank the last row.

        The cursor is left where it is; callers clamp it.
        """
        for row in range(self._store.rows - 1):
            self._store.copy_row(row + 1, row)
        self._store.blank_row(self._store.rows - 1)

    def clear_line(self, row: int) -> None:
        self._store.blank_row(row)

    def clear_screen(self) -> None:
        self._store.reset()
