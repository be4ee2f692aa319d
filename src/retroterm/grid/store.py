"""Fixed-size character grid and cursor.

The GridStore owns the ROWS x COLS cell buffer. It is pure state with
no I/O: the TextWriter mutates it, the Renderer reads it.
"""

from __future__ import annotations

import logging
from typing import Iterator

from retroterm.domain.models import DEFAULT_COLOR, Cell, Cursor

logger = logging.getLogger(__name__)


class OutOfBounds(IndexError):
    """Raised when a grid read addresses a cell outside the grid."""

    def __init__(self, col: int, row: int) -> None:
        super().__init__(f"Cell ({col}, {row}) is outside the grid")
        self.col = col
        self.row = row


class GridStore:
    """Owns the cell buffer and cursor of one terminal instance.

    Dimensions are fixed for the lifetime of the store. Every position
    holds a Cell at all times; blank cells share one frozen instance.
    """

    def __init__(
        self,
        cols: int = 80,
        rows: int = 25,
        default_color: str = DEFAULT_COLOR,
    ) -> None:
        if cols <= 0 or rows <= 0:
            raise ValueError(f"Grid dimensions must be positive, got {cols}x{rows}")
        self._cols = cols
        self._rows = rows
        self._default_color = default_color
        self._blank = Cell(character=" ", color=default_color)
        self._cells: list[list[Cell]] = []
        self.cursor = Cursor()
        self.reset()

    @property
    def cols(self) -> int:
        return self._cols

    @property
    def rows(self) -> int:
        return self._rows

    @property
    def default_color(self) -> str:
        return self._default_color

    def reset(self) -> None:
        """Blank every cell and move the cursor home."""
        self._cells = [[self._blank] * self._cols for _ in range(self._rows)]
        self.cursor.move_to(0, 0)

    def in_bounds(self, col: int, row: int) -> bool:
        return 0 <= col < self._cols and 0 <= row < self._rows

    def get(self, col: int, row: int) -> Cell:
        """Return the cell at (col, row).

        Raises:
            OutOfBounds: If the position is outside the grid.
        """
        if not self.in_bounds(col, row):
            raise OutOfBounds(col, row)
        return self._cells[row][col]

    def set(self, col: int, row: int, char: str, color: str) -> None:
        """Store a cell at (col, row). Positions outside the grid are ignored."""
        if not self.in_bounds(col, row):
            return
        if char == " " and color == self._default_color:
            self._cells[row][col] = self._blank
        else:
            self._cells[row][col] = Cell(character=char, color=color)

    def copy_row(self, src: int, dst: int) -> None:
        """Overwrite row ``dst`` with the contents of row ``src``."""
        if not (0 <= src < self._rows and 0 <= dst < self._rows):
            return
        self._cells[dst] = list(self._cells[src])

    def blank_row(self, row: int) -> None:
        if 0 <= row < self._rows:
            self._cells[row] = [self._blank] * self._cols

    def row_cells(self, row: int) -> tuple[Cell, ...]:
        if not 0 <= row < self._rows:
            raise OutOfBounds(0, row)
        return tuple(self._cells[row])

    def iter_cells(self) -> Iterator[tuple[int, int, Cell]]:
        """Yield ``(col, row, cell)`` for every position, row by row."""
        for row, cells in enumerate(self._cells):
            for col, cell in enumerate(cells):
                yield col, row, cell

    def lines(self) -> list[str]:
        """Return the grid as plain text, one string per row."""
        return ["".join(cell.character for cell in cells) for cells in self._cells]

    def snapshot(self) -> tuple[tuple[Cell, ...], ...]:
        return tuple(tuple(cells) for cells in self._cells)
