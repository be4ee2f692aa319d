"""Character grid module for retroterm.

Holds the fixed-size cell buffer (GridStore) and the only operations
allowed to mutate it (TextWriter).

Public API:
    GridStore -- Cell buffer and cursor
    TextWriter -- Character, string and line writes with scrolling
    OutOfBounds -- Raised by GridStore.get outside the grid
"""

from retroterm.grid.store import GridStore, OutOfBounds
from retroterm.grid.writer import TextWriter

__all__ = ["GridStore", "OutOfBounds", "TextWriter"]
