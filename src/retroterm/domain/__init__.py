"""Domain models for retroterm.

This package contains the core data structures shared by the grid,
renderer, remote session and input router. All models use Pydantic v2.
"""

from retroterm.domain.models import (
    DEFAULT_COLOR,
    Cell,
    Cursor,
    InputLine,
    ServiceReply,
    SessionState,
)

__all__ = [
    "DEFAULT_COLOR",
    "Cell",
    "Cursor",
    "InputLine",
    "ServiceReply",
    "SessionState",
]
