"""Core domain models for the retroterm system.

These models represent the data flowing through the terminal: the cells
and cursor of the character grid, the pending input line, the session
state machine, and decoded replies from the command service.
"""

from __future__ import annotations

import enum

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_COLOR = "#0F0"


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class SessionState(str, enum.Enum):
    """Where the remote session is in its request/response cycle."""

    IDLE = "idle"  # Not booted, or boot failed
    AWAITING_RESPONSE = "awaiting_response"  # A request is in flight
    ACCEPTING_INPUT = "accepting_input"  # Prompt shown, keystrokes accepted


# ---------------------------------------------------------------------------
# Grid Models
# ---------------------------------------------------------------------------


class Cell(BaseModel):
    """One character-plus-color unit of the terminal grid."""

    model_config = ConfigDict(frozen=True)

    character: str = Field(default=" ", min_length=1, max_length=1)
    color: str = Field(default=DEFAULT_COLOR, description="Foreground color tag")

    @property
    def is_blank(self) -> bool:
        return self.character == " "


class Cursor(BaseModel):
    """Write position within the grid.

    ``row`` may transiently equal the grid height, meaning the next
    line write must scroll first.
    """

    col: int = Field(default=0, ge=0)
    row: int = Field(default=0, ge=0)

    def move_to(self, col: int, row: int) -> None:
        self.col = col
        self.row = row

    def as_tuple(self) -> tuple[int, int]:
        return self.col, self.row


# ---------------------------------------------------------------------------
# Input Models
# ---------------------------------------------------------------------------


class InputLine(BaseModel):
    """The not-yet-submitted command the user is typing."""

    text: str = ""

    def append(self, char: str) -> None:
        self.text += char

    def backspace(self) -> None:
        self.text = self.text[:-1]

    def clear(self) -> None:
        self.text = ""

    def __len__(self) -> int:
        return len(self.text)


# ---------------------------------------------------------------------------
# Protocol Models
# ---------------------------------------------------------------------------


class MessageBatch(BaseModel):
    """Wire shape of a reply carrying an ordered list of messages."""

    messages: list[str]


class SingleMessage(BaseModel):
    """Wire shape of a demo-pull reply carrying one message."""

    message: str


class ServiceReply(BaseModel):
    """A decoded reply from the command service."""

    model_config = ConfigDict(frozen=True)

    messages: list[str] = Field(
        default_factory=list, description="Lines to write, in arrival order"
    )
    complete: bool = Field(
        default=False,
        description="True when the reply ends the message stream",
    )
