"""Keyboard input module for retroterm.

Routes host key events into the pending input line and hands submitted
lines to the remote session.

Public API:
    InputRouter -- Key event to input line translation
"""

from retroterm.keyboard.router import DELETE_KEY, SUBMIT_KEY, InputRouter

__all__ = ["DELETE_KEY", "InputRouter", "SUBMIT_KEY"]
