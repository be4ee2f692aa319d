"""Input router: raw key events to the pending input line.

Keys are only accepted while the session shows its prompt; anything
typed while a request is in flight is dropped, not buffered.
"""

from __future__ import annotations

import asyncio
import logging

from retroterm.domain.models import SessionState
from retroterm.remote.session import RemoteSession

logger = logging.getLogger(__name__)

DELETE_KEY = "Backspace"
SUBMIT_KEY = "Enter"


class InputRouter:
    """Translates key names into edits of the session's input line.

    Key names follow the host's convention: single printable characters
    ('a', 'A', '1', '!', ' '), plus the delete and submit keys.
    """

    def __init__(
        self,
        session: RemoteSession,
        delete_key: str = DELETE_KEY,
        submit_key: str = SUBMIT_KEY,
    ) -> None:
        self._session = session
        self._delete_key = delete_key
        self._submit_key = submit_key

    @property
    def pending(self) -> str:
        return self._session.input_line.text

    def handle_key(self, key: str) -> asyncio.Task[None] | None:
        """Apply one key event.

        Returns:
            The request task when the key submitted a command, else None.
        """
        if self._session.state is not SessionState.ACCEPTING_INPUT:
            logger.debug("Ignoring key %r while session is %s", key, self._session.state.value)
            return None

        line = self._session.input_line
        if key == self._submit_key:
            return self._session.submit_command(line.text)

        if key == self._delete_key:
            line.backspace()
        elif len(key) == 1 and key.isprintable():
            if len(line) >= self._session.max_input_length:
                logger.debug("Input line full, dropping %r", key)
                return None
            line.append(key)
        else:
            logger.debug("Ignoring unmapped key %r", key)
            return None

        self._session.render_prompt()
        return None
