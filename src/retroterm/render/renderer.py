"""Frame-by-frame painter for the terminal grid.

Reads the GridStore every frame and draws it on a Surface. The renderer
never writes to the grid; it is the only component that draws on the
surface.
"""

from __future__ import annotations

import asyncio
import logging

from retroterm.domain.models import SessionState
from retroterm.grid.store import GridStore
from retroterm.remote.session import RemoteSession
from retroterm.render.base import Surface

logger = logging.getLogger(__name__)

CURSOR_HEIGHT = 2


class Renderer:
    """Repaints the grid on a cooperative frame loop.

    A blinking bar is drawn under the prompt cursor while the session
    accepts input: visible for the first half of every ``blink_period``
    frames.
    """

    def __init__(
        self,
        store: GridStore,
        surface: Surface,
        session: RemoteSession | None = None,
        background_color: str = "#000",
        cursor_color: str | None = None,
        font_family: str = "monospace",
        font_scale: float = 0.8,
        fps: float = 60.0,
        blink_period: int = 20,
    ) -> None:
        self._store = store
        self._surface = surface
        self._session = session
        self._background_color = background_color
        self._cursor_color = cursor_color or store.default_color
        self._font_family = font_family
        self._font_scale = font_scale
        self._frame_interval = 1.0 / fps
        self._blink_period = max(2, blink_period)
        self._frame_counter = 0
        self._running = False
        self.cell_width = 0.0
        self.cell_height = 0.0
        self.font_size = 1.0
        self.on_resize()

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def frame_counter(self) -> int:
        return self._frame_counter

    def on_resize(self) -> None:
        """Recompute cell and font metrics from the surface size."""
        self.cell_width = self._surface.width / self._store.cols
        self.cell_height = self._surface.height / self._store.rows
        self.font_size = max(1.0, self.cell_height * self._font_scale)
        logger.debug(
            "Surface %dx%d, cell %.1fx%.1f, font %.1f",
            self._surface.width, self._surface.height,
            self.cell_width, self.cell_height, self.font_size,
        )

    def cell_origin(self, col: int, row: int) -> tuple[float, float]:
        """Pixel position of the top-left corner of a cell."""
        return col * self.cell_width, row * self.cell_height

    def cursor_visible(self) -> bool:
        if self._session is None or self._session.state is not SessionState.ACCEPTING_INPUT:
            return False
        return self._frame_counter % self._blink_period < self._blink_period // 2

    def paint(self) -> None:
        """Draw one complete frame."""
        surface = self._surface
        width, height = surface.width, surface.height

        surface.set_font(self.font_size, self._font_family)
        surface.clear_rect(0, 0, width, height)
        surface.fill_rect(0, 0, width, height, self._background_color)

        for col, row, cell in self._store.iter_cells():
            if cell.is_blank:
                continue
            x, y = self.cell_origin(col, row)
            surface.fill_text(cell.character, x, y, cell.color)

        if self.cursor_visible():
            col, row = self._session.prompt_cursor
            x, y = self.cell_origin(col, row)
            surface.fill_rect(
                x,
                y + self.cell_height - CURSOR_HEIGHT,
                self.cell_width,
                CURSOR_HEIGHT,
                self._cursor_color,
            )

        surface.present()
        self._frame_counter += 1

    async def run(self) -> None:
        """Paint frames until stopped or cancelled."""
        self._running = True
        logger.info("Renderer started at %.0f fps", 1.0 / self._frame_interval)
        try:
            while self._running:
                self.paint()
                await asyncio.sleep(self._frame_interval)
        finally:
            self._running = False
            logger.info("Renderer stopped after %d frames", self._frame_counter)

    def stop(self) -> None:
        self._running = False
