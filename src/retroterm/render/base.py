"""Abstract base class for raster output surfaces.

The renderer draws only through this interface, so the pygame window
can be replaced by an offscreen or mock surface without touching it.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


class Surface(ABC):
    """Abstract drawing target measured in pixels.

    Font and baseline state may be reset by the implementation between
    frames, so the renderer calls ``set_font`` at the start of every
    frame.

    Example usage::

        with PygameSurface(width=960, height=600) as surface:
            surface.set_font(19, "monospace")
            surface.fill_text("READY.", 0, 0, "#0F0")
            surface.present()
    """

    @property
    @abstractmethod
    def width(self) -> int:
        """Current surface width in pixels."""
        ...

    @property
    @abstractmethod
    def height(self) -> int:
        """Current surface height in pixels."""
        ...

    @abstractmethod
    def clear_rect(self, x: float, y: float, w: float, h: float) -> None: ...

    @abstractmethod
    def fill_rect(self, x: float, y: float, w: float, h: float, color: str) -> None: ...

    @abstractmethod
    def fill_text(self, text: str, x: float, y: float, color: str) -> None:
        """Draw ``text`` with its top-left corner at (x, y)."""
        ...

    @abstractmethod
    def set_font(self, size: float, family: str) -> None: ...

    def open(self) -> None:
        """Acquire the underlying window or buffer. No-op by default."""

    def close(self) -> None:
        """Release the underlying window or buffer. No-op by default."""

    def present(self) -> None:
        """Make the finished frame visible. No-op by default."""

    def __enter__(self) -> Surface:
        self.open()
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: object) -> None:
        self.close()
