"""pygame-backed output surface.

Opens a window (fullscreen or resizable) and implements the Surface
drawing primitives on it. Uses pygame for precise control over the
monospace font and per-cell colors.
"""

from __future__ import annotations

import logging
import re

import pygame

from retroterm.render.base import Surface

logger = logging.getLogger(__name__)

_SHORT_HEX = re.compile(r"^#([0-9a-fA-F])([0-9a-fA-F])([0-9a-fA-F])$")
_MONO_FONTS = ["dejavusansmono", "liberationmono", "couriernew", "monospace", "courier"]


def to_pygame_color(color: str) -> pygame.Color:
    """Convert a color tag ('red', '#0F0', '#00ff00') to a pygame Color."""
    match = _SHORT_HEX.match(color)
    if match:
        color = "#" + "".join(c * 2 for c in match.groups())
    try:
        return pygame.Color(color)
    except ValueError:
        logger.warning("Unknown color %r, using white", color)
        return pygame.Color("white")


class PygameSurface(Surface):
    """Draws on a pygame display window."""

    def __init__(
        self,
        width: int = 960,
        height: int = 600,
        window_title: str = "retroterm",
        fullscreen: bool = False,
    ) -> None:
        self._initial_size = (width, height)
        self._window_title = window_title
        self._fullscreen = fullscreen
        self._screen: pygame.Surface | None = None
        self._font: pygame.font.Font | None = None
        self._font_key: tuple[int, str] | None = None
        self._font_cache: dict[tuple[int, str], pygame.font.Font] = {}
        self._color_cache: dict[str, pygame.Color] = {}

    @property
    def is_open(self) -> bool:
        return self._screen is not None

    @property
    def width(self) -> int:
        if self._screen is None:
            return self._initial_size[0]
        return self._screen.get_width()

    @property
    def height(self) -> int:
        if self._screen is None:
            return self._initial_size[1]
        return self._screen.get_height()

    def open(self) -> None:
        if self._screen is not None:
            return
        pygame.init()
        if self._fullscreen:
            info = pygame.display.Info()
            size = (info.current_w, info.current_h)
            self._screen = pygame.display.set_mode(size, pygame.FULLSCREEN)
        else:
            self._screen = pygame.display.set_mode(self._initial_size, pygame.RESIZABLE)
        pygame.display.set_caption(self._window_title)
        logger.info("Opened %dx%d window", self.width, self.height)

    def close(self) -> None:
        if self._screen is None:
            return
        self._screen = None
        self._font = None
        self._font_key = None
        self._font_cache.clear()
        pygame.quit()
        logger.info("Window closed")

    def resize(self, width: int, height: int) -> None:
        """Re-create the window surface after the host resized it."""
        if self._screen is None or self._fullscreen:
            return
        self._screen = pygame.display.set_mode((width, height), pygame.RESIZABLE)

    def clear_rect(self, x: float, y: float, w: float, h: float) -> None:
        self._require_screen().fill((0, 0, 0), pygame.Rect(int(x), int(y), int(w), int(h)))

    def fill_rect(self, x: float, y: float, w: float, h: float, color: str) -> None:
        rect = pygame.Rect(int(x), int(y), max(1, int(w)), max(1, int(h)))
        self._require_screen().fill(self._color(color), rect)

    def fill_text(self, text: str, x: float, y: float, color: str) -> None:
        if self._font is None:
            raise RuntimeError("set_font() must be called before fill_text()")
        rendered = self._font.render(text, True, self._color(color))
        self._require_screen().blit(rendered, (int(x), int(y)))

    def set_font(self, size: float, family: str) -> None:
        key = (max(1, int(size)), family)
        if key == self._font_key:
            return
        font = self._font_cache.get(key)
        if font is None:
            font = self._find_mono_font(key[0], family)
            self._font_cache[key] = font
        self._font = font
        self._font_key = key

    def present(self) -> None:
        pygame.display.flip()

    def _require_screen(self) -> pygame.Surface:
        if self._screen is None:
            raise RuntimeError("Surface is not open")
        return self._screen

    def _color(self, color: str) -> pygame.Color:
        cached = self._color_cache.get(color)
        if cached is None:
            cached = to_pygame_color(color)
            self._color_cache[color] = cached
        return cached

    @staticmethod
    def _find_mono_font(size: int, family: str) -> pygame.font.Font:
        """Find a monospace font at the given size, preferring ``family``."""
        for name in [family, *_MONO_FONTS]:
            path = pygame.font.match_font(name)
            if path:
                return pygame.font.Font(path, size)
        return pygame.font.SysFont("monospace", size)
