"""Rendering module for retroterm.

Paints the character grid onto a raster surface every frame.

Public API:
    Renderer -- Frame loop that draws the grid and blinking cursor
    Surface -- Abstract base class for drawing targets
    PygameSurface -- pygame window implementation
"""

from retroterm.render.base import Surface
from retroterm.render.renderer import Renderer

__all__ = ["PygameSurface", "Renderer", "Surface"]


def __getattr__(name: str) -> type:
    """Lazy import for the surface that requires pygame."""
    if name == "PygameSurface":
        from retroterm.render.pygame_surface import PygameSurface
        return PygameSurface
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
