"""retroterm -- Fixed-grid retro terminal driven by a remote command service.

This package renders an 80x25 character/color grid onto a raster surface
and feeds it from an external line-oriented command service over HTTP.
Submitted input lines are sent back out to the same service as commands.
"""

__version__ = "0.1.0"
