"""Demo command service module for retroterm.

A local stand-in for the external command service. Provides an HTTP
server that answers the terminal's boot and interactive commands, so
the terminal can be run end to end without the real service.
"""
