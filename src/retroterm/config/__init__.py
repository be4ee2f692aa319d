"""Configuration management for retroterm.

Loads and validates YAML-based configuration with Pydantic models.
Supports environment variable overrides, including the capability
endpoint injected by the host.
"""

from retroterm.config.settings import Settings, load_settings

__all__ = ["Settings", "load_settings"]
