"""Configuration management for retroterm.

Loads settings from a YAML configuration file with environment variable
overrides. The host injects the capability endpoint through the
``RETROTERM_ENDPOINT`` variable. Supports .env files.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config/retroterm.yaml")
ENDPOINT_ENV_VAR = "RETROTERM_ENDPOINT"


class TerminalConfig(BaseModel):
    cols: int = Field(default=80, gt=0)
    rows: int = Field(default=25, gt=0)
    default_color: str = Field(default="#0F0")
    error_color: str = Field(default="red")
    background_color: str = Field(default="#000")
    prompt_prefix: str = Field(default="> ")
    delete_key: str = Field(default="Backspace")
    submit_key: str = Field(default="Enter")


class DisplayConfig(BaseModel):
    width: int = Field(default=960, gt=0)
    height: int = Field(default=600, gt=0)
    fullscreen: bool = Field(default=False)
    window_title: str = Field(default="retroterm")
    font_family: str = Field(default="monospace")
    font_scale: float = Field(default=0.8, gt=0, le=1.0)
    fps: float = Field(default=60.0, gt=0)
    blink_period: int = Field(default=20, ge=2, description="Cursor blink cycle in frames")


class ServiceConfig(BaseModel):
    endpoint_url: str | None = Field(default=None, description="Capability endpoint URL")
    method: Literal["get", "post"] = Field(default="get")
    timeout: float | None = Field(
        default=None, gt=0, description="Request timeout in seconds; None waits forever"
    )
    demo_delay: float = Field(default=0.5, ge=0)
    reset_command: str = Field(default="reset")
    next_command: str = Field(default="next")
    completion_sentinel: str = Field(default="END")
    recipient_header: str = Field(default="X-Recipient-Id")


class DemoServerConfig(BaseModel):
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=8080, ge=1, le=65535)


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO")
    format: str = Field(
        default="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    file: str | None = Field(default=None)


class Settings(BaseSettings):
    """Root configuration for retroterm.

    Loads from YAML file and supports environment variable overrides.
    Reads .env files automatically.
    """

    model_config = {
        "env_prefix": "RETROTERM_",
        "env_nested_delimiter": "__",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    terminal: TerminalConfig = Field(default_factory=TerminalConfig)
    display: DisplayConfig = Field(default_factory=DisplayConfig)
    service: ServiceConfig = Field(default_factory=ServiceConfig)
    demo_server: DemoServerConfig = Field(default_factory=DemoServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # YAML arrives as init kwargs; environment values win over it
        return env_settings, dotenv_settings, init_settings, file_secret_settings


def load_settings(config_path: Path | str | None = None) -> Settings:
    """Load settings from YAML + .env + environment variables.

    Priority: env vars > .env file > YAML file > defaults
    """
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

    _load_dotenv()

    yaml_data = {}
    if path.exists():
        with open(path) as f:
            yaml_data = yaml.safe_load(f) or {}
        logger.info("Loaded configuration from %s", path)
    else:
        logger.warning("Config file %s not found, using defaults + env vars", path)

    _apply_env_overrides(yaml_data)

    return Settings(**yaml_data)


def _load_dotenv() -> None:
    """Load .env file into os.environ if it exists."""
    env_path = Path(".env")
    if not env_path.exists():
        return
    with open(env_path) as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if "=" in line:
                key, _, value = line.partition("=")
                key = key.strip()
                value = value.strip()
                if not os.environ.get(key):
                    os.environ[key] = value


def _apply_env_overrides(yaml_data: dict) -> None:
    """Map the host-injected endpoint variable onto the service section."""
    endpoint = os.environ.get(ENDPOINT_ENV_VAR, "")
    if not endpoint:
        return
    service = yaml_data.setdefault("service", {})
    service["endpoint_url"] = endpoint
