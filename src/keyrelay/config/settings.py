"""Configuration management for keyrelay.

Loads settings from a YAML configuration file with environment variable
overrides (``KEYRELAY_RELAY__PORT=12000`` and friends).
"""

from __future__ import annotations

import ipaddress
import logging
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config/keyrelay.yaml")

# Well-known UDP port shared by hosts and clients
DEFAULT_RELAY_PORT = 11000


class RelayConfig(BaseModel):
    port: int = Field(default=DEFAULT_RELAY_PORT, ge=1, le=65535)
    bind_host: str = Field(default="0.0.0.0", description="Local interface to bind")
    max_datagram: int = Field(default=1024, gt=0)

    @field_validator("bind_host")
    @classmethod
    def _ipv4_host(cls, value: str) -> str:
        try:
            return str(ipaddress.IPv4Address(value.strip()))
        except ValueError as e:
            raise ValueError(f"bind_host must be an IPv4 address: {e}") from e


class SessionConfig(BaseModel):
    quit_key: str = Field(default="q", description="Local key that ends a session")
    state_file: str = Field(default="program.settings")

    @field_validator("quit_key")
    @classmethod
    def _single_char(cls, value: str) -> str:
        if len(value) != 1:
            raise ValueError("quit_key must be exactly one character")
        return value


class KeyboardConfig(BaseModel):
    simulator: Literal["pynput", "none"] = Field(default="pynput")


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO")
    format: str = Field(
        default="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    file: str | None = Field(default=None)


class Settings(BaseSettings):
    """Root configuration for keyrelay.

    Loads from YAML file and supports environment variable overrides.
    """

    model_config = {
        "env_prefix": "KEYRELAY_",
        "env_nested_delimiter": "__",
        "extra": "ignore",
    }

    relay: RelayConfig = Field(default_factory=RelayConfig)
    session: SessionConfig = Field(default_factory=SessionConfig)
    keyboard: KeyboardConfig = Field(default_factory=KeyboardConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def load_settings(config_path: Path | str | None = None) -> Settings:
    """Load settings from YAML + environment variables.

    Priority: YAML file > env vars > defaults (YAML values are passed
    as init arguments, which pydantic-settings ranks first).
    """
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

    yaml_data = {}
    if path.exists():
        with open(path) as f:
            yaml_data = yaml.safe_load(f) or {}
        logger.info("Loaded configuration from %s", path)
    else:
        logger.warning("Config file %s not found, using defaults + env vars", path)

    return Settings(**yaml_data)
