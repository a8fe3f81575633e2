"""Configuration management for keyrelay.

Loads and validates YAML-based configuration with Pydantic models.
Supports environment variable overrides with the ``KEYRELAY_`` prefix.
"""

from keyrelay.config.settings import Settings, load_settings

__all__ = ["Settings", "load_settings"]
