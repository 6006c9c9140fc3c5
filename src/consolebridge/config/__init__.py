"""Configuration management for consolebridge.

Loads and validates YAML-based configuration with Pydantic models.
Supports environment variable overrides for deployment settings.
"""

from consolebridge.config.settings import Settings, load_settings

__all__ = ["Settings", "load_settings"]
