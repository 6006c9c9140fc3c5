"""Configuration management for consolebridge.

Loads settings from a YAML configuration file with environment variable
overrides. Supports .env files and the unprefixed variables common on
hosting platforms (PORT, NODE_ENV, RENDER_SERVICE_NAME).
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config/consolebridge.yaml")


class ServerConfig(BaseModel):
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000, ge=1, le=65535)
    environment: str = Field(default="development")
    service_name: str = Field(default="consolebridge")
    allowed_origins: list[str] = Field(
        default_factory=list,
        description="Origins allowed in production; every origin is allowed otherwise",
    )


class ProcessConfig(BaseModel):
    python_executable: str = Field(
        default=sys.executable, description="Interpreter used to run the bundled simulators"
    )
    shutdown_grace: float = Field(
        default=5.0, ge=0, description="Seconds to wait for children on shutdown before SIGKILL"
    )
    encoding: str = Field(default="utf-8")
    read_chunk_size: int = Field(default=4096, gt=0)
    stdin_buffer_limit: int = Field(
        default=1024 * 1024, gt=0, description="Bytes of unread input queued per process before dropping"
    )


class ProjectConfig(BaseModel):
    """A project backed by an arbitrary command, declared in YAML."""

    id: str = Field(min_length=1)
    description: str = Field(default="")
    tech: list[str] = Field(default_factory=list)
    repository_url: str = Field(default="")
    command: list[str] = Field(min_length=1, description="argv of the backing process")
    cwd: str | None = Field(default=None)
    banner: str | None = Field(default=None)


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO")
    format: str = Field(
        default="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    file: str | None = Field(default=None)
    access_log: bool = Field(
        default=False, description="Log every HTTP request, including health probes"
    )


class Settings(BaseSettings):
    """Root configuration for the consolebridge server.

    Loads from YAML file and supports environment variable overrides.
    Reads .env files automatically.
    """

    model_config = {
        "env_prefix": "CONSOLEBRIDGE_",
        "env_nested_delimiter": "__",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    server: ServerConfig = Field(default_factory=ServerConfig)
    processes: ProcessConfig = Field(default_factory=ProcessConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    projects: list[ProjectConfig] = Field(default_factory=list)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # YAML values arrive as init kwargs and must lose to the environment
        return env_settings, dotenv_settings, init_settings, file_secret_settings


def load_settings(config_path: Path | str | None = None) -> Settings:
    """Load settings from YAML + .env + environment variables.

    Priority: env vars > .env file > YAML file > defaults
    """
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

    # Load .env file manually for non-prefixed vars
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
    """Apply hosting-platform environment variables to the server section."""
    port = os.environ.get("PORT", "")
    environment = os.environ.get("ENVIRONMENT", "") or os.environ.get("NODE_ENV", "")
    service_name = os.environ.get("RENDER_SERVICE_NAME", "")

    if not (port or environment or service_name):
        return

    server = yaml_data.setdefault("server", {}) or {}
    yaml_data["server"] = server

    if port:
        server["port"] = port
    if environment:
        server["environment"] = environment
    if service_name:
        server["service_name"] = service_name
