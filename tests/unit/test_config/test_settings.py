"""Tests for configuration loading and validation."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from consolebridge.config.settings import (
    ProcessConfig,
    ProjectConfig,
    ServerConfig,
    Settings,
    load_settings,
)

ENV_VARS = (
    "PORT",
    "ENVIRONMENT",
    "NODE_ENV",
    "RENDER_SERVICE_NAME",
    "CONSOLEBRIDGE_SERVER__PORT",
    "CONSOLEBRIDGE_SERVER__HOST",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Run every test from an empty directory with no overriding variables."""
    monkeypatch.chdir(tmp_path)
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def write_config(path: Path, text: str) -> Path:
    path.write_text(text)
    return path


class TestSettings:
    def test_default_settings(self) -> None:
        settings = Settings()
        assert settings.server.host == "0.0.0.0"
        assert settings.server.port == 3000
        assert settings.server.environment == "development"
        assert settings.processes.shutdown_grace == 5.0
        assert settings.logging.level == "INFO"
        assert settings.projects == []

    def test_process_config_defaults(self) -> None:
        config = ProcessConfig()
        assert config.encoding == "utf-8"
        assert config.read_chunk_size == 4096

    def test_invalid_port(self) -> None:
        with pytest.raises(ValidationError):
            ServerConfig(port=70000)

    def test_project_requires_command(self) -> None:
        with pytest.raises(ValidationError):
            ProjectConfig(id="empty", command=[])


class TestLoadSettings:
    def test_missing_file_uses_defaults(self, tmp_path: Path) -> None:
        settings = load_settings(tmp_path / "nonexistent.yaml")
        assert settings.server.port == 3000

    def test_yaml_file(self, tmp_path: Path) -> None:
        path = write_config(
            tmp_path / "bridge.yaml",
            "server:\n"
            "  port: 8080\n"
            "  environment: production\n"
            "  allowed_origins: [https://console.example.com]\n"
            "processes:\n"
            "  shutdown_grace: 1.5\n"
            "projects:\n"
            "  - id: shell\n"
            "    description: Login shell\n"
            "    command: [bash, -i]\n",
        )
        settings = load_settings(path)
        assert settings.server.port == 8080
        assert settings.server.environment == "production"
        assert settings.server.allowed_origins == ["https://console.example.com"]
        assert settings.processes.shutdown_grace == 1.5
        assert settings.projects[0].command == ["bash", "-i"]

    def test_empty_yaml_file(self, tmp_path: Path) -> None:
        settings = load_settings(write_config(tmp_path / "empty.yaml", ""))
        assert settings.server.port == 3000

    def test_default_path_is_relative_to_cwd(self, tmp_path: Path) -> None:
        (tmp_path / "config").mkdir()
        write_config(tmp_path / "config" / "consolebridge.yaml", "server:\n  port: 4000\n")
        assert load_settings().server.port == 4000

    def test_platform_variables(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = write_config(tmp_path / "bridge.yaml", "server:\n  port: 8080\n")
        monkeypatch.setenv("PORT", "10000")
        monkeypatch.setenv("NODE_ENV", "production")
        monkeypatch.setenv("RENDER_SERVICE_NAME", "console-bridge")
        settings = load_settings(path)
        assert settings.server.port == 10000
        assert settings.server.environment == "production"
        assert settings.server.service_name == "console-bridge"

    def test_environment_beats_node_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ENVIRONMENT", "staging")
        monkeypatch.setenv("NODE_ENV", "production")
        assert load_settings().server.environment == "staging"

    def test_prefixed_variable_beats_yaml(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        path = write_config(tmp_path / "bridge.yaml", "server:\n  port: 8080\n  host: 127.0.0.1\n")
        monkeypatch.setenv("CONSOLEBRIDGE_SERVER__PORT", "9090")
        settings = load_settings(path)
        assert settings.server.port == 9090
        assert settings.server.host == "127.0.0.1"

    def test_dotenv_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        write_config(tmp_path / ".env", "# local overrides\nPORT=5050\n")
        monkeypatch.setenv("PORT", "")
        assert load_settings().server.port == 5050
