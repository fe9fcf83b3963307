"""Unit tests for configuration loading."""

import logging
from pathlib import Path
from unittest.mock import MagicMock

import httpx
import pytest

from idlink.config import AuthConfig, Config, LoggingConfig, configure_logging
from idlink.infrastructure.auth.provider_registry import StaticProviderRegistry


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv("IDLINK_CONFIG_FILE", raising=False)
    monkeypatch.delenv("IDLINK_LOG_FILE", raising=False)


class TestConfig:
    def test_defaults(self):
        config = Config(auth=AuthConfig())

        assert config.auth.connect_timeout == 300
        assert config.auth.allow_registration is True
        assert config.auth.sync_provider_email is False
        assert config.auth.session_key_prefix == "idlink."
        assert config.providers == {}

    def test_nested_env_override(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("IDLINK_AUTH__CONNECT_TIMEOUT", "120")
        monkeypatch.setenv("IDLINK_AUTH__ALLOW_REGISTRATION", "false")

        config = Config()

        assert config.auth.connect_timeout == 120
        assert config.auth.allow_registration is False

    def test_yaml_file(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
        config_file = tmp_path / "idlink.yaml"
        config_file.write_text(
            """
auth:
  redirect_uri: https://app.example/api/v1/auth/callback
  session_secret: from-yaml
providers:
  Github:
    client_id: gh-id
    client_secret: gh-secret
  Kanidm:
    client_id: k-id
    client_secret: k-secret
    kanidm_url: https://idm.example
    sign_in_label: Kanidm
"""
        )
        monkeypatch.setenv("IDLINK_CONFIG_FILE", str(config_file))
        monkeypatch.delenv("IDLINK_AUTH__SESSION_SECRET", raising=False)

        config = Config()

        assert config.auth.redirect_uri == "https://app.example/api/v1/auth/callback"
        assert config.auth.session_secret == "from-yaml"
        assert config.providers["Github"] == {"client_id": "gh-id", "client_secret": "gh-secret"}
        assert config.providers["Kanidm"]["kanidm_url"] == "https://idm.example"

    def test_missing_yaml_file_is_ignored(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
        monkeypatch.setenv("IDLINK_CONFIG_FILE", str(tmp_path / "missing.yaml"))

        config = Config()

        assert config.providers == {}

    def test_provider_from_env(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("IDLINK_PROVIDERS__GITHUB__CLIENT_ID", "gh-id")
        monkeypatch.setenv("IDLINK_PROVIDERS__GITHUB__CLIENT_SECRET", "gh-secret")
        monkeypatch.setenv("IDLINK_PROVIDERS__GITHUB__USE_PKCE", "false")

        config = Config()
        registry = StaticProviderRegistry.from_config(
            config.providers, "https://app.example/cb", MagicMock(spec=httpx.AsyncClient)
        )

        provider = registry.resolve("Github")
        assert provider is not None
        assert provider.config.client_id == "gh-id"
        assert provider.config.use_pkce is False

    def test_init_values_win_over_env(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("IDLINK_AUTH__LOGIN_URL", "/from-env")

        config = Config(auth=AuthConfig(login_url="/from-init"))

        assert config.auth.login_url == "/from-init"


class TestConfigureLogging:
    def test_writes_to_log_file(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
        log_file = tmp_path / "logs" / "idlink.log"
        monkeypatch.setenv("IDLINK_LOG_FILE", str(log_file))
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level

        try:
            configure_logging(LoggingConfig(level="INFO"))
            logging.getLogger("idlink.test").info("hello from the test")
            for handler in root.handlers:
                handler.flush()
        finally:
            for handler in root.handlers[:]:
                root.removeHandler(handler)
                handler.close()
            for handler in saved_handlers:
                root.addHandler(handler)
            root.setLevel(saved_level)

        assert "hello from the test" in log_file.read_text()
