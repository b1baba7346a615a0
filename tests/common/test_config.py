"""Tests for settings and client configuration."""

from __future__ import annotations

import os

import pytest

from cloudstore.common import config as config_module
from cloudstore.common.config import ClientConfig, Settings, get_settings

ENV_KEYS = (
    "STORAGE_BACKEND",
    "STORAGE_CREDENTIALS_PATH",
    "STORAGE_TRANSFER_TIMEOUT",
    "STORAGE_BUFFER_SIZE",
    "GCS_PROJECT",
    "S3_USE_SSL",
    "LOCAL_STORAGE_ROOT",
    "LOG_LEVEL",
)


@pytest.fixture()
def clean_env(monkeypatch, tmp_path):
    # setenv first so monkeypatch restores keys the .env loader may add.
    for key in ENV_KEYS:
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)
    monkeypatch.setattr(config_module, "ENV_FILE", tmp_path / ".env")
    return monkeypatch


class TestSettings:
    def test_defaults(self, clean_env):
        settings = Settings.from_environment()

        assert settings.STORAGE_BACKEND == "gcs"
        assert settings.STORAGE_CREDENTIALS_PATH is None
        assert settings.STORAGE_TRANSFER_TIMEOUT == 50.0
        assert settings.STORAGE_BUFFER_SIZE == 32 * 1024
        assert settings.S3_USE_SSL is True
        assert settings.LOG_LEVEL == "INFO"

    def test_reads_environment(self, clean_env):
        clean_env.setenv("STORAGE_BACKEND", " S3 ")
        clean_env.setenv("STORAGE_CREDENTIALS_PATH", "/secrets/creds")
        clean_env.setenv("STORAGE_TRANSFER_TIMEOUT", "12.5")
        clean_env.setenv("STORAGE_BUFFER_SIZE", "1024")
        clean_env.setenv("S3_USE_SSL", "no")

        settings = Settings.from_environment()

        assert settings.STORAGE_BACKEND == "s3"
        assert settings.STORAGE_CREDENTIALS_PATH == "/secrets/creds"
        assert settings.STORAGE_TRANSFER_TIMEOUT == 12.5
        assert settings.STORAGE_BUFFER_SIZE == 1024
        assert settings.S3_USE_SSL is False

    def test_env_file_does_not_override_environment(self, clean_env, tmp_path):
        (tmp_path / ".env").write_text(
            "# local overrides\n"
            "STORAGE_BACKEND=local\n"
            "GCS_PROJECT='from-file'\n",
            encoding="utf-8",
        )
        clean_env.setenv("GCS_PROJECT", "from-env")

        settings = Settings.from_environment()

        assert settings.STORAGE_BACKEND == "local"
        assert settings.GCS_PROJECT == "from-env"
        assert os.environ["STORAGE_BACKEND"] == "local"

    @pytest.mark.parametrize(
        ("field", "value", "message"),
        [
            ("STORAGE_BACKEND", "azure", "STORAGE_BACKEND must be one of"),
            ("STORAGE_TRANSFER_TIMEOUT", 0, "STORAGE_TRANSFER_TIMEOUT must be positive"),
            ("STORAGE_BUFFER_SIZE", -1, "STORAGE_BUFFER_SIZE must be positive"),
        ],
    )
    def test_rejects_invalid_values(self, field, value, message):
        with pytest.raises(ValueError, match=message):
            Settings(**{field: value})

    def test_client_config(self):
        settings = Settings(
            STORAGE_CREDENTIALS_PATH="",
            STORAGE_TRANSFER_TIMEOUT=30,
            STORAGE_BUFFER_SIZE=2048,
        )

        assert settings.client_config() == ClientConfig(
            credentials_path=None, transfer_timeout=30, buffer_size=2048
        )

    def test_get_settings_is_cached(self, clean_env):
        assert get_settings() is get_settings()


class TestClientConfig:
    def test_defaults(self):
        config = ClientConfig()

        assert config.credentials_path is None
        assert config.transfer_timeout == 50.0

    def test_rejects_non_positive_timeout(self):
        with pytest.raises(ValueError, match="transfer_timeout"):
            ClientConfig(transfer_timeout=0)

    def test_rejects_non_positive_buffer(self):
        with pytest.raises(ValueError, match="buffer_size"):
            ClientConfig(buffer_size=0)
