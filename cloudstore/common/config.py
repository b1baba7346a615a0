from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

ENV_FILE = Path(".env")

SUPPORTED_BACKENDS: tuple[str, ...] = ("gcs", "s3", "local")

# Upload/download ceiling, applied regardless of the caller's own timeout.
DEFAULT_TRANSFER_TIMEOUT = 50.0
DEFAULT_BUFFER_SIZE = 32 * 1024


def _load_env_file() -> None:
    if not ENV_FILE.exists():
        return
    for raw_line in ENV_FILE.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key and key not in os.environ:
            os.environ[key] = value


def _as_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.lower() in {"1", "true", "t", "yes", "y", "on"}


@dataclass(frozen=True, slots=True)
class ClientConfig:
    """Settings a storage client snapshots at construction."""

    credentials_path: str | None = None
    transfer_timeout: float = DEFAULT_TRANSFER_TIMEOUT
    buffer_size: int = DEFAULT_BUFFER_SIZE

    def __post_init__(self) -> None:
        if self.transfer_timeout <= 0:
            raise ValueError("transfer_timeout must be positive")
        if self.buffer_size <= 0:
            raise ValueError("buffer_size must be positive")


@dataclass
class Settings:
    STORAGE_BACKEND: str = "gcs"
    STORAGE_CREDENTIALS_PATH: str | None = None
    STORAGE_TRANSFER_TIMEOUT: float = DEFAULT_TRANSFER_TIMEOUT
    STORAGE_BUFFER_SIZE: int = DEFAULT_BUFFER_SIZE
    GCS_PROJECT: str | None = None
    S3_ENDPOINT_URL: str | None = None
    S3_REGION: str | None = None
    S3_ACCESS_KEY_ID: str | None = None
    S3_SECRET_ACCESS_KEY: str | None = None
    S3_USE_SSL: bool = True
    S3_ADDRESSING_STYLE: str = "path"
    LOCAL_STORAGE_ROOT: str = ".storage"
    LOG_LEVEL: str = "INFO"

    def __post_init__(self) -> None:
        self.STORAGE_BACKEND = (self.STORAGE_BACKEND or "").strip().lower()
        if self.STORAGE_BACKEND not in SUPPORTED_BACKENDS:
            raise ValueError(
                f"STORAGE_BACKEND must be one of {', '.join(SUPPORTED_BACKENDS)}, "
                f"got {self.STORAGE_BACKEND!r}."
            )
        if self.STORAGE_TRANSFER_TIMEOUT <= 0:
            raise ValueError("STORAGE_TRANSFER_TIMEOUT must be positive.")
        if self.STORAGE_BUFFER_SIZE <= 0:
            raise ValueError("STORAGE_BUFFER_SIZE must be positive.")

    def client_config(self) -> ClientConfig:
        return ClientConfig(
            credentials_path=self.STORAGE_CREDENTIALS_PATH or None,
            transfer_timeout=self.STORAGE_TRANSFER_TIMEOUT,
            buffer_size=self.STORAGE_BUFFER_SIZE,
        )

    @classmethod
    def from_environment(cls) -> "Settings":
        _load_env_file()
        return cls(
            STORAGE_BACKEND=os.environ.get("STORAGE_BACKEND", cls.STORAGE_BACKEND),
            STORAGE_CREDENTIALS_PATH=os.environ.get("STORAGE_CREDENTIALS_PATH"),
            STORAGE_TRANSFER_TIMEOUT=float(
                os.environ.get(
                    "STORAGE_TRANSFER_TIMEOUT", cls.STORAGE_TRANSFER_TIMEOUT
                )
            ),
            STORAGE_BUFFER_SIZE=int(
                os.environ.get("STORAGE_BUFFER_SIZE", cls.STORAGE_BUFFER_SIZE)
            ),
            GCS_PROJECT=os.environ.get("GCS_PROJECT"),
            S3_ENDPOINT_URL=os.environ.get("S3_ENDPOINT_URL"),
            S3_REGION=os.environ.get("S3_REGION"),
            S3_ACCESS_KEY_ID=os.environ.get("S3_ACCESS_KEY_ID"),
            S3_SECRET_ACCESS_KEY=os.environ.get("S3_SECRET_ACCESS_KEY"),
            S3_USE_SSL=_as_bool(os.environ.get("S3_USE_SSL"), cls.S3_USE_SSL),
            S3_ADDRESSING_STYLE=os.environ.get(
                "S3_ADDRESSING_STYLE", cls.S3_ADDRESSING_STYLE
            ),
            LOCAL_STORAGE_ROOT=os.environ.get(
                "LOCAL_STORAGE_ROOT", cls.LOCAL_STORAGE_ROOT
            ),
            LOG_LEVEL=os.environ.get("LOG_LEVEL", cls.LOG_LEVEL),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_environment()
