"""Factory for creating storage clients based on configuration."""

from __future__ import annotations

import logging

from cloudstore.common.config import Settings, get_settings
from cloudstore.infra.storage.base import BaseStorageClient
from cloudstore.infra.storage.errors import StorageBackendNotConfiguredError


def create_storage_client(
    settings: Settings | None = None,
    logger: logging.Logger | None = None,
) -> BaseStorageClient:
    """Build the storage client selected by ``STORAGE_BACKEND``.

    Args:
        settings: Settings to use; read from the environment when omitted.
        logger: Logger handed to the client; defaults to ``cloudstore.storage``.

    Raises:
        StorageBackendNotConfiguredError: If the backend is not supported.
        StorageClientCreationError: If the backend client cannot be created.
    """
    settings = settings or get_settings()
    logger = logger or logging.getLogger("cloudstore.storage")
    config = settings.client_config()
    backend = (settings.STORAGE_BACKEND or "").strip().lower()

    if backend == "gcs":
        from cloudstore.infra.storage.gcs_client import GcsStorageClient

        return GcsStorageClient(config, logger, project=settings.GCS_PROJECT)
    if backend == "s3":
        from cloudstore.infra.storage.s3_client import S3StorageClient

        return S3StorageClient(
            config,
            logger,
            endpoint_url=settings.S3_ENDPOINT_URL,
            region=settings.S3_REGION,
            access_key_id=settings.S3_ACCESS_KEY_ID,
            secret_access_key=settings.S3_SECRET_ACCESS_KEY,
            use_ssl=settings.S3_USE_SSL,
            addressing_style=settings.S3_ADDRESSING_STYLE,
        )
    if backend == "local":
        from cloudstore.infra.storage.local_client import LocalStorageClient

        return LocalStorageClient(config, logger, root=settings.LOCAL_STORAGE_ROOT)

    raise StorageBackendNotConfiguredError(
        f"Unsupported storage backend: {backend}. Supported: gcs, s3, local"
    )
