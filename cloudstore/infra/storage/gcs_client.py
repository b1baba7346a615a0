"""Google Cloud Storage client implementation.

Dependencies:
    - google-cloud-storage
    - google-auth
"""

from __future__ import annotations

import logging
from typing import Any, BinaryIO, Iterator

from cloudstore.common.config import ClientConfig
from cloudstore.infra.storage.base import BaseStorageClient
from cloudstore.infra.storage.client import ObjectAttrs
from cloudstore.infra.storage.errors import (
    ERROR_CREATING_STORAGE_CLIENT,
    StorageClientCreationError,
)
from cloudstore.infra.storage.streams import CountingReader, Deadline, ForwardReader


def _timeout_kwargs(timeout: float | None) -> dict[str, Any]:
    # Omitted rather than None so the library keeps its own default.
    return {} if timeout is None else {"timeout": timeout}


class GcsStorageClient(BaseStorageClient):
    """Google Cloud Storage backend.

    One ``google.cloud.storage.Client`` is opened per instance and shared by
    all calls; the library client is safe for concurrent use.
    """

    def __init__(
        self,
        config: ClientConfig,
        logger: logging.Logger | None,
        *,
        project: str | None = None,
    ) -> None:
        """Open the GCS connection.

        Args:
            config: Client configuration; ``credentials_path`` points at a
                service account key file. Without it the library's default
                credential discovery applies.
            logger: Required logger.
            project: Optional GCS project id.

        Raises:
            MissingRequiredError: If ``logger`` is None.
            StorageClientCreationError: If the client cannot be created.
        """
        super().__init__(config, logger)
        try:
            self._client = self._build_client(config, project)
        except Exception as exc:
            self._log(logging.ERROR, ERROR_CREATING_STORAGE_CLIENT, error=exc)
            raise StorageClientCreationError(
                ERROR_CREATING_STORAGE_CLIENT, cause=exc
            ) from exc

    @staticmethod
    def _build_client(config: ClientConfig, project: str | None) -> Any:
        """Create a google.cloud.storage client from configuration."""
        from google.cloud import storage as gcs

        kwargs: dict[str, Any] = {}
        if project:
            kwargs["project"] = project
        if config.credentials_path:
            from google.oauth2 import service_account

            kwargs["credentials"] = (
                service_account.Credentials.from_service_account_file(
                    config.credentials_path
                )
            )
        return gcs.Client(**kwargs)

    def _blob(self, bucket: str, key: str) -> Any:
        return self._client.bucket(bucket).blob(key)

    def _stat(self, bucket: str, key: str, timeout: float | None) -> ObjectAttrs:
        blob = self._blob(bucket, key)
        blob.reload(**_timeout_kwargs(timeout))
        return ObjectAttrs(
            name=blob.name,
            size_bytes=blob.size,
            created=blob.time_created,
            updated=blob.updated,
        )

    def _open_reader(
        self, bucket: str, key: str, timeout: float | None
    ) -> ForwardReader:
        return self._blob(bucket, key).open("rb", **_timeout_kwargs(timeout))

    def _write(
        self, bucket: str, key: str, source: BinaryIO, deadline: Deadline
    ) -> int:
        # The upload is only finalized after the source is exhausted, so a
        # failing read never commits a truncated object.
        reader = CountingReader(source, deadline)
        self._blob(bucket, key).upload_from_file(
            reader, **_timeout_kwargs(deadline.remaining())
        )
        return reader.bytes_read

    def _iter_objects(
        self, bucket: str, timeout: float | None
    ) -> Iterator[ObjectAttrs]:
        for blob in self._client.list_blobs(bucket, **_timeout_kwargs(timeout)):
            yield ObjectAttrs(
                name=blob.name,
                size_bytes=blob.size,
                created=blob.time_created,
                updated=blob.updated,
            )

    def _delete(self, bucket: str, key: str, timeout: float | None) -> None:
        self._blob(bucket, key).delete(**_timeout_kwargs(timeout))

    def _close(self) -> None:
        self._client.close()
