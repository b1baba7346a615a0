"""S3-compatible storage client implementation.

This module provides an S3-compatible storage client that works with
AWS S3, MinIO, and other S3-compatible object storage services.

Dependencies:
    - boto3
    - botocore
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


class S3StorageClient(BaseStorageClient):
    """S3-compatible object storage client.

    Supports AWS S3, MinIO, and other S3-compatible services.
    Uses boto3 for all storage operations.
    """

    def __init__(
        self,
        config: ClientConfig,
        logger: logging.Logger | None,
        *,
        endpoint_url: str | None = None,
        region: str | None = None,
        access_key_id: str | None = None,
        secret_access_key: str | None = None,
        use_ssl: bool = True,
        addressing_style: str = "path",
    ) -> None:
        """Initialize the S3 client.

        Args:
            config: Client configuration; ``credentials_path`` points at a
                shared credentials file read by this client only.
            logger: Required logger.
            endpoint_url: Custom endpoint for S3-compatible services.
            region: Region name.
            access_key_id: Static access key, overriding the credentials file.
            secret_access_key: Static secret key.
            use_ssl: Whether to use TLS.
            addressing_style: ``path``, ``virtual`` or ``auto``.

        Raises:
            MissingRequiredError: If ``logger`` is None.
            StorageClientCreationError: If the client cannot be created.
        """
        super().__init__(config, logger)
        try:
            self._client = self._build_client(
                config,
                endpoint_url=endpoint_url,
                region=region,
                access_key_id=access_key_id,
                secret_access_key=secret_access_key,
                use_ssl=use_ssl,
                addressing_style=addressing_style,
            )
        except Exception as exc:
            self._log(logging.ERROR, ERROR_CREATING_STORAGE_CLIENT, error=exc)
            raise StorageClientCreationError(
                ERROR_CREATING_STORAGE_CLIENT, cause=exc
            ) from exc

    @staticmethod
    def _build_client(
        config: ClientConfig,
        *,
        endpoint_url: str | None,
        region: str | None,
        access_key_id: str | None,
        secret_access_key: str | None,
        use_ssl: bool,
        addressing_style: str,
    ) -> Any:
        """Create a boto3 S3 client on a private botocore session."""
        import boto3
        import botocore.session
        from botocore.config import Config

        core_session = botocore.session.Session()
        if config.credentials_path:
            core_session.set_config_variable(
                "credentials_file", config.credentials_path
            )
        session = boto3.session.Session(botocore_session=core_session)

        style = (addressing_style or "path").strip().lower()
        return session.client(
            "s3",
            endpoint_url=endpoint_url,
            region_name=region,
            aws_access_key_id=access_key_id,
            aws_secret_access_key=secret_access_key,
            use_ssl=bool(use_ssl),
            config=Config(s3={"addressing_style": style}),
        )

    # boto3 has no per-call timeout; ``timeout`` is unused here and the
    # dispatcher enforces the budget between chunks and objects.

    def _stat(self, bucket: str, key: str, timeout: float | None) -> ObjectAttrs:
        response = self._client.head_object(Bucket=bucket, Key=key)
        size = response.get("ContentLength")
        return ObjectAttrs(
            name=key,
            size_bytes=int(size) if size is not None else None,
            updated=response.get("LastModified"),
        )

    def _open_reader(
        self, bucket: str, key: str, timeout: float | None
    ) -> ForwardReader:
        response = self._client.get_object(Bucket=bucket, Key=key)
        return response["Body"]

    def _write(
        self, bucket: str, key: str, source: BinaryIO, deadline: Deadline
    ) -> int:
        from boto3.s3.transfer import TransferConfig

        reader = CountingReader(source, deadline)
        self._client.upload_fileobj(
            reader,
            bucket,
            key,
            Config=TransferConfig(use_threads=False),
        )
        return reader.bytes_read

    def _iter_objects(
        self, bucket: str, timeout: float | None
    ) -> Iterator[ObjectAttrs]:
        paginator = self._client.get_paginator("list_objects_v2")
        for page in paginator.paginate(Bucket=bucket):
            for item in page.get("Contents", []):
                yield ObjectAttrs(
                    name=item["Key"],
                    size_bytes=item.get("Size"),
                    updated=item.get("LastModified"),
                )

    def _delete(self, bucket: str, key: str, timeout: float | None) -> None:
        self._client.delete_object(Bucket=bucket, Key=key)

    def _close(self) -> None:
        self._client.close()
