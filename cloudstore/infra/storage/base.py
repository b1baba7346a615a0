"""Operation dispatcher shared by all storage backends.

:class:`BaseStorageClient` implements the :class:`CloudStorage` operations
once: request validation, time budgets, logging, stream lifetimes and error
wrapping. Backends subclass it and provide the native primitives.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, BinaryIO, Iterator

from cloudstore.common.config import ClientConfig
from cloudstore.infra.storage.client import ObjectAttrs
from cloudstore.infra.storage.errors import (
    ERROR_CLOSING_STORAGE_CLIENT,
    ERROR_DELETING_OBJECT,
    ERROR_DELETING_OBJECTS,
    ERROR_LISTING_OBJECTS,
    ERROR_MISSING_REQUIRED,
    DownloadError,
    MissingRequiredError,
    ObjectDeletionError,
    ObjectInaccessibleError,
    ObjectListingError,
    ObjectReadError,
    StorageClientCloseError,
    StorageClientClosedError,
    UploadError,
)
from cloudstore.infra.storage.request import FileRequest
from cloudstore.infra.storage.streams import (
    Deadline,
    DiscardReadAtAdaptor,
    ForwardReader,
    ReadAtAdaptor,
    copy_stream,
)


def _unix(moment: datetime | None) -> int | None:
    return int(moment.timestamp()) if moment is not None else None


class BaseStorageClient(ABC):
    """Backend-agnostic implementation of the storage operations."""

    def __init__(self, config: ClientConfig, logger: logging.Logger | None) -> None:
        if logger is None:
            raise MissingRequiredError(ERROR_MISSING_REQUIRED)
        self._config = config
        self._logger = logger
        self._closed = False

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def closed(self) -> bool:
        return self._closed

    # Backend primitives. Native errors propagate; the dispatcher wraps them.

    @abstractmethod
    def _stat(self, bucket: str, key: str, timeout: float | None) -> ObjectAttrs:
        """Fetch object metadata, raising the native error if unavailable."""

    @abstractmethod
    def _open_reader(
        self, bucket: str, key: str, timeout: float | None
    ) -> ForwardReader:
        """Open a forward-only stream over the whole object."""

    @abstractmethod
    def _write(
        self, bucket: str, key: str, source: BinaryIO, deadline: Deadline
    ) -> int:
        """Create or replace the object from ``source``; return bytes written.

        The object must only become visible once all bytes are committed.
        """

    @abstractmethod
    def _iter_objects(
        self, bucket: str, timeout: float | None
    ) -> Iterator[ObjectAttrs]:
        """Yield every object in the bucket, paging as needed."""

    @abstractmethod
    def _delete(self, bucket: str, key: str, timeout: float | None) -> None:
        """Delete one object."""

    @abstractmethod
    def _close(self) -> None:
        """Release the native connection."""

    def _open_read_at(
        self, bucket: str, key: str, deadline: Deadline
    ) -> ReadAtAdaptor:
        reader = self._open_reader(bucket, key, deadline.remaining())
        return DiscardReadAtAdaptor(
            reader, buffer_size=self._config.buffer_size, deadline=deadline
        )

    # Operations

    def upload_file(
        self,
        stream: BinaryIO,
        request: FileRequest,
        *,
        timeout: float | None = None,
    ) -> int:
        key = request.object_key()
        self._ensure_open()
        deadline = Deadline(self._transfer_timeout(timeout))

        try:
            attrs = self._stat(request.bucket, key, deadline.remaining())
        except Exception:
            self._log(
                logging.DEBUG,
                "cloud file doesn't exist, will create new",
                filepath=key,
            )
        else:
            self._log(
                logging.DEBUG,
                "cloud file exists",
                filepath=key,
                created=_unix(attrs.created),
                updated=_unix(attrs.updated),
                mod_time=request.mod_time,
            )

        try:
            written = self._write(request.bucket, key, stream, deadline)
        except Exception as exc:
            self._log(logging.ERROR, "error uploading file", filepath=key, error=exc)
            raise UploadError(
                f"error uploading file {key}", key=key, cause=exc
            ) from exc
        self._log(logging.DEBUG, "cloud file created/updated", filepath=key)
        return written

    def download_file(
        self,
        stream: BinaryIO,
        request: FileRequest,
        *,
        timeout: float | None = None,
    ) -> int:
        key = request.object_key()
        self._ensure_open()
        deadline = Deadline(self._transfer_timeout(timeout))

        attrs = self._require_attrs(request.bucket, key, deadline)
        self._log(
            logging.DEBUG,
            "downloading cloud file",
            filepath=key,
            created=_unix(attrs.created),
            updated=_unix(attrs.updated),
        )

        try:
            reader = self._open_reader(request.bucket, key, deadline.remaining())
        except Exception as exc:
            self._log(logging.ERROR, "error reading cloud file", filepath=key, error=exc)
            raise DownloadError(
                f"error reading cloud file {key}", key=key, cause=exc
            ) from exc
        try:
            return copy_stream(
                reader,
                stream,
                buffer_size=self._config.buffer_size,
                deadline=deadline,
            )
        except Exception as exc:
            self._log(logging.ERROR, "error copying cloud file", filepath=key, error=exc)
            raise DownloadError(
                f"error copying cloud file {key}", key=key, cause=exc
            ) from exc
        finally:
            self._release(reader, key)

    def read_at(
        self,
        request: FileRequest,
        buffer: bytearray | memoryview,
        offset: int,
        *,
        timeout: float | None = None,
    ) -> int:
        key = request.object_key()
        self._ensure_open()
        deadline = Deadline(timeout)

        attrs = self._require_attrs(request.bucket, key, deadline)
        self._log(
            logging.DEBUG,
            "reading cloud file chunk",
            filepath=key,
            offset=offset,
            length=len(buffer),
            created=_unix(attrs.created),
            updated=_unix(attrs.updated),
        )

        try:
            adaptor = self._open_read_at(request.bucket, key, deadline)
        except Exception as exc:
            self._log(logging.ERROR, "error reading cloud file", filepath=key, error=exc)
            raise ObjectReadError(
                f"error reading cloud file {key}", key=key, cause=exc
            ) from exc
        try:
            return adaptor.read_at(buffer, offset)
        except Exception as exc:
            self._log(
                logging.ERROR,
                "error reading cloud file chunk",
                filepath=key,
                offset=offset,
                error=exc,
            )
            raise ObjectReadError(
                f"error reading cloud file {key} at offset {offset}",
                key=key,
                cause=exc,
            ) from exc
        finally:
            self._release(adaptor, key)

    def list_objects(
        self, request: FileRequest, *, timeout: float | None = None
    ) -> list[str]:
        bucket = request.require_bucket()
        self._ensure_open()
        deadline = Deadline(timeout)

        names: list[str] = []
        try:
            deadline.check()
            for attrs in self._iter_objects(bucket, deadline.remaining()):
                deadline.check()
                names.append(attrs.name)
        except Exception as exc:
            self._log(logging.ERROR, ERROR_LISTING_OBJECTS, bucket=bucket, error=exc)
            raise ObjectListingError(
                ERROR_LISTING_OBJECTS, names=names, cause=exc
            ) from exc
        return names

    def delete_object(
        self, request: FileRequest, *, timeout: float | None = None
    ) -> None:
        key = request.delete_key()
        self._ensure_open()
        deadline = Deadline(timeout)

        try:
            deadline.check()
            self._delete(request.bucket, key, deadline.remaining())
        except Exception as exc:
            self._log(logging.ERROR, ERROR_DELETING_OBJECT, filepath=key, error=exc)
            raise ObjectDeletionError(
                ERROR_DELETING_OBJECT, key=key, cause=exc
            ) from exc

    def delete_objects(
        self, request: FileRequest, *, timeout: float | None = None
    ) -> None:
        bucket = request.require_bucket()
        self._ensure_open()
        deadline = Deadline(timeout)

        deleted: list[str] = []
        objects = self._iter_objects(bucket, deadline.remaining())
        while True:
            try:
                deadline.check()
                attrs = next(objects, None)
            except Exception as exc:
                self._log(
                    logging.ERROR, ERROR_LISTING_OBJECTS, bucket=bucket, error=exc
                )
                raise ObjectListingError(
                    ERROR_LISTING_OBJECTS, names=deleted, cause=exc
                ) from exc
            if attrs is None:
                return
            self._log(
                logging.INFO,
                "object attributes",
                name=attrs.name,
                size=attrs.size_bytes,
                created=_unix(attrs.created),
                updated=_unix(attrs.updated),
            )
            try:
                deadline.check()
                self._delete(bucket, attrs.name, deadline.remaining())
            except Exception as exc:
                self._log(
                    logging.ERROR, ERROR_DELETING_OBJECTS, filepath=attrs.name, error=exc
                )
                raise ObjectDeletionError(
                    ERROR_DELETING_OBJECTS, key=attrs.name, deleted=deleted, cause=exc
                ) from exc
            deleted.append(attrs.name)

    def close(self) -> None:
        if self._closed:
            return
        try:
            self._close()
        except Exception as exc:
            self._log(logging.ERROR, ERROR_CLOSING_STORAGE_CLIENT, error=exc)
            raise StorageClientCloseError(
                ERROR_CLOSING_STORAGE_CLIENT, cause=exc
            ) from exc
        finally:
            self._closed = True

    def __enter__(self) -> "BaseStorageClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # Helpers

    def _ensure_open(self) -> None:
        if self._closed:
            raise StorageClientClosedError()

    def _transfer_timeout(self, timeout: float | None) -> float:
        ceiling = self._config.transfer_timeout
        if timeout is None:
            return ceiling
        return min(timeout, ceiling)

    def _require_attrs(self, bucket: str, key: str, deadline: Deadline) -> ObjectAttrs:
        try:
            return self._stat(bucket, key, deadline.remaining())
        except Exception as exc:
            self._log(logging.ERROR, "cloud file inaccessible", filepath=key, error=exc)
            raise ObjectInaccessibleError(
                f"cloud file inaccessible {key}", key=key, cause=exc
            ) from exc

    def _release(self, stream: ForwardReader | ReadAtAdaptor, key: str) -> None:
        try:
            stream.close()
        except Exception as exc:
            self._log(
                logging.ERROR, "error closing cloud file reader", filepath=key, error=exc
            )

    def _log(self, level: int, event: str, **fields: Any) -> None:
        message = " ".join([event, *(f"{name}=%s" for name in fields)])
        self._logger.log(level, message, *fields.values(), extra={"extra": fields})
