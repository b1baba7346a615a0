"""Local filesystem storage client.

Buckets are directories under a root directory. Each object is one file in
its bucket directory, named by the percent-encoded key, so keys such as
``a`` and ``a/b`` coexist the way they do in a remote object store.
Intended for development and tests.
"""

from __future__ import annotations

import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import BinaryIO, Iterator
from urllib.parse import quote, unquote

from cloudstore.common.config import ClientConfig
from cloudstore.infra.storage.base import BaseStorageClient
from cloudstore.infra.storage.client import ObjectAttrs
from cloudstore.infra.storage.streams import Deadline, ForwardReader, copy_stream

TEMP_PREFIX = ".upload-"


def _timestamp(seconds: float) -> datetime:
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


def _encode_key(key: str) -> str:
    name = quote(key, safe="")
    # A leading dot would collide with ".", ".." and in-flight temp files.
    if name.startswith("."):
        name = "%2E" + name[1:]
    return name


def _decode_key(name: str) -> str:
    return unquote(name)


class LocalStorageClient(BaseStorageClient):
    """Filesystem-backed storage client."""

    def __init__(
        self,
        config: ClientConfig,
        logger: logging.Logger | None,
        *,
        root: str | os.PathLike[str],
    ) -> None:
        super().__init__(config, logger)
        self._root = Path(root)
        self._root.mkdir(parents=True, exist_ok=True)

    @property
    def root(self) -> Path:
        return self._root

    def _bucket_dir(self, bucket: str) -> Path:
        if bucket in {".", ".."} or "/" in bucket or "\\" in bucket:
            raise FileNotFoundError(f"no such bucket: {bucket}")
        return self._root / bucket

    def _object_path(self, bucket: str, key: str) -> Path:
        return self._bucket_dir(bucket) / _encode_key(key)

    def _stat(self, bucket: str, key: str, timeout: float | None) -> ObjectAttrs:
        path = self._object_path(bucket, key)
        if not path.is_file():
            raise FileNotFoundError(f"no such object: {key}")
        st = path.stat()
        return ObjectAttrs(
            name=key,
            size_bytes=st.st_size,
            created=_timestamp(st.st_ctime),
            updated=_timestamp(st.st_mtime),
        )

    def _open_reader(
        self, bucket: str, key: str, timeout: float | None
    ) -> ForwardReader:
        return self._object_path(bucket, key).open("rb")

    def _write(
        self, bucket: str, key: str, source: BinaryIO, deadline: Deadline
    ) -> int:
        target = self._object_path(bucket, key)
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=TEMP_PREFIX)
        try:
            with os.fdopen(fd, "wb") as tmp:
                written = copy_stream(
                    source,
                    tmp,
                    buffer_size=self._config.buffer_size,
                    deadline=deadline,
                )
            os.replace(tmp_name, target)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        return written

    def _iter_objects(
        self, bucket: str, timeout: float | None
    ) -> Iterator[ObjectAttrs]:
        bucket_dir = self._bucket_dir(bucket)
        if not bucket_dir.is_dir():
            raise FileNotFoundError(f"no such bucket: {bucket}")
        entries = sorted(
            (_decode_key(entry.name), entry)
            for entry in bucket_dir.iterdir()
            if entry.is_file() and not entry.name.startswith(TEMP_PREFIX)
        )
        for key, entry in entries:
            st = entry.stat()
            yield ObjectAttrs(
                name=key,
                size_bytes=st.st_size,
                created=_timestamp(st.st_ctime),
                updated=_timestamp(st.st_mtime),
            )

    def _delete(self, bucket: str, key: str, timeout: float | None) -> None:
        self._object_path(bucket, key).unlink()

    def _close(self) -> None:
        pass
