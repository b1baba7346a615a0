"""File request model and validation.

A :class:`FileRequest` names an object by bucket, optional directory-like
path and base file name. Validation happens before any I/O so a malformed
request never reaches the backend.
"""

from __future__ import annotations

import posixpath
from dataclasses import dataclass

from cloudstore.infra.storage.errors import (
    BucketNameMissingError,
    FileNameMissingError,
    FilePathMissingError,
)


@dataclass(frozen=True, slots=True)
class FileRequest:
    """Target of a storage operation.

    ``mod_time`` is carried for callers that track local modification times;
    it is not compared against the remote object.
    """

    bucket: str
    file: str = ""
    path: str = ""
    mod_time: int = 0

    @classmethod
    def create(
        cls,
        bucket: str,
        file: str = "",
        path: str = "",
        mod_time: int = 0,
    ) -> "FileRequest":
        """Build a request, rejecting a missing bucket up front."""
        if not bucket:
            raise BucketNameMissingError()
        return cls(bucket=bucket, file=file, path=path, mod_time=mod_time)

    def require_bucket(self) -> str:
        if not self.bucket:
            raise BucketNameMissingError()
        return self.bucket

    def object_key(self) -> str:
        """Resolve the key for upload, download and ranged reads.

        Returns ``file`` when ``path`` is empty, otherwise ``path`` and
        ``file`` joined and cleaned like a filesystem path join.

        Raises:
            BucketNameMissingError: If bucket is empty.
            FileNameMissingError: If file is empty.
        """
        self.require_bucket()
        if not self.file:
            raise FileNameMissingError()
        if not self.path:
            return self.file
        key = posixpath.normpath(f"{self.path}/{self.file}")
        # POSIX keeps exactly two leading slashes; collapse them like the rest.
        if key.startswith("//"):
            key = key[1:]
        return key

    def delete_key(self) -> str:
        """Resolve the key for single-object deletion.

        Unlike :meth:`object_key`, ``path`` is mandatory and the two parts
        are joined verbatim with ``/``.

        Raises:
            BucketNameMissingError: If bucket is empty.
            FilePathMissingError: If path is empty.
            FileNameMissingError: If file is empty.
        """
        self.require_bucket()
        if not self.path:
            raise FilePathMissingError()
        if not self.file:
            raise FileNameMissingError()
        return f"{self.path}/{self.file}"
