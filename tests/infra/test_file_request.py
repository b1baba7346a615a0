"""Tests for FileRequest validation and key resolution."""

from __future__ import annotations

import pytest

from cloudstore.infra.storage.errors import (
    BucketNameMissingError,
    FileNameMissingError,
    FilePathMissingError,
)
from cloudstore.infra.storage.request import FileRequest


class TestCreate:
    def test_rejects_missing_bucket(self):
        with pytest.raises(BucketNameMissingError, match="bucket name missing"):
            FileRequest.create("", file="c.txt")

    def test_carries_all_fields(self):
        request = FileRequest.create("bkt", file="c.txt", path="a/b", mod_time=42)

        assert request.bucket == "bkt"
        assert request.file == "c.txt"
        assert request.path == "a/b"
        assert request.mod_time == 42

    def test_is_immutable(self):
        request = FileRequest.create("bkt", file="c.txt")

        with pytest.raises(AttributeError):
            request.file = "other.txt"  # type: ignore[misc]


class TestObjectKey:
    def test_joins_path_and_file(self):
        assert FileRequest("bkt", file="c.txt", path="a/b").object_key() == "a/b/c.txt"

    def test_file_alone_without_path(self):
        assert FileRequest("bkt", file="c.txt").object_key() == "c.txt"

    def test_cleans_trailing_separator(self):
        assert FileRequest("bkt", file="c.txt", path="a/b/").object_key() == "a/b/c.txt"

    @pytest.mark.parametrize("path", ["//p", "///p", "/p/"])
    def test_collapses_leading_slashes(self, path):
        assert FileRequest("bkt", file="c.txt", path=path).object_key() == "/p/c.txt"

    def test_missing_file(self):
        with pytest.raises(FileNameMissingError, match="file name missing"):
            FileRequest("bkt", path="a/b").object_key()

    def test_bucket_checked_before_file(self):
        with pytest.raises(BucketNameMissingError):
            FileRequest("").object_key()


class TestDeleteKey:
    def test_joins_with_separator(self):
        assert FileRequest("bkt", file="c.txt", path="a/b").delete_key() == "a/b/c.txt"

    def test_joins_verbatim_without_cleaning(self):
        # Single-object deletion does not normalise the path.
        assert FileRequest("bkt", file="c.txt", path="a/b/").delete_key() == "a/b//c.txt"

    def test_path_is_required(self):
        with pytest.raises(FilePathMissingError, match="file path missing"):
            FileRequest("bkt", file="c.txt").delete_key()

    def test_file_is_required(self):
        with pytest.raises(FileNameMissingError):
            FileRequest("bkt", path="a/b").delete_key()

    def test_validation_order(self):
        with pytest.raises(BucketNameMissingError):
            FileRequest("").delete_key()
        with pytest.raises(FilePathMissingError):
            FileRequest("bkt").delete_key()


def test_require_bucket():
    assert FileRequest("bkt").require_bucket() == "bkt"
    with pytest.raises(BucketNameMissingError):
        FileRequest("").require_bucket()
