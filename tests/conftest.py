from __future__ import annotations

import logging

import pytest

from cloudstore.common.config import ClientConfig, get_settings
from cloudstore.infra.storage.local_client import LocalStorageClient


@pytest.fixture(autouse=True)
def reset_settings_cache():
    get_settings.cache_clear()  # type: ignore[attr-defined]
    yield
    get_settings.cache_clear()  # type: ignore[attr-defined]


@pytest.fixture()
def logger():
    return logging.getLogger("tests.storage")


@pytest.fixture()
def client_config():
    # Small chunks so copy and discard loops run more than once.
    return ClientConfig(buffer_size=4)


@pytest.fixture()
def local_client(tmp_path, client_config, logger):
    client = LocalStorageClient(client_config, logger, root=tmp_path / "store")
    yield client
    client.close()
