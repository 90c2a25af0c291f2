"""
Copyright (c) 2024 Aiven Ltd
See LICENSE for details
"""
from graphbr.common.exceptions import ConfigurationException, UnsupportedBackendException
from graphbr.storage.factory import BACKENDS, create_external_storage
from graphbr.storage.local import LocalStorage

import pytest


def test_local_scheme() -> None:
    backend = create_external_storage("local:///tmp/x")
    assert isinstance(backend, LocalStorage)
    assert backend.uri() == "/tmp/x"


def test_local_path_is_normalized() -> None:
    assert create_external_storage("local:///tmp/x/../y/").uri() == "/tmp/y"


@pytest.mark.parametrize("url", ["bogus://x", "s3://bucket/prefix", "/tmp/x", ""])
def test_unsupported_scheme(url: str) -> None:
    with pytest.raises(UnsupportedBackendException):
        create_external_storage(url)


@pytest.mark.parametrize("url", ["local://host/tmp/x", "local:relative/path", "local://"])
def test_invalid_local_url(url: str) -> None:
    with pytest.raises(ConfigurationException):
        create_external_storage(url)


def test_every_backend_is_registered_by_scheme() -> None:
    assert sorted(BACKENDS) == ["local"]
