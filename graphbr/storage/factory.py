"""
Copyright (c) 2024 Aiven Ltd
See LICENSE for details
"""
from .base import ExternalStorage
from .local import LocalStorage
from collections.abc import Callable, Mapping
from graphbr.common.exceptions import UnsupportedBackendException
from urllib.parse import SplitResult

import logging
import urllib.parse

logger = logging.getLogger(__name__)

# Backend families by url scheme
BACKENDS: Mapping[str, Callable[[SplitResult], ExternalStorage]] = {
    "local": LocalStorage.from_url,
}


def create_external_storage(url: str) -> ExternalStorage:
    parsed = urllib.parse.urlsplit(url)
    logger.info("parsed external storage url: scheme=%r path=%r", parsed.scheme, parsed.path)
    factory = BACKENDS.get(parsed.scheme)
    if factory is None:
        raise UnsupportedBackendException(
            f"Unsupported backend storage type {parsed.scheme!r} in {url!r}; supported: {', '.join(sorted(BACKENDS))}"
        )
    return factory(parsed)
