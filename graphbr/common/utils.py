"""

utils

Copyright (c) 2024 Aiven Ltd
See LICENSE for details

Shared utilities (between backup and restore)

"""
from collections.abc import Iterator
from pathlib import Path
from pydantic.v1 import BaseModel
from typing import IO

import contextlib
import logging
import os

logger = logging.getLogger(__name__)


class GraphbrModel(BaseModel):
    class Config:
        # As we're keen to both export and decode json, just using
        # enum values for encode/decode is much saner than the default
        # enumname.value
        use_enum_values = True

        # Extra values should be errors, as they are most likely typos
        # which lead to grief when not detected.
        extra = "forbid"

        # Validate field default values too
        validate_all = True


def build_netloc(host: str, port: int | None = None) -> str:
    """Create a netloc that can be passed to `url.parse.urlunsplit` while safely handling ipv6 addresses."""
    escaped_host = f"[{host}]" if ":" in host else host
    return escaped_host if port is None else f"{escaped_host}:{port}"


def split_netloc(netloc: str) -> tuple[str, int | None]:
    """Inverse of `build_netloc`: '[::1]:80' -> ('::1', 80), 'example.org' -> ('example.org', None)"""
    if netloc.startswith("["):
        host, sep, rest = netloc[1:].partition("]")
        if not sep:
            raise ValueError(f"Unterminated ipv6 address in {netloc!r}")
        if not rest:
            return host, None
        if not rest.startswith(":"):
            raise ValueError(f"Unexpected trailer in {netloc!r}")
        return host, int(rest[1:])
    host, sep, port = netloc.rpartition(":")
    if not sep:
        return netloc, None
    if ":" in host:
        # Unbracketed ipv6 address without a port
        return netloc, None
    return host, int(port)


def host_of(netloc: str) -> str:
    return split_netloc(netloc)[0]


@contextlib.contextmanager
def open_path_with_atomic_rename(path: os.PathLike | str, *, mode: str = "wb") -> Iterator[IO]:
    """Output to a temporary file and rename it to the final name when closed without errors."""
    path = Path(path)
    temp_path = path.with_name(f"{path.name}.tmp")
    try:
        with temp_path.open(mode) as f:
            yield f
            f.flush()
            os.fsync(f.fileno())
        os.rename(temp_path, path)
    except BaseException:
        with contextlib.suppress(FileNotFoundError):
            temp_path.unlink()
        raise
