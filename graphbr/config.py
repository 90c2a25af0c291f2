"""
Copyright (c) 2024 Aiven Ltd
See LICENSE for details

graphbr configuration, which includes
- backup configuration
- restore configuration

Values come from an optional YAML configuration file, overridden by
command line arguments. The resulting object is created once by the
entry point and handed to the components that need it.
"""

from collections.abc import Mapping
from graphbr.common import magic
from graphbr.common.exceptions import ConfigurationException
from graphbr.common.executor import SshConfig
from graphbr.common.ipc import HostAddr
from graphbr.common.statsd import StatsdConfig
from graphbr.common.utils import GraphbrModel
from pathlib import Path
from pydantic.v1 import validator, ValidationError
from typing import Any, TypeVar

import logging
import yaml

logger = logging.getLogger(__name__)

# pydantic validators are class methods in disguise
# pylint: disable=no-self-argument

CT = TypeVar("CT", bound="ClusterConfig")


def _validate_addrs(addrs: list[str]) -> list[str]:
    for addr in addrs:
        try:
            HostAddr.parse(addr)
        except ValueError as ex:
            raise ValueError(f"invalid address {addr!r}, expected host:port") from ex
    return addrs


class ClusterConfig(GraphbrModel):
    # host:port of the metadata service nodes
    meta_addrs: list[str]

    # host:port of the storage nodes
    storage_addrs: list[str] = []

    # Where backups are stored, e.g. local:///mnt/backups
    backend_url: str

    # OS users used to log in to the storage and metadata service hosts
    storage_user: str
    meta_user: str

    ssh: SshConfig = SshConfig()
    statsd: StatsdConfig | None = None
    sentry_dsn: str = ""

    @validator("meta_addrs")
    def _check_meta_addrs(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("at least one metadata service address is required")
        return _validate_addrs(v)

    @validator("storage_addrs")
    def _check_storage_addrs(cls, v: list[str]) -> list[str]:
        return _validate_addrs(v)


class BackupConfig(ClusterConfig):
    # Empty means all spaces
    space_names: list[str] = []

    # How many leader redirects the create backup call follows
    leader_retries: int = magic.DEFAULT_LEADER_RETRIES

    rpc_timeout: float = magic.DEFAULT_RPC_TIMEOUT

    # Where the manifest is written before it is pushed to the backend
    staging_dir: Path = Path(magic.DEFAULT_STAGING_DIR)

    @validator("leader_retries")
    def _check_leader_retries(cls, v: int) -> int:
        if v < 1:
            raise ValueError("leader_retries must be at least 1")
        return v


class RestoreConfig(ClusterConfig):
    backup_name: str

    # Data directories on the metadata service and storage hosts
    meta_data_dir: str
    storage_data_dir: str

    # Where the manifest is fetched to
    staging_dir: Path = Path(magic.DEFAULT_STAGING_DIR)

    @validator("storage_addrs")
    def _check_restore_storage_addrs(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("at least one storage address is required for restore")
        return v


def load_config(config_class: type[CT], path: str | Path | None, overrides: Mapping[str, Any]) -> CT:
    """Build `config_class` from YAML file at `path` (if any) and the non-None `overrides`."""
    values: dict[str, Any] = {}
    if path is not None:
        with open(path, "r") as config_file:
            try:
                loaded = yaml.safe_load(config_file) or {}
            except yaml.YAMLError as ex:
                raise ConfigurationException(f"{path}: invalid YAML: {ex}") from ex
        if not isinstance(loaded, dict):
            raise ConfigurationException(f"{path}: expected a mapping at the top level")
        values.update(loaded)
    values.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return config_class.parse_obj(values)
    except ValidationError as ex:
        raise ConfigurationException(f"Invalid configuration: {ex}") from ex
