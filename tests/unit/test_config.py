"""
Copyright (c) 2024 Aiven Ltd
See LICENSE for details
"""
from graphbr.common.exceptions import ConfigurationException
from graphbr.common.magic import HostKeyPolicy
from graphbr.config import BackupConfig, load_config, RestoreConfig
from pathlib import Path

import graphbr
import pytest

EXAMPLE_PATH = Path(graphbr.__file__).parent.parent / "examples"

BACKUP_OVERRIDES = {
    "meta_addrs": ["10.0.0.1:9559"],
    "backend_url": "local:///backups",
    "storage_user": "nebula",
    "meta_user": "nebula",
}


@pytest.mark.parametrize(
    "name,config_class",
    [("graphbr-backup.yaml", BackupConfig), ("graphbr-restore.yaml", RestoreConfig)],
)
def test_config_sample_load(name: str, config_class: type[BackupConfig] | type[RestoreConfig]) -> None:
    config = load_config(config_class, EXAMPLE_PATH / name, {})
    assert config.meta_addrs
    assert config.backend_url == "local:///mnt/backups"


def test_backup_config_defaults() -> None:
    config = load_config(BackupConfig, None, BACKUP_OVERRIDES)
    assert config.leader_retries == 3
    assert config.rpc_timeout == 120
    assert config.staging_dir == Path("/tmp")
    assert config.space_names == []
    assert config.storage_addrs == []
    assert config.ssh.host_key_policy == HostKeyPolicy.auto_add
    assert config.statsd is None


def test_overrides_win_over_file(tmp_path: Path) -> None:
    path = tmp_path / "graphbr.yaml"
    path.write_text(
        "meta_addrs: ['10.0.0.9:9559']\nbackend_url: local:///from-file\nleader_retries: 5\nssh:\n  host_key_policy: reject\n"
    )
    config = load_config(BackupConfig, path, BACKUP_OVERRIDES | {"space_names": None, "leader_retries": None})
    assert config.meta_addrs == ["10.0.0.1:9559"]
    assert config.backend_url == "local:///backups"
    # Unset command line values leave the file values in place
    assert config.leader_retries == 5
    assert config.ssh.host_key_policy == HostKeyPolicy.reject


@pytest.mark.parametrize(
    "overrides",
    [
        {"meta_addrs": []},
        {"meta_addrs": ["10.0.0.1"]},
        {"meta_addrs": ["10.0.0.1:port"]},
        {"meta_addrs": ["10.0.0.1:99999"]},
        {"storage_addrs": ["10.0.0.2:0"]},
        {"storage_addrs": ["[::1"]},
        {"leader_retries": 0},
        {"unknown_option": 1},
        {"backend_url": None, "meta_user": None},
    ],
)
def test_invalid_backup_config(overrides: dict) -> None:
    values = {k: v for k, v in (BACKUP_OVERRIDES | overrides).items() if v is not None}
    with pytest.raises(ConfigurationException):
        load_config(BackupConfig, None, values)


def test_ipv6_addresses() -> None:
    config = load_config(BackupConfig, None, BACKUP_OVERRIDES | {"meta_addrs": ["[fe80::1]:9559"]})
    assert config.meta_addrs == ["[fe80::1]:9559"]


def test_restore_config_requires_storage_addrs() -> None:
    overrides = BACKUP_OVERRIDES | {"backup_name": "b1", "meta_data_dir": "/m", "storage_data_dir": "/s"}
    with pytest.raises(ConfigurationException):
        load_config(RestoreConfig, None, overrides)
    config = load_config(RestoreConfig, None, overrides | {"storage_addrs": ["10.0.0.2:9779"]})
    assert config.backup_name == "b1"


def test_config_file_must_be_mapping(tmp_path: Path) -> None:
    path = tmp_path / "graphbr.yaml"
    path.write_text("- just\n- a list\n")
    with pytest.raises(ConfigurationException):
        load_config(BackupConfig, path, BACKUP_OVERRIDES)


def test_malformed_yaml_is_configuration_error(tmp_path: Path) -> None:
    path = tmp_path / "graphbr.yaml"
    path.write_text("meta_addrs: [10.0.0.1:9559\nbackend_url: local:///backups\n")
    with pytest.raises(ConfigurationException):
        load_config(BackupConfig, path, BACKUP_OVERRIDES)
