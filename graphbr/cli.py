"""
Copyright (c) 2024 Aiven Ltd
See LICENSE for details

Backup and restore commands

"""

from graphbr.backup import Backup
from graphbr.common.exceptions import GraphbrException
from graphbr.common.executor import LocalExecutor, SshExecutor
from graphbr.common.statsd import StatsClient
from graphbr.config import BackupConfig, ClusterConfig, load_config, RestoreConfig
from graphbr.metaclient import http_channel_factory, MetaClient
from graphbr.restore import Restore
from graphbr.storage.factory import create_external_storage
from graphbr.version import __version__

import asyncio
import logging
import os
import sentry_sdk

logger = logging.getLogger(__name__)


def _init_sentry(config: ClusterConfig) -> None:
    sentry_dsn = os.environ.get("SENTRY_DSN", config.sentry_dsn)
    if sentry_dsn:
        sentry_sdk.init(dsn=sentry_dsn)  # pylint: disable=abstract-class-instantiated


def _cluster_overrides(args) -> dict:
    return {
        "meta_addrs": args.meta,
        "storage_addrs": args.storage,
        "backend_url": args.backend,
        "storage_user": args.storageuser,
        "meta_user": args.metauser,
    }


def _run_backup(args) -> bool:
    try:
        config = load_config(
            BackupConfig,
            args.config,
            _cluster_overrides(args)
            | {
                "space_names": args.space,
                "leader_retries": args.leader_retries,
            },
        )
        _init_sentry(config)
        backup = Backup(
            config=config,
            backend=create_external_storage(config.backend_url),
            meta_client=MetaClient(channel_factory=http_channel_factory(timeout=config.rpc_timeout)),
            remote=SshExecutor(config.ssh),
            local=LocalExecutor(),
            stats=StatsClient(config.statsd),
        )
        meta = asyncio.run(backup.backup_cluster())
    except (GraphbrException, OSError) as ex:
        logger.error("Backup failed: %s", ex)
        return False
    print(f"Backup {meta.backup_name} succeeded")
    return True


def _run_restore(args) -> bool:
    try:
        config = load_config(
            RestoreConfig,
            args.config,
            _cluster_overrides(args)
            | {
                "backup_name": args.backupname,
                "meta_data_dir": args.mdir,
                "storage_data_dir": args.sdir,
            },
        )
        _init_sentry(config)
        restore = Restore(
            config=config,
            backend=create_external_storage(config.backend_url),
            remote=SshExecutor(config.ssh),
            local=LocalExecutor(),
            stats=StatsClient(config.statsd),
        )
        asyncio.run(restore.restore_cluster())
    except (GraphbrException, OSError) as ex:
        logger.error("Restore failed: %s", ex)
        return False
    print(f"Restore of {config.backup_name} succeeded")
    return True


def _run_version(args) -> bool:
    print(f"graphbr {__version__}")
    return True


def _add_cluster_arguments(parser) -> None:
    parser.add_argument("-c", "--config", type=str, help="YAML configuration file to use")
    parser.add_argument("--meta", action="append", help="Metadata service address host:port (repeatable)")
    parser.add_argument("--storage", action="append", help="Storage service address host:port (repeatable)")
    parser.add_argument("--backend", type=str, help="Backend storage url, e.g. local:///mnt/backups")
    parser.add_argument("--storageuser", type=str, help="OS user on the storage hosts")
    parser.add_argument("--metauser", type=str, help="OS user on the metadata service hosts")


def create_client_parsers(parser, subparsers):
    p_backup = subparsers.add_parser("backup", help="Back up the cluster")
    backup_subparsers = p_backup.add_subparsers(title="Backup commands")
    p_full_backup = backup_subparsers.add_parser("full", help="Full backup of all (or selected) spaces")
    _add_cluster_arguments(p_full_backup)
    p_full_backup.add_argument("--space", action="append", help="Space to back up (repeatable, default: all)")
    p_full_backup.add_argument("--leader-retries", type=int, help="How many leader changes to follow")
    p_full_backup.set_defaults(func=_run_backup)

    p_restore = subparsers.add_parser("restore", help="Restore the cluster from a backup")
    restore_subparsers = p_restore.add_subparsers(title="Restore commands")
    p_full_restore = restore_subparsers.add_parser("full", help="Full restore of a backup")
    _add_cluster_arguments(p_full_restore)
    p_full_restore.add_argument("--backupname", type=str, help="Name of the backup to restore")
    p_full_restore.add_argument("--mdir", type=str, help="Metadata service data directory")
    p_full_restore.add_argument("--sdir", type=str, help="Storage service data directory")
    p_full_restore.set_defaults(func=_run_restore)

    p_version = subparsers.add_parser("version", help="Print version")
    p_version.set_defaults(func=_run_version)
