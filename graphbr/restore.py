"""
Copyright (c) 2024 Aiven Ltd
See LICENSE for details

Full cluster restore:

1. fetch the backup manifest from the backend to the staging directory
2. concurrently make every metadata service host pull all meta files,
   and every storage host pull the spaces of one original storage host

"""
from collections.abc import Mapping, Sequence
from graphbr.common import ipc, magic
from graphbr.common.exceptions import ConfigurationException, ManifestException
from graphbr.common.executor import LocalExecutor, RemoteExecutor
from graphbr.common.fanout import FanOut
from graphbr.common.metafile import manifest_file_name, read_backup_meta
from graphbr.common.statsd import StatsClient
from graphbr.common.utils import host_of, split_netloc
from graphbr.config import RestoreConfig
from graphbr.operation import Operation
from graphbr.storage.base import ExternalStorage

import logging

logger = logging.getLogger(__name__)


class Restore(Operation):
    def __init__(
        self,
        *,
        config: RestoreConfig,
        backend: ExternalStorage,
        remote: RemoteExecutor,
        local: LocalExecutor,
        stats: StatsClient,
    ) -> None:
        super().__init__(backend=backend, remote=remote, local=local, stats=stats)
        self.config = config
        self.backend.set_backup_name(config.backup_name)

    async def restore_cluster(self) -> ipc.BackupMeta:
        async with self.stats.async_timing_manager("graphbr_restore"):
            meta = await self.download_manifest()
            storage_hosts = map_storage_hosts(meta.backup_info, self.config.storage_addrs)
            group: FanOut[None] = FanOut("restore")
            self.download_meta(group, meta.meta_files)
            self.download_storage(group, storage_hosts)
            await group.wait()
        logger.info("Restore of backup %r done", meta.backup_name)
        return meta

    async def download_manifest(self) -> ipc.BackupMeta:
        file_name = manifest_file_name(self.config.backup_name)
        staging_dir = self.config.staging_dir
        staging_dir.mkdir(parents=True, exist_ok=True)
        command = self.backend.restore_meta_file_command(file_name, str(staging_dir))
        await self.run_local(magic.Phase.download_manifest, command)
        meta = read_backup_meta(staging_dir / file_name)
        if meta.backup_name != self.config.backup_name:
            raise ManifestException(f"{file_name} describes backup {meta.backup_name!r}, not {self.config.backup_name!r}")
        return meta

    def download_meta(self, group: FanOut[None], files: Sequence[str]) -> None:
        # Every metadata service replica needs the full set of files
        command = self.backend.restore_meta_command(files, self.config.meta_data_dir)
        for addr in self.config.meta_addrs:
            logger.info("Will download %d meta files to %s", len(files), addr)
            group.add(
                f"meta@{addr}",
                self.run_remote(magic.Phase.download_meta, host_of(addr), self.config.meta_user, command),
            )

    def download_storage(self, group: FanOut[None], storage_hosts: Sequence[tuple[str, list[int], str]]) -> None:
        for origin_addr, space_ids, target_addr in storage_hosts:
            logger.info("Will download spaces %s of %s to %s", space_ids, origin_addr, target_addr)
            command = self.backend.restore_storage_command(host_of(origin_addr), space_ids, self.config.storage_data_dir)
            group.add(
                f"storage@{target_addr}",
                self.run_remote(magic.Phase.download_storage, host_of(target_addr), self.config.storage_user, command),
            )


def map_storage_hosts(
    backup_info: Mapping[int, ipc.SpaceBackupInfo], storage_addrs: Sequence[str]
) -> list[tuple[str, list[int], str]]:
    """Pair the original storage hosts of the backup with the storage hosts to restore to.

    Original hosts are taken in (host, port) order and matched positionally with
    `storage_addrs`. Returns (original address, space ids, target address) tuples.
    """
    by_host = ipc.checkpoints_by_host(backup_info)
    if len(by_host) > len(storage_addrs):
        raise ConfigurationException(
            f"Backup has data from {len(by_host)} storage hosts, but only {len(storage_addrs)} storage addresses given"
        )
    origins = sorted(by_host, key=split_netloc)
    return [
        (origin, sorted({cp.space_id for cp in by_host[origin]}), target) for origin, target in zip(origins, storage_addrs)
    ]
