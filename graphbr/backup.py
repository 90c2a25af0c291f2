"""
Copyright (c) 2024 Aiven Ltd
See LICENSE for details

Full cluster backup:

1. ask the metadata service (leader) to checkpoint everything
2. prepare the backend (pre command, locally)
3. concurrently push the metadata service files and, per storage host,
   the checkpoints of all its spaces
4. write the manifest locally and push it to the backend

"""
from collections.abc import Sequence
from graphbr.common import ipc, magic
from graphbr.common.exceptions import ConfigurationException
from graphbr.common.executor import LocalExecutor, RemoteExecutor
from graphbr.common.fanout import FanOut
from graphbr.common.metafile import write_backup_meta
from graphbr.common.statsd import StatsClient
from graphbr.common.utils import host_of
from graphbr.config import BackupConfig
from graphbr.metaclient import MetaClient
from graphbr.operation import Operation
from graphbr.storage.base import ExternalStorage

import logging

logger = logging.getLogger(__name__)


class Backup(Operation):
    def __init__(
        self,
        *,
        config: BackupConfig,
        backend: ExternalStorage,
        meta_client: MetaClient,
        remote: RemoteExecutor,
        local: LocalExecutor,
        stats: StatsClient,
    ) -> None:
        super().__init__(backend=backend, remote=remote, local=local, stats=stats)
        self.config = config
        self.meta_client = meta_client

    async def backup_cluster(self) -> ipc.BackupMeta:
        async with self.stats.async_timing_manager("graphbr_backup"):
            self.prepare_staging_dir()
            meta, meta_addr = await self.create_backup()
            self.backend.set_backup_name(meta.backup_name)
            await self.run_local(magic.Phase.pre_command, self.backend.pre_command())
            await self.upload_all(meta, meta_addr=meta_addr)
            manifest_path = write_backup_meta(meta, self.config.staging_dir)
            await self.run_local(magic.Phase.upload_manifest, self.backend.backup_meta_file_command(str(manifest_path)))
        logger.info("Backup %r stored in %s", meta.backup_name, self.backend.uri())
        return meta

    def prepare_staging_dir(self) -> None:
        try:
            self.config.staging_dir.mkdir(parents=True, exist_ok=True)
        except OSError as ex:
            raise ConfigurationException(f"Unusable staging directory {self.config.staging_dir}: {ex}") from ex

    async def create_backup(self) -> tuple[ipc.BackupMeta, str]:
        """Return the new backup manifest, and the address of the leader that created it."""
        async with self.meta_client:
            await self.meta_client.open(self.config.meta_addrs[0])
            meta = await self.meta_client.create_backup(
                max_attempts=self.config.leader_retries, spaces=self.config.space_names
            )
            assert self.meta_client.address is not None
            return meta, self.meta_client.address

    async def upload_all(self, meta: ipc.BackupMeta, *, meta_addr: str) -> None:
        group: FanOut[None] = FanOut("upload")
        self.upload_meta(group, meta.meta_files, meta_addr=meta_addr)
        self.upload_storage(group, ipc.checkpoints_by_host(meta.backup_info))
        await group.wait()
        logger.info("Upload of backup %r done", meta.backup_name)

    def upload_meta(self, group: FanOut[None], files: Sequence[str], *, meta_addr: str) -> None:
        logger.info("Will upload %d meta files from %s", len(files), meta_addr)
        command = self.backend.backup_meta_command(files)
        group.add(
            f"meta@{meta_addr}",
            self.run_remote(magic.Phase.upload_meta, host_of(meta_addr), self.config.meta_user, command),
        )

    def upload_storage(self, group: FanOut[None], by_host: dict[str, list[ipc.SpaceCheckpoint]]) -> None:
        for addr, checkpoints in by_host.items():
            host_ip = host_of(addr)
            logger.info("Will upload spaces %s from %s", [cp.space_id for cp in checkpoints], addr)
            command = self.backend.backup_storage_command(host_ip, checkpoints)
            group.add(
                f"storage@{addr}",
                self.run_remote(magic.Phase.upload_storage, host_ip, self.config.storage_user, command),
            )

