"""
Copyright (c) 2024 Aiven Ltd
See LICENSE for details

Shared plumbing of the backup and restore operations: running backend
commands either on remote hosts or locally, with failures logged and
counted before they are propagated.

"""
from graphbr.common import magic
from graphbr.common.executor import Command, LocalExecutor, RemoteExecutor
from graphbr.common.statsd import StatsClient
from graphbr.storage.base import ExternalStorage

import logging

logger = logging.getLogger(__name__)


class Operation:
    def __init__(
        self,
        *,
        backend: ExternalStorage,
        remote: RemoteExecutor,
        local: LocalExecutor,
        stats: StatsClient,
    ) -> None:
        self.backend = backend
        self.remote = remote
        self.local = local
        self.stats = stats

    async def run_remote(self, phase: magic.Phase, host: str, user: str, command: Command) -> None:
        try:
            await self.remote.execute(host, user, command)
        except Exception:
            logger.error("%s failed on %s@%s running %r", phase, user, host, command)
            self.stats.increase("graphbr_transfer_failure", tags={"phase": str(phase)})
            raise

    async def run_local(self, phase: magic.Phase, command: Command) -> None:
        try:
            await self.local.run(command)
        except Exception:
            logger.error("%s failed locally running %r", phase, command)
            self.stats.increase("graphbr_transfer_failure", tags={"phase": str(phase)})
            raise
