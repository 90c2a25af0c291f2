"""
Copyright (c) 2024 Aiven Ltd
See LICENSE for details

Client for the metadata service create backup call.

Only the leader of the metadata service accepts the call; other nodes
answer with E_LEADER_CHANGED and the address of the leader they know
of, and the client follows such redirects a bounded number of times.

"""
from collections.abc import Callable, Sequence
from graphbr.common import ipc
from graphbr.common.exceptions import BackupFailedException, LeaderNotFoundException, MetaServiceException
from graphbr.common.ipc import ErrorCode

import httpx
import logging
import msgspec

logger = logging.getLogger(__name__)


class MetaChannel:
    """A request/response connection to one metadata service node.

    A `MetaChannel` cannot be shared between multiple asyncio coroutines.
    """

    async def open(self) -> None:
        raise NotImplementedError

    async def close(self) -> None:
        raise NotImplementedError

    async def create_backup(self, req: ipc.CreateBackupRequest) -> ipc.CreateBackupResponse:
        """Issue the create backup call.

        Raises `MetaServiceException` if no valid response was received.
        """
        raise NotImplementedError


class HttpMetaChannel(MetaChannel):
    """JSON over HTTP transport to the metadata service."""

    def __init__(self, address: str, *, timeout: float) -> None:
        self.base_url = f"http://{address}"
        self.timeout = timeout
        self._client: httpx.AsyncClient | None = None

    async def open(self) -> None:
        self._client = httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout)

    async def close(self) -> None:
        if self._client is not None:
            client, self._client = self._client, None
            await client.aclose()

    async def create_backup(self, req: ipc.CreateBackupRequest) -> ipc.CreateBackupResponse:
        assert self._client is not None, "channel not open"
        try:
            r = await self._client.post(
                "/create_backup", content=msgspec.json.encode(req), headers={"Content-Type": "application/json"}
            )
            r.raise_for_status()
        except httpx.HTTPError as ex:
            raise MetaServiceException(f"create backup call to {self.base_url} failed: {ex!r}") from ex
        try:
            return msgspec.json.decode(r.content, type=ipc.CreateBackupResponse)
        except (msgspec.DecodeError, msgspec.ValidationError) as ex:
            raise MetaServiceException(f"invalid create backup response from {self.base_url}: {ex}") from ex


ChannelFactory = Callable[[str], MetaChannel]


def http_channel_factory(*, timeout: float) -> ChannelFactory:
    def _factory(address: str) -> MetaChannel:
        return HttpMetaChannel(address, timeout=timeout)

    return _factory


class MetaClient:
    """Leader-following client; owns at most one open channel at a time."""

    def __init__(self, *, channel_factory: ChannelFactory) -> None:
        self.channel_factory = channel_factory
        self.channel: MetaChannel | None = None
        self.address: str | None = None

    async def __aenter__(self) -> "MetaClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def open(self, address: str) -> None:
        """Connect to the node at `address`, closing the current connection first."""
        await self.close()
        channel = self.channel_factory(address)
        await channel.open()
        self.channel = channel
        self.address = address
        logger.info("Connected to metadata service at %s", address)

    async def close(self) -> None:
        if self.channel is not None:
            channel, self.channel = self.channel, None
            logger.debug("Closing connection to metadata service at %s", self.address)
            await channel.close()

    async def create_backup(self, *, max_attempts: int, spaces: Sequence[str] | None = None) -> ipc.BackupMeta:
        """Ask the metadata service to create a backup, following leader changes.

        At most `max_attempts` leader redirects are followed before giving up with `LeaderNotFoundException`.
        """
        req = ipc.CreateBackupRequest(spaces=list(spaces) if spaces else None)
        for attempt in range(1, max_attempts + 1):
            assert self.channel is not None, "open() must be called first"
            resp = await self.channel.create_backup(req)
            if resp.code == ErrorCode.SUCCEEDED:
                if resp.meta is None:
                    raise MetaServiceException(f"{self.address} reported success without backup manifest")
                logger.info("Backup %r created by %s", resp.meta.backup_name, self.address)
                return resp.meta
            if resp.code != ErrorCode.E_LEADER_CHANGED:
                logger.error("Create backup failed on %s: %s", self.address, ipc.error_code_name(resp.code))
                raise BackupFailedException(resp.code)
            if resp.leader is None or resp.leader.is_default:
                logger.error("%s has no leader to redirect to", self.address)
                raise LeaderNotFoundException(f"{self.address} does not know the metadata service leader")
            leader = str(resp.leader)
            logger.info("Leader changed, reconnecting from %s to %s (attempt %d/%d)", self.address, leader, attempt, max_attempts)
            await self.open(leader)
        raise LeaderNotFoundException(f"leader not found after {max_attempts} redirects")
