"""Copyright (c) 2024 Aiven Ltd
See LICENSE for details.

Messages exchanged with the metadata service, and the backup manifest
(BackupMeta) which is persisted next to the backup data.

"""

from .utils import build_netloc, split_netloc
from collections.abc import Mapping, Sequence
from enum import IntEnum
from typing import Self

import dataclasses
import msgspec


class ErrorCode(IntEnum):
    # Subset of the metadata service error codes we care to name
    SUCCEEDED = 0
    E_DISCONNECTED = -1
    E_FAIL_TO_CONNECT = -2
    E_RPC_FAILURE = -3
    E_LEADER_CHANGED = -11
    E_NO_HOSTS = -21
    E_EXISTED = -22
    E_NOT_FOUND = -23
    E_INVALID_HOST = -24
    E_UNSUPPORTED = -25
    E_STORE_FAILURE = -32
    E_SNAPSHOT_FAILURE = -51
    E_BLOCK_WRITE_FAILURE = -52
    E_BACKUP_FAILURE = -70
    E_BACKUP_BUILDING_INDEX = -71
    E_BACKUP_SPACE_NOT_FOUND = -72
    E_UNKNOWN = -99


def error_code_name(code: int) -> str:
    try:
        return ErrorCode(code).name
    except ValueError:
        return str(code)


class HostAddr(msgspec.Struct, frozen=True):
    host: str = ""
    port: int = 0

    def __str__(self) -> str:
        return build_netloc(self.host, self.port)

    @property
    def is_default(self) -> bool:
        return not self.host and not self.port

    @classmethod
    def parse(cls, netloc: str) -> Self:
        host, port = split_netloc(netloc)
        if port is None:
            raise ValueError(f"Port missing from address {netloc!r}")
        if not 0 < port < 65536:
            raise ValueError(f"Port out of range in address {netloc!r}")
        if not host:
            raise ValueError(f"Host missing from address {netloc!r}")
        return cls(host=host, port=port)


# backup manifest


class CheckpointInfo(msgspec.Struct, kw_only=True):
    host: HostAddr
    checkpoint_dir: str


class SpaceBackupInfo(msgspec.Struct, kw_only=True):
    cp_dirs: Sequence[CheckpointInfo] = msgspec.field(default_factory=list)


class BackupMeta(msgspec.Struct, kw_only=True):
    backup_name: str
    # Checkpoint files of the metadata service itself
    meta_files: Sequence[str] = msgspec.field(default_factory=list)
    backup_info: Mapping[int, SpaceBackupInfo] = msgspec.field(default_factory=dict)


@dataclasses.dataclass(frozen=True)
class SpaceCheckpoint:
    space_id: int
    checkpoint_dir: str


def checkpoints_by_host(backup_info: Mapping[int, SpaceBackupInfo]) -> dict[str, list[SpaceCheckpoint]]:
    """Group the checkpoints of all spaces by the 'host:port' of the node holding them.

    Spaces are visited in ascending id order so the result is stable.
    """
    by_host: dict[str, list[SpaceCheckpoint]] = {}
    for space_id in sorted(backup_info):
        for cp_dir in backup_info[space_id].cp_dirs:
            by_host.setdefault(str(cp_dir.host), []).append(
                SpaceCheckpoint(space_id=space_id, checkpoint_dir=cp_dir.checkpoint_dir)
            )
    return by_host


# metadata service create backup call


class CreateBackupRequest(msgspec.Struct, kw_only=True, omit_defaults=True):
    # None means all spaces
    spaces: Sequence[str] | None = None


class CreateBackupResponse(msgspec.Struct, kw_only=True):
    code: int
    leader: HostAddr | None = None
    meta: BackupMeta | None = None
