"""
Copyright (c) 2024 Aiven Ltd
See LICENSE for details

Backend storage capability set.

A backend never moves data itself; it only tells the orchestrator which
command moves the data. Commands returned for remote hosts are shell
command lines, the ones run locally are argument vectors.

"""
from abc import ABC, abstractmethod
from collections.abc import Sequence
from graphbr.common.exceptions import BackupNameNotSetException
from graphbr.common.executor import Command
from graphbr.common.ipc import SpaceCheckpoint


class ExternalStorage(ABC):
    def __init__(self) -> None:
        self._backup_name: str | None = None

    def set_backup_name(self, name: str) -> None:
        """Bind the backend to the namespace of a single backup run."""
        self._backup_name = name

    @property
    def backup_name(self) -> str:
        if self._backup_name is None:
            raise BackupNameNotSetException(f"{self.__class__.__name__} used before set_backup_name")
        return self._backup_name

    @abstractmethod
    def uri(self) -> str: ...

    @abstractmethod
    def pre_command(self) -> Sequence[str]:
        """Locally run once before any transfer, e.g. to create the backup prefix."""

    @abstractmethod
    def backup_meta_command(self, files: Sequence[str]) -> Command:
        """Run on the metadata service host to push its checkpoint `files`."""

    @abstractmethod
    def backup_storage_command(self, host_ip: str, checkpoints: Sequence[SpaceCheckpoint]) -> Command:
        """Run on the storage host `host_ip` to push the checkpoints of all its spaces."""

    @abstractmethod
    def backup_meta_file_command(self, local_path: str) -> Sequence[str]:
        """Locally run to push the written manifest file."""

    @abstractmethod
    def restore_meta_file_command(self, file_name: str, dst_dir: str) -> Sequence[str]:
        """Locally run to fetch the manifest file `file_name` into `dst_dir`."""

    @abstractmethod
    def restore_meta_command(self, files: Sequence[str], dst_dir: str) -> Command:
        """Run on each metadata service host to fetch the meta `files` into `dst_dir`."""

    @abstractmethod
    def restore_storage_command(self, host_ip: str, space_ids: Sequence[int], dst_dir: str) -> Command:
        """Run on a storage host to fetch the spaces originally backed up from `host_ip` into `dst_dir`."""
