"""
Copyright (c) 2024 Aiven Ltd
See LICENSE for details

Backend storage on a (typically shared) local filesystem path:

  <root>/<backup>/<backup>.meta
  <root>/<backup>/meta/<meta file>
  <root>/<backup>/storage/<host ip>/<space id>/<checkpoint contents>

"""
from .base import ExternalStorage
from collections.abc import Iterable, Sequence
from graphbr.common import magic
from graphbr.common.exceptions import ConfigurationException
from graphbr.common.ipc import SpaceCheckpoint
from urllib.parse import SplitResult

import logging
import posixpath
import shlex

logger = logging.getLogger(__name__)


def _copy_into(sources: Iterable[str], dst_dir: str) -> str:
    quoted_sources = " ".join(shlex.quote(src) for src in sources)
    mkdir = f"mkdir -p {shlex.quote(dst_dir)}"
    if not quoted_sources:
        return mkdir
    return f"{mkdir} && cp -rf {quoted_sources} {shlex.quote(dst_dir)}"


def _contents_of(directory: str) -> str:
    # cp -r of 'dir/.' copies what is inside dir instead of dir itself
    return posixpath.join(directory, ".")


class LocalStorage(ExternalStorage):
    def __init__(self, root: str) -> None:
        super().__init__()
        if not posixpath.isabs(root):
            raise ConfigurationException(f"Local backend path must be absolute, got {root!r}")
        self.root = posixpath.normpath(root)
        logger.info("Using local backend storage at %s", self.root)

    @classmethod
    def from_url(cls, url: SplitResult) -> "LocalStorage":
        if url.netloc:
            raise ConfigurationException(f"Local backend takes no host; use local:///path, not {url.geturl()!r}")
        return cls(url.path)

    def uri(self) -> str:
        return self.root

    @property
    def backup_dir(self) -> str:
        return posixpath.join(self.root, self.backup_name)

    @property
    def meta_dir(self) -> str:
        return posixpath.join(self.backup_dir, magic.BACKEND_META_DIR)

    def space_dir(self, host_ip: str, space_id: int) -> str:
        return posixpath.join(self.backup_dir, magic.BACKEND_STORAGE_DIR, host_ip, str(space_id))

    def pre_command(self) -> Sequence[str]:
        return ["mkdir", "-p", self.backup_dir]

    def backup_meta_command(self, files: Sequence[str]) -> str:
        return _copy_into(files, self.meta_dir)

    def backup_storage_command(self, host_ip: str, checkpoints: Sequence[SpaceCheckpoint]) -> str:
        return " && ".join(
            _copy_into([_contents_of(cp.checkpoint_dir)], self.space_dir(host_ip, cp.space_id)) for cp in checkpoints
        )

    def backup_meta_file_command(self, local_path: str) -> Sequence[str]:
        return ["cp", local_path, self.backup_dir + "/"]

    def restore_meta_file_command(self, file_name: str, dst_dir: str) -> Sequence[str]:
        return ["cp", posixpath.join(self.backup_dir, file_name), dst_dir]

    def restore_meta_command(self, files: Sequence[str], dst_dir: str) -> str:
        return _copy_into([posixpath.join(self.meta_dir, posixpath.basename(f)) for f in files], dst_dir)

    def restore_storage_command(self, host_ip: str, space_ids: Sequence[int], dst_dir: str) -> str:
        return " && ".join(
            _copy_into(
                [_contents_of(self.space_dir(host_ip, space_id))],
                posixpath.join(dst_dir, magic.STORAGE_SPACE_ROOT, str(space_id)),
            )
            for space_id in space_ids
        )
