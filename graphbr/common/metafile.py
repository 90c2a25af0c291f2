"""
Copyright (c) 2024 Aiven Ltd
See LICENSE for details

Backup manifest codec.

Manifests are stored as MessagePack maps keyed by field name; unknown
fields are ignored and missing optional ones defaulted, so manifests
written by other versions of the tool still decode.

"""
from .exceptions import ManifestException
from .ipc import BackupMeta
from .magic import MANIFEST_SUFFIX
from .utils import open_path_with_atomic_rename
from pathlib import Path

import logging
import msgspec
import posixpath

logger = logging.getLogger(__name__)

_encoder = msgspec.msgpack.Encoder()
_decoder = msgspec.msgpack.Decoder(BackupMeta)


def manifest_file_name(backup_name: str) -> str:
    return f"{backup_name}{MANIFEST_SUFFIX}"


def encode_backup_meta(meta: BackupMeta) -> bytes:
    return _encoder.encode(meta)


def decode_backup_meta(data: bytes) -> BackupMeta:
    try:
        return _decoder.decode(data)
    except (msgspec.DecodeError, msgspec.ValidationError) as ex:
        raise ManifestException(f"Unable to decode backup manifest: {ex}") from ex


def with_relative_meta_files(meta: BackupMeta) -> BackupMeta:
    """Return copy of `meta` with the meta file paths reduced to their base names."""
    return msgspec.structs.replace(meta, meta_files=[posixpath.basename(f) for f in meta.meta_files])


def write_backup_meta(meta: BackupMeta, directory: Path | str) -> Path:
    path = Path(directory) / manifest_file_name(meta.backup_name)
    with open_path_with_atomic_rename(path) as f:
        f.write(encode_backup_meta(with_relative_meta_files(meta)))
    logger.info("Wrote backup manifest %s (%d meta files, %d spaces)", path, len(meta.meta_files), len(meta.backup_info))
    return path


def read_backup_meta(path: Path | str) -> BackupMeta:
    data = Path(path).read_bytes()
    meta = decode_backup_meta(data)
    logger.info("Read backup manifest %s for backup %r", path, meta.backup_name)
    return meta
