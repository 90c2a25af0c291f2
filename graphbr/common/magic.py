"""
Copyright (c) 2024 Aiven Ltd
See LICENSE for details
"""

from enum import Enum

# How many times the create-backup call follows a leader redirect
DEFAULT_LEADER_RETRIES = 3

# Seconds; matches the metadata service's own socket timeout
DEFAULT_RPC_TIMEOUT = 120.0

DEFAULT_SSH_PORT = 22
DEFAULT_SSH_CONNECT_TIMEOUT = 10.0
DEFAULT_SSH_PRIVATE_KEY = "~/.ssh/id_rsa"
SSH_READ_CHUNK_SIZE = 64 * 1024
# How much of the remote command output is kept for error reports
SSH_OUTPUT_TAIL_SIZE = 4096

# Local directory where manifests are written to and fetched into
DEFAULT_STAGING_DIR = "/tmp"

MANIFEST_SUFFIX = ".meta"

# Backend layout below the per-backup prefix
BACKEND_META_DIR = "meta"
BACKEND_STORAGE_DIR = "storage"

# Storage nodes keep per-space data under <data dir>/nebula/<space id>
STORAGE_SPACE_ROOT = "nebula"


class StrEnum(str, Enum):
    def __str__(self) -> str:
        return str(self.value)


class HostKeyPolicy(StrEnum):
    # Refuse hosts not present in known_hosts
    reject = "reject"
    # Log unknown hosts, but connect anyway
    warning = "warning"
    # Accept and remember unknown hosts
    auto_add = "auto_add"


class Phase(StrEnum):
    pre_command = "pre_command"
    upload_meta = "upload_meta"
    upload_storage = "upload_storage"
    upload_manifest = "upload_manifest"
    download_manifest = "download_manifest"
    download_meta = "download_meta"
    download_storage = "download_storage"
