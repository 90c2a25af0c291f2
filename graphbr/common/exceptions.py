"""
Copyright (c) 2024 Aiven Ltd
See LICENSE for details
"""
from collections.abc import Sequence


class GraphbrException(Exception):
    pass


class PermanentException(GraphbrException):
    pass


class ConfigurationException(PermanentException):
    pass


class UnsupportedBackendException(ConfigurationException):
    pass


class BackupNameNotSetException(ConfigurationException):
    pass


class LeaderNotFoundException(PermanentException):
    pass


class BackupFailedException(PermanentException):
    def __init__(self, code: int) -> None:
        super().__init__(f"backup rejected by metadata service with code {code}")
        self.code = code


class ManifestException(PermanentException):
    pass


class TransientException(GraphbrException):
    pass


class MetaServiceException(TransientException):
    pass


class CommandFailedException(TransientException):
    def __init__(self, *, host: str, command: str | Sequence[str], reason: str) -> None:
        super().__init__(f"command {command!r} failed on {host}: {reason}")
        self.host = host
        self.command = command
        self.reason = reason


class LocalCommandFailedException(CommandFailedException):
    def __init__(self, *, command: str | Sequence[str], reason: str) -> None:
        super().__init__(host="localhost", command=command, reason=reason)
