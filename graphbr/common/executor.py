"""
Copyright (c) 2024 Aiven Ltd
See LICENSE for details

Running backend commands, either on a remote host over SSH or locally.

The blocking implementations (paramiko, subprocess) are driven from
worker threads so that many hosts can be served concurrently.

"""
from .exceptions import CommandFailedException, LocalCommandFailedException
from .magic import HostKeyPolicy
from .utils import GraphbrModel
from asyncio import to_thread
from collections.abc import Sequence
from graphbr.common import magic
from pathlib import Path
from typing import TypeAlias

import logging
import paramiko
import shlex
import subprocess

logger = logging.getLogger(__name__)

# Shell command line, or argument vector executed without a shell
Command: TypeAlias = str | Sequence[str]


def command_as_string(command: Command) -> str:
    if isinstance(command, str):
        return command
    return shlex.join(command)


class SshConfig(GraphbrModel):
    port: int = magic.DEFAULT_SSH_PORT
    private_key_path: Path = Path(magic.DEFAULT_SSH_PRIVATE_KEY)
    # What to do with host keys not found in known_hosts
    host_key_policy: HostKeyPolicy = HostKeyPolicy.auto_add
    # Extra known_hosts file in addition to the system ones
    known_hosts: Path | None = None
    connect_timeout: float = magic.DEFAULT_SSH_CONNECT_TIMEOUT


_HOST_KEY_POLICIES: dict[str, type[paramiko.MissingHostKeyPolicy]] = {
    HostKeyPolicy.reject: paramiko.RejectPolicy,
    HostKeyPolicy.warning: paramiko.WarningPolicy,
    HostKeyPolicy.auto_add: paramiko.AutoAddPolicy,
}


def _read_output_tail(stream: paramiko.ChannelFile) -> str:
    """Read `stream` to EOF, keeping only its last `SSH_OUTPUT_TAIL_SIZE` bytes."""
    tail = b""
    while chunk := stream.read(magic.SSH_READ_CHUNK_SIZE):
        tail = (tail + chunk)[-magic.SSH_OUTPUT_TAIL_SIZE :]
    return tail.decode("utf-8", errors="replace").strip()


class RemoteExecutor:
    async def execute(self, host: str, user: str, command: Command) -> None:
        """Run `command` on `host` as `user` and wait for it to finish.

        Raises `CommandFailedException` if the command could not be run or exited with non-zero status.
        """
        raise NotImplementedError


class SshExecutor(RemoteExecutor):
    def __init__(self, config: SshConfig) -> None:
        self.config = config

    async def execute(self, host: str, user: str, command: Command) -> None:
        await to_thread(self._execute, host, user, command_as_string(command))

    def create_client(self) -> paramiko.SSHClient:
        client = paramiko.SSHClient()
        client.load_system_host_keys()
        if self.config.known_hosts is not None:
            client.load_host_keys(str(self.config.known_hosts.expanduser()))
        client.set_missing_host_key_policy(_HOST_KEY_POLICIES[self.config.host_key_policy]())
        return client

    def _execute(self, host: str, user: str, command: str) -> None:
        logger.info("ssh %s@%s will exec %r", user, host, command)
        try:
            with self.create_client() as client:
                client.connect(
                    host,
                    port=self.config.port,
                    username=user,
                    key_filename=str(self.config.private_key_path.expanduser()),
                    timeout=self.config.connect_timeout,
                    allow_agent=False,
                    look_for_keys=False,
                )
                _, stdout, _ = client.exec_command(command)
                # Output must be consumed while the command runs, or a full channel window stalls it
                stdout.channel.set_combine_stderr(True)
                output_tail = _read_output_tail(stdout)
                exit_status = stdout.channel.recv_exit_status()
        except (paramiko.SSHException, OSError) as ex:
            logger.error("ssh %s@%s failed to run %r: %r", user, host, command, ex)
            raise CommandFailedException(host=host, command=command, reason=repr(ex)) from ex
        if exit_status != 0:
            logger.error("ssh %s@%s command %r exited with %d: %s", user, host, command, exit_status, output_tail)
            raise CommandFailedException(
                host=host, command=command, reason=f"exit status {exit_status}: {output_tail}"
            )
        logger.info("ssh %s@%s finished %r", user, host, command)


class LocalExecutor:
    async def run(self, command: Command) -> None:
        """Run `command` on this host and wait for it to finish.

        Strings are run through the shell, argument vectors are not.
        """
        await to_thread(self._run, command)

    def _run(self, command: Command) -> None:
        logger.info("local exec %r", command)
        if isinstance(command, str):
            args: str | list[str] = command
        else:
            args = list(command)
        try:
            subprocess.run(args, shell=isinstance(args, str), check=True, capture_output=True)
        except subprocess.CalledProcessError as ex:
            error_output = (ex.stderr or b"").decode("utf-8", errors="replace").strip()
            logger.error("local command %r exited with %d: %s", command, ex.returncode, error_output)
            raise LocalCommandFailedException(
                command=command, reason=f"exit status {ex.returncode}: {error_output}"
            ) from ex
