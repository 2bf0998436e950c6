# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/autobench/ssh/client.py

from __future__ import annotations

import logging
import shlex
from typing import Optional

import paramiko

from autobench.config.models import SSHConfig
from autobench.logging.log import for_host
from autobench.utils.command import Command

from .errors import FileAlreadyExistsError, RemoteCommandError, SSHConnectionError, SSHError
from .platform import Platform, detect_platform

log = logging.getLogger("autobench")

PARTIAL_UPLOAD_SUFFIX = ".part"


def _load_private_key(path: str, passphrase: Optional[str] = None) -> Optional[paramiko.PKey]:
    for key_cls in (
        paramiko.RSAKey,
        paramiko.Ed25519Key,
        paramiko.ECDSAKey,
    ):
        try:
            return key_cls.from_private_key_file(path, password=passphrase)
        except paramiko.SSHException:
            continue
        except OSError as e:
            raise SSHConnectionError(f"failed to read private key {path}: {e}") from e
    return None


class SSHClient:
    """
    Remote command channel to a single host, backed by paramiko.

    Commands are run one at a time and block until the remote side exits;
    there is no per-command timeout.
    """

    def __init__(
        self,
        host: str,
        client: paramiko.SSHClient,
        platform: Optional[Platform] = None,
    ):
        self.host = host
        self.client = client
        self.log = for_host(log, host)
        self._platform = platform
        self._sftp: Optional[paramiko.SFTPClient] = None

    @classmethod
    def connect(cls, host: str, config: SSHConfig) -> "SSHClient":
        pkey = None
        if config.private_key:
            pkey = _load_private_key(str(config.private_key), config.password)
            if pkey is None:
                raise SSHConnectionError(
                    f"unsupported private key format for {config.private_key}"
                )

        client = paramiko.SSHClient()
        client.set_missing_host_key_policy(paramiko.AutoAddPolicy())

        for_host(log, host).debug("Connecting as %s on port %d", config.username, config.port)
        try:
            client.connect(
                hostname=host,
                port=config.port,
                username=config.username,
                password=config.password if not pkey else None,
                pkey=pkey,
                timeout=config.connect_timeout,
                allow_agent=pkey is None,
                look_for_keys=pkey is None,
            )
        except (paramiko.SSHException, OSError) as e:
            client.close()
            raise SSHConnectionError(
                f"failed to connect to {host}:{config.port} as '{config.username}': {e}"
            ) from e

        return cls(host, client)

    # ------------------ commands ------------------

    @property
    def platform(self) -> Platform:
        if self._platform is None:
            os_release = self.execute_command(Command.of("cat", "/etc/os-release"))
            self._platform = detect_platform(os_release)
            self.log.debug("Detected platform %s", self._platform.name)
        return self._platform

    def execute_command(self, command: str, *, sudo: bool = False) -> str:
        """
        Run a shell command and return its stdout. If sudo=True the whole
        command line runs as root, so pipes and redirects are elevated too.
        """
        if sudo:
            command = f"sudo -n -H bash -c {shlex.quote(command)}"

        self.log.debug("$ %s", command)
        try:
            _, stdout, stderr = self.client.exec_command(command)
            out = stdout.read().decode("utf-8", errors="replace")
            err = stderr.read().decode("utf-8", errors="replace")
            rc = stdout.channel.recv_exit_status()
        except (paramiko.SSHException, OSError) as e:
            raise SSHError(f"failed to run command on {self.host}: {e}") from e

        if rc != 0:
            self.log.debug("exit %d: %s", rc, err.strip())
            raise RemoteCommandError(command, rc, out, err)
        return out

    def install_packages(self, *names: str) -> None:
        if not names:
            return
        self.execute_command(self.platform.command_install_packages(*names), sudo=True)

    def uninstall_packages(self, *names: str) -> None:
        if not names:
            return
        self.execute_command(self.platform.command_uninstall_packages(*names), sudo=True)

    def install_package_at(self, path: str) -> None:
        self.execute_command(self.platform.command_install_package_at(path), sudo=True)

    def remove_file(self, path: str) -> None:
        self.execute_command(Command.of("rm", "-f", path), sudo=True)

    def remove_directory(self, path: str) -> None:
        self.execute_command(Command.of("rm", "-rf", path), sudo=True)

    # ------------------ files ------------------

    def _open_sftp(self) -> paramiko.SFTPClient:
        if self._sftp is None:
            try:
                self._sftp = self.client.open_sftp()
            except (paramiko.SSHException, OSError) as e:
                raise SSHError(f"failed to open sftp session to {self.host}: {e}") from e
        return self._sftp

    def secure_upload(self, local_path: str, remote_path: str) -> None:
        """
        Copy a local file to the remote host over SFTP. Raises
        FileAlreadyExistsError without transferring anything when
        remote_path is already there.

        The file is written next to its target and renamed into place once
        complete, so remote_path never holds a partial upload.
        """
        sftp = self._open_sftp()
        try:
            sftp.stat(remote_path)
        except FileNotFoundError:
            pass
        except (paramiko.SSHException, OSError) as e:
            raise SSHError(f"failed to stat '{remote_path}' on {self.host}: {e}") from e
        else:
            raise FileAlreadyExistsError(f"'{remote_path}' already exists on {self.host}")

        partial_path = remote_path + PARTIAL_UPLOAD_SUFFIX
        self.log.debug("Uploading %s -> %s", local_path, remote_path)
        try:
            sftp.put(str(local_path), partial_path)
            sftp.posix_rename(partial_path, remote_path)
        except (paramiko.SSHException, OSError) as e:
            self._discard_partial(sftp, partial_path)
            raise SSHError(f"failed to upload '{local_path}' to {self.host}:{remote_path}: {e}") from e

    def _discard_partial(self, sftp: paramiko.SFTPClient, path: str) -> None:
        try:
            sftp.remove(path)
        except (paramiko.SSHException, OSError) as e:
            self.log.debug("could not remove partial upload %s: %s", path, e)

    def close(self) -> None:
        try:
            if self._sftp is not None:
                self._sftp.close()
        finally:
            self._sftp = None
            self.client.close()
