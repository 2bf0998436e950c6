# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/autobench/nodes/node.py

from __future__ import annotations

import logging
import os
import posixpath
import time
from typing import Callable, Optional

from autobench.logging.log import for_host
from autobench.config.models import DEFAULT_SETTLE_SECONDS, NodeBlueprint, SSHConfig
from autobench.ssh.client import SSHClient
from autobench.ssh.errors import FileAlreadyExistsError, SSHError
from autobench.ssh.interface import RemoteChannel
from autobench.utils.command import Command

from .constants import (
    ADMIN_ENDPOINT,
    CB_INSTALL_DIRECTORY,
    CB_OWNER,
    CB_PACKAGE,
    DEFAULT_ADMIN_PASSWORD,
    DEFAULT_ADMIN_USERNAME,
    PACKAGE_STAGING_DIRECTORY,
    ROOT_AUTHORIZED_KEYS,
    ROOT_KEY_PREFIX,
    SCRATCH_MOUNT_POINT,
)
from .disk import DiskPartitioner
from .errors import ProvisionError, RootBootstrapError
from .volumes import VolumeLocator, extract_last_volume_name


class Node:
    """
    A remote Couchbase Server host, which may or may not be set up yet.

    Owns one blueprint and one channel to the same host. Every step raises
    ProvisionError on failure; nothing is retried.
    """

    def __init__(
        self,
        blueprint: NodeBlueprint,
        client: RemoteChannel,
        *,
        logger: Optional[logging.Logger] = None,
        settle_seconds: float = DEFAULT_SETTLE_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
        locator: VolumeLocator = extract_last_volume_name,
    ):
        if client.host != blueprint.host:
            raise ValueError(
                f"channel host '{client.host}' does not match blueprint host '{blueprint.host}'"
            )
        self.blueprint = blueprint
        self.client = client
        self.log = for_host(logger or logging.getLogger("autobench"), blueprint.host)
        self.settle_seconds = settle_seconds
        self._sleep = sleep
        self._disk = DiskPartitioner(client, locator=locator, logger=logger)

    @classmethod
    def connect(cls, config: SSHConfig, blueprint: NodeBlueprint, **kwargs) -> "Node":
        """Open an SSH channel to the blueprint's host."""
        try:
            client = SSHClient.connect(blueprint.host, config)
        except SSHError as e:
            raise ProvisionError(f"failed to create ssh client: {e}") from e
        return cls(blueprint, client, **kwargs)

    @property
    def host(self) -> str:
        return self.blueprint.host

    def _execute(self, command: str, failure: str, *, sudo: bool = False) -> str:
        try:
            return self.client.execute_command(command, sudo=sudo)
        except SSHError as e:
            raise ProvisionError(f"{failure}: {e}") from e

    # ------------------ provisioning ------------------

    def provision(self, package_path: str | os.PathLike) -> None:
        """
        Install the dependencies and a fresh copy of Couchbase Server, then hand
        the scratch volume over to the couchbase user.
        """
        try:
            self.install_deps()
        except SSHError as e:
            raise ProvisionError(f"failed to install dependencies: {e}") from e

        try:
            self.uninstall_cb()
        except (SSHError, ProvisionError) as e:
            raise ProvisionError(f"failed to uninstall Couchbase Server: {e}") from e

        try:
            self.install_cb(package_path)
        except (SSHError, ProvisionError) as e:
            raise ProvisionError(f"failed to install Couchbase Server: {e}") from e

        # Couchbase Server starts asynchronously after install
        self.log.info("Waiting %ss for Couchbase Server to start", self.settle_seconds)
        self._sleep(self.settle_seconds)

        try:
            self.give_cb_permissions()
        except ProvisionError as e:
            raise ProvisionError(f"failed to give Couchbase Server permissions: {e}") from e

        self.log.info("Provisioning complete")

    def install_deps(self) -> None:
        self.log.info("Installing dependencies")
        self.client.install_packages(*self.client.platform.dependencies())

    def uninstall_cb(self) -> None:
        """Remove any existing installation so every run starts from a clean slate."""
        self.log.info("Uninstalling '%s'", CB_PACKAGE)
        try:
            self.client.uninstall_packages(CB_PACKAGE)
        except SSHError as e:
            raise ProvisionError(f"failed to uninstall '{CB_PACKAGE}': {e}") from e

        self.log.info("Purging install directory")
        try:
            self.client.remove_directory(CB_INSTALL_DIRECTORY)
        except SSHError as e:
            raise ProvisionError(
                f"failed to cleanup install directory at '{CB_INSTALL_DIRECTORY}': {e}"
            ) from e

    def install_cb(self, local_path: str | os.PathLike) -> None:
        """
        Upload the install package and install it. An archive left behind by an
        earlier run is installed as is instead of being uploaded again. The
        archive is removed once installed.
        """
        remote_path = posixpath.join(PACKAGE_STAGING_DIRECTORY, os.path.basename(local_path))

        self.log.info("Uploading package archive")
        try:
            self.client.secure_upload(str(local_path), remote_path)
        except FileAlreadyExistsError:
            self.log.info("Package archive already exists")
        except SSHError as e:
            raise ProvisionError(f"failed to upload package archive: {e}") from e

        self.log.info("Installing '%s'", CB_PACKAGE)
        try:
            self.client.install_package_at(remote_path)
        except SSHError as e:
            raise ProvisionError(f"failed to install '{CB_PACKAGE}': {e}") from e

        self.log.info("Cleaning up package archive")
        try:
            self.client.remove_file(remote_path)
        except SSHError as e:
            raise ProvisionError(f"failed to remove package archive: {e}") from e

    def give_cb_permissions(self) -> None:
        """Give the couchbase user ownership of the scratch volume."""
        self.log.info("Giving '%s' ownership of %s", CB_OWNER, SCRATCH_MOUNT_POINT)
        self._execute(
            Command.of("chown", "-R", CB_OWNER, SCRATCH_MOUNT_POINT),
            f"failed to change permissions on {SCRATCH_MOUNT_POINT}",
            sudo=True,
        )

    # ------------------ configuration ------------------

    def _create_owned_directory(self, path: Optional[str], kind: str) -> None:
        if not path:
            return

        self.log.info("Creating/configuring %s path", kind)
        self._execute(
            Command.of("mkdir", "-p", path),
            f"failed to create remote {kind} directory",
            sudo=True,
        )
        self._execute(
            Command.of("chown", "-R", CB_OWNER, path),
            f"failed to chown remote {kind} directory",
            sudo=True,
        )

    def create_data_path(self) -> None:
        self._create_owned_directory(self.blueprint.data_path, "data")

    def create_index_path(self) -> None:
        self._create_owned_directory(self.blueprint.index_path, "index")

    def initialize_command(self) -> Command:
        args = [
            "couchbase-cli", "node-init",
            "-c", ADMIN_ENDPOINT,
            "-u", DEFAULT_ADMIN_USERNAME,
            "-p", DEFAULT_ADMIN_PASSWORD,
        ]
        if self.blueprint.data_path:
            args += ["--node-init-data-path", self.blueprint.data_path]
        if self.blueprint.index_path:
            args += ["--node-init-index-path", self.blueprint.index_path]
        return Command.of(*args)

    def initialize(self) -> None:
        """Node level initialization of Couchbase Server."""
        self.log.info(
            "Initializing node (data_path=%s, index_path=%s)",
            self.blueprint.data_path or "-", self.blueprint.index_path or "-",
        )
        self._execute(self.initialize_command(), "failed to initialize node")

    def disable(self) -> None:
        """
        Disable Couchbase Server; done on load generation clients to free up
        resources for the benchmark tooling.
        """
        self.log.info("Disabling '%s'", CB_PACKAGE)
        try:
            command = self.client.platform.command_disable_couchbase()
        except SSHError as e:
            raise ProvisionError(f"failed to detect platform: {e}") from e
        self._execute(command, f"failed to disable '{CB_PACKAGE}'", sudo=True)

    def partition_attached_volume(self) -> bool:
        return self._disk.partition_attached_volume()

    # ------------------ root access ------------------

    def login_as_root(self) -> None:
        """
        Allow direct root logins by trimming root's authorized_keys down to the
        embedded public key, then restart sshd.

        Raises RootBootstrapError, which callers must treat as fatal.
        """
        self.log.info("Enabling root login")

        try:
            self.client.execute_command(Command.of("true"), sudo=True)
        except SSHError as e:
            raise RootBootstrapError(f"failed to become root: {e}") from e

        try:
            content = self.client.execute_command(Command.of("cat", ROOT_AUTHORIZED_KEYS), sudo=True)
        except SSHError as e:
            raise RootBootstrapError(f"failed to read authorized_keys: {e}") from e

        index = content.find(ROOT_KEY_PREFIX)
        if index == -1:
            raise RootBootstrapError(f"{ROOT_KEY_PREFIX} not found in authorized_keys")

        key = content[index:].rstrip("\n")
        try:
            self.client.execute_command(
                Command.of("printf", "%s\\n", key).redirect(ROOT_AUTHORIZED_KEYS),
                sudo=True,
            )
        except SSHError as e:
            raise RootBootstrapError(f"failed to write to authorized_keys: {e}") from e

        try:
            self.client.execute_command(
                Command.of("systemctl", "restart", "sshd.service").or_else(
                    Command.of("systemctl", "restart", "ssh.service")
                ),
                sudo=True,
            )
        except SSHError as e:
            raise RootBootstrapError(f"failed to restart SSH service: {e}") from e

    # ------------------ lifecycle ------------------

    def close(self) -> None:
        """Release the channel."""
        self.client.close()

    def __enter__(self) -> "Node":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
