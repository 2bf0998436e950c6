# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/autobench/nodes/disk.py

from __future__ import annotations

import logging
from typing import Optional

from autobench.logging.log import for_host
from autobench.ssh.errors import SSHError
from autobench.ssh.interface import RemoteChannel
from autobench.utils.command import Command

from .constants import SCRATCH_FILESYSTEM, SCRATCH_MOUNT_POINT
from .errors import PartitionProbeError, ProvisionError
from .volumes import VolumeLocator, extract_last_volume_name, partition_name


class DiskPartitioner:
    """
    Turns the attached scratch volume into a mounted, world-writable
    filesystem. Safe to re-run at any point: an existing partition is detected
    and left alone, a failed earlier attempt is simply retried.
    """

    def __init__(
        self,
        client: RemoteChannel,
        *,
        locator: VolumeLocator = extract_last_volume_name,
        logger: Optional[logging.Logger] = None,
        mount_point: str = SCRATCH_MOUNT_POINT,
        filesystem: str = SCRATCH_FILESYSTEM,
    ):
        self.client = client
        self.locator = locator
        self.log = for_host(logger or logging.getLogger("autobench"), client.host)
        self.mount_point = mount_point
        self.filesystem = filesystem

    def _run(self, command: str, failure: str) -> str:
        try:
            return self.client.execute_command(command, sudo=True)
        except SSHError as e:
            raise ProvisionError(f"{failure}: {e}") from e

    def is_partitioned(self, volume: str) -> bool:
        """
        True when the volume's first partition is listed under it. A probe
        that fails to run raises PartitionProbeError.
        """
        device = f"/dev/{volume}"
        try:
            output = self.client.execute_command(
                Command.of("lsblk", "-n", "-l", "-o", "NAME", device)
            )
        except SSHError as e:
            raise PartitionProbeError(f"failed to probe {device} for partitions: {e}") from e

        names = {ln.strip() for ln in output.splitlines()}
        return partition_name(volume) in names

    def partition_attached_volume(self) -> bool:
        """
        Partition, format and mount the scratch volume. Returns False when the
        volume was already partitioned and nothing was done.
        """
        self.log.info("Checking and partitioning EBS volume")

        listing = self._run(
            Command.of("lsblk", "-o", "NAME,SIZE,TYPE,MOUNTPOINT"),
            "failed to check for all volumes",
        )
        volume = self.locator(listing)
        self.log.info("Using volume %s", volume)

        if self.is_partitioned(volume):
            self.log.info("EBS volume is already partitioned, skipping partitioning")
            return False

        device = f"/dev/{volume}"
        partition = f"/dev/{partition_name(volume)}"

        self._run(
            Command.of("echo", ",,,;").pipe(Command.of("sfdisk", device)),
            "failed to partition EBS volume",
        )
        self._run(
            Command.of(f"mkfs.{self.filesystem}", partition),
            "failed to make mkfs file structure",
        )
        self._run(
            Command.of("mount", partition, self.mount_point),
            f"failed to mount {self.mount_point} on EBS volume",
        )
        self._run(
            Command.of("chmod", "777", self.mount_point),
            f"failed to change permissions on {self.mount_point}",
        )

        self.log.info("Mounted %s at %s", partition, self.mount_point)
        return True
