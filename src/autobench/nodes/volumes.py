# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/autobench/nodes/volumes.py

from __future__ import annotations

from typing import Callable

from .errors import VolumeNotFoundError

# Picks the scratch volume from `lsblk -o NAME,SIZE,TYPE,MOUNTPOINT` output.
VolumeLocator = Callable[[str], str]


def extract_last_volume_name(lsblk_output: str) -> str:
    """
    Return the NAME of the last row whose TYPE is ``disk``.

    Freshly attached volumes enumerate after the boot disk on the EC2 images we
    target, so the last disk is taken to be the scratch volume. Rows with fewer
    than three columns are ignored.
    """
    last_volume_name = ""
    for line in lsblk_output.splitlines():
        fields = line.split()
        if len(fields) > 2 and fields[2] == "disk":
            last_volume_name = fields[0]

    if not last_volume_name:
        raise VolumeNotFoundError("no disk volume found in lsblk output")
    return last_volume_name


def partition_name(volume: str) -> str:
    """
    Name of the first partition on a volume: nvme1n1 -> nvme1n1p1,
    xvdb -> xvdb1.
    """
    if volume[-1:].isdigit():
        return f"{volume}p1"
    return f"{volume}1"
