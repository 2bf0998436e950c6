# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/autobench/ssh/platform.py

from __future__ import annotations

import shlex
from abc import ABC, abstractmethod
from typing import Dict, List

from autobench.utils.command import Command

from .errors import UnsupportedPlatformError

COUCHBASE_SERVICE = "couchbase-server"


class Platform(ABC):
    """
    Distribution specific command builders. Every command returned here
    expects to be run as root.
    """

    name: str = ""

    @abstractmethod
    def dependencies(self) -> List[str]:
        """Packages Couchbase Server and the scratch disk tooling need."""

    @abstractmethod
    def command_install_packages(self, *names: str) -> Command: ...

    @abstractmethod
    def command_uninstall_packages(self, *names: str) -> Command: ...

    @abstractmethod
    def command_install_package_at(self, path: str) -> Command: ...

    def command_disable_couchbase(self) -> Command:
        return Command.of("systemctl", "disable", "--now", COUCHBASE_SERVICE)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class RPMPlatform(Platform):
    def command_install_packages(self, *names: str) -> Command:
        return Command.of("yum", "install", "-y", *names)

    def command_uninstall_packages(self, *names: str) -> Command:
        # Removing something that was never installed is not an error.
        parts = [
            f"{{ ! rpm -q {shlex.quote(n)} >/dev/null 2>&1 || yum remove -y {shlex.quote(n)}; }}"
            for n in names
        ]
        return Command(" && ".join(parts))

    def command_install_package_at(self, path: str) -> Command:
        return Command.of("yum", "localinstall", "-y", path)


class DEBPlatform(Platform):
    def command_install_packages(self, *names: str) -> Command:
        return Command.of("env", "DEBIAN_FRONTEND=noninteractive", "apt-get", "install", "-y", *names)

    def command_uninstall_packages(self, *names: str) -> Command:
        parts = [
            f"{{ ! dpkg -s {shlex.quote(n)} >/dev/null 2>&1 || "
            f"env DEBIAN_FRONTEND=noninteractive apt-get purge -y {shlex.quote(n)}; }}"
            for n in names
        ]
        return Command(" && ".join(parts))

    def command_install_package_at(self, path: str) -> Command:
        # apt-get only treats the argument as a file when it looks like a path
        return Command.of("env", "DEBIAN_FRONTEND=noninteractive", "apt-get", "install", "-y", path)


class AmazonLinux2(RPMPlatform):
    name = "amzn2"

    def dependencies(self) -> List[str]:
        return ["bzip2", "ncurses-compat-libs", "xfsprogs", "util-linux"]


class CentOS(RPMPlatform):
    name = "centos"

    def dependencies(self) -> List[str]:
        return ["bzip2", "ncurses-libs", "xfsprogs", "util-linux"]


class Ubuntu(DEBPlatform):
    name = "ubuntu"

    def dependencies(self) -> List[str]:
        return ["bzip2", "libtinfo5", "xfsprogs", "fdisk"]


class Debian(DEBPlatform):
    name = "debian"

    def dependencies(self) -> List[str]:
        # libtinfo5 is not packaged on current Debian releases
        return ["bzip2", "libncurses6", "xfsprogs", "fdisk"]


_PLATFORMS_BY_ID = {
    "amzn": AmazonLinux2,
    "centos": CentOS,
    "rhel": CentOS,
    "rocky": CentOS,
    "almalinux": CentOS,
    "ubuntu": Ubuntu,
    "debian": Debian,
}


def parse_os_release(text: str) -> Dict[str, str]:
    fields: Dict[str, str] = {}
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        fields[key.strip()] = value.strip().strip('"').strip("'")
    return fields


def detect_platform(os_release: str) -> Platform:
    """Pick the platform from the contents of /etc/os-release."""
    fields = parse_os_release(os_release)
    distro = fields.get("ID", "").lower()
    cls = _PLATFORMS_BY_ID.get(distro)
    if cls is None:
        raise UnsupportedPlatformError(
            f"unsupported distribution '{distro or 'unknown'}' "
            f"(supported: {', '.join(sorted(_PLATFORMS_BY_ID))})"
        )
    return cls()
