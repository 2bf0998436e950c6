# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/autobench/ssh/interface.py

from __future__ import annotations
from typing import Protocol

from .platform import Platform


class RemoteChannel(Protocol):
    """
    A command channel to exactly one remote host. Every method raises an
    ``SSHError`` subclass on failure.
    """

    host: str

    @property
    def platform(self) -> Platform: ...

    def execute_command(self, command: str, *, sudo: bool = False) -> str: ...

    def install_packages(self, *names: str) -> None: ...

    def uninstall_packages(self, *names: str) -> None: ...

    def install_package_at(self, path: str) -> None: ...

    def secure_upload(self, local_path: str, remote_path: str) -> None: ...

    def remove_file(self, path: str) -> None: ...

    def remove_directory(self, path: str) -> None: ...

    def close(self) -> None: ...
