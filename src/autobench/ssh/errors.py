# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/autobench/ssh/errors.py

from __future__ import annotations


class SSHError(RuntimeError):
    """Base class for remote channel failures."""


class SSHConnectionError(SSHError):
    """Raised when the SSH session cannot be established."""


class RemoteCommandError(SSHError):
    """Raised when a remote command exits with a non-zero status."""

    def __init__(self, command: str, exit_status: int, stdout: str = "", stderr: str = ""):
        self.command = command
        self.exit_status = exit_status
        self.stdout = stdout
        self.stderr = stderr
        detail = (stderr or stdout).strip()
        msg = f"command '{command}' exited with status {exit_status}"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class FileAlreadyExistsError(SSHError):
    """Raised by uploads when the remote target is already present."""


class UnsupportedPlatformError(SSHError):
    """Raised when the remote distribution is not one we know how to drive."""
