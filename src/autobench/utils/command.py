# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/autobench/utils/command.py

from __future__ import annotations

import shlex


class Command(str):
    """
    A shell command line.

    Build commands from structured arguments with ``Command.of`` so every
    argument is quoted; blueprint fields (hosts, paths) are never pasted into
    shell text verbatim.
    """

    @classmethod
    def of(cls, *args: object) -> "Command":
        return cls(" ".join(shlex.quote(str(a)) for a in args))

    def pipe(self, other: str) -> "Command":
        return Command(f"{self} | {other}")

    def or_else(self, other: str) -> "Command":
        return Command(f"{self} || {other}")

    def redirect(self, path: str) -> "Command":
        return Command(f"{self} > {shlex.quote(path)}")
