# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/autobench/config/models.py

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_SETTLE_SECONDS = 30.0


class SSHConfig(BaseModel):
    """How to reach every node over SSH."""

    username: str = "ec2-user"
    port: int = 22
    private_key: Optional[Path] = None
    password: Optional[str] = None
    connect_timeout: float = 30.0

    @field_validator("private_key")
    @classmethod
    def _expand_key_path(cls, v: Optional[Path]) -> Optional[Path]:
        return v.expanduser() if v else v


class NodeBlueprint(BaseModel):
    """
    Desired state for a single remote host. Immutable for the lifetime of a
    provisioning run; an empty path means "leave the server default alone".
    """

    model_config = ConfigDict(frozen=True)

    host: str
    data_path: Optional[str] = None
    index_path: Optional[str] = None

    @field_validator("host")
    @classmethod
    def _host_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("host must not be empty")
        return v


class ProvisionConfig(BaseModel):
    ssh: SSHConfig = Field(default_factory=SSHConfig)
    package_path: Optional[Path] = None
    settle_seconds: float = Field(default=DEFAULT_SETTLE_SECONDS, ge=0)
    servers: List[NodeBlueprint] = Field(default_factory=list)   # run couchbase-server
    clients: List[NodeBlueprint] = Field(default_factory=list)   # load generators, server disabled

    @property
    def all_nodes(self) -> List[NodeBlueprint]:
        return [*self.servers, *self.clients]
