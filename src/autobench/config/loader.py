# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/autobench/config/loader.py

import logging
import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from .models import ProvisionConfig

log = logging.getLogger("autobench")


class ConfigError(ValueError):
    """Raised when the provisioning config cannot be read or validated."""


def _load_yaml(path: Path) -> dict:
    """Load a YAML file, expanding ${ENV_VAR} references."""
    raw = path.read_text()
    expanded = os.path.expandvars(raw)
    return yaml.safe_load(expanded) or {}


def load_config(path: str | Path) -> ProvisionConfig:
    """
    Load and validate an autobench YAML config.

    ``${ENV_VAR}`` placeholders anywhere in the file are resolved at load time,
    which keeps SSH passwords and key paths out of the file itself.
    """
    path = Path(path)
    try:
        data = _load_yaml(path)
    except OSError as e:
        raise ConfigError(f"failed to read config '{path}': {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"failed to parse config '{path}': {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"config '{path}' must be a mapping, got {type(data).__name__}")

    try:
        cfg = ProvisionConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"invalid config '{path}': {e}") from e

    log.debug(
        "Loaded config %s (%d servers, %d clients)",
        path, len(cfg.servers), len(cfg.clients),
    )
    return cfg
