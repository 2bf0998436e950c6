# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/autobench/logging/log.py

from __future__ import annotations

import logging
from pathlib import Path
from datetime import datetime, timezone
from typing import Union
import uuid

NO_HOST = "-"

FILE_FORMAT = "%(asctime)s | %(levelname)-7s | %(host)-15s | %(message)s"
CONSOLE_FORMAT = "%(levelname)-7s [%(host)s] %(message)s"


class HostFieldFilter(logging.Filter):
    """Gives records that aren't about a particular node a placeholder host."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "host"):
            record.host = NO_HOST
        return True


class HostLogAdapter(logging.LoggerAdapter):
    """Tags every record with the node it concerns."""

    def process(self, msg, kwargs):
        kwargs["extra"] = {**self.extra, **(kwargs.get("extra") or {})}
        return msg, kwargs


def for_host(
    logger: Union[logging.Logger, logging.LoggerAdapter],
    host: str,
) -> HostLogAdapter:
    if isinstance(logger, logging.LoggerAdapter):
        logger = logger.logger
    return HostLogAdapter(logger, {"host": host})


def init_logging(
    *,
    base_dir: Path | None = None,
    name: str = "autobench",
    verbose: bool = False,
) -> tuple[logging.Logger, str, Path]:
    """
    One log file per run under ``base_dir`` (default ~/.autobench/logs)
    with every remote command in it, plus console output at INFO, or DEBUG
    with verbose=True. Lines carry the node host they concern.
    """
    run_id = uuid.uuid4().hex[:12]

    if base_dir is None:
        base_dir = Path.home() / ".autobench" / "logs"
    base_dir.mkdir(parents=True, exist_ok=True)

    ts = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
    log_path = base_dir / f"{name}-{ts}-{run_id}.log"

    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()
    logger.propagate = False

    host_field = HostFieldFilter()

    fh = logging.FileHandler(log_path)
    fh.setLevel(logging.DEBUG)
    fh.addFilter(host_field)
    fh.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))

    ch = logging.StreamHandler()
    ch.setLevel(logging.DEBUG if verbose else logging.INFO)
    ch.addFilter(host_field)
    ch.setFormatter(logging.Formatter(CONSOLE_FORMAT))

    logger.addHandler(fh)
    logger.addHandler(ch)

    logger.debug("run %s started, logging to %s", run_id, log_path)
    return logger, run_id, log_path
