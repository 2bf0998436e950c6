# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/autobench/cli/app.py
from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, List, Optional

import typer

from autobench.config.loader import ConfigError, load_config
from autobench.config.models import NodeBlueprint, ProvisionConfig
from autobench.logging.log import for_host, init_logging
from autobench.nodes.errors import FatalProvisionError, ProvisionError
from autobench.nodes.node import Node

log = logging.getLogger("autobench")


# ------------------------------------------------------------------------------
# CLI setup
# ------------------------------------------------------------------------------

app = typer.Typer(help="Couchbase Server node provisioning for benchmark hosts")

CONFIG_OPTION = typer.Option(
    ..., "--config", "-c",
    exists=True, dir_okay=False, readable=True,
    help="Path to the autobench YAML config",
)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log remote commands to the console"),
    log_dir: Optional[Path] = typer.Option(None, "--log-dir", help="Directory for run log files"),
) -> None:
    init_logging(base_dir=log_dir, verbose=verbose)


# ------------------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------------------

def _load(config: Path) -> ProvisionConfig:
    try:
        return load_config(config)
    except ConfigError as e:
        log.error(str(e))
        raise typer.Exit(code=2)


def _run_on_nodes(
    cfg: ProvisionConfig,
    blueprints: List[NodeBlueprint],
    action: Callable[[Node], None],
    label: str,
) -> List[str]:
    """
    Run ``action`` against each node in turn and return the hosts that failed.

    A ProvisionError marks that host as failed and moves on to the next one;
    a FatalProvisionError stops the whole process immediately.
    """
    if not blueprints:
        log.warning("%s: no nodes configured, nothing to do", label)
        return []

    failed: List[str] = []
    for i, bp in enumerate(blueprints, 1):
        node_log = for_host(log, bp.host)
        node_log.info("%s (%d/%d)", label, i, len(blueprints))
        try:
            with Node.connect(cfg.ssh, bp, settle_seconds=cfg.settle_seconds) as node:
                action(node)
        except FatalProvisionError as e:
            node_log.critical("%s", e)
            raise typer.Exit(code=1)
        except ProvisionError as e:
            node_log.error("%s", e)
            failed.append(bp.host)

    if failed:
        log.error("%s: failed on %d/%d nodes: %s", label, len(failed), len(blueprints), ", ".join(failed))
    else:
        log.info("%s: done", label)
    return failed


def _exit_on_failures(failed: List[str]) -> None:
    if failed:
        raise typer.Exit(code=1)


# ------------------------------------------------------------------------------
# Commands
# ------------------------------------------------------------------------------

@app.command()
def provision(
    config: Path = CONFIG_OPTION,
    package: Optional[Path] = typer.Option(
        None, "--package", "-p", exists=True, dir_okay=False,
        help="Couchbase Server install package (overrides package_path in the config)",
    ),
    partition: bool = typer.Option(True, "--partition/--no-partition", help="Prepare the scratch volume first"),
) -> None:
    """
    Install Couchbase Server on every server and client node, initialize the
    servers and disable the service on the clients.
    """
    cfg = _load(config)
    package_path = package or cfg.package_path
    if package_path is None:
        raise typer.BadParameter("no install package given (--package or package_path in the config)")

    def server(node: Node) -> None:
        if partition:
            node.partition_attached_volume()
        node.provision(package_path)
        node.create_data_path()
        node.create_index_path()
        node.initialize()

    def client(node: Node) -> None:
        if partition:
            node.partition_attached_volume()
        node.provision(package_path)
        node.disable()

    failed = _run_on_nodes(cfg, cfg.servers, server, "servers")
    failed += _run_on_nodes(cfg, cfg.clients, client, "clients")
    _exit_on_failures(failed)


@app.command()
def partition(config: Path = CONFIG_OPTION) -> None:
    """Partition, format and mount the attached scratch volume on every node."""
    cfg = _load(config)
    _exit_on_failures(_run_on_nodes(cfg, cfg.all_nodes, lambda node: node.partition_attached_volume(), "partition"))


@app.command()
def initialize(config: Path = CONFIG_OPTION) -> None:
    """Create data/index paths and run node-init on the server nodes."""
    cfg = _load(config)

    def init(node: Node) -> None:
        node.create_data_path()
        node.create_index_path()
        node.initialize()

    _exit_on_failures(_run_on_nodes(cfg, cfg.servers, init, "initialize"))


@app.command()
def disable(config: Path = CONFIG_OPTION) -> None:
    """Disable Couchbase Server on the client nodes."""
    cfg = _load(config)
    _exit_on_failures(_run_on_nodes(cfg, cfg.clients, lambda node: node.disable(), "disable"))


@app.command("login-as-root")
def login_as_root(config: Path = CONFIG_OPTION) -> None:
    """Allow direct root SSH logins on every node. Any failure aborts the run."""
    cfg = _load(config)
    _exit_on_failures(_run_on_nodes(cfg, cfg.all_nodes, lambda node: node.login_as_root(), "login-as-root"))


if __name__ == "__main__":
    app()
