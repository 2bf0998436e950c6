from pathlib import Path
import textwrap

import pytest
from pydantic import ValidationError

from autobench.config.loader import ConfigError, load_config
from autobench.config.models import NodeBlueprint


def test_load_config_minimal_ok(tmp_path: Path):
    cfg_text = textwrap.dedent("""
        ssh:
          username: ec2-user
          private_key: ~/.ssh/bench.pem
        package_path: /tmp/couchbase-server-enterprise-7.2.0-amzn2.x86_64.rpm
        servers:
          - host: 10.0.0.11
            data_path: /data
            index_path: /index
          - host: 10.0.0.12
        clients:
          - host: 10.0.0.20
    """)
    f = tmp_path / "autobench.yaml"
    f.write_text(cfg_text)

    cfg = load_config(f)

    assert cfg.ssh.username == "ec2-user"
    assert cfg.settle_seconds == 30
    assert cfg.servers[0].data_path == "/data"
    assert cfg.servers[1].index_path is None
    assert [n.host for n in cfg.all_nodes] == ["10.0.0.11", "10.0.0.12", "10.0.0.20"]


def test_env_vars_are_expanded(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("BENCH_SSH_PASSWORD", "hunter2")
    f = tmp_path / "autobench.yaml"
    f.write_text("ssh:\n  password: ${BENCH_SSH_PASSWORD}\nsettle_seconds: 5\n")

    cfg = load_config(f)

    assert cfg.ssh.password == "hunter2"
    assert cfg.settle_seconds == 5
    assert cfg.all_nodes == []


def test_empty_file_gives_defaults(tmp_path: Path):
    f = tmp_path / "autobench.yaml"
    f.write_text("")
    assert load_config(f).ssh.port == 22


def test_blueprint_is_immutable():
    bp = NodeBlueprint(host="10.0.0.11", data_path="/data")
    with pytest.raises(ValidationError):
        bp.data_path = "/elsewhere"


@pytest.mark.parametrize(
    "text, message",
    [
        ("servers:\n  - data_path: /data\n", "invalid config"),
        ("servers:\n  - host: '   '\n", "host must not be empty"),
        ("settle_seconds: -1\n", "invalid config"),
        ("servers: [unclosed\n", "failed to parse config"),
        ("- just\n- a list\n", "must be a mapping"),
    ],
)
def test_bad_configs(tmp_path: Path, text, message):
    f = tmp_path / "autobench.yaml"
    f.write_text(text)
    with pytest.raises(ConfigError, match=message):
        load_config(f)


def test_missing_file(tmp_path: Path):
    with pytest.raises(ConfigError, match="failed to read config"):
        load_config(tmp_path / "nope.yaml")
