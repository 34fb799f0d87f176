import json

import pytest
from typer.testing import CliRunner

from valconsole.cli.commands import app

runner = CliRunner()


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "console.json"
    path.write_text(
        json.dumps({"config": {}, "transport": "fake_transport:connect", "wallet_id": "-1:" + "ab" * 32, "max_factor": 2}),
        encoding="utf-8",
    )
    return path


@pytest.fixture
def fake_transport(monkeypatch, node):
    monkeypatch.setattr("valconsole.transport.channel.load_object", lambda ref: lambda cfg: node)
    return node


def test_batch_mode_runs_commands_and_closes_channel(config_file, fake_transport) -> None:
    result = runner.invoke(app, ["--config", str(config_file), "--json", "-c", "getstats", "-c", "newkey"])
    assert result.exit_code == 0, result.output
    assert '"sync_status"' in result.output
    assert "received public key hash" in result.output
    assert "valconsole v" not in result.output
    assert fake_transport.closed


def test_batch_mode_failure_sets_exit_code(config_file, fake_transport) -> None:
    result = runner.invoke(app, ["--config", str(config_file), "--cmd", "bogus"])
    assert result.exit_code == 1
    assert "Error executing command: command bogus not supported" in result.output
    assert "valconsole v" in result.output


def test_missing_config_is_bad_parameter(tmp_path) -> None:
    result = runner.invoke(app, ["--config", str(tmp_path / "absent.json"), "--cmd", "getstats"])
    assert result.exit_code != 0


def test_connect_failure_is_reported(config_file, monkeypatch) -> None:
    def refuse(cfg):
        raise ConnectionRefusedError("no route")

    monkeypatch.setattr("valconsole.transport.channel.load_object", lambda ref: refuse)
    result = runner.invoke(app, ["--config", str(config_file), "--cmd", "getstats"])
    assert result.exit_code == 1
    assert "Error executing command: can't connect" in result.output
