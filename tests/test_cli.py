"""CLI smoke tests (config commands only; nothing here starts signal-cli)."""

import json

import pytest
from click.testing import CliRunner

from signal_bridge import config as config_module
from signal_bridge.cli.main import main


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    path = tmp_path / "config.json"
    monkeypatch.setattr(config_module, "CONFIG_FILE", path)
    monkeypatch.delenv(config_module.ACCOUNT_ENV, raising=False)
    return path


def test_config_set_and_show(config_file):
    runner = CliRunner()
    result = runner.invoke(main, ["config", "set", "account", "+15551234567"])
    assert result.exit_code == 0, result.output
    assert json.loads(config_file.read_text())["account"] == "+15551234567"

    result = runner.invoke(main, ["config", "show"])
    assert result.exit_code == 0
    assert json.loads(result.output)["account"] == "+15551234567"


def test_config_set_unknown_key(config_file):
    result = CliRunner().invoke(main, ["config", "set", "colour", "blue"])
    assert result.exit_code == 1
    assert not config_file.exists()


def test_send_requires_content(config_file):
    result = CliRunner().invoke(main, ["send", "+1555"])
    assert result.exit_code == 2
    assert "Nothing to send" in result.output
