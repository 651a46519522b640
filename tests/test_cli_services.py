import json
from pathlib import Path

from typer.testing import CliRunner

from matrixpack.cli.app import app


def _invoke(state_file: Path, *args: str):
    runner = CliRunner()
    return runner.invoke(app, ["--state-file", str(state_file), *args])


def test_cli_services_block_and_list(tmp_path: Path) -> None:
    state_file = tmp_path / "state.json"
    result = _invoke(state_file, "services", "block", "Presence", "social")

    assert result.exit_code == 0
    assert result.stdout.strip() == "Presence, Social"

    listing = json.loads(_invoke(state_file, "services", "list", "--json").stdout.strip())
    blocked = {row["name"] for row in listing["services"] if row["blocked"]}
    assert blocked == {"Presence", "Social"}

    text = _invoke(state_file, "services", "list").stdout
    assert "[x] Presence: userpresence.xboxlive.com" in text
    assert "[ ] External Services (non-Xbox): (all non-Xbox Live hosts)" in text


def test_cli_services_unknown_name_fails(tmp_path: Path) -> None:
    state_file = tmp_path / "state.json"
    result = _invoke(state_file, "services", "block", "Presence", "Marketplace")

    assert result.exit_code == 2
    assert "Unknown service 'Marketplace'" in result.output
    assert not state_file.exists()


def test_cli_services_all_then_none(tmp_path: Path) -> None:
    state_file = tmp_path / "state.json"
    _invoke(state_file, "hosts", "add", "custom.example.com")

    assert _invoke(state_file, "services", "all").exit_code == 0
    status = json.loads(_invoke(state_file, "status", "--json").stdout.strip())
    assert len(status["blocked_services"]) == 18
    assert status["block_non_xbox_live"] is True

    assert _invoke(state_file, "services", "none").exit_code == 0
    status = json.loads(_invoke(state_file, "status", "--json").stdout.strip())
    assert status["blocked_services"] == []
    assert status["blocked_hosts"] == "custom.example.com"


def test_cli_services_unblock(tmp_path: Path) -> None:
    state_file = tmp_path / "state.json"
    _invoke(state_file, "services", "block", "Privacy", "Profile")

    result = _invoke(state_file, "services", "unblock", "privacy")

    assert result.exit_code == 0
    assert result.stdout.strip() == "Profile"
