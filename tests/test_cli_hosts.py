import json
from pathlib import Path

from typer.testing import CliRunner

from matrixpack.cli.app import app
from matrixpack.policy import EXTERNAL_SERVICES_SENTINEL


def _invoke(state_file: Path, *args: str, input: str | None = None):
    runner = CliRunner()
    return runner.invoke(app, ["--state-file", str(state_file), *args], input=input)


def test_cli_hosts_add_remove_and_show(tmp_path: Path) -> None:
    state_file = tmp_path / "state.json"

    added = _invoke(state_file, "hosts", "add", "b.com", "a.com", "B.com")
    assert added.exit_code == 0
    assert added.stdout.strip() == "b.com; a.com"

    removed = _invoke(state_file, "hosts", "remove", "b.com", "missing.com")
    assert removed.exit_code == 0
    assert removed.stdout.strip() == "a.com"

    shown = _invoke(state_file, "hosts", "show", "--json")
    payload = json.loads(shown.stdout.strip())
    assert payload == {"block_non_xbox_live": False, "delimited": "a.com", "hosts": ["a.com"]}


def test_cli_hosts_edit_with_value_deduplicates(tmp_path: Path) -> None:
    state_file = tmp_path / "state.json"
    result = _invoke(state_file, "hosts", "edit", "--value", "a.com; b.com; a.com")

    assert result.exit_code == 0
    assert "Successfully updated blocked host list." in result.stdout
    assert _invoke(state_file, "hosts", "show").stdout.strip() == "a.com; b.com"


def test_cli_hosts_edit_prompts_with_current_list(tmp_path: Path) -> None:
    state_file = tmp_path / "state.json"
    _invoke(state_file, "hosts", "add", "old.com")

    result = _invoke(state_file, "hosts", "edit", input="new.com; other.com\n")

    assert result.exit_code == 0
    assert "old.com" in result.output
    assert _invoke(state_file, "hosts", "show").stdout.strip() == "new.com; other.com"


def test_cli_hosts_edit_rejects_malformed_list(tmp_path: Path) -> None:
    state_file = tmp_path / "state.json"
    _invoke(state_file, "hosts", "add", "keep.com")

    result = _invoke(state_file, "hosts", "edit", "--value", "fine.com; not valid")

    assert result.exit_code == 2
    assert "Could not set new host values" in result.output
    assert _invoke(state_file, "hosts", "show").stdout.strip() == "keep.com"


def test_cli_hosts_edit_sentinel_turns_on_overlay(tmp_path: Path) -> None:
    state_file = tmp_path / "state.json"
    result = _invoke(state_file, "hosts", "edit", "--value", f"a.com; {EXTERNAL_SERVICES_SENTINEL}")

    assert result.exit_code == 0
    payload = json.loads(_invoke(state_file, "hosts", "show", "--json").stdout.strip())
    assert payload["hosts"] == ["a.com"]
    assert payload["block_non_xbox_live"] is True
    assert payload["delimited"] == f"a.com; {EXTERNAL_SERVICES_SENTINEL}"


def test_cli_exec_edit_command(tmp_path: Path) -> None:
    state_file = tmp_path / "state.json"
    result = _invoke(state_file, "exec", "--", "livematrix", "-edit", input="x.com\n")

    assert result.exit_code == 0
    assert "Successfully updated blocked host list." in result.output
    assert _invoke(state_file, "hosts", "show").stdout.strip() == "x.com"


def test_cli_exec_unknown_commands(tmp_path: Path) -> None:
    state_file = tmp_path / "state.json"

    unknown_action = _invoke(state_file, "exec", "--", "livematrix", "-reset")
    assert unknown_action.exit_code == 2
    assert "livematrix command not found." in unknown_action.output

    foreign = _invoke(state_file, "exec", "--", "select", "html")
    assert foreign.exit_code == 2
    assert "unrecognized command" in foreign.output


def test_cli_hosts_add_with_port_reloads_cleanly(tmp_path: Path) -> None:
    state_file = tmp_path / "state.json"

    added = _invoke(state_file, "hosts", "add", "example.com:8080")
    assert added.exit_code == 0
    assert added.stdout.strip() == "example.com"

    status = _invoke(state_file, "status", "--json")
    assert status.exit_code == 0
    assert json.loads(status.stdout.strip())["blocked_hosts"] == "example.com"


def test_cli_hosts_add_skips_delimited_argument(tmp_path: Path) -> None:
    state_file = tmp_path / "state.json"

    added = _invoke(state_file, "hosts", "add", "a.com;b.com", "c.com")
    assert added.exit_code == 0
    assert added.stdout.strip() == "c.com"

    shown = _invoke(state_file, "hosts", "show")
    assert shown.exit_code == 0
    assert shown.stdout.strip() == "c.com"
