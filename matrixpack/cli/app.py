import json
from importlib.metadata import PackageNotFoundError, version as package_version
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, NoReturn

import typer

from matrixpack.commands import edit_blocked_hosts, handle_exec_action
from matrixpack.policy import (
    SERVICES,
    FailureType,
    InterceptionPolicy,
    LiveMatrixError,
    PolicyConfigError,
    default_state_path,
    load_policy_or_default,
    policy_to_config,
    save_policy_to_file,
)

app = typer.Typer(help="LiveMatrix failure-injection policy CLI")
hosts_app = typer.Typer(help="Inspect and edit the blocked host list.")
services_app = typer.Typer(help="Block or unblock catalogued Xbox Live services.")
app.add_typer(hosts_app, name="hosts")
app.add_typer(services_app, name="services")


@dataclass(slots=True)
class _CliOptions:
    quiet: bool = False
    state_file: Path = field(default_factory=default_state_path)


_CLI_OPTIONS = _CliOptions()


def _resolve_cli_version() -> str:
    try:
        return package_version("livematrix")
    except PackageNotFoundError:
        from livematrix import __version__ as local_version

        return local_version


def _version_callback(value: bool) -> None:
    if not value:
        return
    typer.echo(_resolve_cli_version(), color=False)
    raise typer.Exit()


@app.callback()
def app_options(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show LiveMatrix version and exit.",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        help="Suppress non-error text output.",
    ),
    state_file: Path | None = typer.Option(
        None,
        "--state-file",
        help="Path to the persisted policy state (default: $LIVEMATRIX_STATE_FILE or .livematrix/state.json).",
    ),
    log_level: str = typer.Option(
        "WARNING",
        "--log-level",
        help="Logging level for diagnostic output.",
    ),
) -> None:
    """Global options for all CLI commands."""
    _CLI_OPTIONS.quiet = quiet
    _CLI_OPTIONS.state_file = state_file if state_file is not None else default_state_path()
    logging.basicConfig(
        level=getattr(logging, log_level.strip().upper(), logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )


def _echo(message: str, *, err: bool = False) -> None:
    if _CLI_OPTIONS.quiet and not err:
        return
    typer.echo(message, err=err)


def _echo_json(payload: dict[str, Any]) -> None:
    typer.echo(json.dumps(payload, ensure_ascii=True, sort_keys=True, separators=(",", ":")))


def _fail(message: str, *, code: int = 2) -> NoReturn:
    _echo(message, err=True)
    raise typer.Exit(code=code)


def _load_policy() -> InterceptionPolicy:
    try:
        return load_policy_or_default(_CLI_OPTIONS.state_file)
    except PolicyConfigError as error:
        _fail(f"could not load policy state: {error}")


def _save_policy(policy: InterceptionPolicy) -> None:
    save_policy_to_file(policy, _CLI_OPTIONS.state_file)


def _status_payload(policy: InterceptionPolicy) -> dict[str, Any]:
    payload = policy_to_config(policy)
    payload["failure_label"] = policy.failure_type.label
    payload["blocked_services"] = policy.blocked_services()
    payload["state_file"] = str(_CLI_OPTIONS.state_file)
    return payload


@app.command()
def status(
    json_output: bool = typer.Option(False, "--json", help="Emit machine-readable status."),
) -> None:
    """Show the current policy state."""
    policy = _load_policy()
    payload = _status_payload(policy)
    if json_output:
        _echo_json(payload)
        return
    _echo(f"enabled: {'yes' if payload['enabled'] else 'no'}")
    _echo(f"failure type: {payload['failure_label']}")
    _echo(f"block non-Xbox Live: {'yes' if payload['block_non_xbox_live'] else 'no'}")
    _echo(f"blocked hosts: {payload['blocked_hosts'] or '(none)'}")


@app.command()
def enable() -> None:
    """Turn failure injection on."""
    policy = _load_policy()
    policy.set_enabled(True)
    _save_policy(policy)
    _echo("interception enabled")


@app.command()
def disable() -> None:
    """Turn failure injection off without clearing any selection."""
    policy = _load_policy()
    policy.set_enabled(False)
    _save_policy(policy)
    _echo("interception disabled")


@app.command()
def failure(
    failure_type: str = typer.Argument(
        ...,
        help="One of: " + ", ".join(member.slug for member in FailureType),
    ),
) -> None:
    """Select the failure injected for blocked requests."""
    try:
        resolved = FailureType.parse(failure_type)
    except ValueError as error:
        _fail(str(error))
    policy = _load_policy()
    policy.set_failure_type(resolved)
    _save_policy(policy)
    _echo(f"failure type: {resolved.label}")


@app.command()
def decide(
    host: str = typer.Argument(..., help="Request host to evaluate."),
    json_output: bool = typer.Option(False, "--json", help="Emit machine-readable decision."),
) -> None:
    """Show whether a request to HOST would be blocked."""
    decision = _load_policy().decide(host)
    if json_output:
        _echo_json(
            {
                "host": host,
                "block": decision.block,
                "response_template": decision.response_template,
                "failure_type": decision.failure_type.slug if decision.failure_type else None,
                "marker": decision.marker,
                "reason": decision.reason,
            }
        )
        return
    if decision.block:
        _echo(f"blocked: {host} -> {decision.response_template}")
    else:
        _echo(f"allowed: {host}")


@app.command(name="exec")
def exec_action(
    command: list[str] = typer.Argument(..., help="Command text, e.g. `livematrix -edit`."),
) -> None:
    """Run a command-box action such as `livematrix -edit`."""
    policy = _load_policy()
    result = handle_exec_action(policy, " ".join(command), prompt=_prompt_host_list)
    if not result.handled:
        _fail(f"unrecognized command: {' '.join(command)}")
    if not result.ok:
        _fail(result.message)
    _save_policy(policy)
    if result.message:
        _echo(result.message)


def _prompt_host_list(_title: str, message: str, current: str) -> str | None:
    return typer.prompt(message, default=current, show_default=True)


@hosts_app.command("show")
def hosts_show(
    json_output: bool = typer.Option(False, "--json", help="Emit machine-readable host list."),
) -> None:
    """Print the blocked host list in its delimited form."""
    policy = _load_policy()
    if json_output:
        _echo_json(
            {
                "hosts": list(policy.blocked_hosts),
                "block_non_xbox_live": policy.block_non_xbox_live,
                "delimited": policy.to_delimited_string(),
            }
        )
        return
    _echo(policy.to_delimited_string())


@hosts_app.command("add")
def hosts_add(hosts: list[str] = typer.Argument(..., help="Hosts to block.")) -> None:
    """Block one or more hosts."""
    policy = _load_policy()
    for host in hosts:
        policy.add_blocked_host(host)
    _save_policy(policy)
    _echo(policy.to_delimited_string())


@hosts_app.command("remove")
def hosts_remove(hosts: list[str] = typer.Argument(..., help="Hosts to unblock.")) -> None:
    """Unblock one or more hosts."""
    policy = _load_policy()
    for host in hosts:
        policy.remove_blocked_host(host)
    _save_policy(policy)
    _echo(policy.to_delimited_string())


@hosts_app.command("edit")
def hosts_edit(
    value: str | None = typer.Option(
        None,
        "--value",
        help="Replacement host list; prompts with the current list when omitted.",
    ),
) -> None:
    """Replace the whole blocked host list."""
    policy = _load_policy()
    prompt = _prompt_host_list if value is None else (lambda _title, _message, _current: value)
    result = edit_blocked_hosts(policy, prompt)
    if not result.ok:
        _fail(result.message)
    _save_policy(policy)
    _echo(result.message)


@services_app.command("list")
def services_list(
    json_output: bool = typer.Option(False, "--json", help="Emit machine-readable catalog."),
) -> None:
    """List catalogued services and whether each is blocked."""
    policy = _load_policy()
    if json_output:
        _echo_json(
            {
                "services": [
                    {
                        "name": service.name,
                        "endpoint": service.endpoint,
                        "blocked": policy.contains(service.endpoint),
                    }
                    for service in SERVICES
                ]
            }
        )
        return
    for service in SERVICES:
        mark = "x" if policy.contains(service.endpoint) else " "
        endpoint = "(all non-Xbox Live hosts)" if service.is_external else service.endpoint
        _echo(f"[{mark}] {service.name}: {endpoint}")


@services_app.command("block")
def services_block(names: list[str] = typer.Argument(..., help="Service names.")) -> None:
    """Block catalogued services by name."""
    _update_services(names, block=True)


@services_app.command("unblock")
def services_unblock(names: list[str] = typer.Argument(..., help="Service names.")) -> None:
    """Unblock catalogued services by name."""
    _update_services(names, block=False)


@services_app.command("all")
def services_all() -> None:
    """Block every catalogued service."""
    policy = _load_policy()
    policy.select_all_services()
    _save_policy(policy)
    _echo(f"blocked {len(SERVICES)} services")


@services_app.command("none")
def services_none() -> None:
    """Unblock every catalogued service."""
    policy = _load_policy()
    policy.select_no_services()
    _save_policy(policy)
    _echo("no services blocked")


def _update_services(names: list[str], *, block: bool) -> None:
    policy = _load_policy()
    try:
        for name in names:
            if block:
                policy.block_service(name)
            else:
                policy.unblock_service(name)
    except LiveMatrixError as error:
        _fail(str(error))
    _save_policy(policy)
    _echo(", ".join(policy.blocked_services()) or "no services blocked")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
