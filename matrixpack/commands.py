"""Command-line style actions delegated from a proxy host's command box."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Callable

from matrixpack.policy.engine import InterceptionPolicy

logger = logging.getLogger(__name__)

COMMAND_PREFIX = "livematrix "
EDIT_PROMPT_TITLE = "Edit Blocked Host List"
EDIT_PROMPT_MESSAGE = "Enter semicolon-delimited block list."

# (title, message, current value) -> edited value, or None when cancelled.
HostListPrompt = Callable[[str, str, str], "str | None"]


@dataclass(frozen=True, slots=True)
class ExecActionResult:
    handled: bool
    ok: bool = True
    message: str = ""


def edit_blocked_hosts(policy: InterceptionPolicy, prompt: HostListPrompt) -> ExecActionResult:
    entered = prompt(EDIT_PROMPT_TITLE, EDIT_PROMPT_MESSAGE, policy.to_delimited_string())
    if entered is None:
        return ExecActionResult(handled=True, ok=True, message="")

    ok, errors = policy.replace_all(entered)
    if ok:
        return ExecActionResult(
            handled=True,
            ok=True,
            message="Successfully updated blocked host list.",
        )
    return ExecActionResult(
        handled=True,
        ok=False,
        message="Could not set new host values: " + errors,
    )


def handle_exec_action(
    policy: InterceptionPolicy,
    command: str,
    *,
    prompt: HostListPrompt,
) -> ExecActionResult:
    """Dispatch ``livematrix <action>``; other commands are left to the host."""
    normalized = command.strip().lower()
    if not normalized.startswith(COMMAND_PREFIX):
        return ExecActionResult(handled=False)

    action = normalized[len(COMMAND_PREFIX):].strip()
    if action == "-edit":
        return edit_blocked_hosts(policy, prompt)

    logger.debug("unrecognized livematrix action: %r", action)
    return ExecActionResult(handled=True, ok=False, message="livematrix command not found.")
