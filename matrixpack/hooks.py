"""Per-request hook for intercepting-proxy hosts."""

from __future__ import annotations

from typing import Any, MutableMapping

from matrixpack.policy.engine import Decision, InterceptionPolicy

REPLY_WITH_FILE_FLAG = "x-replywithfile"
UI_COLOR_FLAG = "ui-color"


def mark_session(session: MutableMapping[str, Any], marker: str) -> None:
    session[UI_COLOR_FLAG] = marker


def apply_decision(
    policy: InterceptionPolicy,
    host: str,
    session: MutableMapping[str, Any],
) -> Decision:
    """Decide for ``host`` and record the outcome as session flags.

    A blocked session is told which canned response file to reply with and is
    colour-marked; an allowed session is left untouched.
    """
    decision = policy.decide(host)
    if decision.block:
        session[REPLY_WITH_FILE_FLAG] = decision.response_template
        if decision.marker:
            mark_session(session, decision.marker)
    return decision
