"""Stable public API surface for LiveMatrix.

This module is the supported import path for library users.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import ExitStack, contextmanager
from pathlib import Path
from typing import Literal

from matrixpack.adapters import intercept_httpx, intercept_requests
from matrixpack.commands import ExecActionResult, handle_exec_action
from matrixpack.hooks import apply_decision
from matrixpack.policy import (
    BlockedHostSet,
    Decision,
    FailureType,
    InterceptionPolicy,
    load_policy_from_file,
    save_policy_to_file,
)

__version__ = "0.1.0"

ClientInterceptor = Literal["httpx", "requests"]


def _normalize_interceptors(
    intercept: tuple[ClientInterceptor, ...] | list[ClientInterceptor],
) -> tuple[ClientInterceptor, ...]:
    allowed = {"httpx", "requests"}
    normalized: list[ClientInterceptor] = []
    for name in intercept:
        normalized_name = str(name).strip()
        if normalized_name not in allowed:
            raise ValueError(
                f"Unsupported intercept option: {normalized_name}. "
                "Supported values: httpx, requests."
            )
        if normalized_name == "httpx":
            normalized.append("httpx")
        else:
            normalized.append("requests")
    if not normalized:
        return ("httpx", "requests")
    return tuple(dict.fromkeys(normalized))


@contextmanager
def inject_failures(
    policy: InterceptionPolicy,
    *,
    intercept: tuple[ClientInterceptor, ...] | list[ClientInterceptor] | None = None,
) -> Iterator[InterceptionPolicy]:
    """Route in-process HTTP client calls through ``policy`` for the scope."""
    interceptors = _normalize_interceptors(intercept or ())
    with ExitStack() as stack:
        if "requests" in interceptors:
            stack.enter_context(intercept_requests(policy))
        if "httpx" in interceptors:
            stack.enter_context(intercept_httpx(policy))
        yield policy


def load_policy(path: str | Path) -> InterceptionPolicy:
    return load_policy_from_file(path)


def save_policy(policy: InterceptionPolicy, path: str | Path) -> Path:
    return save_policy_to_file(policy, path)


__all__ = [
    "__version__",
    "ClientInterceptor",
    "BlockedHostSet",
    "Decision",
    "FailureType",
    "InterceptionPolicy",
    "ExecActionResult",
    "apply_decision",
    "handle_exec_action",
    "inject_failures",
    "load_policy",
    "save_policy",
]
