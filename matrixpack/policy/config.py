"""JSON configuration and state persistence for the interception policy."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Mapping

from matrixpack.policy.engine import FailureType, InterceptionPolicy
from matrixpack.policy.exceptions import PolicyConfigError

logger = logging.getLogger(__name__)

STATE_FILE_ENV_VAR = "LIVEMATRIX_STATE_FILE"

_SUPPORTED_KEYS = frozenset(
    {
        "enabled",
        "failure_type",
        "blocked_hosts",
        "block_non_xbox_live",
    }
)


def default_state_path() -> Path:
    override = os.getenv(STATE_FILE_ENV_VAR)
    if override and override.strip():
        return Path(override.strip())
    return Path(".livematrix/state.json")


def policy_from_config(config: Mapping[str, Any]) -> InterceptionPolicy:
    """Create a policy from a config mapping."""
    unknown = sorted(set(config.keys()) - _SUPPORTED_KEYS)
    if unknown:
        raise PolicyConfigError("Unsupported policy config keys: " + ", ".join(unknown))

    enabled = config.get("enabled", False)
    if not isinstance(enabled, bool):
        raise PolicyConfigError("policy config key 'enabled' must be a boolean.")

    raw_failure = config.get("failure_type", FailureType.NOT_FOUND.slug)
    if not isinstance(raw_failure, str):
        raise PolicyConfigError("policy config key 'failure_type' must be a string.")
    try:
        failure_type = FailureType.parse(raw_failure)
    except ValueError as error:
        raise PolicyConfigError(str(error)) from error

    blocked_hosts = config.get("blocked_hosts", "")
    if not isinstance(blocked_hosts, str):
        raise PolicyConfigError(
            "policy config key 'blocked_hosts' must be a semicolon-delimited string."
        )

    block_non_xbox_live = config.get("block_non_xbox_live", False)
    if not isinstance(block_non_xbox_live, bool):
        raise PolicyConfigError("policy config key 'block_non_xbox_live' must be a boolean.")

    policy = InterceptionPolicy(enabled=enabled, failure_type=failure_type)
    ok, detail = policy.replace_all(blocked_hosts)
    if not ok:
        raise PolicyConfigError(f"policy config key 'blocked_hosts' is invalid: {detail}")
    if block_non_xbox_live:
        policy.set_block_non_xbox_live(True)
    return policy


def policy_to_config(policy: InterceptionPolicy) -> dict[str, Any]:
    snapshot = policy.snapshot()
    return {
        "enabled": snapshot.enabled,
        "failure_type": snapshot.failure_type.slug,
        "blocked_hosts": snapshot.to_delimited_string(),
        "block_non_xbox_live": snapshot.block_non_xbox_live,
    }


def load_policy_from_file(path: str | Path) -> InterceptionPolicy:
    """Load policy state from a JSON file."""
    config_path = Path(path)
    try:
        raw = json.loads(config_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise
    except json.JSONDecodeError as error:
        raise PolicyConfigError(f"Invalid policy config JSON ({config_path}): {error}") from error

    if not isinstance(raw, dict):
        raise PolicyConfigError(f"Policy config must be a JSON object ({config_path}).")

    return policy_from_config(raw)


def load_policy_or_default(path: str | Path) -> InterceptionPolicy:
    try:
        return load_policy_from_file(path)
    except FileNotFoundError:
        logger.debug("no policy state at %s, starting with defaults", path)
        return InterceptionPolicy()


def save_policy_to_file(policy: InterceptionPolicy, path: str | Path) -> Path:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    temp_path = target.with_name(target.name + ".tmp")
    temp_path.write_text(
        json.dumps(policy_to_config(policy), indent=2, ensure_ascii=True, sort_keys=True) + "\n",
        encoding="utf-8",
    )
    os.replace(temp_path, target)
    logger.debug("policy state written to %s", target)
    return target
