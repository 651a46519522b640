from typing import Any

from matrixpack.hooks import REPLY_WITH_FILE_FLAG, UI_COLOR_FLAG, apply_decision
from matrixpack.policy import FailureType, InterceptionPolicy


def test_blocked_session_gets_reply_file_and_marker() -> None:
    policy = InterceptionPolicy(enabled=True, blocked_hosts=["userstats.xboxlive.com"])
    policy.set_failure_type(FailureType.RATE_LIMIT_SUSTAINED)
    session: dict[str, Any] = {}

    decision = apply_decision(policy, "UserStats.xboxlive.com", session)

    assert decision.block is True
    assert session == {
        REPLY_WITH_FILE_FLAG: "429_XboxLiveResiliency_RateLimit_Sustained.dat",
        UI_COLOR_FLAG: "red",
    }


def test_allowed_session_is_untouched() -> None:
    policy = InterceptionPolicy(enabled=True, blocked_hosts=["userstats.xboxlive.com"])
    session: dict[str, Any] = {"existing": "value"}

    decision = apply_decision(policy, "titlestorage.xboxlive.com", session)

    assert decision.block is False
    assert session == {"existing": "value"}


def test_disabled_policy_leaves_session_untouched() -> None:
    policy = InterceptionPolicy(blocked_hosts=["userstats.xboxlive.com"])
    session: dict[str, Any] = {}

    apply_decision(policy, "userstats.xboxlive.com", session)

    assert session == {}
