import inspect

import livematrix


def test_public_api_symbol_list_is_explicit_and_stable() -> None:
    assert livematrix.__all__ == [
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


def test_policy_mutation_and_query_api_is_present() -> None:
    expected = {
        "set_enabled",
        "set_failure_type",
        "set_block_non_xbox_live",
        "add_blocked_host",
        "remove_blocked_host",
        "replace_all",
        "to_delimited_string",
        "contains",
        "decide",
    }
    members = {name for name, _ in inspect.getmembers(livematrix.InterceptionPolicy, inspect.isfunction)}
    assert expected <= members


def test_public_api_function_signatures() -> None:
    assert tuple(inspect.signature(livematrix.inject_failures).parameters) == ("policy", "intercept")
    assert tuple(inspect.signature(livematrix.apply_decision).parameters) == (
        "policy",
        "host",
        "session",
    )
    assert tuple(inspect.signature(livematrix.handle_exec_action).parameters) == (
        "policy",
        "command",
        "prompt",
    )


def test_load_and_save_policy_round_trip(tmp_path) -> None:
    policy = livematrix.InterceptionPolicy(enabled=True, blocked_hosts=["rta.xboxlive.com"])
    path = livematrix.save_policy(policy, tmp_path / "state.json")

    loaded = livematrix.load_policy(path)
    assert loaded.decide("rta.xboxlive.com").block is True
