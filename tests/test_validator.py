# tests/test_validator.py

import pytest

from genstatem.compiler import validate
from genstatem.models import CallbackKind, Description, DiagnosticKind


def _kinds(result):
    assert result.is_err()
    return [d.kind for d in result.unwrap_err()]


def test_valid_description_builds_indexes(player_description):
    result = validate(player_description)

    assert result.is_ok()
    validated = result.unwrap()
    assert validated.name == "Player"
    assert set(validated.states) == {"stopped", "playing", "paused"}
    assert validated.state_constants == {
        "stopped": "STATE_STOPPED",
        "playing": "STATE_PLAYING",
        "paused": "STATE_PAUSED",
    }
    assert validated.events == ["play", "pause", "stop", "tick"]
    assert validated.callbacks["has_media"] is CallbackKind.CONDITION
    assert validated.callbacks["load_media"] is CallbackKind.ACTION
    assert validated.callbacks["on_playing"] is CallbackKind.ACTION
    assert validated.entry_action_of("playing") == "on_playing"
    assert validated.entry_action_of("paused") is None


def test_distinct_names_derive_distinct_constants(player_description):
    validated = validate(player_description).unwrap()

    assert len(set(validated.state_constants.values())) == len(validated.state_constants)
    assert len(set(validated.event_constants.values())) == len(validated.event_constants)


def test_duplicate_state(running_data):
    running_data["states"].append({"name": "idle"})

    result = validate(Description.from_dict(running_data))

    assert _kinds(result) == [DiagnosticKind.DUPLICATE_STATE]
    assert result.unwrap_err()[0].state == "idle"


def test_duplicate_event(running_data):
    running_data["states"][0]["transitions"].append({"event": "start"})

    result = validate(Description.from_dict(running_data))

    assert _kinds(result) == [DiagnosticKind.DUPLICATE_EVENT]
    diagnostic = result.unwrap_err()[0]
    assert diagnostic.state == "idle"
    assert diagnostic.event == "start"
    assert "Can't have two transitions for the same event" in diagnostic.message


def test_missing_init(running_data):
    running_data["init"] = "booting"

    result = validate(Description.from_dict(running_data))

    assert _kinds(result) == [DiagnosticKind.MISSING_INIT]
    assert str(result.unwrap_err()[0]) == "missing_init: Init state `booting` does not exist."


def test_missing_target(running_data):
    running_data["states"][1]["transitions"] = [{"event": "stop", "to": "halted"}]

    result = validate(Description.from_dict(running_data))

    assert _kinds(result) == [DiagnosticKind.MISSING_TARGET]
    diagnostic = result.unwrap_err()[0]
    assert (diagnostic.state, diagnostic.event, diagnostic.target) == ("running", "stop", "halted")


def test_empty_target_stays_in_place(running_data):
    running_data["states"][1]["transitions"] = [{"event": "tick", "action": "count"}]

    assert validate(Description.from_dict(running_data)).is_ok()


def test_all_problems_reported_together():
    description = Description.from_dict({
        "name": "Broken",
        "init": "nowhere",
        "states": [
            {"name": "a", "transitions": [
                {"event": "go", "to": "b"},
                {"event": "go", "to": "missing"},
            ]},
            {"name": "b"},
            {"name": "a"},
        ],
    })

    kinds = _kinds(validate(description))

    assert DiagnosticKind.DUPLICATE_STATE in kinds
    assert DiagnosticKind.DUPLICATE_EVENT in kinds
    assert DiagnosticKind.MISSING_INIT in kinds
    assert DiagnosticKind.MISSING_TARGET in kinds


def test_state_identifier_collision():
    description = Description.from_dict({
        "name": "Machine",
        "init": "Idle",
        "states": [{"name": "Idle"}, {"name": "idle"}],
    })

    result = validate(description)

    assert _kinds(result) == [DiagnosticKind.IDENTIFIER_COLLISION]
    assert "STATE_IDLE" in result.unwrap_err()[0].message


def test_event_identifier_collision():
    description = Description.from_dict({
        "name": "Machine",
        "init": "a",
        "states": [
            {"name": "a", "transitions": [{"event": "run-fast"}]},
            {"name": "b", "transitions": [{"event": "run_fast"}]},
        ],
    })

    assert _kinds(validate(description)) == [DiagnosticKind.IDENTIFIER_COLLISION]


def test_same_event_in_two_states_is_one_constant():
    description = Description.from_dict({
        "name": "Machine",
        "init": "a",
        "states": [
            {"name": "a", "transitions": [{"event": "go", "to": "b"}]},
            {"name": "b", "transitions": [{"event": "go", "to": "a"}]},
        ],
    })

    validated = validate(description).unwrap()

    assert validated.event_constants == {"go": "EVENT_GO"}


def test_machine_name_must_be_identifier(running_data):
    running_data["name"] = "my machine"

    assert _kinds(validate(Description.from_dict(running_data))) == [
        DiagnosticKind.INVALID_IDENTIFIER
    ]


def test_machine_name_must_not_shadow_generated_names(running_data):
    running_data["name"] = "State"

    assert _kinds(validate(Description.from_dict(running_data))) == [
        DiagnosticKind.RESERVED_NAME
    ]


def test_iface_must_differ_from_name(running_data):
    running_data["iface"] = "Machine"

    assert _kinds(validate(Description.from_dict(running_data))) == [
        DiagnosticKind.RESERVED_NAME
    ]


def test_callback_must_be_identifier(running_data):
    running_data["states"][1]["on"] = "on-running"

    result = validate(Description.from_dict(running_data))

    assert _kinds(result) == [DiagnosticKind.INVALID_IDENTIFIER]
    assert result.unwrap_err()[0].state == "running"


def test_free_callback_must_not_shadow_locals(running_data):
    del running_data["iface"]
    running_data["states"][1]["on"] = "event"

    assert _kinds(validate(Description.from_dict(running_data))) == [
        DiagnosticKind.RESERVED_NAME
    ]


@pytest.mark.parametrize("name", ["property", "super", "Exception", "str", "bool"])
def test_free_callback_must_not_shadow_builtins(running_data, name):
    del running_data["iface"]
    running_data["callbacks"] = "machine_callbacks"
    running_data["states"][0]["transitions"][0]["action"] = name

    result = validate(Description.from_dict(running_data))

    assert _kinds(result) == [DiagnosticKind.RESERVED_NAME]
    assert result.unwrap_err()[0].event == "start"


def test_machine_name_must_not_shadow_builtins(running_data):
    running_data["name"] = "super"

    assert _kinds(validate(Description.from_dict(running_data))) == [
        DiagnosticKind.RESERVED_NAME
    ]


def test_interface_callback_may_reuse_builtin_names(running_data):
    running_data["states"][0]["transitions"][0]["action"] = "property"

    assert validate(Description.from_dict(running_data)).is_ok()


def test_interface_callback_may_reuse_local_names(running_data):
    running_data["states"][1]["on"] = "event"

    assert validate(Description.from_dict(running_data)).is_ok()


def test_callback_conflict(running_data):
    running_data["states"][0]["transitions"][0]["condition"] = "on_running"

    result = validate(Description.from_dict(running_data))

    assert _kinds(result) == [DiagnosticKind.CALLBACK_CONFLICT]


def test_callback_conflict_reported_once(running_data):
    running_data["states"][0]["transitions"][0]["condition"] = "on_running"
    running_data["states"][1]["transitions"] = [
        {"event": "a", "condition": "on_running"},
        {"event": "b", "condition": "on_running"},
    ]

    assert _kinds(validate(Description.from_dict(running_data))) == [
        DiagnosticKind.CALLBACK_CONFLICT
    ]


def test_callbacks_module_must_be_module_path(running_data):
    del running_data["iface"]
    running_data["callbacks"] = "app/callbacks"

    assert _kinds(validate(Description.from_dict(running_data))) == [
        DiagnosticKind.INVALID_IDENTIFIER
    ]


def test_diagnostic_to_dict(running_data):
    running_data["init"] = "booting"

    diagnostic = validate(Description.from_dict(running_data)).unwrap_err()[0]

    assert diagnostic.to_dict() == {
        "kind": "missing_init",
        "message": "Init state `booting` does not exist.",
        "target": "booting",
    }
