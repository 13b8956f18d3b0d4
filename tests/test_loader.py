# tests/test_loader.py

import json

import pytest

from genstatem.loader import decode, load_description, parse_description
from genstatem.models import Description


def test_parse_description(running_data):
    result = parse_description(running_data)

    assert result.is_ok()
    description = result.unwrap()
    assert description.name == "Machine"
    assert description.init == "idle"
    assert description.iface == "Callbacks"
    assert [s.name for s in description.states] == ["idle", "running"]
    assert description.states[1].entry_action == "on_running"
    assert description.states[0].transitions[0].target == "running"


def test_keys_are_case_insensitive():
    data = {
        "Name": "Machine",
        "Package": "machine",
        "Init": "idle",
        "States": [
            {"Name": "idle", "Transitions": [{"Event": "start", "To": "running"}]},
            {"Name": "running", "On": "onRunning"},
        ],
    }

    description = parse_description(data).unwrap()

    assert description.package == "machine"
    assert description.states[0].transitions[0].target == "running"
    assert description.states[1].entry_action == "onRunning"


def test_missing_optional_fields_are_empty():
    description = parse_description({"name": "M", "init": "a", "states": [{"name": "a"}]}).unwrap()

    assert description.iface == ""
    assert description.callbacks == ""
    assert description.states[0].entry_action == ""
    assert description.states[0].transitions == ()


def test_numbers_become_strings():
    description = parse_description({
        "name": "M",
        "init": 1,
        "states": [{"name": 1, "transitions": [{"event": 2, "to": 1}]}],
    }).unwrap()

    assert description.init == "1"
    assert description.states[0].transitions[0].event == "2"


@pytest.mark.parametrize(
    "data, fragment",
    [
        ([], "description: expected a mapping"),
        ({"name": "M", "states": {}}, "states: expected a list"),
        ({"name": "M", "states": ["idle"]}, "states[0]: expected a mapping"),
        ({"name": "M", "states": [{"name": "a", "transitions": "x"}]}, "states[0].transitions"),
        ({"name": ["M"]}, "description.name: expected a string"),
        ({"name": "M", "states": [{"name": True}]}, "states[0].name: expected a string"),
    ],
)
def test_shape_errors(data, fragment):
    result = parse_description(data, "desc.json")

    assert result.is_err()
    assert fragment in str(result.unwrap_err())
    assert str(result.unwrap_err()).startswith("desc.json:")


def test_decode_json_suffix():
    assert decode('{"name": "M"}', ".json").unwrap() == {"name": "M"}


def test_decode_json_error():
    result = decode("{name: M", ".json", "desc.json")

    assert result.is_err()
    assert "Failed to parse JSON" in str(result.unwrap_err())


def test_decode_unknown_suffix_falls_back_to_yaml():
    assert decode("name: M\n", ".desc").unwrap() == {"name": "M"}


def test_load_json(tmp_path, running_data):
    path = tmp_path / "desc.json"
    path.write_text(json.dumps(running_data), encoding="utf-8")

    description = load_description(path).unwrap()

    assert description == Description.from_dict(running_data)


def test_load_yaml_with_bare_on_key(tmp_path):
    path = tmp_path / "desc.yaml"
    path.write_text(
        "name: Machine\n"
        "init: idle\n"
        "states:\n"
        "  - name: idle\n"
        "    transitions:\n"
        "      - event: start\n"
        "        to: running\n"
        "  - name: running\n"
        "    on: on_running\n",
        encoding="utf-8",
    )

    description = load_description(path).unwrap()

    assert description.states[1].entry_action == "on_running"


def test_yaml_boolean_name_asks_for_quotes(tmp_path):
    path = tmp_path / "desc.yaml"
    path.write_text(
        "name: Switch\n"
        "init: off\n"
        "states:\n"
        "  - name: off\n",
        encoding="utf-8",
    )

    result = load_description(path)

    assert result.is_err()
    message = str(result.unwrap_err())
    assert "description.init: expected a string, got False" in message
    assert "quote" in message


def test_load_missing_file(tmp_path):
    result = load_description(tmp_path / "nope.json")

    assert result.is_err()
    assert "not found" in str(result.unwrap_err())


def test_description_round_trips_through_dict(player_description):
    assert Description.from_dict(player_description.to_dict()) == player_description
