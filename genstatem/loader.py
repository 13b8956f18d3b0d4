"""Reading state machine descriptions from JSON and YAML files."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from genstatem.models import Description
from genstatem.utils.logging import get_logger
from genstatem.utils.result import Err, InputError, Ok, Result, collect_results

logger = get_logger("loader")

JSON_SUFFIXES = (".json",)
YAML_SUFFIXES = (".yaml", ".yml")

DESCRIPTION_FIELDS = ("name", "package", "init", "iface", "callbacks")
STATE_FIELDS = ("name", "on")
TRANSITION_FIELDS = ("event", "to", "action", "condition")


def _fold(record: dict, where: str, source: str) -> Result[dict, InputError]:
    folded = {}
    for key, value in record.items():
        # YAML 1.1 reads a bare `on:` key as the boolean True
        if key is True:
            key = "on"
        if not isinstance(key, str):
            return Err(InputError(source, f"{where}: keys must be strings, got {key!r}"))
        folded[key.lower()] = value
    return Ok(folded)


def _scalar(value: Any, where: str, source: str) -> Result[str, InputError]:
    if value is None:
        return Ok("")
    if isinstance(value, bool):
        # YAML 1.1 reads bare on, off, yes and no as booleans
        return Err(InputError(
            source,
            f"{where}: expected a string, got {value!r}; quote words such as "
            "on, off, yes and no in YAML",
        ))
    if isinstance(value, (str, int, float)):
        return Ok(str(value))
    return Err(InputError(
        source, f"{where}: expected a string, got {type(value).__name__}"
    ))


def _record(
    data: Any,
    fields: tuple[str, ...],
    where: str,
    source: str,
) -> Result[dict, InputError]:
    if not isinstance(data, dict):
        return Err(InputError(
            source, f"{where}: expected a mapping, got {type(data).__name__}"
        ))

    folded = _fold(data, where, source)
    if folded.is_err():
        return folded
    record = folded.unwrap()

    clean: dict[str, Any] = {}
    for name in fields:
        value = _scalar(record.get(name), f"{where}.{name}", source)
        if value.is_err():
            return value
        clean[name] = value.unwrap()

    return Ok(clean)


def _records(
    items: Any,
    where: str,
    source: str,
) -> Result[list[Any], InputError]:
    if items is None:
        return Ok([])
    if not isinstance(items, list):
        return Err(InputError(
            source, f"{where}: expected a list, got {type(items).__name__}"
        ))
    return Ok(items)


def _parse_transition(data: Any, where: str, source: str) -> Result[dict, InputError]:
    return _record(data, TRANSITION_FIELDS, where, source)


def _parse_state(data: Any, where: str, source: str) -> Result[dict, InputError]:
    result = _record(data, STATE_FIELDS, where, source)
    if result.is_err():
        return result
    state = result.unwrap()

    folded = _fold(data, where, source).unwrap()
    items = _records(folded.get("transitions"), f"{where}.transitions", source)
    if items.is_err():
        return items

    transitions = collect_results([
        _parse_transition(item, f"{where}.transitions[{i}]", source)
        for i, item in enumerate(items.unwrap())
    ])
    if transitions.is_err():
        return Err(transitions.unwrap_err()[0])

    state["transitions"] = transitions.unwrap()
    return Ok(state)


def parse_description(data: Any, source: str = "") -> Result[Description, InputError]:
    """
    Build a Description from decoded JSON or YAML data.

    Field names match case-insensitively, so ``{"Name": ..., "States": ...}``
    and ``{"name": ..., "states": ...}`` load the same. Only the shape is
    checked here; the validator checks meaning.

    Args:
        data: Decoded document
        source: File name used in error messages

    Returns:
        Result with the Description or the first shape error
    """
    result = _record(data, DESCRIPTION_FIELDS, "description", source)
    if result.is_err():
        return result
    description = result.unwrap()

    folded = _fold(data, "description", source).unwrap()
    items = _records(folded.get("states"), "states", source)
    if items.is_err():
        return items

    states = collect_results([
        _parse_state(item, f"states[{i}]", source)
        for i, item in enumerate(items.unwrap())
    ])
    if states.is_err():
        return Err(states.unwrap_err()[0])

    description["states"] = states.unwrap()
    return Ok(Description.from_dict(description))


def decode(text: str, suffix: str = "", source: str = "") -> Result[Any, InputError]:
    """
    Decode description text as JSON or YAML.

    The format follows the file suffix. Without a known suffix, JSON is tried
    first and YAML second.

    Args:
        text: File content
        suffix: File suffix including the dot
        source: File name used in error messages

    Returns:
        Result with the decoded document or a parse error
    """
    suffix = suffix.lower()

    if suffix not in YAML_SUFFIXES:
        try:
            return Ok(json.loads(text))
        except json.JSONDecodeError as e:
            if suffix in JSON_SUFFIXES:
                return Err(InputError(source, "Failed to parse JSON", cause=e))

    try:
        return Ok(yaml.safe_load(text))
    except yaml.YAMLError as e:
        return Err(InputError(source, "Failed to parse YAML", cause=e))


def load_description(path: Path) -> Result[Description, InputError]:
    """
    Load a description file.

    Args:
        path: Path to a .json, .yaml or .yml description

    Returns:
        Result with the Description or an input error
    """
    path = Path(path)

    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return Err(InputError(str(path), "Description file not found"))
    except (OSError, UnicodeDecodeError) as e:
        return Err(InputError(str(path), "Failed to read description", cause=e))

    result = decode(text, path.suffix, str(path)).and_then(
        lambda data: parse_description(data, str(path))
    )

    if result.is_err():
        logger.warning("description_load_failed", path=str(path), error=str(result.unwrap_err()))
    else:
        description = result.unwrap()
        logger.debug(
            "description_loaded",
            path=str(path),
            name=description.name,
            states=len(description.states),
        )

    return result
