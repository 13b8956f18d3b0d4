# tests/test_identifiers.py

import keyword

import pytest
from hypothesis import given
from hypothesis import strategies as st

from genstatem.compiler.identifiers import (
    EVENT_PREFIX,
    STATE_PREFIX,
    derive_constant_name,
    is_identifier,
    is_module_path,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("idle", "STATE_IDLE"),
        ("Idle", "STATE_IDLE"),
        ("running", "STATE_RUNNING"),
        ("run-fast", "STATE_RUN_FAST"),
        ("wait for input", "STATE_WAIT_FOR_INPUT"),
        ("2fa", "STATE_2FA"),
        ("état", "STATE_ÉTAT"),
        ("", "STATE_"),
    ],
)
def test_derive_state_constant(raw, expected):
    assert derive_constant_name(raw, STATE_PREFIX) == expected


def test_derive_event_constant():
    assert derive_constant_name("start", EVENT_PREFIX) == "EVENT_START"
    assert derive_constant_name("", EVENT_PREFIX) == "EVENT_"


def test_derivation_is_lossy():
    assert derive_constant_name("run-fast", STATE_PREFIX) == derive_constant_name(
        "run_fast", STATE_PREFIX
    )


def test_compatibility_characters_are_folded():
    # U+FB01 LATIN SMALL LIGATURE FI
    assert derive_constant_name("ﬁle", STATE_PREFIX) == "STATE_FILE"


@given(st.text())
def test_derived_name_is_always_an_identifier(raw):
    name = derive_constant_name(raw, STATE_PREFIX)
    assert name.isidentifier()
    assert not keyword.iskeyword(name)
    assert name.startswith("STATE_")


@given(st.text())
def test_derivation_is_deterministic(raw):
    assert derive_constant_name(raw, EVENT_PREFIX) == derive_constant_name(raw, EVENT_PREFIX)


@given(st.text(alphabet="abcdefghijklmnopqrstuvwxyz_0123456789"))
def test_ascii_names_upper_case_verbatim(raw):
    assert derive_constant_name(raw, STATE_PREFIX) == f"STATE_{raw.upper()}"


def test_is_identifier():
    assert is_identifier("on_running")
    assert is_identifier("état")
    assert not is_identifier("")
    assert not is_identifier("class")
    assert not is_identifier("on-running")
    assert not is_identifier("1st")


def test_is_module_path():
    assert is_module_path("app.callbacks")
    assert is_module_path("callbacks")
    assert not is_module_path("")
    assert not is_module_path("app..callbacks")
    assert not is_module_path("app.class")
