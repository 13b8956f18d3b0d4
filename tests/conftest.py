# tests/conftest.py

import sys

import pytest

from genstatem.compiler import compile_description
from genstatem.models import Description
from genstatem.utils.logging import configure_logging


@pytest.fixture(autouse=True)
def _logging():
    """Send logs to the stderr pytest is capturing for the current test."""
    configure_logging(level="debug", format_type="json", stream=sys.stderr)


class Collaborator:
    """Records callback invocations and lets a test script their outcome.

    Any public attribute is a callback. Conditions return True unless a
    result is set, and a callback listed in ``errors`` raises instead.
    """

    def __init__(self):
        self.calls = []
        self.results = {}
        self.errors = {}

    def __getattr__(self, name):
        if name.startswith("_"):
            raise AttributeError(name)

        def callback(event, state):
            self.calls.append((name, event, state))
            if name in self.errors:
                raise self.errors[name]
            return self.results.get(name, True)

        return callback

    @property
    def names(self):
        return [call[0] for call in self.calls]


@pytest.fixture
def collaborator():
    return Collaborator()


@pytest.fixture
def running_data():
    """The idle/running machine: entry action on running, nothing else."""
    return {
        "name": "Machine",
        "package": "machine",
        "init": "idle",
        "iface": "Callbacks",
        "states": [
            {"name": "idle", "transitions": [{"event": "start", "to": "running"}]},
            {"name": "running", "on": "on_running"},
        ],
    }


@pytest.fixture
def running_description(running_data):
    return Description.from_dict(running_data)


@pytest.fixture
def player_data():
    """A machine using every transition feature."""
    return {
        "name": "Player",
        "package": "media",
        "init": "stopped",
        "iface": "PlayerCallbacks",
        "states": [
            {
                "name": "stopped",
                "on": "on_stopped",
                "transitions": [
                    {
                        "event": "play",
                        "to": "playing",
                        "condition": "has_media",
                        "action": "load_media",
                    },
                ],
            },
            {
                "name": "playing",
                "on": "on_playing",
                "transitions": [
                    {"event": "pause", "to": "paused", "action": "hold"},
                    {"event": "stop", "to": "stopped"},
                    {"event": "tick", "action": "advance"},
                ],
            },
            {
                "name": "paused",
                "transitions": [
                    {"event": "play", "to": "playing"},
                    {"event": "stop", "to": "stopped", "condition": "can_stop"},
                ],
            },
        ],
    }


@pytest.fixture
def player_description(player_data):
    return Description.from_dict(player_data)


@pytest.fixture
def load_machine():
    """Compile a description and execute the generated module.

    Returns the module namespace. In free-function mode the collaborator's
    callbacks are injected into the namespace before the module runs.
    """

    def _load(description, collaborator=None, config=None):
        result = compile_description(description, config)
        assert result.is_ok(), result
        output = result.unwrap()

        namespace = {"__name__": f"generated_{description.name.lower()}"}
        if collaborator is not None and not description.iface:
            for name in output.validated.callbacks:
                namespace[name] = getattr(collaborator, name)

        exec(compile(output.source, f"<{description.name}>", "exec"), namespace)
        return namespace

    return _load
