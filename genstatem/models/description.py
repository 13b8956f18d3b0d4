"""Data models for state machine descriptions."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


def _fold_keys(data: dict) -> dict:
    """Lower-case the keys of a mapping.

    Descriptions use capitalized field names (``Name``, ``Init``,
    ``States``) as often as lower-case ones, and both must load identically.
    """
    return {str(key).lower(): value for key, value in data.items()}


def _text(value: Any) -> str:
    return "" if value is None else str(value)


@dataclass(frozen=True)
class Transition:
    """
    The response of a state to one event.

    Attributes:
        event: Event name, unique among the transitions of a state
        target: State to move to; empty means the event is handled in place
        action: Callback invoked before the state changes
        condition: Callback deciding whether the transition happens at all
    """

    event: str
    target: str = ""
    action: str = ""
    condition: str = ""

    @property
    def changes_state(self) -> bool:
        """Check if this transition moves the machine to another state."""
        return bool(self.target)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "event": self.event,
            "to": self.target,
            "action": self.action,
            "condition": self.condition,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Transition":
        """Create from dictionary."""
        data = _fold_keys(data)
        return cls(
            event=_text(data.get("event")),
            target=_text(data.get("to")),
            action=_text(data.get("action")),
            condition=_text(data.get("condition")),
        )


@dataclass(frozen=True)
class State:
    """
    A named state and the transitions leaving it.

    Attributes:
        name: Unique state name
        entry_action: Callback invoked whenever the machine enters this state
        transitions: Transitions originating from this state, in input order
    """

    name: str
    entry_action: str = ""
    transitions: tuple[Transition, ...] = ()

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "on": self.entry_action,
            "transitions": [t.to_dict() for t in self.transitions],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "State":
        """Create from dictionary."""
        data = _fold_keys(data)
        return cls(
            name=_text(data.get("name")),
            entry_action=_text(data.get("on")),
            transitions=tuple(
                Transition.from_dict(t) for t in data.get("transitions") or []
            ),
        )


@dataclass(frozen=True)
class Description:
    """
    A declarative state machine, as read from the input file.

    Attributes:
        name: Name of the generated state machine class
        package: Namespace the generated module belongs to (passed through)
        init: Name of the initial state
        iface: Collaborator type on which callbacks are resolved, if any
        callbacks: Module that free-function callbacks are imported from
        states: States in input order
    """

    name: str
    init: str
    package: str = ""
    iface: str = ""
    callbacks: str = ""
    states: tuple[State, ...] = ()

    @property
    def uses_iface(self) -> bool:
        """Check if callbacks resolve against an injected collaborator."""
        return bool(self.iface)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "package": self.package,
            "init": self.init,
            "iface": self.iface,
            "callbacks": self.callbacks,
            "states": [s.to_dict() for s in self.states],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Description":
        """Create from dictionary."""
        data = _fold_keys(data)
        return cls(
            name=_text(data.get("name")),
            init=_text(data.get("init")),
            package=_text(data.get("package")),
            iface=_text(data.get("iface")),
            callbacks=_text(data.get("callbacks")),
            states=tuple(State.from_dict(s) for s in data.get("states") or []),
        )


class CallbackKind(Enum):
    """Signature family of a callback."""

    CONDITION = "condition"  # (event, state) -> bool
    ACTION = "action"  # (event, state) -> None, actions and entry actions


@dataclass(frozen=True)
class ValidatedDescription:
    """
    A description that passed validation, plus the indexes built on the way.

    Only the validator creates these. The indexes live exactly as long as
    the compilation that needs them.

    Attributes:
        description: The validated description
        states: State name to State
        state_constants: State name to derived constant identifier
        event_constants: Event name to derived constant identifier
        callbacks: Callback name to its signature family
    """

    description: Description
    states: dict[str, State] = field(default_factory=dict)
    state_constants: dict[str, str] = field(default_factory=dict)
    event_constants: dict[str, str] = field(default_factory=dict)
    callbacks: dict[str, CallbackKind] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.description.name

    @property
    def events(self) -> list[str]:
        """Distinct event names in first-seen order."""
        return list(self.event_constants)

    def entry_action_of(self, state_name: str) -> Optional[str]:
        """Get the entry action of a state, or None if it has none."""
        state = self.states.get(state_name)
        if state is None or not state.entry_action:
            return None
        return state.entry_action

    def to_dict(self) -> dict:
        """Convert to dictionary, including derived constant names."""
        return {
            **self.description.to_dict(),
            "constants": {
                "states": dict(self.state_constants),
                "events": dict(self.event_constants),
            },
            "callback_kinds": {
                name: kind.value for name, kind in sorted(self.callbacks.items())
            },
        }
