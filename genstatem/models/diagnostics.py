"""Diagnostics reported when a description fails validation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class DiagnosticKind(Enum):
    """Class of validation failure."""

    DUPLICATE_STATE = "duplicate_state"
    DUPLICATE_EVENT = "duplicate_event"
    MISSING_INIT = "missing_init"
    MISSING_TARGET = "missing_target"
    IDENTIFIER_COLLISION = "identifier_collision"
    INVALID_IDENTIFIER = "invalid_identifier"
    RESERVED_NAME = "reserved_name"
    CALLBACK_CONFLICT = "callback_conflict"


@dataclass(frozen=True)
class Diagnostic:
    """
    One problem found in a description.

    Attributes:
        kind: Failure class
        message: Human-readable explanation
        state: Offending state name, when there is one
        event: Offending event name, when there is one
        target: Offending target state name, when there is one
    """

    kind: DiagnosticKind
    message: str
    state: Optional[str] = None
    event: Optional[str] = None
    target: Optional[str] = None

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        data = {"kind": self.kind.value, "message": self.message}
        for key in ("state", "event", "target"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data

    @classmethod
    def duplicate_state(cls, state: str) -> "Diagnostic":
        return cls(
            kind=DiagnosticKind.DUPLICATE_STATE,
            message=f"Duplicate state: {state}",
            state=state,
        )

    @classmethod
    def duplicate_event(cls, state: str, event: str) -> "Diagnostic":
        return cls(
            kind=DiagnosticKind.DUPLICATE_EVENT,
            message=(
                "Can't have two transitions for the same event. "
                f"Duplicate event `{event}` in state `{state}`."
            ),
            state=state,
            event=event,
        )

    @classmethod
    def missing_init(cls, init: str) -> "Diagnostic":
        return cls(
            kind=DiagnosticKind.MISSING_INIT,
            message=f"Init state `{init}` does not exist.",
            target=init,
        )

    @classmethod
    def missing_target(cls, state: str, event: str, target: str) -> "Diagnostic":
        return cls(
            kind=DiagnosticKind.MISSING_TARGET,
            message=(
                f"Target state in transition from state `{state}` to `{target}` "
                f"on event `{event}` does not exist."
            ),
            state=state,
            event=event,
            target=target,
        )
