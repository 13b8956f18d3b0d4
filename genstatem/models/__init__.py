"""Data models for genstatem."""

from genstatem.models.description import (
    CallbackKind,
    Description,
    State,
    Transition,
    ValidatedDescription,
)
from genstatem.models.diagnostics import Diagnostic, DiagnosticKind

__all__ = [
    # Description models
    "Description",
    "State",
    "Transition",
    "ValidatedDescription",
    "CallbackKind",
    # Diagnostics
    "Diagnostic",
    "DiagnosticKind",
]
