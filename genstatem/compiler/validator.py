"""Structural validation of state machine descriptions.

Validation is exhaustive: every problem in the description is reported in
one pass, so a user can fix them all before recompiling.
"""

from __future__ import annotations

from typing import Iterable

from genstatem.compiler.identifiers import (
    BUILTIN_NAMES,
    EVENT_PREFIX,
    LOCAL_NAMES,
    RESERVED_NAMES,
    STATE_PREFIX,
    derive_constant_name,
    is_identifier,
    is_module_path,
)
from genstatem.models import (
    CallbackKind,
    Description,
    Diagnostic,
    DiagnosticKind,
    State,
    ValidatedDescription,
)
from genstatem.utils.logging import get_logger
from genstatem.utils.result import Err, Ok, Result

logger = get_logger("compiler.validator")


def _index_states(
    description: Description,
    diagnostics: list[Diagnostic],
) -> dict[str, State]:
    states: dict[str, State] = {}

    for state in description.states:
        if state.name in states:
            diagnostics.append(Diagnostic.duplicate_state(state.name))
        else:
            states[state.name] = state

        # Duplicates are still checked so their own problems surface too
        seen_events: set[str] = set()
        for transition in state.transitions:
            if transition.event in seen_events:
                diagnostics.append(
                    Diagnostic.duplicate_event(state.name, transition.event)
                )
            seen_events.add(transition.event)

    return states


def _resolve_references(
    description: Description,
    states: dict[str, State],
    diagnostics: list[Diagnostic],
) -> None:
    if description.init not in states:
        diagnostics.append(Diagnostic.missing_init(description.init))

    for state in description.states:
        for transition in state.transitions:
            if transition.changes_state and transition.target not in states:
                diagnostics.append(
                    Diagnostic.missing_target(
                        state.name, transition.event, transition.target
                    )
                )


def _derive_constants(
    names: Iterable[str],
    prefix: str,
    label: str,
    diagnostics: list[Diagnostic],
) -> dict[str, str]:
    constants: dict[str, str] = {}
    owners: dict[str, str] = {}

    for name in names:
        if name in constants:
            continue

        constant = derive_constant_name(name, prefix)
        owner = owners.get(constant)
        if owner is not None:
            diagnostics.append(Diagnostic(
                kind=DiagnosticKind.IDENTIFIER_COLLISION,
                message=(
                    f"{label.capitalize()} names `{owner}` and `{name}` both "
                    f"derive the constant `{constant}`."
                ),
                state=name if label == "state" else None,
                event=name if label == "event" else None,
            ))
            continue

        owners[constant] = name
        constants[name] = constant

    return constants


def _check_names(
    description: Description,
    generated_names: set[str],
    diagnostics: list[Diagnostic],
) -> None:
    for field_name, value in (("name", description.name), ("iface", description.iface)):
        if field_name == "iface" and not value:
            continue

        if not is_identifier(value):
            diagnostics.append(Diagnostic(
                kind=DiagnosticKind.INVALID_IDENTIFIER,
                message=f"`{value}` is not a valid Python identifier for `{field_name}`.",
            ))
        elif value in generated_names:
            diagnostics.append(Diagnostic(
                kind=DiagnosticKind.RESERVED_NAME,
                message=(
                    f"`{field_name}` `{value}` clashes with a name the "
                    "generated module defines."
                ),
            ))

    if description.iface and description.iface == description.name:
        diagnostics.append(Diagnostic(
            kind=DiagnosticKind.RESERVED_NAME,
            message=f"`iface` `{description.iface}` clashes with the machine class name.",
        ))

    if description.callbacks and not is_module_path(description.callbacks):
        diagnostics.append(Diagnostic(
            kind=DiagnosticKind.INVALID_IDENTIFIER,
            message=f"`{description.callbacks}` is not a valid module path for `callbacks`.",
        ))


def _collect_callbacks(
    description: Description,
    generated_names: set[str],
    diagnostics: list[Diagnostic],
) -> dict[str, CallbackKind]:
    callbacks: dict[str, CallbackKind] = {}
    reported: set[str] = set()

    def use(name: str, kind: CallbackKind, state: str, event: str | None) -> None:
        if not name or name in reported:
            return

        known = callbacks.get(name)
        if known is None:
            if not is_identifier(name):
                diagnostics.append(Diagnostic(
                    kind=DiagnosticKind.INVALID_IDENTIFIER,
                    message=f"Callback `{name}` is not a valid Python identifier.",
                    state=state,
                    event=event,
                ))
                reported.add(name)
                return
            # Free functions live in the module namespace next to generated names
            if not description.uses_iface and (
                name in generated_names
                or name in LOCAL_NAMES
                or name == description.name
            ):
                diagnostics.append(Diagnostic(
                    kind=DiagnosticKind.RESERVED_NAME,
                    message=(
                        f"Callback `{name}` clashes with a name the generated "
                        "module defines."
                    ),
                    state=state,
                    event=event,
                ))
                reported.add(name)
                return
            callbacks[name] = kind
        elif known is not kind:
            diagnostics.append(Diagnostic(
                kind=DiagnosticKind.CALLBACK_CONFLICT,
                message=(
                    f"Callback `{name}` is used both as a condition and as an "
                    "action; conditions return a truth value, actions return nothing."
                ),
                state=state,
                event=event,
            ))
            reported.add(name)

    for state in description.states:
        use(state.entry_action, CallbackKind.ACTION, state.name, None)
        for transition in state.transitions:
            use(transition.condition, CallbackKind.CONDITION, state.name, transition.event)
            use(transition.action, CallbackKind.ACTION, state.name, transition.event)

    return {name: kind for name, kind in callbacks.items() if name not in reported}


def validate(description: Description) -> Result[ValidatedDescription, list[Diagnostic]]:
    """
    Validate a description and build the indexes code generation needs.

    Checks, all reported together:
    - duplicate state names
    - duplicate events within one state
    - unresolved initial state and transition targets
    - derived constant collisions
    - names that are not identifiers or shadow generated names
    - callbacks used with conflicting signatures

    Args:
        description: Description as loaded from the input

    Returns:
        Ok(ValidatedDescription) or Err with every diagnostic found
    """
    diagnostics: list[Diagnostic] = []

    states = _index_states(description, diagnostics)
    _resolve_references(description, states, diagnostics)

    state_constants = _derive_constants(states, STATE_PREFIX, "state", diagnostics)
    event_constants = _derive_constants(
        (t.event for s in description.states for t in s.transitions),
        EVENT_PREFIX,
        "event",
        diagnostics,
    )

    generated_names = (
        set(RESERVED_NAMES)
        | BUILTIN_NAMES
        | set(state_constants.values())
        | set(event_constants.values())
    )
    _check_names(description, generated_names, diagnostics)
    callbacks = _collect_callbacks(description, generated_names, diagnostics)

    if description.iface and description.callbacks:
        logger.warning(
            "callbacks_module_ignored",
            callbacks=description.callbacks,
            iface=description.iface,
        )

    if diagnostics:
        logger.warning(
            "validation_failed",
            errors=len(diagnostics),
            kinds=sorted({d.kind.value for d in diagnostics}),
        )
        return Err(diagnostics)

    logger.debug(
        "validation_passed",
        states=len(state_constants),
        events=len(event_constants),
        callbacks=len(callbacks),
    )

    return Ok(ValidatedDescription(
        description=description,
        states=states,
        state_constants=state_constants,
        event_constants=event_constants,
        callbacks=callbacks,
    ))
