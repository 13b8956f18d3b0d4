"""Python code generation for validated descriptions.

The generator turns a ValidatedDescription into a view model (constants,
branches and ready-made call expressions) and renders it through the
``statemachine.py.j2`` template. Everything order-dependent is sorted here,
so identical input always renders identical text.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from jinja2 import Environment, PackageLoader, StrictUndefined, TemplateError

from genstatem.config.settings import GeneratorConfig
from genstatem.models import CallbackKind, State, ValidatedDescription
from genstatem.utils.logging import get_logger
from genstatem.utils.result import Err, GenerationError, Ok, Result

logger = get_logger("compiler.generator")

TEMPLATE_NAME = "statemachine.py.j2"


@dataclass(frozen=True)
class ConstantView:
    """A module-level State or Event constant."""

    name: str
    literal: str


@dataclass(frozen=True)
class TransitionView:
    """One ``event == EVENT_X`` branch of the event() method."""

    event_constant: str
    condition_call: Optional[str] = None
    action_call: Optional[str] = None
    target_constant: Optional[str] = None
    entry_call: Optional[str] = None


@dataclass(frozen=True)
class StateView:
    """One ``self._state == STATE_X`` branch of the event() method."""

    constant: str
    transitions: list[TransitionView] = field(default_factory=list)


@dataclass(frozen=True)
class EntryView:
    """One branch of set_state() invoking an entry action."""

    constant: str
    call: str


@dataclass(frozen=True)
class MethodView:
    """A method of the generated collaborator Protocol."""

    name: str
    returns: str


class CodeGenerator:
    """
    Renders Python state machine modules.

    Callbacks are emitted as direct calls: ``self._iface.name(event, self._state)``
    when the description names an interface type, ``name(event, self._state)``
    otherwise.
    """

    def __init__(self, config: Optional[GeneratorConfig] = None) -> None:
        """
        Initialize the generator.

        Args:
            config: Generator settings (defaults apply if omitted)
        """
        self.config = config or GeneratorConfig()

        # Python source, not markup: no autoescaping
        self.env = Environment(
            loader=PackageLoader("genstatem", "templates"),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )

    def generate(
        self,
        validated: ValidatedDescription,
        package: str = "",
    ) -> Result[str, GenerationError]:
        """
        Generate the state machine module.

        Args:
            validated: Description that passed validation
            package: Package target recorded in the module header

        Returns:
            Result with the module source or a render error
        """
        context = self.build_context(validated, package)

        try:
            template = self.env.get_template(TEMPLATE_NAME)
            source = template.render(**context)
        except TemplateError as e:
            logger.error("render_failed", template=TEMPLATE_NAME, error=str(e))
            return Err(GenerationError(
                phase="render",
                message=f"Failed to render {TEMPLATE_NAME}",
                cause=e,
            ))

        logger.debug(
            "module_rendered",
            machine=validated.name,
            lines=source.count("\n"),
            order=self.config.order,
        )
        return Ok(source)

    def build_context(
        self,
        validated: ValidatedDescription,
        package: str = "",
    ) -> dict[str, Any]:
        """
        Build the template context for a description.

        Args:
            validated: Description that passed validation
            package: Package target recorded in the module header

        Returns:
            Template variables
        """
        description = validated.description
        free_callbacks = (
            [] if description.uses_iface else self._ordered(validated.callbacks)
        )

        return {
            "header": self.config.header,
            "package": " ".join(package.split()),
            "name": description.name,
            "iface": description.iface,
            "callbacks_module": description.callbacks,
            "imports": free_callbacks if description.callbacks else [],
            "free_callbacks": free_callbacks,
            "state_constants": [
                ConstantView(name=validated.state_constants[s], literal=repr(s))
                for s in self._ordered(validated.state_constants)
            ],
            "event_constants": [
                ConstantView(name=validated.event_constants[e], literal=repr(e))
                for e in self._ordered(validated.event_constants)
            ],
            "protocol_methods": [
                MethodView(
                    name=name,
                    returns="bool" if validated.callbacks[name] is CallbackKind.CONDITION else "None",
                )
                for name in sorted(validated.callbacks)
            ] if description.uses_iface else [],
            "init_constant": validated.state_constants[description.init],
            "entry_states": self._entry_views(validated),
            "states": self._state_views(validated),
        }

    def _ordered(self, names: Iterable[str]) -> list[str]:
        names = list(names)
        if self.config.order == "name":
            return sorted(names)
        return names

    def _call(self, validated: ValidatedDescription, callback: str) -> str:
        if validated.description.uses_iface:
            return f"self._iface.{callback}(event, self._state)"
        return f"{callback}(event, self._state)"

    def _entry_views(self, validated: ValidatedDescription) -> list[EntryView]:
        views = []
        for name in self._ordered(validated.states):
            entry_action = validated.entry_action_of(name)
            if entry_action:
                views.append(EntryView(
                    constant=validated.state_constants[name],
                    call=self._call(validated, entry_action),
                ))
        return views

    def _state_views(self, validated: ValidatedDescription) -> list[StateView]:
        views = []
        for name in self._ordered(validated.states):
            state = validated.states[name]
            if not state.transitions:
                continue
            views.append(StateView(
                constant=validated.state_constants[name],
                transitions=self._transition_views(validated, state),
            ))
        return views

    def _transition_views(
        self,
        validated: ValidatedDescription,
        state: State,
    ) -> list[TransitionView]:
        by_event = {t.event: t for t in state.transitions}
        views = []

        for event in self._ordered(by_event):
            transition = by_event[event]
            entry_action = (
                validated.entry_action_of(transition.target)
                if transition.changes_state
                else None
            )
            views.append(TransitionView(
                event_constant=validated.event_constants[event],
                condition_call=(
                    self._call(validated, transition.condition)
                    if transition.condition
                    else None
                ),
                action_call=(
                    self._call(validated, transition.action)
                    if transition.action
                    else None
                ),
                target_constant=(
                    validated.state_constants[transition.target]
                    if transition.changes_state
                    else None
                ),
                entry_call=self._call(validated, entry_action) if entry_action else None,
            ))

        return views
