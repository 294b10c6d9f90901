"""Agent descriptors and argument marshaling.

An ``AgentDescriptor`` is the immutable metadata of one invocable agent. It
is built once at registration time, either explicitly or with the ``agent``
decorator, and knows how to turn the named state of an execution store into
the positional arguments its callable expects.
"""

import inspect
import logging
import types
from collections.abc import Callable, Mapping
from enum import StrEnum
from typing import Any, Union, get_args, get_origin, get_type_hints

from pydantic import BaseModel, ConfigDict, Field

from .agent_protocol import ArgumentBindingError, UnsupportedArgumentTypeError


logger = logging.getLogger(__name__)

DESCRIPTOR_ATTRIBUTE = "__agent_descriptor__"

_TRUE_VALUES = {"true"}
_FALSE_VALUES = {"false"}
_SCALAR_NAMES = {"str": str, "int": int, "float": float, "bool": bool}


class AgentKind(StrEnum):
    """How an agent receives its arguments."""

    SIMPLE = "simple"  # named scalar arguments
    WORKFLOW = "workflow"  # the whole state map as one argument


class AgentDescriptor(BaseModel):
    """Immutable description of one invocable agent."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str = Field(..., min_length=1)
    description: str = ""
    arguments: tuple[str, ...] = ()
    kind: AgentKind = AgentKind.SIMPLE
    output_name: str | None = None
    argument_types: dict[str, Any] = Field(default_factory=dict)
    method_name: str | None = None

    @classmethod
    def simple(
        cls,
        name: str,
        description: str = "",
        arguments: list[str] | tuple[str, ...] = (),
        output_name: str | None = None,
        argument_types: Mapping[str, Any] | None = None,
        method_name: str | None = None,
    ) -> "AgentDescriptor":
        """Build a descriptor for an agent taking named scalar arguments."""
        return cls(
            name=name,
            description=description,
            arguments=tuple(arguments),
            kind=AgentKind.SIMPLE,
            output_name=output_name,
            argument_types=dict(argument_types or {}),
            method_name=method_name,
        )

    @classmethod
    def workflow(
        cls,
        name: str,
        description: str = "",
        output_name: str | None = None,
        method_name: str | None = None,
    ) -> "AgentDescriptor":
        """Build a descriptor for an agent receiving the whole state map."""
        return cls(
            name=name,
            description=description,
            kind=AgentKind.WORKFLOW,
            output_name=output_name,
            method_name=method_name,
        )

    @property
    def is_workflow(self) -> bool:
        return self.kind is AgentKind.WORKFLOW

    def to_card(self) -> str:
        """Render the one-line summary shown to the planner."""
        if self.is_workflow:
            return f"{{{self.name}: {self.description}}}"
        return f"{{{self.name}: {self.description}, [{', '.join(self.arguments)}]}}"

    def to_invocation_arguments(self, state: Mapping[str, Any]) -> tuple[Any, ...]:
        """Marshal named state into the positional arguments of the agent.

        Args:
            state: Current state of the execution store

        Returns:
            Positional arguments for the agent callable

        Raises:
            ArgumentBindingError: If a required argument is missing or ambiguous
            UnsupportedArgumentTypeError: If a text value cannot be coerced

        """
        if self.is_workflow:
            return (dict(state),)

        if len(self.arguments) == 1:
            argument = self.arguments[0]
            if argument in state:
                value = state[argument]
            elif len(state) == 1:
                value = next(iter(state.values()))
                logger.debug(
                    f"Bound sole state entry to argument `{argument}` of {self.name}"
                )
            else:
                raise ArgumentBindingError(
                    self.name,
                    f"expected exactly one state entry for argument `{argument}`, "
                    f"found {len(state)}",
                )
            return (self._coerce(argument, value),)

        values = []
        for argument in self.arguments:
            value = state.get(argument)
            if value is None:
                raise ArgumentBindingError(self.name, f"missing argument `{argument}`")
            values.append(self._coerce(argument, value))
        return tuple(values)

    def bind_positional(self, inputs: tuple[Any, ...]) -> dict[str, Any]:
        """Map caller inputs onto state entries.

        Mapping inputs are merged as named state; the other inputs bind to the
        declared argument names in order. Workflow agents only take mappings.
        """
        merged: dict[str, Any] = {}
        positional = []
        for value in inputs:
            if isinstance(value, Mapping):
                merged.update(value)
            else:
                positional.append(value)
        if not self.is_workflow:
            merged.update(zip(self.arguments, positional, strict=False))
        return merged

    def _coerce(self, argument: str, value: Any) -> Any:
        target = _unwrap_optional(self.argument_types.get(argument))
        if not isinstance(value, str) or target in (None, str, Any):
            return value
        return parse_argument(self.name, argument, value, target)


def parse_argument(agent_name: str, argument: str, value: str, target: Any) -> Any:
    """Parse a text value into a numeric or boolean scalar.

    Raises:
        UnsupportedArgumentTypeError: If the target type is not a supported
            scalar or the text does not parse

    """
    if target is bool:
        normalized = value.strip().lower()
        if normalized in _TRUE_VALUES:
            return True
        if normalized in _FALSE_VALUES:
            return False
        raise UnsupportedArgumentTypeError(agent_name, argument, value, target)

    if target in (int, float):
        try:
            return target(value.strip())
        except ValueError as e:
            raise UnsupportedArgumentTypeError(
                agent_name, argument, value, target
            ) from e

    raise UnsupportedArgumentTypeError(agent_name, argument, value, target)


def _unwrap_optional(target: Any) -> Any:
    origin = get_origin(target)
    if origin is Union or origin is types.UnionType:
        members = [arg for arg in get_args(target) if arg is not type(None)]
        if len(members) == 1:
            return members[0]
        return Any
    return target


def _parameter_names(func: Callable[..., Any]) -> list[str]:
    parameters = inspect.signature(func).parameters.values()
    return [
        p.name
        for p in parameters
        if p.name not in ("self", "cls")
        and p.kind not in (p.VAR_POSITIONAL, p.VAR_KEYWORD)
    ]


def _annotations(func: Callable[..., Any]) -> dict[str, Any]:
    try:
        hints = get_type_hints(func)
    except (NameError, TypeError):
        # Unresolvable forward references: keep what names a known scalar.
        hints = {}
        for key, value in getattr(func, "__annotations__", {}).items():
            resolved = _scalar_from_name(value) if isinstance(value, str) else value
            if resolved is not None:
                hints[key] = resolved
    hints.pop("return", None)
    return hints


def _scalar_from_name(annotation: str) -> Any:
    members = [m.strip() for m in annotation.split("|") if m.strip() != "None"]
    if len(members) == 1:
        return _SCALAR_NAMES.get(members[0])
    return None


def agent(
    name: str | None = None,
    description: str = "",
    arguments: list[str] | None = None,
    output_name: str | None = None,
    argument_types: Mapping[str, Any] | None = None,
    kind: AgentKind = AgentKind.SIMPLE,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Declare a function or method as an agent.

    The descriptor is built once, when the decorated function is defined.
    Argument names default to the function parameters and argument types to
    their annotations; both can be declared explicitly instead.

    Example:
        class StyleScorer:
            @agent(description="Scores a story", output_name="score")
            async def score_style(self, story: str, style: str) -> float: ...

    """

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        agent_name = name or func.__name__
        if kind is AgentKind.WORKFLOW:
            descriptor = AgentDescriptor.workflow(
                agent_name,
                description,
                output_name=output_name,
                method_name=func.__name__,
            )
        else:
            declared = arguments if arguments is not None else _parameter_names(func)
            hints = _annotations(func)
            types_by_name = {arg: hints[arg] for arg in declared if arg in hints}
            types_by_name.update(argument_types or {})
            descriptor = AgentDescriptor.simple(
                agent_name,
                description,
                arguments=declared,
                output_name=output_name,
                argument_types=types_by_name,
                method_name=func.__name__,
            )
        setattr(func, DESCRIPTOR_ATTRIBUTE, descriptor)
        return func

    return decorator


def descriptor_of(obj: Any) -> AgentDescriptor | None:
    """Return the descriptor attached to a decorated function, if any."""
    descriptor = getattr(obj, DESCRIPTOR_ATTRIBUTE, None)
    return descriptor if isinstance(descriptor, AgentDescriptor) else None
