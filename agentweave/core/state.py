"""Shared execution state for multi-agent orchestration.

This module defines the execution store shared by every agent taking part in
one top-level execution: a key/value state map plus an append-only ledger of
agent invocations.
"""

import threading
import uuid
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict

from .descriptor import AgentDescriptor


class InvocationRecord(BaseModel):
    """One completed agent call, as recorded in the ledger."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    descriptor: AgentDescriptor
    inputs: tuple[Any, ...]
    response: Any = None

    @property
    def agent_name(self) -> str:
        return self.descriptor.name

    def __str__(self) -> str:
        return (
            f"AgentInvocation(agent_name={self.agent_name}, "
            f"inputs={list(self.inputs)}, response={self.response})"
        )


class ExecutionStore:
    """State map and invocation ledger scoped to one execution.

    A store is created per top-level invocation, or handed over by an outer
    caller so several composed agents read and write the same state. Single
    key writes are last-writer-wins; there is no cross-key atomicity.
    """

    def __init__(self, store_id: str | None = None):
        """Initialize an empty store with an optional identity."""
        self.id = store_id or str(uuid.uuid4())
        self._state: dict[str, Any] = {}
        self._ledger: dict[str, list[InvocationRecord]] = {}
        self._lock = threading.RLock()

    def write(self, key: str, value: Any) -> None:
        with self._lock:
            self._state[key] = value

    def write_all(self, values: Mapping[str, Any]) -> None:
        with self._lock:
            self._state.update(values)

    def read(self, key: str, default: Any = None) -> Any:
        """Read a state value, returning ``default`` when the key is absent."""
        with self._lock:
            return self._state.get(key, default)

    def has(self, key: str) -> bool:
        with self._lock:
            return key in self._state

    def read_all(self) -> dict[str, Any]:
        """Return a snapshot of the whole state map."""
        with self._lock:
            return dict(self._state)

    def record_invocation(
        self, descriptor: AgentDescriptor, inputs: tuple[Any, ...], response: Any
    ) -> InvocationRecord:
        """Append an invocation to the ledger of the descriptor's agent.

        Args:
            descriptor: Descriptor of the invoked agent
            inputs: Positional arguments the agent was called with
            response: Value returned by the agent

        Returns:
            The appended record

        """
        record = InvocationRecord(
            descriptor=descriptor, inputs=tuple(inputs), response=response
        )
        with self._lock:
            self._ledger.setdefault(descriptor.name, []).append(record)
        return record

    def invocations_for(self, agent_name: str) -> list[InvocationRecord]:
        """Return the recorded invocations of an agent in call order."""
        with self._lock:
            return list(self._ledger.get(agent_name, []))

    def invoked_agents(self) -> list[str]:
        """Return the names of all agents with at least one invocation."""
        with self._lock:
            return list(self._ledger)

    def __repr__(self) -> str:
        return f"ExecutionStore(id={self.id!r}, state={self.read_all()!r})"
