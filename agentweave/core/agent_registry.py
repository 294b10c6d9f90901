"""Agent registry for name-based agent lookup.

This module manages the executors available to a supervisor or a guarded
service. A registry is built once at composition time and stays stable for
the lifetime of its owner.
"""

import logging
from collections.abc import Iterator
from typing import Any

from .agent_protocol import UnknownAgentError
from .executor import AgentExecutor


logger = logging.getLogger(__name__)


class AgentRegistry:
    """Registry of agent executors keyed by agent name.

    Provides functionality for:
    - Executor registration and deregistration
    - Declared-agent discovery on plain objects
    - Lookup with unknown-agent reporting
    - Planner card rendering
    """

    def __init__(self, *agents: Any):
        """Initialize registry, registering any agents given."""
        self._executors: dict[str, AgentExecutor] = {}
        if agents:
            self.register_agents(*agents)

    def register(self, executor: AgentExecutor) -> None:
        """Register an executor under its descriptor name.

        Args:
            executor: Executor to register

        Raises:
            ValueError: If an agent with the same name is already registered

        """
        if executor.name in self._executors:
            raise ValueError(f"Agent '{executor.name}' is already registered")

        self._executors[executor.name] = executor
        logger.info(
            f"Registered agent '{executor.name}' ({executor.descriptor.kind.value})"
        )

    def register_agents(self, *agents: Any) -> int:
        """Discover the agents declared by the given objects and register them.

        Returns:
            Number of executors registered

        """
        executors = AgentExecutor.from_agents(*agents)
        for executor in executors:
            self.register(executor)
        return len(executors)

    def deregister(self, agent_name: str) -> bool:
        """Deregister an agent.

        Returns:
            True if agent was deregistered, False if not found

        """
        if agent_name not in self._executors:
            return False

        del self._executors[agent_name]
        logger.info(f"Deregistered agent: {agent_name}")
        return True

    def get(self, agent_name: str) -> AgentExecutor | None:
        return self._executors.get(agent_name)

    def require(self, agent_name: str) -> AgentExecutor:
        """Get an executor by name.

        Raises:
            UnknownAgentError: If no agent is registered under the name

        """
        executor = self._executors.get(agent_name)
        if executor is None:
            raise UnknownAgentError(agent_name, self.names())
        return executor

    def names(self) -> list[str]:
        return list(self._executors)

    def list_executors(self) -> list[AgentExecutor]:
        return list(self._executors.values())

    def cards(self) -> list[str]:
        """Return the planner cards of all registered agents."""
        return [executor.descriptor.to_card() for executor in self._executors.values()]

    def __contains__(self, agent_name: object) -> bool:
        return agent_name in self._executors

    def __len__(self) -> int:
        return len(self._executors)

    def __iter__(self) -> Iterator[AgentExecutor]:
        return iter(list(self._executors.values()))
