"""Agent capability protocols and the orchestration error taxonomy.

This module defines the optional capabilities an agent object may expose to
the orchestration layer, and the exceptions raised when binding, dispatching
or invoking an agent fails.
"""

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable


if TYPE_CHECKING:
    from .memory import MessageWindowMemory
    from .state import ExecutionStore


@runtime_checkable
class StoreOwner(Protocol):
    """An agent that can be rebound to a caller-owned execution store.

    Composed agents (a supervisor used as a sub-agent, for instance) implement
    this so the executor can hand them the store of the enclosing execution.
    """

    @property
    def store(self) -> "ExecutionStore | None":
        """Return the store this agent currently operates on."""
        ...

    def with_store(self, store: "ExecutionStore") -> Any:
        """Return an agent bound to the given store.

        Args:
            store: Store owned by the enclosing execution

        Returns:
            Agent instance sharing the given store

        """
        ...


@runtime_checkable
class MemoryAware(Protocol):
    """An agent that can record one call into an injected conversation memory."""

    def with_memory(self, memory: "MessageWindowMemory") -> Any:
        """Return an agent bound to the given memory.

        The receiver itself is left unchanged.

        Args:
            memory: Memory supplying history and receiving the new turns

        Returns:
            Agent instance recording into ``memory``

        """
        ...



class AgenticError(Exception):
    """Base class for orchestration errors."""


class ArgumentBindingError(AgenticError):
    """Raised when a required agent argument is missing or ambiguous."""

    def __init__(self, agent_name: str, message: str):
        """Initialize with the agent being bound."""
        self.agent_name = agent_name
        super().__init__(f"Cannot bind arguments for agent {agent_name}: {message}")


class UnsupportedArgumentTypeError(ArgumentBindingError):
    """Raised when a state value cannot be coerced to the declared type."""

    def __init__(self, agent_name: str, argument: str, value: Any, target: Any):
        """Initialize with the offending argument and target type."""
        self.argument = argument
        self.value = value
        self.target = target
        target_name = getattr(target, "__name__", str(target))
        super().__init__(
            agent_name,
            f"value {value!r} for argument `{argument}` "
            f"cannot be converted to {target_name}",
        )


class UnknownAgentError(AgenticError):
    """Raised when a planner, hook or caller names an unregistered agent."""

    def __init__(self, agent_name: str, available: list[str] | None = None):
        """Initialize with the requested name and the registered names."""
        self.agent_name = agent_name
        self.available = available or []
        message = f"No agent found with name: {agent_name}"
        if self.available:
            message += f" (registered: {', '.join(self.available)})"
        super().__init__(message)


class AgentInvocationError(AgenticError):
    """Exception raised when the underlying agent callable fails."""

    def __init__(
        self,
        agent_name: str,
        message: str,
        cause: Exception | None = None,
    ):
        """Initialize with agent context."""
        self.agent_name = agent_name
        self.cause = cause
        super().__init__(f"Agent {agent_name} failed: {message}")


class DirectiveLoopError(AgenticError):
    """Raised when guard hooks keep a single call going past the hop limit."""

    def __init__(self, agent_name: str, max_hops: int):
        """Initialize with the entry agent and the exhausted limit."""
        self.agent_name = agent_name
        self.max_hops = max_hops
        super().__init__(
            f"Directives for agent {agent_name} exceeded {max_hops} hops"
        )


class PlanParsingError(AgenticError):
    """Raised when planner or scorer output cannot be decoded."""

    def __init__(self, source: str, output: str, cause: Exception | None = None):
        """Initialize with the raw model output."""
        self.source = source
        self.output = output
        self.cause = cause
        super().__init__(f"Could not decode {source} output: {output[:200]!r}")
