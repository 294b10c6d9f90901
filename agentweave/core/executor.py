"""Agent executors: a descriptor bound to a concrete callable.

An executor performs exactly one invocation against an execution store:
it marshals state into arguments, calls the agent, writes the output binding
and appends the call to the store's ledger.
"""

import inspect
import logging
from typing import Any

from .agent_protocol import AgenticError, AgentInvocationError, MemoryAware, StoreOwner
from .descriptor import AgentDescriptor, descriptor_of
from .memory import MessageWindowMemory
from .state import ExecutionStore


logger = logging.getLogger(__name__)


class AgentExecutor:
    """Descriptor bound to the agent object that implements it."""

    def __init__(self, descriptor: AgentDescriptor, agent: Any):
        """Bind a descriptor to an agent object or callable."""
        self.descriptor = descriptor
        self.agent = agent

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def is_workflow(self) -> bool:
        return self.descriptor.is_workflow

    @property
    def accepts_memory(self) -> bool:
        """Whether the agent can record its conversation into a memory."""
        return isinstance(self.agent, MemoryAware)

    async def invoke(
        self, store: ExecutionStore, memory: MessageWindowMemory | None = None
    ) -> Any:
        """Invoke the agent against a store.

        Args:
            store: Execution store providing arguments and receiving results
            memory: Conversation memory for this call only; ignored unless the
                agent accepts memory

        Returns:
            The raw response of the agent

        Raises:
            ArgumentBindingError: If the store state cannot be marshaled
            AgentInvocationError: If the agent callable fails

        """
        target = self.agent
        if isinstance(target, StoreOwner):
            target = target.with_store(store)
        if memory is not None and isinstance(target, MemoryAware):
            target = target.with_memory(memory)

        inputs = self.descriptor.to_invocation_arguments(store.read_all())
        logger.debug(f"Invoking agent {self.name} with {len(inputs)} argument(s)")

        try:
            response = self._resolve(target)(*inputs)
            if inspect.isawaitable(response):
                response = await response
        except AgenticError:
            raise
        except Exception as e:
            logger.error(f"Agent {self.name} failed: {e}")
            raise AgentInvocationError(self.name, str(e), e) from e

        if self.descriptor.output_name:
            store.write(self.descriptor.output_name, response)
        store.record_invocation(self.descriptor, inputs, response)
        return response

    def _resolve(self, target: Any) -> Any:
        method_name = self.descriptor.method_name
        return getattr(target, method_name) if method_name else target

    @classmethod
    def from_agents(cls, *agents: Any) -> list["AgentExecutor"]:
        """Create one executor per agent declared by the given objects.

        Each object may be a decorated function or bound method, an object
        exposing a ``descriptor`` attribute, or an instance whose class has
        methods decorated with ``agent``.

        Raises:
            ValueError: If an object declares no agent at all

        """
        executors: list[AgentExecutor] = []
        for obj in agents:
            found = cls._executors_for(obj)
            if not found:
                raise ValueError(f"Object {obj!r} does not declare any agent")
            executors.extend(found)
        return executors

    @classmethod
    def _executors_for(cls, obj: Any) -> list["AgentExecutor"]:
        if isinstance(obj, AgentExecutor):
            return [obj]

        descriptor = descriptor_of(obj)
        if descriptor is not None:
            # A decorated function or bound method is called directly.
            return [cls(descriptor.model_copy(update={"method_name": None}), obj)]

        own = getattr(obj, "descriptor", None)
        if isinstance(own, AgentDescriptor):
            return [cls(own, obj)]

        members: dict[str, AgentDescriptor] = {}
        for klass in reversed(type(obj).__mro__):
            for attr_name, value in vars(klass).items():
                method_descriptor = descriptor_of(value)
                if method_descriptor is not None:
                    members[attr_name] = method_descriptor
        return [cls(d, obj) for d in members.values()]

    def __repr__(self) -> str:
        return f"AgentExecutor(name={self.name!r}, kind={self.descriptor.kind.value})"
