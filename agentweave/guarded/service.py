"""Guarded agent service.

A guarded service fronts one entry agent with two hooks. The pre-call hook
can let the entry agent run, redirect the call to another registered agent,
or stop; the post-call hook can return the response, hand the same input to
another agent, or re-evaluate the pre-call hook. Redirects never consume an
additional caller turn.
"""

import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from ..config import get_settings
from ..core.agent_protocol import DirectiveLoopError
from ..core.agent_registry import AgentRegistry
from ..core.executor import AgentExecutor
from ..core.memory import ConversationState, MessageWindowMemory
from ..core.state import ExecutionStore
from .directives import (
    AgentDirective,
    AgentRequest,
    AgentResponse,
    default_on_request,
    default_on_response,
)


logger = logging.getLogger(__name__)

RequestHook = Callable[[AgentRequest], AgentDirective | Awaitable[AgentDirective]]
ResponseHook = Callable[[AgentResponse], AgentDirective | Awaitable[AgentDirective]]


class GuardedAgentService:
    """Entry agent plus interception hooks over one conversation.

    Example:
        def route(request):
            if request.conversation.has_state("expert"):
                return AgentDirective.redirect_to(request.conversation.read_state("expert"))
            return AgentDirective.prompt()

        def remember(response):
            if response.agent_name == "categorize":
                response.conversation.write_state("expert", response.response)
                return AgentDirective.prompt()
            return AgentDirective.terminate()

        router = GuardedAgentService(classifier, agents=[medical, legal],
                                     on_request=route, on_response=remember)
        answer = await router.invoke("I broke my leg")

    """

    def __init__(
        self,
        entry: Any,
        agents: list[Any] | tuple[Any, ...] = (),
        conversation: ConversationState | None = None,
        on_request: RequestHook | None = None,
        on_response: ResponseHook | None = None,
        max_hops: int | None = None,
    ):
        """Initialize the service.

        Args:
            entry: The originally addressed agent
            agents: Agents that hooks may redirect to
            conversation: Conversation shared across calls; a fresh one by default
            on_request: Pre-call hook; always prompts when unset
            on_response: Post-call hook; always terminates when unset
            max_hops: Maximum agent executions per call

        Raises:
            ValueError: If ``entry`` does not declare exactly one agent, or
                ``max_hops`` is negative

        """
        settings = get_settings()
        entry_executors = AgentExecutor.from_agents(entry)
        if len(entry_executors) != 1:
            raise ValueError(
                f"Entry must declare exactly one agent, found {len(entry_executors)}"
            )
        self.entry = entry_executors[0]

        self.registry = AgentRegistry()
        self.registry.register(self.entry)
        if agents:
            self.registry.register_agents(*agents)

        self.conversation = (
            conversation
            if conversation is not None
            else ConversationState(
                MessageWindowMemory(max_messages=settings.memory.max_messages)
            )
        )
        self.on_request = on_request or default_on_request
        self.on_response = on_response or default_on_response
        self.max_hops = settings.guarded.max_hops if max_hops is None else max_hops
        if self.max_hops < 0:
            raise ValueError("max_hops must not be negative")

    async def invoke(self, *inputs: Any, store: ExecutionStore | None = None) -> Any:
        """Handle one caller turn addressed to the entry agent.

        Args:
            inputs: Positional inputs of the entry agent
            store: Store to run against; a fresh one per call by default

        Returns:
            Response of the last agent executed, or None if the pre-call hook
            terminated before any agent ran

        Raises:
            UnknownAgentError: If a hook redirects to an unregistered agent
            DirectiveLoopError: If hooks keep the call going past ``max_hops``

        """
        store = store or ExecutionStore()
        response: Any = None
        evaluate_request = True
        target = self.entry
        hops = 0

        while True:
            if evaluate_request:
                directive = await self._evaluate(
                    self.on_request,
                    AgentRequest(agent_name=self.entry.name, conversation=self.conversation),
                )
                if directive.is_terminate:
                    logger.info(f"Request to {self.entry.name} terminated before execution")
                    return response
                target = (
                    self.registry.require(directive.target)
                    if directive.is_redirect
                    else self.entry
                )
                if directive.is_redirect:
                    logger.info(f"Redirecting request from {self.entry.name} to {target.name}")

            hops += 1
            if hops > self.max_hops:
                raise DirectiveLoopError(self.entry.name, self.max_hops)

            response = await self._run(target, inputs, store)

            directive = await self._evaluate(
                self.on_response,
                AgentResponse(
                    agent_name=target.name,
                    conversation=self.conversation,
                    response=response,
                ),
            )
            if directive.is_terminate:
                return response
            if directive.is_redirect:
                target = self.registry.require(directive.target)
                logger.info(f"Response redirected to {target.name}")
                evaluate_request = False
            else:
                evaluate_request = True

    async def _run(
        self, executor: AgentExecutor, inputs: tuple[Any, ...], store: ExecutionStore
    ) -> Any:
        store.write_all(executor.descriptor.bind_positional(inputs))
        return await executor.invoke(store, memory=self.conversation.memory)

    @staticmethod
    async def _evaluate(hook: Callable[[Any], Any], context: Any) -> AgentDirective:
        directive = hook(context)
        if inspect.isawaitable(directive):
            directive = await directive
        if not isinstance(directive, AgentDirective):
            raise TypeError(
                f"Guard hook returned {type(directive).__name__}, expected AgentDirective"
            )
        return directive
