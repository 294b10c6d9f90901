"""Planner-driven supervisor over a registry of agents.

The supervisor repeatedly asks a planner which registered agent to invoke
next, runs it against the shared execution store, and feeds a compact summary
of the call back into the planner's session memory. The loop ends when the
planner answers "done" (a candidate final answer is arbitrated by a scorer)
or after ``max_invocations`` cycles.

The loop is a small LangGraph workflow:

    START -> plan -> execute -> plan ... -> finalize -> END
                 \\-> score -> finalize
"""

import copy
import logging
import uuid
from collections.abc import Mapping
from typing import Any, TypedDict

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, HumanMessage
from langchain_core.runnables import RunnableConfig
from langgraph.graph import END, START, StateGraph

from .agents.planner import AgentInvocation, PlannerAgent
from .agents.scorer import ScorerAgent
from .config import AgenticSettings, get_settings
from .core.agent_protocol import ArgumentBindingError
from .core.agent_registry import AgentRegistry
from .core.descriptor import AgentDescriptor
from .core.executor import AgentExecutor
from .core.memory import ChatMemoryStore, MessageWindowMemory
from .core.state import ExecutionStore
from .models import create_chat_model


logger = logging.getLogger(__name__)

REQUEST_KEY = "request"


class SupervisorState(TypedDict):
    """State flowing through the supervisor graph for one execution."""

    request: str
    memory_id: str
    last_response: str
    decision: AgentInvocation | None
    cycles: int


class Supervisor:
    """Autonomous multi-agent supervisor.

    The supervisor is itself a workflow agent: it can be registered as a
    sub-agent of another composition, in which case it runs against the
    store of the enclosing execution.
    """

    def __init__(
        self,
        planner: PlannerAgent,
        scorer: ScorerAgent,
        agents: AgentRegistry | list[Any] | tuple[Any, ...],
        max_invocations: int | None = None,
        output_name: str | None = None,
        memory_window: int | None = None,
        name: str = "supervisor",
        description: str = "Supervisor coordinating a set of agents",
        store: ExecutionStore | None = None,
    ):
        """Initialize the supervisor.

        Args:
            planner: Planner choosing the next agent
            scorer: Scorer arbitrating candidate final answers
            agents: Registry, or agents and objects declaring agents, to coordinate
            max_invocations: Maximum planning cycles per execution
            output_name: State key receiving the final response
            memory_window: Size of memories injected into sub-agents
            name: Agent name of the supervisor itself
            description: Agent description of the supervisor itself
            store: Store to operate on; a fresh one per execution by default

        """
        settings = get_settings()
        self.planner = planner
        self.scorer = scorer
        self.registry = (
            agents if isinstance(agents, AgentRegistry) else AgentRegistry(*agents)
        )
        self.max_invocations = (
            settings.supervisor.max_invocations
            if max_invocations is None
            else max_invocations
        )
        if self.max_invocations < 0:
            raise ValueError("max_invocations must not be negative")
        self.output_name = output_name
        self.memory_window = (
            settings.memory.max_messages if memory_window is None else memory_window
        )
        self.descriptor = AgentDescriptor.workflow(name, description, output_name=output_name)
        self._store = store
        self.workflow = self._create_workflow()

        logger.info(
            f"Supervisor '{name}' initialized with {len(self.registry)} agents "
            f"(max {self.max_invocations} invocations)"
        )

    @classmethod
    def from_model(
        cls,
        model: BaseChatModel,
        agents: AgentRegistry | list[Any] | tuple[Any, ...],
        **kwargs: Any,
    ) -> "Supervisor":
        """Build a supervisor whose planner and scorer share one chat model."""
        window = get_settings().supervisor.planner_memory_window
        planner = PlannerAgent(model, ChatMemoryStore(max_messages=window))
        return cls(planner, ScorerAgent(model), agents, **kwargs)

    @classmethod
    def from_settings(
        cls,
        agents: AgentRegistry | list[Any] | tuple[Any, ...],
        settings: AgenticSettings | None = None,
        **kwargs: Any,
    ) -> "Supervisor":
        """Build a supervisor with the configured chat model and limits."""
        settings = settings or get_settings()
        kwargs.setdefault("max_invocations", settings.supervisor.max_invocations)
        kwargs.setdefault("memory_window", settings.memory.max_messages)
        return cls.from_model(create_chat_model(settings), agents, **kwargs)

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def store(self) -> ExecutionStore | None:
        return self._store

    def with_store(self, store: ExecutionStore) -> "Supervisor":
        """Return a supervisor sharing this configuration but bound to ``store``."""
        bound = copy.copy(self)
        bound._store = store
        return bound

    def agents_catalog(self) -> str:
        return ", ".join(self.registry.cards())

    async def __call__(self, state: Mapping[str, Any]) -> str:
        """Run as a workflow agent over a whole state map."""
        store = self._store or ExecutionStore()
        store.write_all(state)
        return await self.run(store)

    async def invoke(self, request: str, store: ExecutionStore | None = None) -> str:
        """Address a request to the supervised agents.

        Args:
            request: The user request
            store: Store to run against; the bound store or a fresh one otherwise

        Returns:
            The best response produced

        """
        store = store or self._store or ExecutionStore()
        store.write(REQUEST_KEY, request)
        return await self.run(store)

    async def run(self, store: ExecutionStore) -> str:
        """Run the planning loop against a store holding the request.

        Raises:
            ArgumentBindingError: If the store holds no request
            UnknownAgentError: If the planner names an unregistered agent
            AgentInvocationError: If an invoked agent fails

        """
        request = store.read(REQUEST_KEY)
        if request is None:
            raise ArgumentBindingError(self.name, f"missing argument `{REQUEST_KEY}`")

        memory_id = str(uuid.uuid4())
        initial_state: SupervisorState = {
            "request": str(request),
            "memory_id": memory_id,
            "last_response": "",
            "decision": None,
            "cycles": 0,
        }
        config: RunnableConfig = {
            "configurable": {"store": store},
            "recursion_limit": 2 * self.max_invocations + 5,
        }

        try:
            final_state = await self.workflow.ainvoke(initial_state, config)
        finally:
            self.planner.evict(memory_id)

        logger.info(
            f"Supervisor '{self.name}' finished after {final_state['cycles']} invocation(s)"
        )
        return final_state["last_response"]

    def _create_workflow(self):
        """Create the LangGraph workflow of the planning loop."""
        workflow = StateGraph(SupervisorState)

        workflow.add_node("plan", self._plan)
        workflow.add_node("execute", self._execute)
        workflow.add_node("score", self._score)
        workflow.add_node("finalize", self._finalize)

        def route_decision(state: SupervisorState) -> str:
            """Route to scoring when the planner is done."""
            decision = state["decision"]
            return "score" if decision is not None and decision.is_done else "execute"

        def should_continue(state: SupervisorState) -> str:
            """Stop planning once the invocation budget is spent."""
            return "finalize" if state["cycles"] >= self.max_invocations else "plan"

        workflow.add_conditional_edges(START, should_continue, ["finalize", "plan"])
        workflow.add_conditional_edges("plan", route_decision, ["score", "execute"])
        workflow.add_conditional_edges("execute", should_continue, ["finalize", "plan"])
        workflow.add_edge("score", "finalize")
        workflow.add_edge("finalize", END)

        return workflow.compile()

    async def _plan(self, state: SupervisorState) -> dict[str, Any]:
        decision = await self.planner.plan(
            state["memory_id"],
            self.agents_catalog(),
            state["request"],
            state["last_response"],
        )
        logger.info(
            f"Planner cycle {state['cycles'] + 1}: {decision.agent_name} "
            f"with {decision.arguments}"
        )
        return {"decision": decision}

    async def _execute(
        self, state: SupervisorState, config: RunnableConfig
    ) -> dict[str, Any]:
        store: ExecutionStore = config["configurable"]["store"]
        decision = state["decision"]
        executor = self.registry.require(decision.agent_name)

        injected = (
            MessageWindowMemory(max_messages=self.memory_window)
            if executor.accepts_memory
            else None
        )

        store.write_all(decision.arguments)
        response = await executor.invoke(store, memory=injected)
        last_response = str(response)

        self._sync_planner_memory(
            state["memory_id"], executor, decision, last_response, store, injected
        )

        return {"last_response": last_response, "cycles": state["cycles"] + 1}

    def _sync_planner_memory(
        self,
        memory_id: str,
        executor: AgentExecutor,
        decision: AgentInvocation,
        last_response: str,
        store: ExecutionStore,
        injected: MessageWindowMemory | None,
    ) -> None:
        """Summarize one sub-agent call into the planner session.

        Only the first user turn and the final reply of an agent that kept a
        conversation are copied; its internal exchanges stay local to it.
        """
        planner_memory = self.planner.memory(memory_id)

        if injected is not None and len(injected) > 0:
            messages = injected.messages()
            first_user = next((m for m in messages if isinstance(m, HumanMessage)), None)
            if first_user is not None:
                planner_memory.add(first_user)
            planner_memory.add(messages[-1])
            logger.debug(f"Copied conversation of {executor.name} into planner memory")
        else:
            planner_memory.add(
                HumanMessage(
                    content=f"{executor.descriptor.description} using {decision.arguments}"
                )
            )
            planner_memory.add(
                AIMessage(content=f"{last_response} with {store.read_all()}")
            )

    async def _score(self, state: SupervisorState) -> dict[str, Any]:
        candidate = state["decision"].final_response
        if candidate is None:
            return {"last_response": state["last_response"]}

        score = await self.scorer.score_responses(
            state["request"], state["last_response"], str(candidate)
        )
        if score.score2 > score.score1:
            logger.info("Planner's final answer replaces the last agent response")
            return {"last_response": str(candidate)}
        return {"last_response": state["last_response"]}

    async def _finalize(
        self, state: SupervisorState, config: RunnableConfig
    ) -> dict[str, Any]:
        store: ExecutionStore = config["configurable"]["store"]
        if self.output_name:
            store.write(self.output_name, state["last_response"])
        return {"decision": None}
