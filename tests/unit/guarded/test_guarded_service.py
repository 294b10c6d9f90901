"""Test suite for guarded/service.py.

Tests the directive loop of a guarded service: plain passthrough, routing by
conversation state, response redirects, prompt re-evaluation, loop limits and conversation memory.
"""

import pytest
from langchain_core.messages import AIMessage

from agentweave.agents.llm_agent import LLMAgent
from agentweave.core.agent_protocol import (
    AgentInvocationError,
    DirectiveLoopError,
    UnknownAgentError,
)
from agentweave.core.descriptor import agent
from agentweave.core.executor import AgentExecutor
from agentweave.core.state import ExecutionStore
from agentweave.guarded.directives import AgentDirective
from agentweave.guarded.service import GuardedAgentService


class Experts:
    """Classifier entry agent and the experts it routes to."""

    def __init__(self):
        self.calls: list[tuple[str, str]] = []

    @agent(description="Classifies a request", output_name="category")
    def categorize(self, request: str) -> str:
        self.calls.append(("categorize", request))
        return "medical" if "leg" in request else "legal"

    @agent(description="Answers medical questions")
    def medical(self, request: str) -> str:
        self.calls.append(("medical", request))
        return f"Medical advice for: {request}"

    @agent(description="Answers legal questions")
    async def legal(self, request: str) -> str:
        self.calls.append(("legal", request))
        return f"Legal advice for: {request}"


def route_to_expert(request):
    """Send every request to the stored expert, once known."""
    if request.conversation.has_state("expert"):
        return AgentDirective.redirect_to(request.conversation.read_state("expert"))
    return AgentDirective.prompt()


def remember_expert(response):
    """Store the classification and re-evaluate the request."""
    if response.agent_name == "categorize":
        response.conversation.write_state("expert", response.response)
        return AgentDirective.prompt()
    return AgentDirective.terminate()


@pytest.fixture
def experts():
    """Experts instance."""
    return Experts()


@pytest.fixture
def router(experts):
    """Guarded classifier routing to the experts."""
    return GuardedAgentService(
        experts.categorize,
        agents=[experts.medical, experts.legal],
        on_request=route_to_expert,
        on_response=remember_expert,
    )


class TestGuardedAgentService:
    """Test the guarded directive loop."""

    @pytest.mark.asyncio
    async def test_default_hooks_run_entry_once(self, experts):
        """Test a service without hooks behaves like the entry agent."""
        service = GuardedAgentService(experts.medical)

        response = await service.invoke("I broke my leg")

        assert response == "Medical advice for: I broke my leg"
        assert experts.calls == [("medical", "I broke my leg")]

    @pytest.mark.asyncio
    async def test_routes_to_expert_in_one_turn(self, router, experts):
        """Test classification and expert answer happen within one call."""
        response = await router.invoke("I broke my leg")

        assert response == "Medical advice for: I broke my leg"
        assert experts.calls == [
            ("categorize", "I broke my leg"),
            ("medical", "I broke my leg"),
        ]
        assert router.conversation.read_state("expert") == "medical"

    @pytest.mark.asyncio
    async def test_later_turns_skip_classification(self, router, experts):
        """Test the remembered route bypasses the entry agent."""
        await router.invoke("I broke my leg")
        experts.calls.clear()

        response = await router.invoke("Is it swollen?")

        assert response == "Medical advice for: Is it swollen?"
        assert experts.calls == [("medical", "Is it swollen?")]

    @pytest.mark.asyncio
    async def test_async_expert(self, router, experts):
        """Test routing to a coroutine agent."""
        response = await router.invoke("My landlord kept my deposit")

        assert response == "Legal advice for: My landlord kept my deposit"

    @pytest.mark.asyncio
    async def test_response_redirect_reuses_inputs(self, experts):
        """Test a response redirect runs the target with the same input."""

        def second_opinion(response):
            if response.agent_name == "medical":
                return AgentDirective.redirect_to("legal")
            return AgentDirective.terminate()

        service = GuardedAgentService(
            experts.medical, agents=[experts.legal], on_response=second_opinion
        )

        response = await service.invoke("I slipped at work")

        assert response == "Legal advice for: I slipped at work"
        assert experts.calls == [
            ("medical", "I slipped at work"),
            ("legal", "I slipped at work"),
        ]

    @pytest.mark.asyncio
    async def test_terminate_before_execution(self, experts):
        """Test a pre-call terminate runs no agent and returns None."""
        service = GuardedAgentService(
            experts.medical, on_request=lambda request: AgentDirective.terminate()
        )

        assert await service.invoke("anything") is None
        assert experts.calls == []

    @pytest.mark.asyncio
    async def test_async_hooks(self, experts):
        """Test hooks may be coroutines."""

        async def redirect(request):
            return AgentDirective.redirect_to("legal")

        service = GuardedAgentService(
            experts.medical, agents=[experts.legal], on_request=redirect
        )

        assert await service.invoke("contract") == "Legal advice for: contract"

    @pytest.mark.asyncio
    async def test_redirect_to_unknown_agent(self, experts):
        """Test redirecting to an unregistered agent fails."""
        service = GuardedAgentService(
            experts.medical, on_request=lambda request: AgentDirective.redirect_to("ghost")
        )

        with pytest.raises(UnknownAgentError):
            await service.invoke("anything")

    @pytest.mark.asyncio
    async def test_endless_prompting_is_bounded(self, experts):
        """Test hooks that never terminate hit the hop limit."""
        service = GuardedAgentService(
            experts.medical,
            on_response=lambda response: AgentDirective.prompt(),
            max_hops=3,
        )

        with pytest.raises(DirectiveLoopError) as exc_info:
            await service.invoke("leg")

        assert exc_info.value.max_hops == 3
        assert len(experts.calls) == 3

    @pytest.mark.asyncio
    async def test_hook_must_return_directive(self, experts):
        """Test hooks returning anything else are rejected."""
        service = GuardedAgentService(experts.medical, on_request=lambda request: "go")

        with pytest.raises(TypeError, match="expected AgentDirective"):
            await service.invoke("leg")

    @pytest.mark.asyncio
    async def test_entry_output_binding_in_store(self, router):
        """Test agent outputs land in the given store."""
        store = ExecutionStore()

        await router.invoke("I broke my leg", store=store)

        assert store.read("category") == "medical"
        assert store.read("request") == "I broke my leg"
        assert [r.agent_name for r in store.invocations_for("medical")] == ["medical"]

    def test_entry_must_declare_one_agent(self, experts):
        """Test objects declaring several agents cannot be an entry."""
        with pytest.raises(ValueError, match="exactly one agent"):
            GuardedAgentService(experts)

    @pytest.mark.asyncio
    async def test_zero_hops_runs_nothing(self, experts):
        """Test an explicit hop limit of zero is honored."""
        service = GuardedAgentService(experts.medical, max_hops=0)

        with pytest.raises(DirectiveLoopError):
            await service.invoke("leg")

        assert experts.calls == []

    def test_negative_hops_rejected(self, experts):
        """Test hop limits cannot be negative."""
        with pytest.raises(ValueError, match="max_hops"):
            GuardedAgentService(experts.medical, max_hops=-1)


class TestGuardedConversationMemory:
    """Test the conversation memory offered to memory-aware agents."""

    @pytest.fixture
    def writer(self, mock_chat_model):
        """Chat-model writer replying from a script."""

        def _factory(*replies) -> LLMAgent:
            return LLMAgent(
                name="writer",
                description="Writes a story",
                user_template="Write about {topic}.",
                model=mock_chat_model(*replies),
            )

        return _factory

    @staticmethod
    async def direct_call(writer: LLMAgent, topic: str) -> list[str]:
        """Invoke the writer outside the service and return the prompt sent."""
        (executor,) = AgentExecutor.from_agents(writer)
        store = ExecutionStore()
        store.write("topic", topic)
        await executor.invoke(store)
        (messages,) = writer.model.ainvoke.call_args.args
        return [m.content for m in messages]

    @pytest.mark.asyncio
    async def test_turns_recorded_in_conversation(self, writer):
        """Test guarded calls share the service conversation as history."""
        agent_obj = writer(AIMessage(content="one"), AIMessage(content="two"))
        service = GuardedAgentService(agent_obj)

        await service.invoke("dragons")
        await service.invoke("wizards")

        (messages,) = agent_obj.model.ainvoke.call_args.args
        assert [m.content for m in messages] == [
            "Write about dragons.",
            "one",
            "Write about wizards.",
        ]
        assert len(service.conversation.messages()) == 4

    @pytest.mark.asyncio
    async def test_agent_unbound_after_guarded_call(self, writer):
        """Test direct calls after a guarded call carry no conversation."""
        agent_obj = writer(AIMessage(content="one"), AIMessage(content="two"))
        service = GuardedAgentService(agent_obj)

        await service.invoke("dragons")

        assert await self.direct_call(agent_obj, "unrelated") == ["Write about unrelated."]
        assert agent_obj.memory is None
        assert len(service.conversation.messages()) == 2

    @pytest.mark.asyncio
    async def test_agent_unbound_after_failed_call(self, writer):
        """Test a failing guarded call leaves no memory on the agent."""
        agent_obj = writer(RuntimeError("model unavailable"), AIMessage(content="two"))
        service = GuardedAgentService(agent_obj)

        with pytest.raises(AgentInvocationError):
            await service.invoke("dragons")

        assert await self.direct_call(agent_obj, "unrelated") == ["Write about unrelated."]
        assert service.conversation.messages() == []
