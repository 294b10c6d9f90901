"""Planner agent choosing the next agent of a supervised execution.

The planner keeps one window memory per planning session, so the decisions
and summarized results of earlier cycles are part of every new plan request.
"""

import logging
from typing import Any

from langchain_core.exceptions import OutputParserException
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage
from langchain_core.output_parsers import PydanticOutputParser
from langchain_core.prompts import ChatPromptTemplate, MessagesPlaceholder
from pydantic import BaseModel, Field

from ..core.agent_protocol import PlanParsingError
from ..core.memory import ChatMemoryStore, MessageWindowMemory
from .llm_agent import message_text


logger = logging.getLogger(__name__)

DONE = "done"

PLANNER_SYSTEM_PROMPT = """You are a planner expert that is provided with a set of agents.
You know nothing about any domain, don't make any assumptions about the user request:
the only thing you can do is rely on the provided agents.

Your role is to analyze the user request and decide which one of the provided agents
to call next to address it. You return an agent invocation made of the name of the
agent and the arguments to pass to it. Take into account the invocations you already
decided and the responses they produced.

When no further agent invocation is needed, return an invocation with agent name
'done' and put the final answer to the user request in the 'response' argument."""

PLANNER_USER_PROMPT = """The list of available agents is: {agents}.

The user request is: '{request}'.
The last received response is: '{last_response}'.

{format_instructions}"""


class AgentInvocation(BaseModel):
    """A planner decision: the agent to call and its arguments."""

    agent_name: str = Field(..., description="Name of the agent to invoke, or 'done'")
    arguments: dict[str, Any] = Field(
        default_factory=dict, description="Arguments to pass to the agent"
    )

    @property
    def is_done(self) -> bool:
        return self.agent_name.strip().lower() == DONE

    @property
    def final_response(self) -> Any:
        return self.arguments.get("response")


class PlannerAgent:
    """Chat-model planner with per-session memory."""

    def __init__(
        self,
        model: BaseChatModel,
        memory_store: ChatMemoryStore | None = None,
        memory_window: int = 10,
    ):
        """Initialize planner with a chat model and a session memory store."""
        self.model = model
        self.memory_store = (
            memory_store
            if memory_store is not None
            else ChatMemoryStore(max_messages=memory_window)
        )
        self.parser = PydanticOutputParser(pydantic_object=AgentInvocation)
        self.prompt = ChatPromptTemplate.from_messages(
            [
                ("system", PLANNER_SYSTEM_PROMPT),
                MessagesPlaceholder("history", optional=True),
                ("human", PLANNER_USER_PROMPT),
            ]
        )

    def memory(self, memory_id: Any) -> MessageWindowMemory:
        """Return the session memory of a planning session."""
        return self.memory_store.get(memory_id)

    def evict(self, memory_id: Any) -> bool:
        return self.memory_store.evict(memory_id)

    async def plan(
        self, memory_id: Any, agents: str, request: str, last_response: str
    ) -> AgentInvocation:
        """Ask the model for the next agent invocation.

        Args:
            memory_id: Planning session id
            agents: Cards of the available agents
            request: Original user request
            last_response: Response of the last invoked agent

        Returns:
            The decoded planner decision

        Raises:
            PlanParsingError: If the model output is not a valid invocation

        """
        memory = self.memory(memory_id)
        messages = self.prompt.format_messages(
            history=memory.messages(),
            agents=agents,
            request=request,
            last_response=last_response,
            format_instructions=self.parser.get_format_instructions(),
        )

        reply = await self.model.ainvoke(messages)
        text = message_text(reply)

        memory.add(messages[-1])
        memory.add(AIMessage(content=text))

        try:
            return self.parser.parse(text)
        except OutputParserException as e:
            logger.warning(f"Planner returned an undecodable plan: {text[:200]}")
            raise PlanParsingError("planner", text, e) from e
