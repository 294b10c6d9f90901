"""Chat-model-backed agent.

An ``LLMAgent`` renders a prompt template with its named arguments, sends it
to a chat model and returns the text of the reply. It accepts an injected
conversation memory, which supplies prior turns as history and receives the
new user and assistant turns.
"""

import copy
import logging
import string
from collections.abc import Mapping
from typing import Any

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage
from langchain_core.prompts import ChatPromptTemplate, MessagesPlaceholder

from ..core.descriptor import AgentDescriptor
from ..core.memory import MessageWindowMemory


logger = logging.getLogger(__name__)


def message_text(message: BaseMessage | str) -> str:
    """Return the plain text of a chat model reply."""
    if isinstance(message, str):
        return message
    content = message.content
    if isinstance(content, str):
        return content
    parts = []
    for part in content:
        if isinstance(part, str):
            parts.append(part)
        elif isinstance(part, dict) and part.get("type") == "text":
            parts.append(part.get("text", ""))
    return "".join(parts)


def template_variables(template: str) -> list[str]:
    """Return the variables of an f-string template in order of appearance."""
    names: list[str] = []
    for _, field_name, _, _ in string.Formatter().parse(template):
        if field_name and field_name not in names:
            names.append(field_name)
    return names


class LLMAgent:
    """Agent whose work is one chat model call.

    Example:
        writer = LLMAgent(
            name="generateStory",
            description="Writes a short story about a topic",
            user_template="Write a three sentence story about {topic}.",
            model=chat_model,
            output_name="story",
        )

    """

    def __init__(
        self,
        name: str,
        description: str,
        user_template: str,
        model: BaseChatModel,
        arguments: list[str] | None = None,
        system_message: str | None = None,
        output_name: str | None = None,
        argument_types: Mapping[str, Any] | None = None,
    ):
        """Initialize the agent and build its descriptor."""
        self.model = model
        self.user_template = user_template
        self.system_message = system_message

        messages: list[Any] = []
        if system_message:
            messages.append(("system", system_message))
        messages.append(MessagesPlaceholder("history", optional=True))
        messages.append(("human", user_template))
        self.prompt = ChatPromptTemplate.from_messages(messages)

        self.descriptor = AgentDescriptor.simple(
            name,
            description,
            arguments=(
                arguments if arguments is not None else template_variables(user_template)
            ),
            output_name=output_name,
            argument_types=argument_types,
        )
        self._memory: MessageWindowMemory | None = None

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def memory(self) -> MessageWindowMemory | None:
        return self._memory

    def with_memory(self, memory: MessageWindowMemory) -> "LLMAgent":
        """Return a copy of this agent recording into ``memory``."""
        bound = copy.copy(self)
        bound._memory = memory
        return bound

    async def __call__(self, *args: Any) -> str:
        """Render the prompt with positional arguments and query the model."""
        memory = self._memory
        variables = dict(zip(self.descriptor.arguments, args, strict=False))
        history = memory.messages() if memory is not None else []
        messages = self.prompt.format_messages(history=history, **variables)

        logger.debug(f"LLMAgent {self.name} sending {len(messages)} message(s)")
        reply = await self.model.ainvoke(messages)
        text = message_text(reply)

        if memory is not None:
            memory.add(messages[-1])
            memory.add(AIMessage(content=text))
        return text

    def __repr__(self) -> str:
        return f"LLMAgent(name={self.name!r})"
