"""Directives returned by guard hooks and the context objects they receive."""

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator

from ..core.memory import ConversationState


class DirectiveKind(StrEnum):
    """What a guarded service does after a hook evaluation."""

    PROMPT = "prompt"
    REDIRECT = "redirect"
    TERMINATE = "terminate"


class AgentDirective(BaseModel):
    """Outcome of one guard hook evaluation."""

    model_config = ConfigDict(frozen=True)

    kind: DirectiveKind
    target: str | None = None

    @model_validator(mode="after")
    def check_target(self) -> "AgentDirective":
        """Only redirects name a target, and they always do."""
        if self.kind is DirectiveKind.REDIRECT and not self.target:
            raise ValueError("A redirect directive requires a target agent name")
        if self.kind is not DirectiveKind.REDIRECT and self.target is not None:
            raise ValueError(f"A {self.kind.value} directive takes no target")
        return self

    @classmethod
    def prompt(cls) -> "AgentDirective":
        return cls(kind=DirectiveKind.PROMPT)

    @classmethod
    def redirect_to(cls, agent_name: str) -> "AgentDirective":
        return cls(kind=DirectiveKind.REDIRECT, target=agent_name)

    @classmethod
    def terminate(cls) -> "AgentDirective":
        return cls(kind=DirectiveKind.TERMINATE)

    @property
    def is_prompt(self) -> bool:
        return self.kind is DirectiveKind.PROMPT

    @property
    def is_redirect(self) -> bool:
        return self.kind is DirectiveKind.REDIRECT

    @property
    def is_terminate(self) -> bool:
        return self.kind is DirectiveKind.TERMINATE


class AgentRequest(BaseModel):
    """Context handed to the pre-call hook."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    agent_name: str
    conversation: ConversationState


class AgentResponse(BaseModel):
    """Context handed to the post-call hook."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    agent_name: str
    conversation: ConversationState
    response: Any = None


def default_on_request(request: AgentRequest) -> AgentDirective:
    return AgentDirective.prompt()


def default_on_response(response: AgentResponse) -> AgentDirective:
    return AgentDirective.terminate()
