"""Guarded agents: request/response interception with directives."""

from .directives import (
    AgentDirective,
    AgentRequest,
    AgentResponse,
    DirectiveKind,
    default_on_request,
    default_on_response,
)
from .service import GuardedAgentService

__all__ = [
    "AgentDirective",
    "AgentRequest",
    "AgentResponse",
    "DirectiveKind",
    "GuardedAgentService",
    "default_on_request",
    "default_on_response",
]
