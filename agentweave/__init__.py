"""agentweave - composition and orchestration of chat-model agents.

Core Components:
- core: execution store, agent descriptors, executors and registry
- guarded: request/response interception with directives
- agents: chat-model agent, planner and scorer
- supervisor: planner-driven supervisor loop
"""

from .agents import AgentInvocation, LLMAgent, PlannerAgent, ResponseScore, ScorerAgent
from .core import (
    AgentDescriptor,
    AgentExecutor,
    AgenticError,
    AgentInvocationError,
    AgentKind,
    AgentRegistry,
    ArgumentBindingError,
    ChatMemoryStore,
    ConversationState,
    DirectiveLoopError,
    ExecutionStore,
    InvocationRecord,
    MessageWindowMemory,
    PlanParsingError,
    UnknownAgentError,
    UnsupportedArgumentTypeError,
    agent,
)
from .guarded import AgentDirective, AgentRequest, AgentResponse, GuardedAgentService
from .supervisor import Supervisor

__version__ = "0.1.0"

__all__ = [
    "AgentDescriptor",
    "AgentDirective",
    "AgentExecutor",
    "AgentInvocation",
    "AgentInvocationError",
    "AgentKind",
    "AgentRegistry",
    "AgentRequest",
    "AgentResponse",
    "AgenticError",
    "ArgumentBindingError",
    "ChatMemoryStore",
    "ConversationState",
    "DirectiveLoopError",
    "ExecutionStore",
    "GuardedAgentService",
    "InvocationRecord",
    "LLMAgent",
    "MessageWindowMemory",
    "PlanParsingError",
    "PlannerAgent",
    "ResponseScore",
    "ScorerAgent",
    "Supervisor",
    "UnknownAgentError",
    "UnsupportedArgumentTypeError",
    "agent",
]
