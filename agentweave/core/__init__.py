"""Core orchestration components.

This module provides the execution store, agent descriptors, executors and
the registry shared by the guarded and supervisor orchestration layers.
"""

from .agent_protocol import (
    AgenticError,
    AgentInvocationError,
    ArgumentBindingError,
    DirectiveLoopError,
    MemoryAware,
    PlanParsingError,
    StoreOwner,
    UnknownAgentError,
    UnsupportedArgumentTypeError,
)
from .agent_registry import AgentRegistry
from .descriptor import AgentDescriptor, AgentKind, agent
from .executor import AgentExecutor
from .memory import ChatMemoryStore, ConversationState, MessageWindowMemory
from .state import ExecutionStore, InvocationRecord


__all__ = [
    "AgentDescriptor",
    "AgentExecutor",
    "AgentInvocationError",
    "AgentKind",
    "AgentRegistry",
    "AgenticError",
    "ArgumentBindingError",
    "ChatMemoryStore",
    "ConversationState",
    "DirectiveLoopError",
    "ExecutionStore",
    "InvocationRecord",
    "MemoryAware",
    "MessageWindowMemory",
    "PlanParsingError",
    "StoreOwner",
    "UnknownAgentError",
    "UnsupportedArgumentTypeError",
    "agent",
]
