"""Chat-model-backed agent implementations.

This package contains the prompt-driven agent used as a composable unit of
work, and the planner and scorer agents the supervisor relies on.
"""

from .llm_agent import LLMAgent, message_text
from .planner import DONE, AgentInvocation, PlannerAgent
from .scorer import ResponseScore, ScorerAgent

__all__ = [
    "DONE",
    "AgentInvocation",
    "LLMAgent",
    "PlannerAgent",
    "ResponseScore",
    "ScorerAgent",
    "message_text",
]
