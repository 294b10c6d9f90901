"""Pytest configuration and fixtures for agentweave orchestration tests."""

import json
from typing import Any
from unittest.mock import AsyncMock

import pytest
from langchain_core.messages import AIMessage

from agentweave.config import get_settings
from agentweave.core.descriptor import agent
from agentweave.core.state import ExecutionStore


def chat_reply(content: str) -> AIMessage:
    """Build a chat model reply."""
    return AIMessage(content=content)


def plan(agent_name: str, **arguments: Any) -> AIMessage:
    """Build a planner reply choosing ``agent_name``."""
    return chat_reply(json.dumps({"agent_name": agent_name, "arguments": arguments}))


def scores(score1: float, score2: float) -> AIMessage:
    """Build a scorer reply."""
    return chat_reply(json.dumps({"score1": score1, "score2": score2}))


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Make every test read settings from a clean cache."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def mock_chat_model():
    """Factory for mock chat models replying with the given messages in order."""

    def _factory(*replies: AIMessage) -> AsyncMock:
        model = AsyncMock()
        model.ainvoke.side_effect = list(replies)
        return model

    return _factory


@pytest.fixture
def sample_store():
    """Execution store seeded with story-writing state."""
    store = ExecutionStore("test-store")
    store.write_all({"topic": "dragons", "style": "comedy"})
    return store


class StoryAgents:
    """Plain agents with declared methods used across test modules."""

    def __init__(self):
        self.calls: list[tuple[str, tuple[Any, ...]]] = []

    @agent(description="Writes a story about a topic", output_name="story")
    def generate_story(self, topic: str) -> str:
        self.calls.append(("generate_story", (topic,)))
        return f"A tale of {topic}."

    @agent(description="Scores how well a story fits a style", output_name="score")
    async def score_style(self, story: str, style: str) -> float:
        self.calls.append(("score_style", (story, style)))
        return 0.5

    @agent(description="Rewrites a story in a style", output_name="story")
    async def edit_story(self, story: str, style: str) -> str:
        self.calls.append(("edit_story", (story, style)))
        return f"{story} ({style})"


@pytest.fixture
def story_agents():
    """Story agents instance."""
    return StoryAgents()


@pytest.fixture
def plan_reply():
    """Builder of planner replies."""
    return plan


@pytest.fixture
def score_reply():
    """Builder of scorer replies."""
    return scores
