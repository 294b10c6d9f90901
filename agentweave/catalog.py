"""YAML agent catalog.

A catalog file declares chat-model agents without code:

    agents:
      - name: generateStory
        description: Writes a short story about a topic
        prompt: Write a three sentence story about {topic}.
        output_name: story
      - name: editStory
        description: Rewrites a story in a given style
        system: You are a professional editor.
        prompt: Rewrite "{story}" in the {style} style.
        arguments: [story, style]
        output_name: story
"""

import logging
from pathlib import Path

import yaml
from langchain_core.language_models import BaseChatModel
from pydantic import BaseModel, Field

from .agents.llm_agent import LLMAgent


logger = logging.getLogger(__name__)


class AgentDefinition(BaseModel):
    """One agent entry of a catalog file."""

    name: str = Field(..., min_length=1)
    description: str = ""
    prompt: str = Field(..., min_length=1)
    system: str | None = None
    arguments: list[str] | None = None
    output_name: str | None = None

    def build(self, model: BaseChatModel) -> LLMAgent:
        return LLMAgent(
            name=self.name,
            description=self.description,
            user_template=self.prompt,
            model=model,
            arguments=self.arguments,
            system_message=self.system,
            output_name=self.output_name,
        )


class AgentCatalog(BaseModel):
    """Validated content of a catalog file."""

    agents: list[AgentDefinition] = Field(default_factory=list)


def read_agent_catalog(path: str | Path) -> AgentCatalog:
    """Read and validate a catalog file.

    Raises:
        FileNotFoundError: If the file does not exist
        pydantic.ValidationError: If an entry is malformed

    """
    with Path(path).open(encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if isinstance(data, list):
        data = {"agents": data}

    catalog = AgentCatalog.model_validate(data)
    names = [definition.name for definition in catalog.agents]
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        raise ValueError(f"Duplicate agent names in {path}: {', '.join(duplicates)}")

    logger.info(f"Loaded {len(catalog.agents)} agent definition(s) from {path}")
    return catalog


def load_agent_catalog(path: str | Path, model: BaseChatModel) -> list[LLMAgent]:
    """Build the agents declared in a catalog file."""
    return [definition.build(model) for definition in read_agent_catalog(path).agents]
