"""Chat model construction from settings."""

import logging

from langchain_core.language_models import BaseChatModel
from langchain_openai import ChatOpenAI

from .config import AgenticSettings, get_settings


logger = logging.getLogger(__name__)


def create_chat_model(
    settings: AgenticSettings | None = None,
    model: str | None = None,
    temperature: float | None = None,
) -> BaseChatModel:
    """Create the chat model used by planners, scorers and LLM agents.

    Args:
        settings: Settings to read; defaults to the global settings
        model: Model name overriding the configured one
        temperature: Temperature overriding the supervisor temperature

    Returns:
        A ``ChatOpenAI`` client for the configured provider

    """
    settings = settings or get_settings()
    provider = settings.supervisor.provider
    client_config = settings.get_provider_config(provider)

    model_name = model or settings.supervisor.model or client_config["model"]
    logger.info(f"Creating {provider} chat model '{model_name}'")

    return ChatOpenAI(
        model=model_name,
        api_key=client_config["api_key"],
        base_url=str(client_config["base_url"]),
        temperature=(
            settings.supervisor.temperature if temperature is None else temperature
        ),
        timeout=client_config["timeout_seconds"],
        max_retries=client_config["max_retries"],
    )
