"""Scorer agent arbitrating between two candidate responses."""

import logging

from langchain_core.exceptions import OutputParserException
from langchain_core.language_models import BaseChatModel
from langchain_core.output_parsers import PydanticOutputParser
from langchain_core.prompts import ChatPromptTemplate
from pydantic import BaseModel, Field

from ..core.agent_protocol import PlanParsingError
from .llm_agent import message_text


logger = logging.getLogger(__name__)

SCORER_SYSTEM_PROMPT = """You are a scorer expert that is provided with a user request
and two possible responses. Your role is to score each response with a number between
0.0 and 1.0, based on how well it addresses the user request."""

SCORER_USER_PROMPT = """The user request is: '{request}'.
The first response is: '{response1}'.
The second response is: '{response2}'.

{format_instructions}"""


class ResponseScore(BaseModel):
    """Scores of two candidate responses."""

    score1: float = Field(..., description="Score of the first response")
    score2: float = Field(..., description="Score of the second response")


class ScorerAgent:
    """Chat-model judge comparing two responses to the same request."""

    def __init__(self, model: BaseChatModel):
        self.model = model
        self.parser = PydanticOutputParser(pydantic_object=ResponseScore)
        self.prompt = ChatPromptTemplate.from_messages(
            [("system", SCORER_SYSTEM_PROMPT), ("human", SCORER_USER_PROMPT)]
        )

    async def score_responses(
        self, request: str, response1: str, response2: str
    ) -> ResponseScore:
        """Score two responses to a request.

        Raises:
            PlanParsingError: If the model output does not decode into scores

        """
        messages = self.prompt.format_messages(
            request=request,
            response1=response1,
            response2=response2,
            format_instructions=self.parser.get_format_instructions(),
        )
        reply = await self.model.ainvoke(messages)
        text = message_text(reply)

        try:
            score = self.parser.parse(text)
        except OutputParserException as e:
            logger.warning(f"Scorer returned undecodable scores: {text[:200]}")
            raise PlanParsingError("scorer", text, e) from e

        logger.info(f"Scored responses: {score.score1} vs {score.score2}")
        return score
