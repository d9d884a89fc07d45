"""Token counting and completion capabilities used by the summarizer.

Every component receives these objects explicitly; there is no module level
model instance.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from functools import lru_cache
from typing import TYPE_CHECKING, TypeVar

import tiktoken
from pydantic import BaseModel, ValidationError

from blog_digest.summarizer.models import (
    MalformedResponseError,
    SummarizerConfig,
    TransientServiceError,
)

if TYPE_CHECKING:
    from pydantic_ai import Agent

logger = logging.getLogger(__name__)

OutputT = TypeVar("OutputT", bound=BaseModel)

SYSTEM_PROMPT = "You are a concise summarizer. Output only the summary, no preamble."


class TokenMeter(ABC):
    """Measures text length in the completion model's tokenization."""

    @abstractmethod
    async def count_tokens(self, text: str) -> int:
        """Return the number of tokens in ``text``."""

    async def total_tokens(self, texts: list[str]) -> int:
        """Count total tokens across all texts."""
        total = 0
        for text in texts:
            total += await self.count_tokens(text)
        return total


class SummarizationService(TokenMeter):
    """A token meter that can also run single-turn completions."""

    @abstractmethod
    async def complete(self, prompt: str) -> str:
        """Run one completion and return the text.

        Raises:
            TransientServiceError: If the request fails or times out.

        """

    async def complete_structured(self, prompt: str, output_type: type[OutputT]) -> OutputT:
        """Run one completion and validate the answer as ``output_type``.

        The default asks for JSON through the plain completion and validates it
        with pydantic.

        Raises:
            TransientServiceError: If the request fails or times out.
            MalformedResponseError: If the answer does not match the schema.

        """
        schema = json.dumps(output_type.model_json_schema())
        text = await self.complete(
            f"{prompt}\n\nRespond only with a JSON object matching this schema:\n{schema}",
        )
        try:
            return output_type.model_validate_json(_strip_code_fence(text))
        except ValidationError as e:
            msg = f"Response does not match {output_type.__name__}: {e}"
            raise MalformedResponseError(msg) from e


def _strip_code_fence(text: str) -> str:
    stripped = text.strip()
    if stripped.startswith("```"):
        stripped = stripped.split("\n", 1)[1] if "\n" in stripped else ""
        stripped = stripped.removesuffix("```").strip()
    return stripped


@lru_cache(maxsize=4)
def _get_encoding(model: str = "gpt-4o-mini") -> tiktoken.Encoding:
    """Get tiktoken encoding for a model, with caching.

    Falls back to cl100k_base for unknown models (covers most modern LLMs).
    """
    try:
        return tiktoken.encoding_for_model(model)
    except KeyError:
        return tiktoken.get_encoding("cl100k_base")


def count_tokens(text: str, model: str = "gpt-4o-mini") -> int:
    """Count tokens using tiktoken."""
    if not text:
        return 0
    # LLM outputs may contain special tokens like <|endoftext|>; count them normally
    return len(_get_encoding(model).encode(text, disallowed_special=()))


class TiktokenMeter(TokenMeter):
    """Token meter backed by tiktoken."""

    def __init__(self, model: str = "gpt-4o-mini") -> None:
        self.model = model

    async def count_tokens(self, text: str) -> int:
        return count_tokens(text, self.model)


class PydanticAIService(TiktokenMeter, SummarizationService):
    """Completion service for any OpenAI-compatible endpoint via PydanticAI."""

    def __init__(self, config: SummarizerConfig) -> None:
        super().__init__(config.model)
        self.config = config

    def _build_agent(self, output_type: type) -> Agent:
        from pydantic_ai import Agent  # noqa: PLC0415
        from pydantic_ai.models.openai import OpenAIChatModel  # noqa: PLC0415
        from pydantic_ai.providers.openai import OpenAIProvider  # noqa: PLC0415
        from pydantic_ai.settings import ModelSettings  # noqa: PLC0415

        provider = OpenAIProvider(
            api_key=self.config.api_key,
            base_url=self.config.openai_base_url,
        )
        model = OpenAIChatModel(
            model_name=self.config.model,
            provider=provider,
            settings=ModelSettings(
                temperature=self.config.temperature,
                timeout=self.config.timeout,
            ),
        )
        return Agent(
            model=model,
            system_prompt=SYSTEM_PROMPT,
            output_type=output_type,
            retries=2,
        )

    async def complete(self, prompt: str) -> str:
        agent = self._build_agent(str)
        try:
            result = await agent.run(prompt)
        except Exception as e:
            msg = f"Completion request failed: {e}"
            raise TransientServiceError(msg) from e
        return result.output.strip()

    async def complete_structured(self, prompt: str, output_type: type[OutputT]) -> OutputT:
        from pydantic_ai.exceptions import UnexpectedModelBehavior  # noqa: PLC0415

        agent = self._build_agent(output_type)
        try:
            result = await agent.run(prompt)
        except UnexpectedModelBehavior as e:
            msg = f"Response does not match {output_type.__name__}: {e}"
            raise MalformedResponseError(msg) from e
        except Exception as e:
            msg = f"Completion request failed: {e}"
            raise TransientServiceError(msg) from e
        return result.output


def create_service(config: SummarizerConfig) -> SummarizationService:
    """Build the default service for ``config``."""
    logger.debug("Using %s at %s", config.model, config.openai_base_url)
    return PydanticAIService(config)
