"""Deterministic in-memory summarization service for tests."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from blog_digest.summarizer.models import TransientServiceError
from blog_digest.summarizer.service import SummarizationService

if TYPE_CHECKING:
    from collections.abc import Callable


def words(n: int, word: str = "word") -> str:
    """Return ``n`` space separated words (``n`` tokens for the fake meter)."""
    return " ".join([word] * n)


class FakeService(SummarizationService):
    """Counts whitespace separated words as tokens; completions are scripted.

    Args:
        responder: Maps a prompt to the completion text. Defaults to a
            ten-word answer.
        fail_on: If set, any prompt containing this string raises
            TransientServiceError.

    """

    def __init__(
        self,
        responder: Callable[[str], str] | None = None,
        *,
        fail_on: str | None = None,
    ) -> None:
        self.responder = responder or (lambda _prompt: words(10, "summary"))
        self.fail_on = fail_on
        self.prompts: list[str] = []
        self.count_calls = 0
        self.in_flight = 0
        self.max_in_flight = 0

    async def count_tokens(self, text: str) -> int:
        self.count_calls += 1
        return len(text.split())

    async def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0)
            if self.fail_on is not None and self.fail_on in prompt:
                msg = "service unavailable"
                raise TransientServiceError(msg)
            return self.responder(prompt)
        finally:
            self.in_flight -= 1

    @property
    def calls(self) -> int:
        return len(self.prompts)
