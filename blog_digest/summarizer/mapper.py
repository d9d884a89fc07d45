"""Map phase: summarize every chunk concurrently."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from blog_digest.summarizer._prompts import map_prompt, structured_map_prompt
from blog_digest.summarizer._waves import run_wave
from blog_digest.summarizer.models import MapSummary, Summary, SummaryStage

if TYPE_CHECKING:
    from blog_digest.summarizer.models import Chunk
    from blog_digest.summarizer.service import SummarizationService

logger = logging.getLogger(__name__)


class Mapper:
    """Issues one completion per chunk and returns summaries in chunk order."""

    def __init__(
        self,
        service: SummarizationService,
        *,
        max_concurrent: int = 5,
        structured: bool = False,
    ) -> None:
        self.service = service
        self.max_concurrent = max_concurrent
        self.structured = structured

    async def map(self, chunks: list[Chunk]) -> list[Summary]:
        """Summarize each chunk in parallel.

        The result has the same length and order as ``chunks``. If any request
        fails, the error propagates, the pending requests are cancelled and no
        summaries are returned.
        """
        if not chunks:
            return []

        logger.info("Map phase: processing %d chunks", len(chunks))
        return await run_wave(self._summarize_chunk, chunks, self.max_concurrent)

    async def _summarize_chunk(self, chunk: Chunk) -> Summary:
        title = chunk.document.title or None
        if self.structured:
            result = await self.service.complete_structured(
                structured_map_prompt(chunk.text, title),
                MapSummary,
            )
            return Summary(text=result.summary.strip(), stage=SummaryStage.PARTIAL, title=result.title)

        text = await self.service.complete(map_prompt(chunk.text, title))
        return Summary(text=text, stage=SummaryStage.PARTIAL, title=title)
