"""Reduce phase: combine a batch of summaries into one."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import TYPE_CHECKING

from blog_digest.summarizer._prompts import reduce_prompt
from blog_digest.summarizer._waves import run_wave
from blog_digest.summarizer.models import Summary, SummaryStage

if TYPE_CHECKING:
    from collections.abc import Sequence

    from blog_digest.summarizer.service import SummarizationService

logger = logging.getLogger(__name__)


class Reducer:
    """Combines summaries through the completion service."""

    def __init__(self, service: SummarizationService, *, max_concurrent: int = 5) -> None:
        self.service = service
        self.max_concurrent = max_concurrent

    async def reduce(
        self,
        batch: Sequence[Summary],
        stage: SummaryStage = SummaryStage.COLLAPSED,
    ) -> Summary:
        """Combine the batch, in order, into a single summary.

        A batch of one keeps its text and is only re-tagged with ``stage``;
        the service is not called.
        """
        if not batch:
            msg = "Cannot reduce an empty batch"
            raise ValueError(msg)
        if len(batch) == 1:
            return replace(batch[0], stage=stage)

        text = await self.service.complete(reduce_prompt([s.text for s in batch]))
        return Summary(text=text, stage=stage)

    async def reduce_all(self, batches: Sequence[Sequence[Summary]]) -> list[Summary]:
        """Reduce every batch in one concurrent wave, keeping batch order."""
        return await run_wave(self.reduce, batches, self.max_concurrent)
