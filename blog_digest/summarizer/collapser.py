"""Collapse phase: batch and reduce summaries until they fit the budget.

Each round packs the current summaries into batches that fit the collapse
budget and reduces every batch in one concurrent wave. The loop ends as soon
as the combined output fits, or when the iteration cap is reached. Hitting the
cap is tolerated: the best-effort summaries are returned flagged as exhausted.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from blog_digest.summarizer.batcher import pack
from blog_digest.summarizer.models import CollapseResult
from blog_digest.summarizer.reducer import Reducer

if TYPE_CHECKING:
    from blog_digest.summarizer.models import Summary
    from blog_digest.summarizer.service import SummarizationService

logger = logging.getLogger(__name__)


class Collapser:
    """Repeatedly batches and reduces summaries under ``budget`` tokens."""

    def __init__(
        self,
        service: SummarizationService,
        budget: int,
        *,
        max_concurrent: int = 5,
    ) -> None:
        if budget <= 0:
            msg = f"budget must be positive, got {budget}"
            raise ValueError(msg)
        self.service = service
        self.budget = budget
        self.reducer = Reducer(service, max_concurrent=max_concurrent)

    async def collapse(self, summaries: list[Summary], max_iterations: int) -> CollapseResult:
        """Run collapse rounds until the summaries fit or the cap is hit.

        At least one round runs for non-empty input, and at most
        ``max_iterations + 1``.
        """
        if max_iterations < 0:
            msg = f"max_iterations must be >= 0, got {max_iterations}"
            raise ValueError(msg)
        if not summaries:
            return CollapseResult(summaries=[])

        history: list[list[Summary]] = []
        iteration = 0
        while True:
            batches = await pack(summaries, self.budget, self.service)
            logger.info(
                "Collapse round %d: reducing %d summaries in %d batches",
                iteration + 1,
                len(summaries),
                len(batches),
            )
            summaries = await self.reducer.reduce_all(batches)
            history.append(summaries)

            total = await self.service.total_tokens([s.text for s in summaries])
            if total <= self.budget:
                logger.info("Collapsed to %d summaries (%d tokens)", len(summaries), total)
                return CollapseResult(summaries=summaries, rounds=iteration + 1, history=history)

            if iteration >= max_iterations:
                logger.warning(
                    "Hit max collapse iterations %d with %d tokens left (budget %d)",
                    max_iterations,
                    total,
                    self.budget,
                )
                return CollapseResult(
                    summaries=summaries,
                    rounds=iteration + 1,
                    exhausted=True,
                    history=history,
                )

            if all(len(batch) == 1 for batch in batches):
                # Every summary is too large to pair with a neighbour; further
                # rounds would reproduce the same summaries.
                logger.warning(
                    "Cannot collapse %d summaries (%d tokens) below budget %d",
                    len(summaries),
                    total,
                    self.budget,
                )
                return CollapseResult(
                    summaries=summaries,
                    rounds=iteration + 1,
                    exhausted=True,
                    history=history,
                )

            logger.info("Token count %d exceeds %d, collapsing further", total, self.budget)
            iteration += 1
