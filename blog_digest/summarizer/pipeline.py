"""Map-reduce summarization of a set of documents into one summary.

Algorithm:
1. Chunk every document under the map budget
2. Map: summarize each chunk in parallel
3. Collapse: if the summaries exceed the collapse budget, batch and reduce them
   until they fit (or the iteration cap is reached)
4. Reduce the remaining summaries into the final summary

References:
- LangChain map-reduce summarization: token_max, recursive collapse
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from blog_digest.summarizer.chunker import chunk_documents
from blog_digest.summarizer.collapser import Collapser
from blog_digest.summarizer.mapper import Mapper
from blog_digest.summarizer.models import (
    EmptyInputError,
    SummarizerConfig,
    SummaryResult,
    SummaryStage,
)
from blog_digest.summarizer.reducer import Reducer
from blog_digest.summarizer.service import create_service

if TYPE_CHECKING:
    from collections.abc import Sequence

    from blog_digest.summarizer.models import Document
    from blog_digest.summarizer.service import SummarizationService

logger = logging.getLogger(__name__)

__all__ = [
    "SummarizerConfig",
    "summarize",
    "summarize_documents",
]


async def summarize_documents(
    documents: Sequence[Document],
    config: SummarizerConfig,
    *,
    service: SummarizationService | None = None,
) -> SummaryResult:
    """Summarize ``documents`` into a single summary.

    Args:
        documents: Scraped posts, in the order they should be read.
        config: Summarizer configuration (budgets, model, concurrency).
        service: Token counting and completion capability. Defaults to a
            PydanticAI service built from ``config``.

    Returns:
        SummaryResult with the final summary and pipeline metadata.

    Raises:
        EmptyInputError: If there are no documents or all of them are blank.
        TransientServiceError: If any request to the model fails.
        MalformedResponseError: If structured map output fails validation.

    """
    if not documents:
        msg = "No documents to summarize"
        raise EmptyInputError(msg)

    if service is None:
        service = create_service(config)

    chunks = await chunk_documents(list(documents), service, config.map_chunk_budget)
    if not chunks:
        msg = f"All {len(documents)} documents are empty"
        raise EmptyInputError(msg)

    oversized = sum(1 for chunk in chunks if chunk.oversized)
    logger.info(
        "Summarizing %d documents in %d chunks (%d oversized)",
        len(documents),
        len(chunks),
        oversized,
    )

    mapper = Mapper(
        service,
        max_concurrent=config.max_concurrent_requests,
        structured=config.structured_map,
    )
    summaries = await mapper.map(chunks)
    intermediate_summaries = [[s.text for s in summaries]]
    map_count = len(summaries)

    collapse_rounds = 0
    exhausted = False
    total = await service.total_tokens([s.text for s in summaries])
    if total > config.collapse_budget:
        logger.info(
            "Map output has %d tokens (budget %d), collapsing",
            total,
            config.collapse_budget,
        )
        collapser = Collapser(
            service,
            config.collapse_budget,
            max_concurrent=config.max_concurrent_requests,
        )
        result = await collapser.collapse(summaries, config.max_collapse_iterations)
        summaries = result.summaries
        collapse_rounds = result.rounds
        exhausted = result.exhausted
        intermediate_summaries.extend([s.text for s in level] for level in result.history)

    reducer = Reducer(service, max_concurrent=config.max_concurrent_requests)
    final = await reducer.reduce(summaries, stage=SummaryStage.FINAL)
    output_tokens = await service.count_tokens(final.text)

    return SummaryResult(
        summary=final.text,
        document_count=len(documents),
        chunk_count=len(chunks),
        oversized_chunks=oversized,
        map_summaries=map_count,
        collapse_rounds=collapse_rounds,
        iteration_exhausted=exhausted,
        output_tokens=output_tokens,
        intermediate_summaries=intermediate_summaries,
    )


async def summarize(
    documents: Sequence[Document],
    config: SummarizerConfig,
    *,
    service: SummarizationService | None = None,
) -> str:
    """Summarize ``documents`` and return only the final summary text."""
    result = await summarize_documents(documents, config, service=service)
    return result.summary
