"""Hierarchical map-reduce summarization of scraped blog posts.

Arbitrarily many documents are reduced to one summary while every request
stays within a token budget:
1. Split each document into chunks that fit the map budget
2. Summarize each chunk in parallel (map phase)
3. Batch and reduce the summaries until they fit the collapse budget
4. Reduce what is left into the final summary

Example:
    from blog_digest.summarizer import SummarizerConfig, summarize

    config = SummarizerConfig(
        openai_base_url="http://localhost:11434/v1",
        model="llama3.1:8b",
    )
    summary = await summarize(documents, config)

"""

from blog_digest.summarizer.models import (
    Document,
    EmptyInputError,
    MalformedResponseError,
    SummarizationError,
    SummarizerConfig,
    SummaryResult,
    TransientServiceError,
)
from blog_digest.summarizer.pipeline import summarize, summarize_documents

__all__ = [
    "Document",
    "EmptyInputError",
    "MalformedResponseError",
    "SummarizationError",
    "SummarizerConfig",
    "SummaryResult",
    "TransientServiceError",
    "summarize",
    "summarize_documents",
]
