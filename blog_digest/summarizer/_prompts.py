"""Prompt templates for blog post summarization.

Templates are plain strings; the ``*_prompt`` functions fill them and are the
only thing the map and reduce phases call.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

SUMMARY_SEPARATOR = "\n\n"

# MAP - one request per chunk
MAP_PROMPT = """You are an expert content analyzer. Your task is to extract and summarize the key information from the following document.

Please analyze the content and provide:
1. Main topics and themes
2. Key insights and takeaways
3. Important facts, statistics, or examples
4. Core concepts or ideas presented

Format your summary in the bullet points format.

Summary should be brief and to the point.
{title_line}
Document Content: {content}

Provide a concise but comprehensive summary that captures the essential information from this document. Focus on the most valuable and actionable content.""".strip()

# MAP (structured) - same task, answer as a title/summary record
STRUCTURED_MAP_PROMPT = """You are an expert content analyzer. Extract the key information from the following document.

Return a short descriptive title for the document and a brief bullet point summary
covering its main topics, key insights, important facts and core concepts.
{title_line}
Document Content: {content}""".strip()

# REDUCE - combine a batch of summaries into one
REDUCE_PROMPT = """The following is a set of summaries:
{summaries}
Take these and create one summary as a whole context gathered from the summaries.

Keep it concise and focused on the main points, avoiding unnecessary details. The goal is to distill the essence of the summaries into a single, coherent summary.""".strip()


def _title_line(title: str | None) -> str:
    if title and title.strip():
        return f"\nDocument Title: {title.strip()}"
    return ""


def map_prompt(content: str, title: str | None = None) -> str:
    """Build the map-phase prompt for one chunk."""
    return MAP_PROMPT.format(title_line=_title_line(title), content=content)


def structured_map_prompt(content: str, title: str | None = None) -> str:
    """Build the map-phase prompt asking for a ``MapSummary`` record."""
    return STRUCTURED_MAP_PROMPT.format(title_line=_title_line(title), content=content)


def join_summaries(summaries: Sequence[str]) -> str:
    """Concatenate summary texts in order, separated by a blank line."""
    return SUMMARY_SEPARATOR.join(summaries)


def reduce_prompt(summaries: Sequence[str]) -> str:
    """Build the reduce prompt over an ordered list of summary texts."""
    return REDUCE_PROMPT.format(summaries=join_summaries(summaries))
