"""Load scraped blog posts from the scraper's JSON output.

Two layouts are accepted:

- a flat list of posts (``scraped_posts.json``)
- the full list of scraping results (``full_scraping_results.json``), where
  each entry has ``url``, ``posts``, ``success`` and ``error``; failed results
  are logged and skipped
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from blog_digest.summarizer.models import Document

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)


class DocumentLoadError(Exception):
    """Raised when a posts file cannot be read or parsed."""


class ScrapingResult(BaseModel):
    """One scraped URL as written by the scraper."""

    url: str
    posts: list[Document] = Field(default_factory=list)
    success: bool
    error: str | None = None


_POSTS = TypeAdapter(list[Document])
_RESULTS = TypeAdapter(list[ScrapingResult])


def _is_scraping_result(entry: Any) -> bool:
    return isinstance(entry, dict) and "posts" in entry and "success" in entry


def parse_documents(data: Any) -> list[Document]:
    """Turn decoded scraper JSON into documents, keeping input order."""
    if not isinstance(data, list):
        msg = f"Expected a JSON list of posts or scraping results, got {type(data).__name__}"
        raise DocumentLoadError(msg)

    try:
        if data and all(_is_scraping_result(entry) for entry in data):
            results = _RESULTS.validate_python(data)
            documents: list[Document] = []
            for result in results:
                if not result.success:
                    logger.warning("Skipping %s: %s", result.url, result.error or "scraping failed")
                    continue
                documents.extend(result.posts)
            return documents
        return _POSTS.validate_python(data)
    except ValidationError as e:
        msg = f"Invalid posts data: {e}"
        raise DocumentLoadError(msg) from e


def load_documents(path: Path) -> list[Document]:
    """Read and validate a posts JSON file."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        msg = f"Cannot read {path}: {e}"
        raise DocumentLoadError(msg) from e
    except json.JSONDecodeError as e:
        msg = f"{path} is not valid JSON: {e}"
        raise DocumentLoadError(msg) from e

    documents = parse_documents(data)
    logger.info("Loaded %d documents from %s", len(documents), path)
    return documents
