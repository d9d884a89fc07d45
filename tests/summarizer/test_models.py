"""Unit tests for summarizer models."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from blog_digest.summarizer.models import (
    DEFAULT_COLLAPSE_BUDGET,
    Batch,
    Document,
    EmptyInputError,
    MalformedResponseError,
    MapSummary,
    SummarizationError,
    SummarizerConfig,
    SummaryResult,
    TransientServiceError,
)


class TestSummarizerConfig:
    """Tests for SummarizerConfig initialization."""

    def test_basic_init(self) -> None:
        """Test basic initialization with required parameters."""
        config = SummarizerConfig(
            openai_base_url="http://localhost:11434/v1",
            model="llama3.1:8b",
        )
        assert config.openai_base_url == "http://localhost:11434/v1"
        assert config.model == "llama3.1:8b"
        assert config.api_key == "not-needed"

    def test_trailing_slash_stripped(self) -> None:
        """Test that trailing slash is stripped from base URL."""
        config = SummarizerConfig(openai_base_url="http://localhost:8000/v1/", model="gpt-4")
        assert config.openai_base_url == "http://localhost:8000/v1"

    def test_default_collapse_budget(self) -> None:
        """Test the canonical collapse budget default."""
        config = SummarizerConfig(openai_base_url="http://x/v1", model="gpt-4")
        assert config.collapse_budget == DEFAULT_COLLAPSE_BUDGET == 1000
        assert config.map_chunk_budget == 2048
        assert config.max_collapse_iterations == 5

    def test_custom_settings(self) -> None:
        """Test initialization with custom budgets."""
        config = SummarizerConfig(
            openai_base_url="http://x/v1",
            model="gpt-4",
            api_key="sk-test-key",
            map_chunk_budget=500,
            collapse_budget=2000,
            max_collapse_iterations=0,
            timeout=120.0,
        )
        assert config.api_key == "sk-test-key"
        assert config.map_chunk_budget == 500
        assert config.collapse_budget == 2000
        assert config.max_collapse_iterations == 0
        assert config.timeout == 120.0

    @pytest.mark.parametrize(
        ("field", "value", "match"),
        [
            ("map_chunk_budget", 0, "map_chunk_budget"),
            ("collapse_budget", -5, "collapse_budget"),
            ("max_collapse_iterations", -1, "max_collapse_iterations"),
            ("max_concurrent_requests", 0, "max_concurrent_requests"),
        ],
    )
    def test_invalid_values(self, field: str, value: int, match: str) -> None:
        """Test that invalid budgets are rejected."""
        with pytest.raises(ValueError, match=match):
            SummarizerConfig(openai_base_url="http://x/v1", model="gpt-4", **{field: value})


class TestErrors:
    """Tests for the error hierarchy."""

    @pytest.mark.parametrize(
        "error",
        [TransientServiceError, MalformedResponseError, EmptyInputError],
    )
    def test_all_derive_from_summarization_error(self, error: type[Exception]) -> None:
        """Test that callers can catch every failure kind at once."""
        assert issubclass(error, SummarizationError)


class TestDocument:
    """Tests for the Document record."""

    def test_from_scraper_json(self) -> None:
        """Test parsing a post as the scraper writes it."""
        doc = Document.model_validate(
            {
                "title": "Not Just Testing",
                "content": "Body",
                "link": "https://www.aboutjs.dev/en/posts/not-just-testing",
                "date": "2024-05-01",
                "source": "https://www.aboutjs.dev",
                "selector": "article",
                "index": 3,
            },
        )
        assert doc.index == 3
        assert doc.source == "https://www.aboutjs.dev"

    def test_immutable(self) -> None:
        """Test that documents cannot be modified."""
        doc = Document(content="Body")
        with pytest.raises(ValidationError):
            doc.content = "Changed"  # type: ignore[misc]


class TestMapSummary:
    """Tests for the structured map output."""

    def test_requires_both_fields(self) -> None:
        """Test that title and summary are required and non-empty."""
        assert MapSummary(title="T", summary="S").summary == "S"
        with pytest.raises(ValidationError):
            MapSummary(title="T", summary="")
        with pytest.raises(ValidationError):
            MapSummary.model_validate({"summary": "S"})


class TestBatch:
    """Tests for the Batch container."""

    def test_sequence_behaviour(self) -> None:
        """Test len, iteration and indexing."""
        batch = Batch(items=["a", "b"], token_count=2)
        assert len(batch) == 2
        assert list(batch) == ["a", "b"]
        assert batch[1] == "b"


class TestSummaryResult:
    """Tests for SummaryResult model."""

    def test_defaults(self) -> None:
        """Test result defaults for a direct summary."""
        result = SummaryResult(summary="Done.", document_count=1, chunk_count=1)
        assert result.collapse_rounds == 0
        assert not result.iteration_exhausted
        assert result.intermediate_summaries == []

    def test_counts_must_be_non_negative(self) -> None:
        """Test count validation."""
        with pytest.raises(ValueError, match="greater than or equal to 0"):
            SummaryResult(summary="x", document_count=-1, chunk_count=0)

    def test_created_at_default(self) -> None:
        """Test that created_at is automatically set."""
        before = datetime.now(UTC)
        result = SummaryResult(summary="x", document_count=1, chunk_count=1)
        after = datetime.now(UTC)
        assert before <= result.created_at <= after

    def test_json_round_trip_fields(self) -> None:
        """Test the JSON dump used by the CLI."""
        result = SummaryResult(
            summary="x",
            document_count=2,
            chunk_count=3,
            intermediate_summaries=[["a", "b", "c"], ["d"]],
        )
        data = result.model_dump(mode="json")
        assert data["intermediate_summaries"] == [["a", "b", "c"], ["d"]]
        assert isinstance(data["created_at"], str)
