"""Data models for map-reduce summarization of scraped blog posts."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import TYPE_CHECKING, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from collections.abc import Iterator

# Canonical collapse budget. Earlier revisions also used 2000; 1000 is the value
# the collapse loop was tuned against.
DEFAULT_COLLAPSE_BUDGET = 1000
DEFAULT_MAP_CHUNK_BUDGET = 2048  # BOOOOKSCORE's tested default
DEFAULT_MAX_COLLAPSE_ITERATIONS = 5


class SummarizationError(Exception):
    """Base class for all summarization failures."""


class TransientServiceError(SummarizationError):
    """A single completion or token-count call failed (network, rate limit, timeout)."""


class MalformedResponseError(SummarizationError):
    """The model returned output that does not match the expected schema."""


class EmptyInputError(SummarizationError):
    """No documents (or no non-blank content) were supplied."""


@dataclass
class SummarizerConfig:
    """Configuration for summarization operations.

    Example:
        config = SummarizerConfig(
            openai_base_url="http://localhost:11434/v1",
            model="llama3.1:8b",
            collapse_budget=1000,
        )
        summary = await summarize(documents, config)

    """

    openai_base_url: str
    model: str
    api_key: str | None = None
    map_chunk_budget: int = DEFAULT_MAP_CHUNK_BUDGET
    collapse_budget: int = DEFAULT_COLLAPSE_BUDGET
    max_collapse_iterations: int = DEFAULT_MAX_COLLAPSE_ITERATIONS
    max_concurrent_requests: int = 5
    timeout: float = 60.0
    temperature: float = 0.0
    structured_map: bool = False

    def __post_init__(self) -> None:
        """Normalize the base URL and validate the budgets."""
        self.openai_base_url = self.openai_base_url.rstrip("/")
        if self.api_key is None:
            self.api_key = "not-needed"
        if self.map_chunk_budget <= 0:
            msg = f"map_chunk_budget must be positive, got {self.map_chunk_budget}"
            raise ValueError(msg)
        if self.collapse_budget <= 0:
            msg = f"collapse_budget must be positive, got {self.collapse_budget}"
            raise ValueError(msg)
        if self.max_collapse_iterations < 0:
            msg = f"max_collapse_iterations must be >= 0, got {self.max_collapse_iterations}"
            raise ValueError(msg)
        if self.max_concurrent_requests < 1:
            msg = f"max_concurrent_requests must be >= 1, got {self.max_concurrent_requests}"
            raise ValueError(msg)


class Document(BaseModel):
    """A scraped blog post, read-only to the summarizer."""

    model_config = ConfigDict(frozen=True)

    title: str = ""
    content: str
    link: str = ""
    date: str = ""
    source: str = ""
    selector: str = ""
    index: int = 0


class MapSummary(BaseModel):
    """Structured output of the map phase: a title paired with its summary."""

    title: str = Field(..., min_length=1)
    summary: str = Field(..., min_length=1)


class SummaryStage(str, Enum):
    """Where a summary was produced. Informational only."""

    PARTIAL = "partial"
    COLLAPSED = "collapsed"
    FINAL = "final"


@dataclass(frozen=True)
class Chunk:
    """A token-bounded slice of one document's text."""

    text: str
    document: Document = field(repr=False, compare=False)
    ordinal: int
    token_count: int
    oversized: bool = False


@dataclass(frozen=True)
class Summary:
    """A summary produced by the map or reduce phase."""

    text: str
    stage: SummaryStage = SummaryStage.PARTIAL
    title: str | None = None


T = TypeVar("T")


@dataclass
class Batch(Generic[T]):
    """An ordered group of items whose token sum fits the budget.

    A single item larger than the budget forms a batch of its own.
    """

    items: list[T]
    token_count: int

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[T]:
        return iter(self.items)

    def __getitem__(self, index: int) -> T:
        return self.items[index]


@dataclass
class CollapseResult:
    """Outcome of the collapse loop.

    Attributes:
        summaries: The reduced summaries handed to the final reduce.
        rounds: Number of collapse rounds that ran.
        exhausted: True if the loop stopped while still above budget.
        history: Summaries produced by each round, in round order.

    """

    summaries: list[Summary]
    rounds: int = 0
    exhausted: bool = False
    history: list[list[Summary]] = field(default_factory=list)


class SummaryResult(BaseModel):
    """Result of summarizing a set of documents."""

    summary: str = Field(..., description="The final summary text")
    document_count: int = Field(..., ge=0, description="Number of input documents")
    chunk_count: int = Field(..., ge=0, description="Number of chunks sent to the map phase")
    oversized_chunks: int = Field(
        default=0,
        ge=0,
        description="Chunks that could not be split below the map budget",
    )
    map_summaries: int = Field(default=0, ge=0, description="Summaries produced by the map phase")
    collapse_rounds: int = Field(
        default=0,
        ge=0,
        description="Number of collapse rounds (0 = map output already fit)",
    )
    iteration_exhausted: bool = Field(
        default=False,
        description="True if collapsing hit the iteration cap above budget",
    )
    output_tokens: int = Field(default=0, ge=0, description="Token count of the final summary")
    intermediate_summaries: list[list[str]] = Field(
        default_factory=list,
        description="Map output followed by the output of each collapse round",
    )
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="Timestamp when summary was created",
    )
