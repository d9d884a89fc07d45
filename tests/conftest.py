"""Shared test fixtures and configuration."""

from __future__ import annotations

import contextlib
from typing import TYPE_CHECKING

import pytest

from blog_digest.summarizer.models import Document
from tests.mocks.llm import FakeService

if TYPE_CHECKING:
    from collections.abc import Callable


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    """Set default timeout for all tests."""
    for item in items:
        with contextlib.suppress(AttributeError):
            item.add_marker(pytest.mark.timeout(3))


@pytest.fixture
def fake_service() -> FakeService:
    """A service whose tokens are words and whose answers are ten words."""
    return FakeService()


@pytest.fixture
def make_document() -> Callable[..., Document]:
    """Factory for documents with sensible defaults."""

    def _make(content: str, title: str = "Post", index: int = 0, **kwargs: str) -> Document:
        return Document(
            title=title,
            content=content,
            link=kwargs.get("link", f"https://blog.example.com/posts/{index}"),
            date=kwargs.get("date", "2024-01-01"),
            source=kwargs.get("source", "https://blog.example.com"),
            selector=kwargs.get("selector", "article"),
            index=index,
        )

    return _make

