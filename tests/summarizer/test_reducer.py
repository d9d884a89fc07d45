"""Tests for the reduce phase."""

from __future__ import annotations

import pytest

from blog_digest.summarizer.models import Summary, SummaryStage, TransientServiceError
from blog_digest.summarizer.reducer import Reducer
from tests.mocks.llm import FakeService


class TestReduce:
    """Tests for Reducer.reduce."""

    @pytest.mark.asyncio
    async def test_reduce_of_one_is_identity(self, fake_service: FakeService) -> None:
        """Test that a single summary keeps its text without a request."""
        summary = Summary(text="Only summary.", title="Post")
        result = await Reducer(fake_service).reduce([summary])
        assert result.text == summary.text
        assert result.title == "Post"
        assert result.stage is SummaryStage.COLLAPSED
        assert fake_service.calls == 0

    @pytest.mark.asyncio
    async def test_final_reduce_of_one_is_tagged_final(self, fake_service: FakeService) -> None:
        """Test that a lone summary handed to the final reduce is tagged final."""
        summary = Summary(text="Only summary.")
        result = await Reducer(fake_service).reduce([summary], stage=SummaryStage.FINAL)
        assert result.text == "Only summary."
        assert result.stage is SummaryStage.FINAL
        assert summary.stage is SummaryStage.PARTIAL
        assert fake_service.calls == 0

    @pytest.mark.asyncio
    async def test_prompt_lists_texts_in_order(self, fake_service: FakeService) -> None:
        """Test the prompt joins the batch texts with blank lines, in order."""
        batch = [Summary(text="first"), Summary(text="second"), Summary(text="third")]
        result = await Reducer(fake_service).reduce(batch)

        assert fake_service.calls == 1
        assert "first\n\nsecond\n\nthird" in fake_service.prompts[0]
        assert result.text == "summary " * 9 + "summary"
        assert result.stage is SummaryStage.COLLAPSED

    @pytest.mark.asyncio
    async def test_final_stage_tag(self, fake_service: FakeService) -> None:
        """Test that the caller can tag the final reduce."""
        batch = [Summary(text="a"), Summary(text="b")]
        result = await Reducer(fake_service).reduce(batch, stage=SummaryStage.FINAL)
        assert result.stage is SummaryStage.FINAL

    @pytest.mark.asyncio
    async def test_empty_batch(self, fake_service: FakeService) -> None:
        """Test that an empty batch is a programming error."""
        with pytest.raises(ValueError, match="empty batch"):
            await Reducer(fake_service).reduce([])


class TestReduceAll:
    """Tests for Reducer.reduce_all."""

    @pytest.mark.asyncio
    async def test_one_result_per_batch_in_order(self) -> None:
        """Test that results line up with their batches."""
        service = FakeService(lambda p: "combined " + p.split("summaries:\n", 1)[1].split("\n", 1)[0])
        batches = [
            [Summary(text="a1"), Summary(text="a2")],
            [Summary(text="b1")],
            [Summary(text="c1"), Summary(text="c2")],
        ]
        results = await Reducer(service).reduce_all(batches)
        assert [r.text for r in results] == ["combined a1", "b1", "combined c1"]
        assert service.calls == 2

    @pytest.mark.asyncio
    async def test_failure_fails_whole_wave(self) -> None:
        """Test that one failing batch fails the round."""
        service = FakeService(fail_on="boom")
        batches = [
            [Summary(text="ok"), Summary(text="fine")],
            [Summary(text="boom"), Summary(text="bang")],
        ]
        with pytest.raises(TransientServiceError):
            await Reducer(service).reduce_all(batches)
