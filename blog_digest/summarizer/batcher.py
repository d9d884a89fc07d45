"""Greedy, order-preserving packing of text items into token-bounded batches."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol, TypeVar

from blog_digest.summarizer.models import Batch

if TYPE_CHECKING:
    from collections.abc import Sequence

    from blog_digest.summarizer.service import TokenMeter

logger = logging.getLogger(__name__)


class HasText(Protocol):
    """Anything carrying a ``text`` attribute (chunks, summaries)."""

    @property
    def text(self) -> str: ...


ItemT = TypeVar("ItemT", bound=HasText)


async def pack(
    items: Sequence[ItemT],
    budget: int,
    meter: TokenMeter,
) -> list[Batch[ItemT]]:
    """Partition ``items`` into the fewest left-to-right groups that fit ``budget``.

    An item is appended to the running group unless that would push the group
    over budget, in which case the group is closed and the item starts a new
    one. An item larger than the budget is never split here: it ends up alone
    in its own batch.
    """
    if budget <= 0:
        msg = f"budget must be positive, got {budget}"
        raise ValueError(msg)

    batches: list[Batch[ItemT]] = []
    current: list[ItemT] = []
    current_tokens = 0

    for item in items:
        item_tokens = await meter.count_tokens(item.text)
        if item_tokens > budget:
            logger.warning(
                "Item of %d tokens exceeds batch budget %d; packing it alone",
                item_tokens,
                budget,
            )

        if current_tokens + item_tokens > budget and current:
            batches.append(Batch(items=current, token_count=current_tokens))
            current = [item]
            current_tokens = item_tokens
        else:
            current.append(item)
            current_tokens += item_tokens

    if current:
        batches.append(Batch(items=current, token_count=current_tokens))

    logger.debug("Packed %d items into %d batches (budget %d)", len(items), len(batches), budget)
    return batches
