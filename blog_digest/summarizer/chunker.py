"""Split documents into token-bounded chunks along semantic boundaries.

Text is split at decreasing granularity (paragraphs, sentences, words) and only
pieces that still exceed the budget are split further. A word that is still
too large (a long URL, or a run of text without spaces such as Chinese or
Japanese prose) is cut into character windows of at most ``budget`` tokens.
Adjacent pieces are then merged back together while the joined text fits, so
chunks are as large as the budget allows. Only a single character larger than
the budget is emitted as an oversized chunk.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, NamedTuple

from blog_digest.summarizer.models import Chunk, Document

if TYPE_CHECKING:
    from collections.abc import Callable

    from blog_digest.summarizer.service import TokenMeter

logger = logging.getLogger(__name__)


def split_paragraphs(text: str) -> list[str]:
    """Split text on blank lines."""
    paragraphs = re.split(r"\n\s*\n", text)
    return [p.strip() for p in paragraphs if p.strip()]


def split_sentences(text: str) -> list[str]:
    """Split text into sentences, preserving common abbreviations."""
    # Matches period/question/exclamation followed by space and capital letter
    sentences = re.split(r"(?<=[.!?])\s+(?=[A-Z])", text)
    return [s.strip() for s in sentences if s.strip()]


def split_words(text: str) -> list[str]:
    """Split text on whitespace."""
    return text.split()


class _Level(NamedTuple):
    name: str
    split: Callable[[str], list[str]]
    joiner: str


_LEVELS: tuple[_Level, ...] = (
    _Level("paragraph", split_paragraphs, "\n\n"),
    _Level("sentence", split_sentences, " "),
    _Level("word", split_words, " "),
)


class _Piece(NamedTuple):
    text: str
    tokens: int
    # Separator placed before this piece when it is joined to the previous one
    lead: str = ""


class Chunker:
    """Splits one document at a time into ordered chunks within ``budget`` tokens."""

    def __init__(self, meter: TokenMeter, budget: int) -> None:
        if budget <= 0:
            msg = f"budget must be positive, got {budget}"
            raise ValueError(msg)
        self.meter = meter
        self.budget = budget

    async def split(self, document: Document) -> list[Chunk]:
        """Return the document's chunks in text order.

        Blank documents produce no chunks.
        """
        text = document.content.strip()
        if not text:
            return []

        tokens = await self.meter.count_tokens(text)
        if tokens <= self.budget:
            return [Chunk(text=text, document=document, ordinal=0, token_count=tokens)]

        pieces = await self._split_piece(_Piece(text, tokens), level=0)
        chunks = []
        for ordinal, piece in enumerate(pieces):
            oversized = piece.tokens > self.budget
            if oversized:
                logger.warning(
                    "Chunk %d of %r has %d tokens (budget %d) and cannot be split further",
                    ordinal,
                    document.title or document.link,
                    piece.tokens,
                    self.budget,
                )
            chunks.append(
                Chunk(
                    text=piece.text,
                    document=document,
                    ordinal=ordinal,
                    token_count=piece.tokens,
                    oversized=oversized,
                ),
            )
        logger.debug("Split %r into %d chunks", document.title or document.link, len(chunks))
        return chunks

    async def _split_piece(self, piece: _Piece, level: int) -> list[_Piece]:
        if piece.tokens <= self.budget:
            return [piece]
        if level >= len(_LEVELS):
            return await self._windows(piece)

        split, joiner = _LEVELS[level].split, _LEVELS[level].joiner
        parts = split(piece.text)
        if len(parts) <= 1:
            return await self._split_piece(piece, level + 1)

        pieces: list[_Piece] = []
        for part in parts:
            part_tokens = await self.meter.count_tokens(part)
            sub = await self._split_piece(_Piece(part, part_tokens), level + 1)
            pieces.append(sub[0]._replace(lead=joiner))
            pieces.extend(sub[1:])
        pieces[0] = pieces[0]._replace(lead=piece.lead)
        return await self._merge(pieces)

    async def _windows(self, piece: _Piece) -> list[_Piece]:
        """Cut text without usable boundaries into the longest prefixes that fit."""
        windows: list[_Piece] = []
        text = piece.text
        while text:
            tokens = await self.meter.count_tokens(text)
            if tokens <= self.budget:
                windows.append(_Piece(text, tokens))
                break
            # Binary search for the longest prefix within budget
            best, best_tokens = 0, 0
            low, high = 1, len(text) - 1
            while low <= high:
                middle = (low + high) // 2
                middle_tokens = await self.meter.count_tokens(text[:middle])
                if middle_tokens <= self.budget:
                    best, best_tokens = middle, middle_tokens
                    low = middle + 1
                else:
                    high = middle - 1
            if best == 0:
                best, best_tokens = 1, await self.meter.count_tokens(text[:1])
            windows.append(_Piece(text[:best], best_tokens))
            text = text[best:]
        windows[0] = windows[0]._replace(lead=piece.lead)
        return windows

    async def _merge(self, pieces: list[_Piece]) -> list[_Piece]:
        """Greedily join adjacent pieces while the joined text fits the budget."""
        merged: list[_Piece] = []
        current: _Piece | None = None

        for piece in pieces:
            if current is not None:
                candidate = current.text + piece.lead + piece.text
                candidate_tokens = await self.meter.count_tokens(candidate)
                if candidate_tokens <= self.budget:
                    current = _Piece(candidate, candidate_tokens, current.lead)
                    continue
                merged.append(current)
            current = piece

        if current is not None:
            merged.append(current)
        return merged


async def chunk_documents(
    documents: list[Document],
    meter: TokenMeter,
    budget: int,
) -> list[Chunk]:
    """Chunk every document, keeping document order then chunk order."""
    chunker = Chunker(meter, budget)
    chunks: list[Chunk] = []
    for document in documents:
        chunks.extend(await chunker.split(document))
    return chunks
