"""Top-K retrieval over an EmbeddingIndex with a fixed relevance floor."""

import logging
from dataclasses import dataclass, field
from typing import List

from fidgetech_rag.errors import EmptyIndexError
from fidgetech_rag.index import EmbeddingIndex, VectorLike

logger = logging.getLogger(__name__)

DEFAULT_TOP_K = 3
DEFAULT_MIN_SCORE = 0.6


@dataclass(frozen=True)
class RetrievedChunk:
    text: str
    source: str
    score: float


@dataclass(frozen=True)
class RetrievalResult:
    """Surviving chunks in descending score order. May be empty."""

    chunks: List[RetrievedChunk] = field(default_factory=list)

    @property
    def texts(self) -> List[str]:
        return [c.text for c in self.chunks]

    @property
    def sources(self) -> List[str]:
        # de-duplicated, first-seen order
        return list(dict.fromkeys(c.source for c in self.chunks))

    def __len__(self) -> int:
        return len(self.chunks)


class Retriever:
    def __init__(self, top_k: int = DEFAULT_TOP_K, min_score: float = DEFAULT_MIN_SCORE):
        if top_k < 1:
            raise ValueError("top_k must be at least 1")
        self.top_k = top_k
        self.min_score = min_score

    def retrieve(self, index: EmbeddingIndex, query_embedding: VectorLike) -> RetrievalResult:
        """Rank the index against the query and keep the top_k entries above min_score.

        Raises EmptyIndexError when the index holds nothing, which callers must
        treat differently from an empty result.
        """
        if index.is_empty():
            raise EmptyIndexError("No corpus available: the document index is empty")

        # sorted() is stable, so equal scores keep insertion order.
        ranked = sorted(index.score(query_embedding), key=lambda c: c.score, reverse=True)
        top = ranked[: self.top_k]
        survivors = [c for c in top if c.score > self.min_score]

        chunks = []
        for candidate in survivors:
            chunk = index.chunk_at(candidate.position)
            chunks.append(RetrievedChunk(text=chunk.text, source=chunk.source, score=candidate.score))

        best = f"{top[0].score:.3f}" if top else "n/a"
        logger.info(
            f"Retrieval complete | indexed={len(index)} | kept={len(chunks)} | best_score={best}"
        )
        return RetrievalResult(chunks=chunks)
