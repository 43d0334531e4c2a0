"""In-memory embedding index: parallel chunk/embedding lists scored by cosine similarity.

Queries scan every entry linearly. That is fine for a small corpus; a larger
one needs an approximate nearest-neighbour structure instead.
"""

from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple, Union

import numpy as np

from fidgetech_rag.errors import DimensionMismatchError, EmbeddingError

VectorLike = Union[np.ndarray, Sequence[float]]


@dataclass(frozen=True)
class Chunk:
    text: str
    source: str


@dataclass(frozen=True)
class ScoredCandidate:
    position: int
    score: float


def to_vector(values: VectorLike) -> np.ndarray:
    """Validate a raw embedding and return it as a 1-D float64 array.

    Raises EmbeddingError for anything that is not a non-empty, finite,
    one-dimensional vector of ints or floats. Strings, booleans and objects
    are rejected rather than coerced.
    """
    try:
        raw = np.asarray(values)
    except (TypeError, ValueError) as e:
        raise EmbeddingError(f"Embedding is not numeric: {e}") from e
    if raw.dtype.kind not in "iuf":
        raise EmbeddingError(f"Embedding must contain numbers, got dtype {raw.dtype}")
    vector = np.array(raw, dtype=np.float64)
    if vector.ndim != 1 or vector.size == 0:
        raise EmbeddingError(f"Embedding must be a non-empty 1-D vector, got shape {vector.shape}")
    if not np.all(np.isfinite(vector)):
        raise EmbeddingError("Embedding contains NaN or infinite values")
    return vector


def _unit(vector: np.ndarray) -> Optional[np.ndarray]:
    # Scale by the largest component first so the norm cannot overflow.
    scale = np.max(np.abs(vector))
    if scale == 0 or not np.isfinite(scale):
        return None
    scaled = vector / scale
    return scaled / np.linalg.norm(scaled)


def cosine_similarity(a: VectorLike, b: VectorLike) -> float:
    """Cosine similarity in [-1, 1].

    Returns 0.0 when either vector has zero magnitude, when the shapes
    differ or when the score is not finite, so one malformed entry cannot
    abort a ranking pass.
    """
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    if a.shape != b.shape or a.ndim != 1 or a.size == 0:
        return 0.0
    unit_a = _unit(a)
    unit_b = _unit(b)
    if unit_a is None or unit_b is None:
        return 0.0
    score = float(np.dot(unit_a, unit_b))
    if not np.isfinite(score):
        return 0.0
    return float(np.clip(score, -1.0, 1.0))


class EmbeddingIndex:
    """Chunks and their embeddings kept in two position-aligned lists.

    Entries are only ever appended as a pair, so both lists always have the
    same length. The first entry fixes the dimensionality for the index.
    """

    def __init__(self):
        self._chunks: List[Chunk] = []
        self._embeddings: List[np.ndarray] = []
        self._dimension: Optional[int] = None

    @property
    def dimension(self) -> Optional[int]:
        return self._dimension

    @property
    def chunks(self) -> Tuple[Chunk, ...]:
        return tuple(self._chunks)

    @property
    def embeddings(self) -> Tuple[np.ndarray, ...]:
        return tuple(self._embeddings)

    def __len__(self) -> int:
        return len(self._chunks)

    def __iter__(self) -> Iterator[Tuple[Chunk, np.ndarray]]:
        return iter(zip(self._chunks, self._embeddings))

    def is_empty(self) -> bool:
        return not self._chunks

    def sources(self) -> List[str]:
        return list(dict.fromkeys(chunk.source for chunk in self._chunks))

    def add(self, chunk: Chunk, embedding: VectorLike) -> None:
        if not chunk.text or not chunk.text.strip():
            raise ValueError("Cannot index an empty chunk")
        vector = to_vector(embedding)
        if self._dimension is not None and vector.shape[0] != self._dimension:
            raise DimensionMismatchError(self._dimension, vector.shape[0])

        # Both appends happen after validation, so a failure leaves the index untouched.
        vector.setflags(write=False)
        self._chunks.append(chunk)
        self._embeddings.append(vector)
        if self._dimension is None:
            self._dimension = vector.shape[0]

    def chunk_at(self, position: int) -> Chunk:
        return self._chunks[position]

    def score(self, query_embedding: VectorLike) -> List[ScoredCandidate]:
        """Score every entry against the query, in insertion order."""
        query = np.asarray(query_embedding, dtype=np.float64)
        return [
            ScoredCandidate(position=i, score=cosine_similarity(query, embedding))
            for i, embedding in enumerate(self._embeddings)
        ]
