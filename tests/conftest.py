"""
Shared test fixtures: in-memory corpus, deterministic embedder and generator fakes.
"""

import math
from typing import Dict, List, Optional, Sequence

import numpy as np
import pytest

from fidgetech_rag.corpus import CorpusLoader, Document
from fidgetech_rag.embeddings import EmbeddingProvider
from fidgetech_rag.errors import CorpusUnavailableError, DocumentReadError, EmbeddingError
from fidgetech_rag.generator import AnswerGenerator
from fidgetech_rag.index import Chunk, EmbeddingIndex
from fidgetech_rag.rag import RAGEngine
from fidgetech_rag.retriever import Retriever

QUERY_VECTOR = [1.0, 0.0]


def vector_with_score(score: float) -> List[float]:
    """2-D unit vector whose cosine similarity with QUERY_VECTOR equals ``score``."""
    return [score, math.sqrt(1.0 - score * score)]


def paragraph(label: str) -> str:
    """A paragraph long enough to survive the default 50 character threshold."""
    return f"{label}: " + "lorem ipsum dolor sit amet " * 3


class InMemoryLoader(CorpusLoader):
    def __init__(self, documents: Dict[str, str], unreadable: Sequence[str] = (), unreachable: bool = False):
        self.documents = dict(documents)
        self.unreadable = set(unreadable)
        self.unreachable = unreachable
        self.loaded: List[str] = []

    def describe(self) -> str:
        return "memory"

    def list_documents(self) -> List[str]:
        if self.unreachable:
            raise CorpusUnavailableError("bucket unreachable")
        return list(self.documents)

    def load(self, name: str) -> Document:
        if name in self.unreadable:
            raise DocumentReadError(f"cannot read {name}", name)
        self.loaded.append(name)
        return Document(name=name, text=self.documents[name])


class FakeEmbedder(EmbeddingProvider):
    """Looks vectors up by exact text, or by the text's leading label before ':'."""

    def __init__(self, vectors: Dict[str, Sequence[float]], default: Optional[Sequence[float]] = None):
        self.vectors = vectors
        self.default = default
        self.calls: List[str] = []

    async def embed(self, text: str) -> np.ndarray:
        self.calls.append(text)
        key = text if text in self.vectors else text.split(":", 1)[0]
        if key in self.vectors:
            value = self.vectors[key]
        elif self.default is not None:
            value = self.default
        else:
            raise EmbeddingError(f"no vector for {text[:20]!r}")
        if isinstance(value, Exception):
            raise value
        return np.asarray(value, dtype=np.float64)


class FakeGenerator(AnswerGenerator):
    def __init__(self, answer: str = "Generated answer.", error: Optional[Exception] = None):
        self.answer = answer
        self.error = error
        self.prompts: List[str] = []

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.answer


@pytest.fixture
def index_factory():
    def build(entries):
        index = EmbeddingIndex()
        for text, source, vector in entries:
            index.add(Chunk(text=text, source=source), vector)
        return index

    return build


@pytest.fixture
def engine_factory():
    def build(documents=None, vectors=None, generator=None, **kwargs):
        return RAGEngine(
            loader=InMemoryLoader(documents or {}),
            embedder=FakeEmbedder(vectors or {}),
            generator=generator or FakeGenerator(),
            retriever=Retriever(),
            **kwargs,
        )

    return build
