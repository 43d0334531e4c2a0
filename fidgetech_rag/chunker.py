"""Splits document text into retrievable chunks.

Two deterministic delimiter policies are supported:

* ``paragraph`` (default): split on blank lines, i.e. one or more line breaks
  separated only by whitespace.
* ``sentence``: split into paragraphs first, then into sentences using spaCy's
  rule-based sentencizer on a blank English pipeline.

Candidates are trimmed and dropped when shorter than ``min_chars``. Chunks do
not overlap and there is no upper bound on chunk length.
"""

import re
from functools import lru_cache
from typing import Iterator

import spacy

DEFAULT_MIN_CHARS = 50
POLICIES = ("paragraph", "sentence")

PARAGRAPH_BREAK = re.compile(r"\n\s*\n")


@lru_cache(maxsize=1)
def _sentence_pipeline():
    nlp = spacy.blank("en")
    nlp.add_pipe("sentencizer")
    return nlp


def _paragraphs(text: str) -> Iterator[str]:
    start = 0
    for match in PARAGRAPH_BREAK.finditer(text):
        yield text[start:match.start()]
        start = match.end()
    yield text[start:]


def _sentences(text: str) -> Iterator[str]:
    nlp = _sentence_pipeline()
    for paragraph in _paragraphs(text):
        if not paragraph.strip():
            continue
        for sent in nlp(paragraph).sents:
            yield sent.text


class TextChunks:
    """Lazy, restartable sequence of chunk strings for one document.

    Every call to ``iter()`` re-splits the text from the beginning, so the
    sequence can be walked more than once with identical results.
    """

    def __init__(self, text: str, *, policy: str = "paragraph", min_chars: int = DEFAULT_MIN_CHARS):
        if policy not in POLICIES:
            raise ValueError(f"Unknown chunk policy {policy!r}, expected one of {POLICIES}")
        if min_chars < 1:
            raise ValueError("min_chars must be at least 1")
        self.text = text or ""
        self.policy = policy
        self.min_chars = min_chars

    def __iter__(self) -> Iterator[str]:
        pieces = _sentences(self.text) if self.policy == "sentence" else _paragraphs(self.text)
        for piece in pieces:
            candidate = piece.strip()
            if len(candidate) >= self.min_chars:
                yield candidate

    def __repr__(self) -> str:
        return f"TextChunks(policy={self.policy!r}, min_chars={self.min_chars}, text_length={len(self.text)})"


def chunk_text(text: str, *, policy: str = "paragraph", min_chars: int = DEFAULT_MIN_CHARS) -> TextChunks:
    return TextChunks(text, policy=policy, min_chars=min_chars)
