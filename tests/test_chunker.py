"""
Tests for document chunking policies.
"""

import pytest

from fidgetech_rag.chunker import TextChunks, chunk_text


class TestParagraphPolicy:
    def test_drops_fragment_shorter_than_threshold(self):
        text = "A" * 60 + "\n\nBB"

        assert list(chunk_text(text)) == ["A" * 60]

    def test_threshold_is_inclusive(self):
        text = "x" * 50 + "\n\n" + "y" * 49

        assert list(chunk_text(text)) == ["x" * 50]

    def test_chunks_are_trimmed_before_length_check(self):
        text = "   " + "a" * 48 + "   \n\n" + "  " + "b" * 55 + "\n"

        assert list(chunk_text(text)) == ["b" * 55]

    def test_splits_on_whitespace_only_and_crlf_blank_lines(self):
        first = "first paragraph " * 5
        second = "second paragraph " * 5
        third = "third paragraph " * 5
        text = f"{first}\n   \n{second}\r\n\r\n{third}"

        assert list(chunk_text(text)) == [first.strip(), second.strip(), third.strip()]

    def test_single_newline_does_not_split(self):
        text = "line one of a paragraph that keeps going\nline two of the same paragraph"

        assert list(chunk_text(text)) == [text]

    def test_empty_text_yields_nothing(self):
        assert list(chunk_text("")) == []
        assert list(chunk_text(None)) == []

    def test_custom_threshold(self):
        assert list(chunk_text("short one\n\nok", min_chars=2)) == ["short one", "ok"]


class TestLaziness:
    def test_returns_lazy_iterable(self):
        chunks = chunk_text("p" * 80 + "\n\n" + "q" * 80)

        assert isinstance(chunks, TextChunks)
        assert next(iter(chunks)) == "p" * 80

    def test_sequence_is_restartable(self):
        chunks = chunk_text("p" * 80 + "\n\n" + "q" * 80)

        assert list(chunks) == list(chunks) == ["p" * 80, "q" * 80]


class TestSentencePolicy:
    def test_splits_paragraph_into_sentences(self):
        text = (
            "The widget ships with a rechargeable battery that lasts two days. "
            "Charging takes roughly ninety minutes with the bundled cable."
        )

        chunks = list(chunk_text(text, policy="sentence", min_chars=20))

        assert chunks == [
            "The widget ships with a rechargeable battery that lasts two days.",
            "Charging takes roughly ninety minutes with the bundled cable.",
        ]

    def test_short_sentences_are_dropped(self):
        text = "Yes. The device supports firmware updates over the air without a cable."

        chunks = list(chunk_text(text, policy="sentence", min_chars=50))

        assert chunks == ["The device supports firmware updates over the air without a cable."]


def test_unknown_policy_is_rejected():
    with pytest.raises(ValueError):
        chunk_text("anything", policy="token")
