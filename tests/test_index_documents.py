"""
Tests for the offline indexing command.
"""

from fidgetech_rag import index_documents
from fidgetech_rag.config import Settings
from fidgetech_rag.errors import ConfigurationError
from fidgetech_rag.rag import RAGEngine
from tests.conftest import FakeEmbedder, FakeGenerator, InMemoryLoader, paragraph


def test_prints_summary_of_indexed_documents(monkeypatch, capsys):
    engine = RAGEngine(
        loader=InMemoryLoader(
            {"a.md": paragraph("one") + "\n\n" + paragraph("two"), "b.txt": paragraph("three"), "bad.txt": ""},
            unreadable=["bad.txt"],
        ),
        embedder=FakeEmbedder({}, default=[0.1, 0.2, 0.3]),
        generator=FakeGenerator(),
    )
    monkeypatch.setattr(Settings, "from_env", classmethod(lambda cls: Settings(corpus_dir="docs")))
    monkeypatch.setattr(RAGEngine, "from_settings", classmethod(lambda cls, settings: engine))

    assert index_documents.main() == 0

    out = capsys.readouterr().out
    assert "Indexed 3 chunks from 2 document(s)" in out
    assert "Embedding dimension: 3" in out
    assert "a.md: 2 chunks" in out
    assert "skipped: bad.txt" in out


def test_configuration_error_exits_non_zero(monkeypatch):
    def fail(cls, settings):
        raise ConfigurationError("No corpus configured.")

    monkeypatch.setattr(Settings, "from_env", classmethod(lambda cls: Settings()))
    monkeypatch.setattr(RAGEngine, "from_settings", classmethod(fail))

    assert index_documents.main() == 1
