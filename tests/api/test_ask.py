"""
Test suite for the HTTP surface.

Covers liveness, POST /ask status mapping (400/503/500/200) and startup
failure when the corpus cannot be loaded.
"""

import asyncio

import pytest
from fastapi.testclient import TestClient

from fidgetech_rag.errors import ConfigurationError, CorpusUnavailableError, EmbeddingError, GenerationError
from fidgetech_rag.main import create_app
from fidgetech_rag.rag import RAGEngine
from fidgetech_rag.routes.health import LIVENESS_MESSAGE
from fidgetech_rag.routes.questions import AI_FAILURE_MESSAGE
from tests.conftest import FakeEmbedder, FakeGenerator, InMemoryLoader, paragraph, vector_with_score

QUESTION = "What colours does the spinner come in?"


@pytest.fixture
def engine(engine_factory) -> RAGEngine:
    documents = {
        "catalog.md": paragraph("colours") + "\n\n" + paragraph("sizes"),
        "pricing.txt": paragraph("price"),
    }
    vectors = {
        QUESTION: [1.0, 0.0],
        "colours": vector_with_score(0.92),
        "sizes": vector_with_score(0.81),
        "price": vector_with_score(0.2),
    }
    engine = engine_factory(documents, vectors, FakeGenerator("Red, blue and green."))
    asyncio.run(engine.initialize())
    return engine


@pytest.fixture
def client(engine: RAGEngine) -> TestClient:
    return TestClient(create_app(engine))


class TestLiveness:
    def test_root_returns_text(self, client: TestClient) -> None:
        response = client.get("/")

        assert response.status_code == 200
        assert response.text == LIVENESS_MESSAGE

    def test_health_reports_chunk_count(self, client: TestClient) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok", "chunks": 3}


class TestAskEndpoint:
    def test_valid_query_returns_answer_chunks_and_sources(self, client: TestClient) -> None:
        response = client.post("/ask", json={"query": QUESTION})

        assert response.status_code == 200
        body = response.json()
        assert body["answer"] == "Red, blue and green."
        assert body["retrieved_chunks"] == [paragraph("colours").strip(), paragraph("sizes").strip()]
        # two chunks from the same document, one source title
        assert body["source_titles"] == ["catalog.md"]

    @pytest.mark.parametrize("payload", [{"query": ""}, {"query": "   "}, {}, {"query": None}, {"query": 12}])
    def test_missing_or_blank_query_is_bad_request(self, client: TestClient, engine: RAGEngine, payload) -> None:
        response = client.post("/ask", json=payload)

        assert response.status_code == 400
        assert response.json() == {"error": "Query is required."}
        assert engine.embedder.calls.count(QUESTION) == 0

    def test_malformed_body_is_bad_request(self, client: TestClient) -> None:
        response = client.post("/ask", content=b"not json", headers={"Content-Type": "application/json"})

        assert response.status_code == 400
        assert "error" in response.json()

    def test_empty_index_is_service_unavailable(self, engine_factory) -> None:
        engine = engine_factory({}, {QUESTION: [1.0, 0.0]})
        asyncio.run(engine.initialize())
        client = TestClient(create_app(engine))

        response = client.post("/ask", json={"query": QUESTION})

        assert response.status_code == 503
        assert "error" in response.json()

    def test_no_relevant_chunks_returns_generated_answer(self, client: TestClient, engine: RAGEngine) -> None:
        engine.embedder.vectors[QUESTION] = [0.0, -1.0]
        engine.generator.answer = "I cannot find the answer in the provided documents."

        response = client.post("/ask", json={"query": QUESTION})

        assert response.status_code == 200
        body = response.json()
        assert body["retrieved_chunks"] == []
        assert body["source_titles"] == []
        assert body["answer"] == "I cannot find the answer in the provided documents."
        assert "No relevant information found." in engine.generator.prompts[-1]

    def test_embedding_failure_is_server_error(self, client: TestClient, engine: RAGEngine) -> None:
        engine.embedder.vectors[QUESTION] = EmbeddingError("Embedding request failed: 429 RESOURCE_EXHAUSTED")

        response = client.post("/ask", json={"query": QUESTION})

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == AI_FAILURE_MESSAGE
        assert "RESOURCE_EXHAUSTED" in body["details"]

    def test_generation_failure_is_server_error(self, client: TestClient, engine: RAGEngine) -> None:
        engine.generator.error = GenerationError("Generation timed out after 30s")

        response = client.post("/ask", json={"query": QUESTION})

        assert response.status_code == 500
        assert response.json() == {"error": AI_FAILURE_MESSAGE, "details": "Generation timed out after 30s"}

    def test_failed_query_leaves_index_untouched(self, client: TestClient, engine: RAGEngine) -> None:
        before = engine.index
        engine.generator.error = GenerationError("boom")

        client.post("/ask", json={"query": QUESTION})

        assert engine.index is before
        assert len(engine.index) == 3

    def test_cors_allows_any_origin(self, client: TestClient) -> None:
        response = client.post("/ask", json={"query": QUESTION}, headers={"Origin": "http://localhost:5173"})

        assert response.headers["access-control-allow-origin"] == "*"


class TestStartup:
    def test_lifespan_keeps_injected_engine(self, engine: RAGEngine) -> None:
        app = create_app(engine)

        with TestClient(app) as client:
            assert client.get("/health").json()["chunks"] == 3
        assert app.state.rag is engine

    def test_missing_configuration_prevents_startup(self, monkeypatch, tmp_path) -> None:
        for name in ("CORPUS_BUCKET", "GCS_BUCKET_NAME", "CORPUS_DIR", "GEMINI_API_KEY"):
            monkeypatch.setenv(name, "")
        monkeypatch.chdir(tmp_path)

        with pytest.raises(ConfigurationError):
            with TestClient(create_app()):
                pass

    def test_unreachable_corpus_prevents_startup(self, monkeypatch) -> None:
        unreachable = RAGEngine(
            loader=InMemoryLoader({}, unreachable=True),
            embedder=FakeEmbedder({}),
            generator=FakeGenerator(),
        )
        monkeypatch.setattr(RAGEngine, "from_settings", classmethod(lambda cls, settings: unreachable))

        with pytest.raises(CorpusUnavailableError):
            with TestClient(create_app()):
                pass
