"""Core RAG engine: owns the live index and answers questions against it."""

import asyncio
import logging
from typing import Optional

from fidgetech_rag.config import Settings
from fidgetech_rag.corpus import CorpusLoader, loader_from_settings
from fidgetech_rag.embeddings import EmbeddingProvider, embedder_from_settings
from fidgetech_rag.errors import EmptyIndexError, EmptyQueryError
from fidgetech_rag.generator import AnswerGenerator, GeminiAnswerGenerator
from fidgetech_rag.genai_client import build_genai_client
from fidgetech_rag.index import EmbeddingIndex
from fidgetech_rag.ingest import IngestionReport, ingest_corpus
from fidgetech_rag.logging_config import log_latency
from fidgetech_rag.prompts import build_answer_prompt
from fidgetech_rag.retriever import Retriever
from fidgetech_rag.schemas import AskResponse

logger = logging.getLogger(__name__)


class RAGEngine:
    """Answers questions from an in-memory index built from the corpus.

    The index is replaced wholesale on reload: a new one is built off to the
    side and then published with a single assignment. Each query reads the
    reference once, so it never sees a half-built index.
    """

    def __init__(
        self,
        *,
        loader: CorpusLoader,
        embedder: EmbeddingProvider,
        generator: AnswerGenerator,
        retriever: Optional[Retriever] = None,
        chunk_policy: str = "paragraph",
        min_chunk_chars: int = 50,
        embed_concurrency: int = 1,
    ):
        self.loader = loader
        self.embedder = embedder
        self.generator = generator
        self.retriever = retriever or Retriever()
        self.chunk_policy = chunk_policy
        self.min_chunk_chars = min_chunk_chars
        self.embed_concurrency = embed_concurrency
        self.last_report: Optional[IngestionReport] = None
        self._index = EmbeddingIndex()
        self._reload_lock = asyncio.Lock()

    @classmethod
    def from_settings(cls, settings: Settings) -> "RAGEngine":
        settings.validate()
        client = build_genai_client(settings)
        return cls(
            loader=loader_from_settings(settings),
            embedder=embedder_from_settings(settings, client),
            generator=GeminiAnswerGenerator(
                client, settings.generation_model, timeout=settings.request_timeout
            ),
            retriever=Retriever(top_k=settings.top_k, min_score=settings.min_score),
            chunk_policy=settings.chunk_policy,
            min_chunk_chars=settings.min_chunk_chars,
            embed_concurrency=settings.embed_concurrency,
        )

    @property
    def index(self) -> EmbeddingIndex:
        return self._index

    async def reload(self) -> IngestionReport:
        """Rebuild the index from the corpus and publish it.

        On failure the previously published index stays in place and the
        error propagates.
        """
        async with self._reload_lock:
            index, report = await ingest_corpus(
                self.loader,
                self.embedder,
                policy=self.chunk_policy,
                min_chars=self.min_chunk_chars,
                concurrency=self.embed_concurrency,
            )
            self._index = index
            self.last_report = report
        if index.is_empty():
            logger.warning("Knowledge base is empty; /ask will report no corpus available")
        return report

    async def initialize(self) -> IngestionReport:
        return await self.reload()

    async def ask(self, question: Optional[str]) -> AskResponse:
        """Answer one question.

        Blank queries and an empty index are rejected before the
        latency-logged pipeline runs.
        """
        if not isinstance(question, str) or not question.strip():
            logger.info("Query rejected | reason=empty")
            raise EmptyQueryError("Query is required.")

        index = self._index
        if index.is_empty():
            logger.warning("Query rejected | reason=empty_index")
            raise EmptyIndexError("Knowledge base is not initialized. No documents are available.")

        return await self._answer(question, index)

    @log_latency("rag.ask")
    async def _answer(self, question: str, index: EmbeddingIndex) -> AskResponse:
        logger.info(f"Query received | question_length={len(question)}")
        query_embedding = await self.embedder.embed(question)
        result = self.retriever.retrieve(index, query_embedding)

        prompt = build_answer_prompt(question, result.texts)
        logger.debug(f"Sending prompt to LLM:\n{prompt}")
        answer = await self.generator.generate(prompt)

        logger.info(
            f"Query complete | chunks={len(result)} | sources={len(result.sources)} | answer_length={len(answer)}"
        )
        return AskResponse(
            answer=answer,
            retrieved_chunks=result.texts,
            source_titles=result.sources,
        )
