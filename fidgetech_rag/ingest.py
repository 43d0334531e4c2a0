"""Ingestion pipeline: load -> chunk -> embed -> append.

Failures are contained at the smallest unit possible. A chunk whose embedding
fails is skipped, a document that cannot be read is skipped, and only a corpus
that cannot be enumerated at all aborts the pass.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from fidgetech_rag.chunker import DEFAULT_MIN_CHARS, chunk_text
from fidgetech_rag.corpus import CorpusLoader, Document
from fidgetech_rag.embeddings import EmbeddingProvider
from fidgetech_rag.errors import DocumentReadError, EmbeddingError
from fidgetech_rag.index import Chunk, EmbeddingIndex
from fidgetech_rag.logging_config import log_latency

logger = logging.getLogger(__name__)


@dataclass
class IngestionReport:
    documents_seen: int = 0
    documents_loaded: int = 0
    chunks_embedded: int = 0
    chunks_failed: int = 0
    skipped_documents: List[str] = field(default_factory=list)
    elapsed_seconds: float = 0.0

    @property
    def documents_skipped(self) -> int:
        return len(self.skipped_documents)

    def summary(self) -> str:
        return (
            f"documents={self.documents_loaded}/{self.documents_seen} | "
            f"skipped={self.documents_skipped} | chunks={self.chunks_embedded} | "
            f"failed_chunks={self.chunks_failed} | elapsed_s={self.elapsed_seconds:.2f}"
        )


async def _embed_chunk(
    embedder: EmbeddingProvider, text: str, source: str, semaphore: asyncio.Semaphore
) -> Optional[np.ndarray]:
    async with semaphore:
        try:
            return await embedder.embed(text)
        except EmbeddingError as e:
            logger.warning(f"Skipping chunk | source={source} | chunk_length={len(text)} | error={e}")
            return None
        except Exception as e:
            # only this chunk is lost
            logger.warning(
                f"Skipping chunk | source={source} | chunk_length={len(text)} | "
                f"error={type(e).__name__}: {e}"
            )
            return None


async def ingest_document(
    index: EmbeddingIndex,
    document: Document,
    embedder: EmbeddingProvider,
    *,
    policy: str = "paragraph",
    min_chars: int = DEFAULT_MIN_CHARS,
    concurrency: int = 1,
    report: Optional[IngestionReport] = None,
) -> int:
    """Embed every chunk of ``document`` once and append the successful ones.

    Embedding calls may overlap up to ``concurrency``; appends happen afterwards
    in chunk order. Returns the number of chunks added.
    """
    semaphore = asyncio.Semaphore(max(1, concurrency))
    texts = list(chunk_text(document.text, policy=policy, min_chars=min_chars))
    vectors = await asyncio.gather(
        *(_embed_chunk(embedder, text, document.name, semaphore) for text in texts)
    )

    added = failed = 0
    for text, vector in zip(texts, vectors):
        if vector is None:
            failed += 1
            continue
        try:
            index.add(Chunk(text=text, source=document.name), vector)
        except EmbeddingError as e:
            logger.warning(f"Rejected embedding | source={document.name} | error={e}")
            failed += 1
            continue
        added += 1

    if report is not None:
        report.chunks_embedded += added
        report.chunks_failed += failed
    logger.info(f"Ingested document | source={document.name} | chunks={added} | failed={failed}")
    return added


@log_latency("ingest.corpus")
async def ingest_corpus(
    loader: CorpusLoader,
    embedder: EmbeddingProvider,
    *,
    policy: str = "paragraph",
    min_chars: int = DEFAULT_MIN_CHARS,
    concurrency: int = 1,
) -> Tuple[EmbeddingIndex, IngestionReport]:
    """Build a fresh index from every document the loader lists.

    Raises CorpusUnavailableError if the loader cannot enumerate documents.
    """
    start = time.perf_counter()
    report = IngestionReport()
    index = EmbeddingIndex()

    logger.info(f"Initializing document knowledge base | source={loader.describe()}")
    names = await asyncio.to_thread(loader.list_documents)
    report.documents_seen = len(names)

    for name in names:
        try:
            document = await asyncio.to_thread(loader.load, name)
        except DocumentReadError as e:
            logger.warning(f"Skipping document | source={name} | error={e}")
            report.skipped_documents.append(name)
            continue
        report.documents_loaded += 1
        await ingest_document(
            index,
            document,
            embedder,
            policy=policy,
            min_chars=min_chars,
            concurrency=concurrency,
            report=report,
        )

    report.elapsed_seconds = time.perf_counter() - start
    logger.info(f"Knowledge base initialized | {report.summary()}")
    return index, report
