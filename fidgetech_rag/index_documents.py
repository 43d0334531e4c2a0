"""Offline ingestion check: builds the index from the configured corpus and reports what was indexed."""

import asyncio
import logging
import sys

from fidgetech_rag.config import Settings
from fidgetech_rag.errors import ConfigurationError, CorpusUnavailableError
from fidgetech_rag.logging_config import setup_logging
from fidgetech_rag.rag import RAGEngine

logger = logging.getLogger(__name__)


async def build(settings: Settings) -> int:
    engine = RAGEngine.from_settings(settings)
    report = await engine.initialize()
    index = engine.index

    print(f"Indexed {len(index)} chunks from {report.documents_loaded} document(s)")
    if index.dimension is not None:
        print(f"Embedding dimension: {index.dimension}")
    for source in index.sources():
        count = sum(1 for chunk in index.chunks if chunk.source == source)
        print(f"  {source}: {count} chunks")
    for name in report.skipped_documents:
        print(f"  skipped: {name}")
    if report.chunks_failed:
        print(f"{report.chunks_failed} chunk(s) failed to embed")
    return 0


def main() -> int:
    try:
        settings = Settings.from_env()
        setup_logging(settings.log_level)
        return asyncio.run(build(settings))
    except (ConfigurationError, CorpusUnavailableError) as e:
        logger.error(f"Indexing aborted | error={e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
