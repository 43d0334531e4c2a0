"""Embedding providers. Every provider returns a validated 1-D numpy vector or raises EmbeddingError."""

import asyncio
import logging
from typing import Optional

import numpy as np

from fidgetech_rag.errors import EmbeddingError
from fidgetech_rag.index import to_vector

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class EmbeddingProvider:
    """Turns one text into one vector.

    Implementations should raise EmbeddingError on failure. Ingestion also
    survives other exceptions, skipping only the chunk that raised.
    """

    async def embed(self, text: str) -> np.ndarray:
        raise NotImplementedError


def _values_from_response(response) -> list:
    embeddings = getattr(response, "embeddings", None)
    if not embeddings:
        raise EmbeddingError("Embedding response contained no embeddings")
    try:
        first = embeddings[0]
    except (TypeError, IndexError, KeyError) as e:
        raise EmbeddingError(f"Embedding response has an unexpected shape: {e}") from e
    values = getattr(first, "values", None)
    if values is None:
        raise EmbeddingError("Embedding response is missing values")
    return values


class GeminiEmbeddingModel(EmbeddingProvider):
    """Embeds text with a Gemini / Vertex AI embedding model via google-genai."""

    def __init__(self, client, model: str = "text-embedding-004", timeout: float = DEFAULT_TIMEOUT):
        self.client = client
        self.model = model
        self.timeout = timeout

    async def embed(self, text: str) -> np.ndarray:
        try:
            response = await asyncio.wait_for(
                self.client.aio.models.embed_content(model=self.model, contents=text),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise EmbeddingError(
                f"Embedding request timed out after {self.timeout:.0f}s", {"model": self.model}
            ) from e
        except Exception as e:
            raise EmbeddingError(f"Embedding request failed: {e}", {"model": self.model}) from e
        return to_vector(_values_from_response(response))


class LocalEmbeddingModel(EmbeddingProvider):
    """Embeds text in-process with sentence-transformers."""

    def __init__(self, model_name: str = "all-mpnet-base-v2", timeout: float = DEFAULT_TIMEOUT, model=None):
        if model is None:
            from sentence_transformers import SentenceTransformer

            model = SentenceTransformer(model_name)
        self.model = model
        self.model_name = model_name
        self.timeout = timeout

    def _encode(self, text: str) -> np.ndarray:
        return self.model.encode(text, convert_to_numpy=True, show_progress_bar=False)

    async def embed(self, text: str) -> np.ndarray:
        try:
            values = await asyncio.wait_for(asyncio.to_thread(self._encode, text), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise EmbeddingError(
                f"Local embedding timed out after {self.timeout:.0f}s", {"model": self.model_name}
            ) from e
        except Exception as e:
            raise EmbeddingError(f"Local embedding failed: {e}", {"model": self.model_name}) from e
        return to_vector(values)


def embedder_from_settings(settings, client: Optional[object] = None) -> EmbeddingProvider:
    if settings.embedding_backend == "local":
        logger.info(f"Using local embedding model | model={settings.local_embedding_model}")
        return LocalEmbeddingModel(settings.local_embedding_model, timeout=settings.request_timeout)
    logger.info(f"Using Gemini embedding model | model={settings.embedding_model}")
    return GeminiEmbeddingModel(client, settings.embedding_model, timeout=settings.request_timeout)
