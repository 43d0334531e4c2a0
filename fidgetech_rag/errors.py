"""Exception hierarchy shared by ingestion, retrieval and the HTTP layer."""

from typing import Any, Dict, Optional


class RAGError(Exception):
    """Base class for all service errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | details={self.details}"
        return self.message


class ConfigurationError(RAGError):
    """Required configuration is missing or invalid. Fatal at startup."""


class CorpusUnavailableError(RAGError):
    """The document store could not be enumerated. Fatal at startup."""


class DocumentReadError(RAGError):
    """A single document could not be fetched or decoded."""

    def __init__(self, message: str, name: Optional[str] = None):
        super().__init__(message, {"document": name} if name else None)
        self.name = name


class EmbeddingError(RAGError):
    """The embedding provider failed, timed out or returned a malformed vector."""


class DimensionMismatchError(EmbeddingError):
    """An embedding does not match the dimensionality of the index."""

    def __init__(self, expected: int, actual: int):
        super().__init__(
            f"Embedding dimension mismatch: expected {expected}, got {actual}",
            {"expected": expected, "actual": actual},
        )
        self.expected = expected
        self.actual = actual


class GenerationError(RAGError):
    """The answer generator failed or timed out."""


class EmptyQueryError(RAGError):
    """The user query is missing or blank."""


class EmptyIndexError(RAGError):
    """No corpus is loaded, so nothing can be retrieved."""
