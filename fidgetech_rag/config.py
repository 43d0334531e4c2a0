"""Service settings loaded from the environment (and a local .env file)."""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import find_dotenv, load_dotenv

from fidgetech_rag.errors import ConfigurationError

CHUNK_POLICIES = ("paragraph", "sentence")
EMBEDDING_BACKENDS = ("gemini", "local")


def _get_bool(value: Optional[str], default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "t", "yes", "y"}


def _get_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from e


def _get_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from e


@dataclass
class Settings:
    """Runtime configuration.

    Exactly one corpus source is used: ``corpus_bucket`` when set, otherwise
    ``corpus_dir``. Google credentials are either an API key or a Vertex AI
    project/location pair.
    """

    gemini_api_key: Optional[str] = None
    use_vertexai: bool = False
    gcp_project_id: Optional[str] = None
    gcp_location: str = "us-central1"
    generation_model: str = "gemini-1.5-flash"
    embedding_model: str = "text-embedding-004"
    embedding_backend: str = "gemini"
    local_embedding_model: str = "all-mpnet-base-v2"

    corpus_bucket: Optional[str] = None
    corpus_endpoint_url: str = "https://storage.googleapis.com"
    corpus_access_key_id: Optional[str] = None
    corpus_secret_access_key: Optional[str] = None
    corpus_region: str = "auto"
    corpus_dir: Optional[str] = None

    chunk_policy: str = "paragraph"
    min_chunk_chars: int = 50
    top_k: int = 3
    min_score: float = 0.6
    embed_concurrency: int = 4
    request_timeout: float = 30.0

    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 5000

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv(find_dotenv(usecwd=True))
        return cls(
            gemini_api_key=os.getenv("GEMINI_API_KEY") or None,
            use_vertexai=_get_bool(os.getenv("GOOGLE_GENAI_USE_VERTEXAI")),
            gcp_project_id=os.getenv("GOOGLE_CLOUD_PROJECT_ID") or None,
            gcp_location=os.getenv("GOOGLE_CLOUD_LOCATION", "us-central1"),
            generation_model=os.getenv("GEMINI_MODEL", "gemini-1.5-flash"),
            embedding_model=os.getenv("EMBEDDING_MODEL", "text-embedding-004"),
            embedding_backend=os.getenv("EMBEDDING_BACKEND", "gemini").lower(),
            local_embedding_model=os.getenv("LOCAL_EMBEDDING_MODEL", "all-mpnet-base-v2"),
            corpus_bucket=os.getenv("CORPUS_BUCKET") or os.getenv("GCS_BUCKET_NAME") or None,
            corpus_endpoint_url=os.getenv("CORPUS_ENDPOINT_URL", "https://storage.googleapis.com"),
            corpus_access_key_id=os.getenv("CORPUS_ACCESS_KEY_ID") or None,
            corpus_secret_access_key=os.getenv("CORPUS_SECRET_ACCESS_KEY") or None,
            corpus_region=os.getenv("CORPUS_REGION", "auto"),
            corpus_dir=os.getenv("CORPUS_DIR") or None,
            chunk_policy=os.getenv("CHUNK_POLICY", "paragraph").lower(),
            min_chunk_chars=_get_int("MIN_CHUNK_CHARS", 50),
            top_k=_get_int("TOP_K", 3),
            min_score=_get_float("MIN_SCORE", 0.6),
            embed_concurrency=_get_int("EMBED_CONCURRENCY", 4),
            request_timeout=_get_float("REQUEST_TIMEOUT_SECONDS", 30.0),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            host=os.getenv("HOST", "0.0.0.0"),
            port=_get_int("PORT", 5000),
        )

    def uses_gcs_endpoint(self) -> bool:
        return "storage.googleapis.com" in (self.corpus_endpoint_url or "").lower()

    def validate(self) -> "Settings":
        """Raise ConfigurationError if the service cannot start with these settings."""
        if not self.corpus_bucket and not self.corpus_dir:
            raise ConfigurationError(
                "No corpus configured. Set CORPUS_BUCKET (or GCS_BUCKET_NAME) or CORPUS_DIR."
            )
        if self.use_vertexai:
            if not self.gcp_project_id:
                raise ConfigurationError(
                    "GOOGLE_CLOUD_PROJECT_ID is required when GOOGLE_GENAI_USE_VERTEXAI is enabled"
                )
        elif not self.gemini_api_key:
            raise ConfigurationError("GEMINI_API_KEY not found in environment")
        if self.corpus_bucket and self.uses_gcs_endpoint() and not (
            self.corpus_access_key_id and self.corpus_secret_access_key
        ):
            # The GCS XML API only accepts HMAC keys over the S3 protocol.
            raise ConfigurationError(
                "CORPUS_ACCESS_KEY_ID and CORPUS_SECRET_ACCESS_KEY (GCS HMAC keys) are required "
                "to read a Google Cloud Storage bucket; service-account credentials are not used"
            )
        if self.chunk_policy not in CHUNK_POLICIES:
            raise ConfigurationError(
                f"CHUNK_POLICY must be one of {CHUNK_POLICIES}, got {self.chunk_policy!r}"
            )
        if self.embedding_backend not in EMBEDDING_BACKENDS:
            raise ConfigurationError(
                f"EMBEDDING_BACKEND must be one of {EMBEDDING_BACKENDS}, got {self.embedding_backend!r}"
            )
        if self.top_k < 1:
            raise ConfigurationError("TOP_K must be at least 1")
        if not -1.0 <= self.min_score <= 1.0:
            raise ConfigurationError("MIN_SCORE must lie in [-1, 1]")
        if self.min_chunk_chars < 1:
            raise ConfigurationError("MIN_CHUNK_CHARS must be at least 1")
        if self.embed_concurrency < 1:
            raise ConfigurationError("EMBED_CONCURRENCY must be at least 1")
        if self.request_timeout <= 0:
            raise ConfigurationError("REQUEST_TIMEOUT_SECONDS must be positive")
        return self
