"""Construction of the shared google-genai client (Gemini API or Vertex AI)."""

import logging

import google.genai as genai
from google.genai import types

from fidgetech_rag.config import Settings
from fidgetech_rag.errors import ConfigurationError

logger = logging.getLogger(__name__)


def build_genai_client(settings: Settings) -> genai.Client:
    http_options = types.HttpOptions(timeout=int(settings.request_timeout * 1000))
    if settings.use_vertexai:
        if not settings.gcp_project_id:
            raise ConfigurationError("GOOGLE_CLOUD_PROJECT_ID is required for Vertex AI")
        logger.info(
            f"Using Vertex AI | project={settings.gcp_project_id} | location={settings.gcp_location}"
        )
        return genai.Client(
            vertexai=True,
            project=settings.gcp_project_id,
            location=settings.gcp_location,
            http_options=http_options,
        )
    if not settings.gemini_api_key:
        raise ConfigurationError("GEMINI_API_KEY not found in environment")
    logger.info("Using Gemini API key authentication")
    return genai.Client(api_key=settings.gemini_api_key, http_options=http_options)
