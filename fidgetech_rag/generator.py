"""Answer generation with a Gemini model through google-genai."""

import asyncio
import logging
from typing import Optional

from google.genai import types

from fidgetech_rag.errors import GenerationError
from fidgetech_rag.prompts import FALLBACK_ANSWER

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


def extract_text(response) -> Optional[str]:
    """Return the first candidate's text, or None if the response is missing any part of it."""
    candidates = getattr(response, "candidates", None)
    if not candidates:
        return None
    content = getattr(candidates[0], "content", None)
    parts = getattr(content, "parts", None) if content is not None else None
    if not parts:
        return None
    text = getattr(parts[0], "text", None)
    if not isinstance(text, str) or not text.strip():
        return None
    return text.strip()


class AnswerGenerator:
    async def generate(self, prompt: str) -> str:
        raise NotImplementedError


class GeminiAnswerGenerator(AnswerGenerator):
    """Single-turn generation. No conversation state is kept between calls."""

    def __init__(
        self,
        client,
        model: str = "gemini-1.5-flash",
        timeout: float = DEFAULT_TIMEOUT,
        fallback: str = FALLBACK_ANSWER,
    ):
        self.client = client
        self.model = model
        self.timeout = timeout
        self.fallback = fallback
        self.config = types.GenerateContentConfig(
            max_output_tokens=2048,
            temperature=0.2,
            top_p=0.9,
            top_k=40,
        )

    async def generate(self, prompt: str) -> str:
        try:
            response = await asyncio.wait_for(
                self.client.aio.models.generate_content(
                    model=self.model,
                    contents=prompt,
                    config=self.config,
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise GenerationError(
                f"Generation timed out after {self.timeout:.0f}s", {"model": self.model}
            ) from e
        except Exception as e:
            raise GenerationError(f"Generation request failed: {e}", {"model": self.model}) from e

        text = extract_text(response)
        if text is None:
            logger.warning(f"Generator response had no usable text, using fallback | model={self.model}")
            return self.fallback
        logger.info(f"LLM response received | answer_length={len(text)}")
        return text
