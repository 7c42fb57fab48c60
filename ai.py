"""
Gemini text generation.

Wraps google-genai's async client behind a single call:
``await generator.generate(prompt, config) -> str``.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from errors import GenerationFailure

logger = logging.getLogger(__name__)

GOOGLE_API_KEY = os.getenv("GOOGLE_API_KEY", "")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")


@dataclass(frozen=True)
class GenerationConfig:
    temperature: float = 0.7
    top_k: int = 1
    top_p: float = 0.8
    max_output_tokens: int = 2048

    def to_genai(self) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(
            temperature=self.temperature,
            top_k=self.top_k,
            top_p=self.top_p,
            max_output_tokens=self.max_output_tokens,
        )


PROBLEM_CONFIG = GenerationConfig(temperature=0.7)
HINT_CONFIG = GenerationConfig(temperature=0.7)
FEEDBACK_CONFIG = GenerationConfig(temperature=0.7)
# Lower temperature for more deterministic solutions
SOLUTION_CONFIG = GenerationConfig(temperature=0.5)


class GeminiClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        client: Optional[genai.Client] = None,
    ):
        self.api_key = api_key if api_key is not None else GOOGLE_API_KEY
        self.model = model or GEMINI_MODEL
        self._client = client

    @property
    def client(self) -> genai.Client:
        """Lazy-load the Gemini client so the app can start without a key."""
        if self._client is None:
            if not self.api_key:
                raise GenerationFailure("GOOGLE_API_KEY not configured on server.")
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    async def generate(self, prompt: str, config: GenerationConfig = PROBLEM_CONFIG) -> str:
        try:
            resp = await self.client.aio.models.generate_content(
                model=self.model,
                contents=prompt,
                config=config.to_genai(),
            )
        except genai_errors.APIError as e:
            # an unknown model or bad key surfaces here, e.g. "not found for API version"
            logger.error("Gemini API error (model=%s): %s", self.model, e)
            raise GenerationFailure(f"Gemini API error: {e}") from e
        except httpx.HTTPError as e:
            logger.error("Gemini transport error: %s", e)
            raise GenerationFailure(f"Gemini transport error: {e}") from e

        text = getattr(resp, "text", None)
        if not text or not text.strip():
            logger.warning("Empty response from Gemini (model=%s)", self.model)
            raise GenerationFailure("Failed to generate response from AI")

        logger.debug("Generated text: %s", text)
        return text.strip()
