"""Gemini-backed verdict service built on the google-genai SDK."""

from __future__ import annotations

import logging
from typing import Any

from google import genai
from google.genai import types

from bouncer.service.types import GenerationResult, ServiceUsage

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash"
TEMPERATURE = 0.1
CANDIDATE_COUNT = 1


class GeminiVerdictService:
    """Counts tokens and generates verdicts with a single Gemini model.

    Generation runs at low temperature with one candidate so that repeated
    runs over the same diff give the same answer as often as the service
    allows.
    """

    def __init__(self, api_key: str, *, model: str = DEFAULT_MODEL, client: Any | None = None):
        self.model = model
        self._client = client if client is not None else genai.Client(api_key=api_key)

    def count_tokens(self, text: str) -> int:
        response = self._client.models.count_tokens(model=self.model, contents=text)
        total = response.total_tokens
        if total is None:
            raise ValueError(f"count_tokens returned no total for model {self.model}")
        logger.debug("count_tokens(%d chars) = %d", len(text), total)
        return total

    def generate(self, prompt: str) -> GenerationResult:
        response = self._client.models.generate_content(
            model=self.model,
            contents=prompt,
            config=types.GenerateContentConfig(
                temperature=TEMPERATURE,
                candidate_count=CANDIDATE_COUNT,
            ),
        )
        metadata = response.usage_metadata
        usage = ServiceUsage(
            prompt_tokens=getattr(metadata, "prompt_token_count", None),
            candidate_tokens=getattr(metadata, "candidates_token_count", None),
            total_tokens=getattr(metadata, "total_token_count", None),
        )
        logger.debug("generate_content usage: %s", usage)
        return GenerationResult(text=response.text or "", usage=usage)
