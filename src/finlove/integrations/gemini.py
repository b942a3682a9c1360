"""Gemini completion client for financial advice."""

from typing import Sequence

import google.generativeai as genai
import structlog

from finlove.domain.advice import AdviceClient
from finlove.domain.errors import ExternalServiceError

logger = structlog.get_logger(__name__)


class GeminiAdviceClient(AdviceClient):
    """Tries each configured model in order until one answers."""

    def __init__(
        self,
        api_key: str,
        models: Sequence[str],
        temperature: float = 0.7,
        max_output_tokens: int = 400,
    ):
        if not api_key:
            raise ExternalServiceError("Gemini API key is not configured")
        genai.configure(api_key=api_key)
        self.models = list(models)
        self.generation_config = {
            "temperature": temperature,
            "max_output_tokens": max_output_tokens,
        }

    def complete(self, prompt: str) -> str:
        last_error: Exception | None = None
        for model_name in self.models:
            try:
                model = genai.GenerativeModel(
                    model_name=model_name, generation_config=self.generation_config
                )
                response = model.generate_content(prompt)
                return response.text
            except Exception as e:
                last_error = e
                logger.warning("gemini_model_failed", model=model_name, error=str(e)[:100])
                if "API key" in str(e):
                    raise ExternalServiceError("Gemini API key was rejected") from e

        if last_error is not None and "429" in str(last_error):
            raise ExternalServiceError("Too many requests, try again shortly") from last_error
        raise ExternalServiceError("Advice service is unavailable") from last_error
