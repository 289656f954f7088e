"""
Google Gemini text generation.

The client is built from explicit settings so tests can hand in a fake key
or replace the client altogether.
"""

import logging
from typing import Protocol

from google import genai

from ..core.config import Settings
from ..core.errors import ConfigurationError, InvalidModelResponseError

logger = logging.getLogger(__name__)


class ModelClient(Protocol):
    async def generate(self, prompt: str) -> str: ...


class GeminiClient:
    def __init__(self, api_key: str, model_name: str) -> None:
        if not api_key:
            raise ConfigurationError("Gemini API key not provided")
        self.model_name = model_name
        self._client = genai.Client(api_key=api_key)

    async def generate(self, prompt: str) -> str:
        response = await self._client.aio.models.generate_content(
            model=self.model_name,
            contents=prompt,
        )
        text = response.text
        if not text or not isinstance(text, str):
            raise InvalidModelResponseError("Invalid response format from Gemini API.")

        logger.debug("Raw response from Gemini API: %s", text)
        return text


def create_model_client(settings: Settings) -> GeminiClient:
    """
    Raises:
        ConfigurationError: GEMINI_API_KEY (or API_KEY) is not set.
    """
    return GeminiClient(api_key=settings.GEMINI_API_KEY or "", model_name=settings.GEMINI_MODEL)
