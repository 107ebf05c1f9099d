import logging
from typing import Optional, Type

from google import genai
from google.genai import types
from pydantic import BaseModel

from placement.core.config import get_settings

logger = logging.getLogger(__name__)


class GeminiClient:
    """Thin async wrapper returning the raw JSON text of a structured Gemini response."""

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None, temperature: float = 0.2):
        settings = get_settings()
        self.api_key = api_key if api_key is not None else settings.GOOGLE_API_KEY
        self.model = model or settings.GEMINI_MODEL
        self.temperature = temperature
        self._client = None

    def _get_client(self) -> genai.Client:
        if not self.api_key:
            raise RuntimeError("GEMINI_API_KEY is not configured")
        if self._client is None:
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    async def generate(self, prompt: str, response_schema: Type[BaseModel]) -> str:
        client = self._get_client()
        config = types.GenerateContentConfig(
            temperature=self.temperature,
            response_mime_type="application/json",
            response_schema=response_schema,
        )
        logger.info("Calling %s with schema %s", self.model, response_schema.__name__)
        response = await client.aio.models.generate_content(
            model=self.model,
            contents=prompt,
            config=config,
        )
        return response.text or ""
