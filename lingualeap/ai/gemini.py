from __future__ import annotations

from typing import Any, Optional, Type

from pydantic import ValidationError

from .base import LLMClient, LLMFlowError, T

DEFAULT_MODEL = "gemini-2.0-flash"


class GeminiClient(LLMClient):
    """
    Google Gemini through the `google-genai` SDK, using JSON structured output.
    The API key comes from GEMINI_API_KEY / GOOGLE_API_KEY unless given.
    """

    def __init__(self, model: str = DEFAULT_MODEL, api_key: Optional[str] = None, client: Any = None):
        self.model = model
        self.api_key = api_key
        self._client = client

    @property
    def name(self) -> str:
        return "gemini"

    def _ensure_client(self) -> Any:
        if self._client is not None:
            return self._client
        from google import genai

        try:
            self._client = genai.Client(api_key=self.api_key) if self.api_key else genai.Client()
        except ValueError as e:
            raise LLMFlowError(f"Gemini client could not be created (missing API key?): {e}") from e
        return self._client

    def generate(self, prompt: str, output_model: Type[T], *, model: str | None = None) -> T:
        from google.genai import errors, types

        client = self._ensure_client()
        try:
            response = client.models.generate_content(
                model=model or self.model,
                contents=prompt,
                config=types.GenerateContentConfig(
                    response_mime_type="application/json",
                    response_schema=output_model,
                ),
            )
        except errors.APIError as e:
            raise LLMFlowError(f"Gemini request failed: {e}") from e

        text = getattr(response, "text", None)
        if not text:
            raise LLMFlowError("Gemini returned an empty response")
        try:
            return output_model.model_validate_json(text)
        except ValidationError as e:
            raise LLMFlowError(f"Gemini response did not match {output_model.__name__}: {e}") from e
