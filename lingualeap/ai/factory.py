from __future__ import annotations
import os
from .base import LLMClient
from .gemini import DEFAULT_MODEL, GeminiClient

def get_llm_client(provider: str | None = None, model: str | None = None) -> LLMClient:
    provider = (provider or os.getenv("LINGUALEAP_LLM_PROVIDER", "gemini")).lower().strip()

    if provider == "gemini":
        return GeminiClient(model=model or DEFAULT_MODEL)

    raise ValueError(f"Unknown LLM provider: {provider}")
