"""OpenRouter HTTP adapter."""
from typing import Optional

from adapters.openai import OpenAIAdapter

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"


class OpenRouterAdapter(OpenAIAdapter):
    """
    Adapter for OpenRouter API.

    OpenRouter provides access to multiple LLM providers through a unified
    OpenAI-compatible API, so requests and responses use the OpenAI format.
    Model identifiers carry the provider prefix (e.g. "openai/gpt-4o-mini").

    API Reference: https://openrouter.ai/docs
    Default endpoint: https://openrouter.ai/api/v1
    """

    def __init__(
        self,
        base_url: str = OPENROUTER_BASE_URL,
        timeout: int = 60,
        max_retries: int = 3,
        api_key: Optional[str] = None,
        headers: Optional[dict[str, str]] = None,
    ):
        default_headers = {"X-Title": "kubernetes-troubleshooter"}
        default_headers.update(headers or {})
        super().__init__(
            base_url=base_url,
            timeout=timeout,
            max_retries=max_retries,
            api_key=api_key,
            headers=default_headers,
        )
