"""Perplexity Sonar provider using openai SDK (OpenAI-compatible API)."""

from dataclasses import replace

from openai import AsyncOpenAI

from config.config_loader import ModelConfig
from trendfusion.providers.base import ProviderError, SDKProvider
from trendfusion.providers.openai_provider import chat_messages, extract_chat_text

_DEFAULT_BASE_URL = "https://api.perplexity.ai"


class PerplexityProvider(SDKProvider):
    """Perplexity provider via OpenAI-compatible API."""

    def __init__(self, config: ModelConfig) -> None:
        base_url = config.base_url or _DEFAULT_BASE_URL
        if not base_url.startswith("https://"):
            raise ProviderError(config.name, f"base_url must use https: {base_url}")
        super().__init__(replace(config, base_url=base_url))

    def _make_client(self, api_key: str) -> AsyncOpenAI:
        return AsyncOpenAI(api_key=api_key, base_url=self._config.base_url)

    async def _complete(self, prompt: str, system: str, temperature: float, max_tokens: int) -> tuple[str, int | None]:
        response = await self._client.chat.completions.create(
            model=self._config.model,
            messages=chat_messages(prompt, system),
            temperature=temperature,
            max_tokens=max_tokens,
        )
        return extract_chat_text(response, self._config.name)
