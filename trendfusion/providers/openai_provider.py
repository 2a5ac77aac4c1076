"""OpenAI provider using openai SDK with native async."""

from openai import AsyncOpenAI

from trendfusion.providers.base import ProviderError, SDKProvider


def extract_chat_text(response, provider_name: str) -> tuple[str, int | None]:
    """Pull the answer out of a chat-completions envelope.

    Shared by every OpenAI-compatible endpoint. Raises ProviderError when the
    choice list is empty or the first message carries no text.
    """
    choice = response.choices[0] if response.choices else None
    if choice is None or choice.message is None:
        raise ProviderError(provider_name, "No choices in response")

    content = (choice.message.content or "").strip()
    if not content:
        raise ProviderError(provider_name, "Empty response content")

    token_count: int | None = None
    if response.usage:
        token_count = response.usage.total_tokens
    return content, token_count


def chat_messages(prompt: str, system: str) -> list[dict[str, str]]:
    messages = []
    if system:
        messages.append({"role": "system", "content": system})
    messages.append({"role": "user", "content": prompt})
    return messages


class OpenAIProvider(SDKProvider):
    """OpenAI provider via openai SDK."""

    def _make_client(self, api_key: str) -> AsyncOpenAI:
        return AsyncOpenAI(api_key=api_key)

    async def _complete(self, prompt: str, system: str, temperature: float, max_tokens: int) -> tuple[str, int | None]:
        response = await self._client.chat.completions.create(
            model=self._config.model,
            messages=chat_messages(prompt, system),
            temperature=temperature,
            max_tokens=max_tokens,
        )
        return extract_chat_text(response, self._config.name)
