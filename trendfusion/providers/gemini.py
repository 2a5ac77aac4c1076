"""Gemini provider using google-genai SDK with native async."""

from google import genai
from google.genai import types as genai_types

from trendfusion.providers.base import ProviderError, SDKProvider


def extract_gemini_text(response, provider_name: str) -> tuple[str, int | None]:
    """Join the text parts of the first candidate.

    Raises ProviderError when there is no candidate, the candidate has no
    content or parts, or every part is blank.
    """
    candidates = response.candidates or []
    if not candidates:
        raise ProviderError(provider_name, "No candidates in response")

    content = candidates[0].content
    if content is None or not content.parts:
        raise ProviderError(provider_name, "Candidate has no content parts")

    text = "\n".join(part.text for part in content.parts if part.text).strip()
    if not text:
        raise ProviderError(provider_name, "Empty response text")

    token_count: int | None = None
    if response.usage_metadata:
        token_count = response.usage_metadata.total_token_count
    return text, token_count


class GeminiProvider(SDKProvider):
    """Google Gemini provider via google-genai SDK."""

    def _make_client(self, api_key: str) -> genai.Client:
        return genai.Client(api_key=api_key)

    async def _complete(self, prompt: str, system: str, temperature: float, max_tokens: int) -> tuple[str, int | None]:
        response = await self._client.aio.models.generate_content(
            model=self._config.model,
            contents=prompt,
            config=genai_types.GenerateContentConfig(
                system_instruction=system or None,
                temperature=temperature,
                max_output_tokens=max_tokens,
            ),
        )
        return extract_gemini_text(response, self._config.name)
