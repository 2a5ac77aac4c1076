"""Abstract base for all text-generation providers."""

import asyncio
import logging
import os
import time
from abc import ABC, abstractmethod

from config.config_loader import ModelConfig
from trendfusion.models import GenerationOutcome, Role

logger = logging.getLogger(__name__)

FUSION_PLACEHOLDER = "Error generating unified summary."


class ProviderError(Exception):
    """Raised when a provider call fails."""

    def __init__(self, provider_name: str, message: str) -> None:
        self.provider_name = provider_name
        super().__init__(f"[{provider_name}] {message}")


def placeholder_text(role: Role, display_name: str) -> str:
    """Fixed marker text substituted for a failed call's output."""
    if role is Role.GENERATION:
        return f"(No {display_name} output)"
    if role is Role.CRITIQUE:
        return f"(Validation unavailable from {display_name}.)"
    return FUSION_PLACEHOLDER


def failed_outcome(provider: "AIProvider", role: Role, detail: str, latency_sec: float = 0.0) -> GenerationOutcome:
    return GenerationOutcome(
        provider=provider.name(),
        role=role,
        success=False,
        text=placeholder_text(role, provider.display_name()),
        error_detail=detail,
        model=provider.model_string(),
        latency_sec=latency_sec,
    )


class AIProvider(ABC):
    """Abstract base for all text-generation providers."""

    @abstractmethod
    def name(self) -> str:
        """Return the short provider name (e.g. 'openai', 'gemini')."""
        ...

    @abstractmethod
    def model_string(self) -> str:
        """Return the actual model identifier string."""
        ...

    def display_name(self) -> str:
        """Human-facing label used in prompts and citations."""
        return self.name().title()

    @abstractmethod
    async def generate(self, prompt: str, role: Role = Role.GENERATION, system: str = "") -> GenerationOutcome:
        """Generate text for the given prompt.

        Args:
            prompt: The full prompt text to send.
            role: Which pipeline stage the call serves; selects temperature and budget.
            system: Optional system instruction.

        Returns:
            GenerationOutcome. Failures come back with success=False and a
            placeholder text rather than as an exception.
        """
        ...


class SDKProvider(AIProvider):
    """Provider backed by a vendor SDK client and a ModelConfig.

    Subclasses implement ``_complete``, which performs one request and parses
    that vendor's response envelope, raising ProviderError on any problem.
    """

    def __init__(self, config: ModelConfig) -> None:
        self._config = config
        api_key = os.environ.get(config.api_key_env, "").strip()
        if not api_key:
            raise ProviderError(config.name, f"Missing API key: {config.api_key_env}")
        self._client = self._make_client(api_key)

    @abstractmethod
    def _make_client(self, api_key: str):
        ...

    @abstractmethod
    async def _complete(self, prompt: str, system: str, temperature: float, max_tokens: int) -> tuple[str, int | None]:
        """Return (text, token_count) or raise ProviderError."""
        ...

    def name(self) -> str:
        return self._config.name

    def model_string(self) -> str:
        return self._config.model

    def display_name(self) -> str:
        return self._config.display_name or super().display_name()

    async def generate(self, prompt: str, role: Role = Role.GENERATION, system: str = "") -> GenerationOutcome:
        if not prompt.strip():
            raise ValueError("prompt must not be empty")

        budget = self._config.budget(role.value)
        start = time.monotonic()
        try:
            text, token_count = await asyncio.wait_for(
                self._complete(prompt, system, budget.temperature, budget.max_tokens),
                timeout=self._config.timeout_sec,
            )
        except TimeoutError:
            detail = f"Request timed out after {self._config.timeout_sec}s"
        except ProviderError as exc:
            detail = str(exc)
        except Exception as exc:
            detail = str(ProviderError(self._config.name, f"API call failed: {exc}"))
        else:
            latency = time.monotonic() - start
            logger.info(
                "%s %s: %.2fs, %s tokens",
                self._config.display_name,
                role.value,
                latency,
                token_count,
            )
            return GenerationOutcome(
                provider=self._config.name,
                role=role,
                success=True,
                text=text,
                model=self._config.model,
                latency_sec=latency,
                token_count=token_count,
            )

        latency = time.monotonic() - start
        logger.warning("%s %s failed after %.2fs: %s", self._config.display_name, role.value, latency, detail)
        return failed_outcome(self, role, detail, latency)
