"""Shared pytest fixtures."""

from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from config.config_loader import AppConfig, DefaultsConfig, ModelConfig, PromptsConfig, RoleConfig, ServerConfig
from trendfusion.models import CompositeResponse, DetailLevel, GenerationOutcome, Role
from trendfusion.providers.base import AIProvider, placeholder_text


def sample_roles() -> dict[str, RoleConfig]:
    return {
        "generation": RoleConfig(temperature=0.5, max_tokens=1200),
        "critique": RoleConfig(temperature=0.4, max_tokens=700),
        "fusion": RoleConfig(temperature=0.3, max_tokens=1500),
    }


@pytest.fixture
def sample_model_config() -> ModelConfig:
    return ModelConfig(
        name="test_model",
        sdk="openai",
        model="test-model-1",
        api_key_env="TEST_API_KEY",
        timeout_sec=30,
        display_name="Test",
        roles=sample_roles(),
    )


@pytest.fixture
def sample_prompts_config() -> PromptsConfig:
    return PromptsConfig(
        in_depth="In-depth analysis of {topic}:\n1. Summary\n2. Mega trends",
        high_level="High-level bullets about {topic}.",
        critique="Critique for accuracy and completeness:\n\n{report}",
        fusion=(
            "Topic: {topic}\n{provider_count} reports ({provider_names}), {critique_count} validations.\n"
            "Cite as {citation_example}, e.g. [{first_provider}].\n\n{generations}\n\n---Validations:\n{critiques}"
        ),
        system_generation="You are a trend analyst.",
        system_critique="You are a validation expert.",
        system_fusion="You are a summary writer.",
    )


@pytest.fixture
def sample_app_config(tmp_path: Path, sample_prompts_config: PromptsConfig) -> AppConfig:
    models = {
        name: ModelConfig(
            name=name,
            sdk=name,
            model=f"{name}-model",
            api_key_env=f"{name.upper()}_API_KEY",
            timeout_sec=60,
            display_name=display,
            roles=sample_roles(),
        )
        for name, display in [("openai", "OpenAI"), ("perplexity", "Perplexity"), ("gemini", "Gemini")]
    }
    return AppConfig(
        defaults=DefaultsConfig(
            referee="openai",
            output_dir=tmp_path / "reports",
            history_file=tmp_path / "reports" / "history.json",
            providers=["openai", "perplexity", "gemini"],
        ),
        models=models,
        prompts=sample_prompts_config,
        server=ServerConfig(cors_origins=["http://localhost:3000"]),
        available_providers={"openai", "perplexity", "gemini"},
    )


class MockProvider(AIProvider):
    """Test double AIProvider.

    Generation returns ``response_content``; critique and fusion return text
    derived from the provider name and prompt so results are deterministic.
    Roles listed in ``fail_roles`` raise instead.
    """

    def __init__(
        self,
        provider_name: str = "mock",
        response_content: str = "Mock response",
        fail_roles: set[Role] | None = None,
    ) -> None:
        self._name = provider_name
        self._response_content = response_content
        self._fail_roles = fail_roles or set()
        # Shadow the class method with an AsyncMock at the instance level so
        # tests can inspect awaits. ABC check passes because generate is
        # defined in the class body below.
        self.generate = AsyncMock(side_effect=self._respond)  # type: ignore[assignment]

    def name(self) -> str:
        return self._name

    def model_string(self) -> str:
        return "mock-model"

    async def _respond(self, prompt: str, role: Role = Role.GENERATION, system: str = "") -> GenerationOutcome:
        if role in self._fail_roles:
            raise RuntimeError(f"{self._name} {role.value} down")
        if role is Role.GENERATION:
            text = self._response_content
        elif role is Role.CRITIQUE:
            text = f"Critique by {self._name}: {prompt.rsplit(chr(10), 1)[-1]}"
        else:
            text = f"Fused by {self._name}"
        return GenerationOutcome(
            provider=self._name,
            role=role,
            success=True,
            text=text,
            model="mock-model",
            latency_sec=0.1,
            token_count=10,
        )

    async def generate(self, prompt: str, role: Role = Role.GENERATION, system: str = "") -> GenerationOutcome:  # type: ignore[override]
        """Default implementation; replaced by AsyncMock in __init__."""
        return await self._respond(prompt, role, system)


def outcome(provider: str, role: Role, text: str, success: bool = True, display_name: str | None = None) -> GenerationOutcome:
    if not success:
        text = placeholder_text(role, display_name or provider.title())
    return GenerationOutcome(provider=provider, role=role, success=success, text=text, model="mock-model")


@pytest.fixture
def sample_composite() -> CompositeResponse:
    """A finished report where Gemini's generation failed."""
    names = ["openai", "perplexity", "gemini"]
    generations = {
        "openai": outcome("openai", Role.GENERATION, "EV adoption is accelerating."),
        "perplexity": outcome("perplexity", Role.GENERATION, "Battery costs fell 14% in 2024."),
        "gemini": outcome("gemini", Role.GENERATION, "", success=False),
    }
    critiques = {
        (subject, critic): outcome(
            critic,
            Role.CRITIQUE,
            f"{critic} reviewed {subject}.",
            success=subject != "gemini",
        )
        for subject in names
        for critic in names
        if subject != critic
    }
    return CompositeResponse(
        topic="Electric Vehicles",
        detail_level=DetailLevel.IN_DEPTH,
        referee="openai",
        summary=outcome("openai", Role.FUSION, "## Key trends\n1. Adoption [OpenAI, Perplexity]"),
        generations=generations,
        critiques=critiques,
        total_duration_sec=12.5,
    )


@pytest.fixture
def mock_provider() -> MockProvider:
    return MockProvider()


@pytest.fixture
def three_mock_providers() -> dict[str, MockProvider]:
    return {
        "openai": MockProvider("openai", "EV-A"),
        "perplexity": MockProvider("perplexity", "EV-B"),
        "gemini": MockProvider("gemini", "EV-C"),
    }
