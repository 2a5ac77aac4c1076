"""Fusion orchestration: parallel generation, cross-critique, referee fusion."""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Sequence

from config.config_loader import PromptsConfig
from trendfusion.critique import critique, ordered_pairs
from trendfusion.fusion import fuse
from trendfusion.models import CompositeResponse, DetailLevel, GenerationOutcome, Role
from trendfusion.prompts import build_prompt, parse_detail_level
from trendfusion.providers.base import AIProvider, failed_outcome

logger = logging.getLogger(__name__)

StageCallback = Callable[[str, Sequence[GenerationOutcome]], None]


class InvalidRequestError(ValueError):
    """Raised when a request cannot start: bad topic or detail level."""


async def _guarded(provider: AIProvider, role: Role, call: Awaitable[GenerationOutcome]) -> GenerationOutcome:
    """Await a provider call, converting any escaped exception to a placeholder.

    Never raises.
    """
    try:
        return await call
    except Exception as exc:
        logger.warning("Provider %s %s raised unexpectedly: %s", provider.name(), role.value, exc)
        return failed_outcome(provider, role, f"Unexpected error: {exc}")


class FusionOrchestrator:
    """Runs one topic through generation, critique and fusion.

    The provider mapping is fixed at construction; its order is the order of
    the panel in prompts and results.
    """

    def __init__(
        self,
        providers: dict[str, AIProvider],
        referee: str,
        prompts: PromptsConfig,
        max_topic_length: int = 80,
    ) -> None:
        if len(providers) < 2:
            raise ValueError(f"Need at least 2 providers for cross-validation, got {len(providers)}")
        if referee not in providers:
            raise ValueError(f"Referee '{referee}' is not among the providers: {', '.join(providers)}")
        for name, provider in providers.items():
            if provider.name() != name:
                raise ValueError(f"Provider registered as '{name}' reports its name as '{provider.name()}'")
        self._providers = dict(providers)
        self._referee = referee
        self._prompts = prompts
        self._max_topic_length = max_topic_length

    @property
    def provider_names(self) -> list[str]:
        return list(self._providers)

    @property
    def referee(self) -> str:
        return self._referee

    def display_names(self) -> dict[str, str]:
        return {name: p.display_name() for name, p in self._providers.items()}

    def _validate_topic(self, topic: str | None) -> str:
        topic = (topic or "").strip()
        if not topic:
            raise InvalidRequestError("Topic is required")
        if len(topic) > self._max_topic_length:
            raise InvalidRequestError(f"Topic must be at most {self._max_topic_length} characters")
        return topic

    async def _generate_all(self, prompt: str) -> dict[str, GenerationOutcome]:
        names = list(self._providers)
        results = await asyncio.gather(*(
            _guarded(
                self._providers[n],
                Role.GENERATION,
                self._providers[n].generate(prompt, role=Role.GENERATION, system=self._prompts.system_generation),
            )
            for n in names
        ))
        return dict(zip(names, results))

    async def _critique_all(self, generations: dict[str, GenerationOutcome]) -> dict[tuple[str, str], GenerationOutcome]:
        pairs = ordered_pairs(self._providers)
        results = await asyncio.gather(*(
            _guarded(
                self._providers[critic],
                Role.CRITIQUE,
                critique(generations[subject], self._providers[critic], self._prompts),
            )
            for subject, critic in pairs
        ))
        return dict(zip(pairs, results))

    async def run(
        self,
        topic: str,
        detail_level: str | DetailLevel = DetailLevel.HIGH_LEVEL,
        on_stage_complete: StageCallback | None = None,
    ) -> CompositeResponse:
        """Produce the composite report for one topic.

        Args:
            topic: Subject to research.
            detail_level: DetailLevel or one of its wire/CLI spellings.
            on_stage_complete: Optional callback invoked with the stage name
                ("generation", "critique", "fusion") and that stage's outcomes.

        Returns:
            CompositeResponse. Provider failures appear as placeholder
            outcomes, never as exceptions.

        Raises:
            InvalidRequestError: If the topic or detail level is invalid.
        """
        topic = self._validate_topic(topic)
        try:
            level = parse_detail_level(detail_level)
        except ValueError as exc:
            raise InvalidRequestError(str(exc)) from exc

        start = time.monotonic()
        prompt = build_prompt(topic, level, self._prompts)

        logger.info("Generating '%s' (%s) with %d providers", topic, level.name, len(self._providers))
        generations = await self._generate_all(prompt)
        genuine = [n for n, g in generations.items() if g.success]
        if len(genuine) < len(generations):
            logger.warning(
                "Only %d/%d providers produced a report. Fused summary quality is degraded.",
                len(genuine),
                len(generations),
            )
        if on_stage_complete:
            on_stage_complete("generation", list(generations.values()))

        critiques = await self._critique_all(generations)
        logger.info(
            "Critique complete: %d/%d genuine",
            sum(1 for c in critiques.values() if c.success),
            len(critiques),
        )
        if on_stage_complete:
            on_stage_complete("critique", list(critiques.values()))

        referee = self._providers[self._referee]
        summary = await _guarded(
            referee,
            Role.FUSION,
            fuse(topic, generations, critiques, referee, self._prompts, self.display_names()),
        )
        if on_stage_complete:
            on_stage_complete("fusion", [summary])

        return CompositeResponse(
            topic=topic,
            detail_level=level,
            referee=self._referee,
            summary=summary,
            generations=generations,
            critiques=critiques,
            total_duration_sec=time.monotonic() - start,
        )
