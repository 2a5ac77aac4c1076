"""Final fusion: merge every report and critique via the referee."""

import logging

from config.config_loader import PromptsConfig
from trendfusion.models import GenerationOutcome, Role
from trendfusion.prompts import build_fusion_prompt
from trendfusion.providers.base import AIProvider

logger = logging.getLogger(__name__)


async def fuse(
    topic: str,
    generations: dict[str, GenerationOutcome],
    critiques: dict[tuple[str, str], GenerationOutcome],
    referee: AIProvider,
    prompts: PromptsConfig,
    display_names: dict[str, str],
) -> GenerationOutcome:
    """Run the fusion call and return the referee's outcome.

    Args:
        topic: The researched topic.
        generations: Per-provider reports, placeholders included.
        critiques: Per-(subject, critic) reviews, placeholders included.
        referee: The provider that writes the unified summary.
        prompts: Prompt templates from config.
        display_names: Provider name -> citation label.

    Returns:
        GenerationOutcome with role FUSION. On failure its text is the
        fusion placeholder.
    """
    genuine = sum(1 for g in generations.values() if g.success)
    if not genuine:
        logger.warning("Fusing with no genuine reports; referee sees placeholders only")

    fusion_prompt = build_fusion_prompt(topic, generations, critiques, display_names, prompts)
    logger.info("Running fusion via %s", referee.name())

    return await referee.generate(fusion_prompt, role=Role.FUSION, system=prompts.system_fusion)
