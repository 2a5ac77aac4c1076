"""Cross-validation: every provider critiques every other provider's report."""

import itertools
import logging
from collections.abc import Iterable

from config.config_loader import PromptsConfig
from trendfusion.models import GenerationOutcome, Role
from trendfusion.prompts import build_critique_prompt
from trendfusion.providers.base import AIProvider, failed_outcome

logger = logging.getLogger(__name__)


def ordered_pairs(names: Iterable[str]) -> list[tuple[str, str]]:
    """All (subject, critic) pairs with subject != critic: n*(n-1) of them."""
    return list(itertools.permutations(names, 2))


async def critique(
    subject: GenerationOutcome,
    critic: AIProvider,
    prompts: PromptsConfig,
) -> GenerationOutcome:
    """Ask ``critic`` to review ``subject``.

    A subject that never produced a report is not sent for review; the pair
    gets the critic's placeholder instead. Reviewing the generation
    placeholder text would only yield a critique of an error message.
    """
    if subject.provider == critic.name():
        raise ValueError(f"{critic.name()} cannot critique its own output")

    if not subject.success:
        logger.info("Skipping %s critique of %s: no report to review", critic.name(), subject.provider)
        return failed_outcome(critic, Role.CRITIQUE, f"No {subject.provider} output to review")

    return await critic.generate(
        build_critique_prompt(subject.text, prompts),
        role=Role.CRITIQUE,
        system=prompts.system_critique,
    )
