"""Prompt construction for the generation, critique and fusion stages."""

from config.config_loader import PromptsConfig
from trendfusion.models import DetailLevel, GenerationOutcome

_DETAIL_ALIASES = {
    "low": DetailLevel.HIGH_LEVEL,
    "high-level": DetailLevel.HIGH_LEVEL,
    "highlevel": DetailLevel.HIGH_LEVEL,
    "high": DetailLevel.IN_DEPTH,
    "in-depth": DetailLevel.IN_DEPTH,
    "indepth": DetailLevel.IN_DEPTH,
}


def parse_detail_level(value: str | DetailLevel) -> DetailLevel:
    """Accept wire values ("high"/"low") and the CLI spellings."""
    if isinstance(value, DetailLevel):
        return value
    try:
        return _DETAIL_ALIASES[value.strip().lower()]
    except KeyError:
        raise ValueError(f"Unknown detail level: {value!r}") from None


def build_prompt(topic: str, detail_level: DetailLevel, prompts: PromptsConfig) -> str:
    template = prompts.in_depth if detail_level is DetailLevel.IN_DEPTH else prompts.high_level
    return template.format(topic=topic)


def build_critique_prompt(subject_text: str, prompts: PromptsConfig) -> str:
    return prompts.critique.format(report=subject_text)


def critique_label(subject: str, critic: str, display_names: dict[str, str]) -> str:
    return f"{display_names.get(subject, subject)} by {display_names.get(critic, critic)}"


def build_fusion_prompt(
    topic: str,
    generations: dict[str, GenerationOutcome],
    critiques: dict[tuple[str, str], GenerationOutcome],
    display_names: dict[str, str],
    prompts: PromptsConfig,
) -> str:
    """Embed every generation and critique, labeled, into the fusion template.

    Failed outcomes contribute their placeholder text so the referee can see
    which sources were unavailable.
    """
    labels = [display_names.get(name, name) for name in generations]

    generation_parts = [
        f"---{display_names.get(name, name)} Main Output:\n{outcome.text}"
        for name, outcome in generations.items()
    ]
    critique_parts = [
        f"{critique_label(subject, critic, display_names)}:\n{outcome.text}"
        for (subject, critic), outcome in critiques.items()
    ]

    return prompts.fusion.format(
        topic=topic,
        provider_count=len(generations),
        provider_names=", ".join(labels),
        critique_count=len(critiques),
        citation_example=", ".join(f"[{label}]" for label in labels),
        first_provider=labels[0] if labels else "",
        generations="\n\n".join(generation_parts),
        critiques="\n\n".join(critique_parts),
    )
