"""Flatten a CompositeResponse into the JSON shape the dashboard renders."""

from trendfusion.models import CompositeResponse


def pair_key(subject: str, critic: str) -> str:
    """'openai', 'perplexity' -> 'openaiByPerplexity'."""
    return f"{subject}By{critic[:1].upper()}{critic[1:]}"


def unavailable_slots(result: CompositeResponse) -> list[str]:
    """Name every slot that holds a placeholder instead of model output."""
    slots: list[str] = []
    if not result.summary.success:
        slots.append("summary")
    slots.extend(f"generation:{name}" for name, g in result.generations.items() if not g.success)
    slots.extend(
        f"critique:{pair_key(subject, critic)}"
        for (subject, critic), c in result.critiques.items()
        if not c.success
    )
    return slots


def to_payload(result: CompositeResponse) -> dict:
    return {
        "topic": result.topic,
        "detailLevel": result.detail_level.value,
        "referee": result.referee,
        "summary": result.summary.text,
        "generationByProvider": {name: g.text for name, g in result.generations.items()},
        "critiqueByPair": {
            pair_key(subject, critic): c.text
            for (subject, critic), c in result.critiques.items()
        },
        "unavailable": unavailable_slots(result),
        "durationSec": round(result.total_duration_sec, 2),
    }
