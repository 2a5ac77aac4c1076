"""Pure dataclasses for the trend fusion pipeline. No logic, no deps."""

from dataclasses import dataclass, field
from enum import Enum


class DetailLevel(str, Enum):
    HIGH_LEVEL = "low"
    IN_DEPTH = "high"


class Role(str, Enum):
    GENERATION = "generation"
    CRITIQUE = "critique"
    FUSION = "fusion"


@dataclass(frozen=True)
class GenerationOutcome:
    provider: str          # "openai", "perplexity", "gemini"
    role: Role
    success: bool
    text: str              # model output, or a fixed placeholder when success is False
    error_detail: str = ""
    model: str = ""
    latency_sec: float = field(default=0.0, compare=False)
    token_count: int | None = field(default=None, compare=False)


@dataclass
class CompositeResponse:
    topic: str
    detail_level: DetailLevel
    referee: str
    summary: GenerationOutcome
    generations: dict[str, GenerationOutcome]
    critiques: dict[tuple[str, str], GenerationOutcome]   # (subject, critic)
    total_duration_sec: float = field(default=0.0, compare=False)


@dataclass
class SavedReport:
    topic: str
    detail_level: str
    summary: str
    details: dict
    last_updated: str      # ISO-8601
