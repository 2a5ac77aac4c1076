"""Pydantic schemas for API requests and responses."""

from pydantic import BaseModel, ConfigDict, Field

from trendfusion.models import CompositeResponse
from trendfusion.payload import to_payload


class FusedReportRequest(BaseModel):
    """Request for a fused trend report."""

    model_config = ConfigDict(populate_by_name=True)

    # Topic and depth are validated by the orchestrator so that every input
    # problem surfaces as the same 400 error shape.
    topic: str = Field(default="", description="Subject to research")
    detail_level: str = Field(
        default="low",
        alias="detailLevel",
        description="'high' for in-depth analysis, 'low' for a high-level summary",
    )


class FusedReportResponse(BaseModel):
    """Fused summary plus every provider report and cross-validation."""

    model_config = ConfigDict(populate_by_name=True)

    topic: str
    detail_level: str = Field(alias="detailLevel")
    referee: str
    summary: str
    generation_by_provider: dict[str, str] = Field(alias="generationByProvider")
    critique_by_pair: dict[str, str] = Field(alias="critiqueByPair")
    unavailable: list[str] = Field(
        default_factory=list,
        description="Slots holding a placeholder instead of model output",
    )
    duration_sec: float = Field(alias="durationSec")

    @classmethod
    def from_composite(cls, result: CompositeResponse) -> "FusedReportResponse":
        return cls.model_validate(to_payload(result))


class ErrorResponse(BaseModel):
    """Request-level failure."""

    error: str


class HealthResponse(BaseModel):
    """Configured panel; no outbound calls are made."""

    status: str
    providers: list[str]
    referee: str
