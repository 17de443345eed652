from __future__ import annotations

from typing import Generic, Literal, Optional, TypeVar

from pydantic import Field, field_validator

from .common import CamelModel

T = TypeVar("T")


class _Scored(CamelModel):
    confidence_score: float

    @field_validator("confidence_score", mode="before")
    @classmethod
    def _clamp(cls, value: object) -> float:
        score = float(value)  # type: ignore[arg-type]
        return min(max(score, 0.0), 1.0)


class AISuggestion(_Scored):
    remediation_steps: str


class AIEnhancement(_Scored):
    executive_summary: str
    prioritized_recommendations: str


class AISummary(_Scored):
    summary: str
    key_insights: str


class AIResult(CamelModel, Generic[T]):
    """Outcome of an AI call. ``data`` is always usable; ``degraded`` marks fallback content."""

    status: Literal["ok", "degraded"]
    data: T
    reason: Optional[str] = None

    @property
    def degraded(self) -> bool:
        return self.status == "degraded"


class RemediationRequest(CamelModel):
    vulnerability_description: str = Field(min_length=1)
    device_information: str = ""


class EnhanceRequest(CamelModel):
    scan_report: str = Field(min_length=1)


class SummarizeRequest(CamelModel):
    scan_data: str = Field(min_length=1)
