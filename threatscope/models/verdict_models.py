"""
Verdict Data Models — the immutable output of one assessment.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from threatscope.models.rule_models import AlertTrigger, ThreatLevel
from threatscope.models.signal_models import DetectorTrace, Signal, SignalCategory


class AggregateScore(BaseModel):
    """Aggregator output, kept for explainability."""

    raw_score: float
    risk_total: float = 0.0
    mitigation_total: float = 0.0
    multiplier: float = 1.0
    applied_multipliers: list[str] = Field(default_factory=list)
    category_counts: dict[SignalCategory, int] = Field(default_factory=dict)
    capped: bool = False

    model_config = {"frozen": True}


class FalsePositiveAdjustment(BaseModel):
    """Bounded downward adjustment produced fresh for each assessment."""

    applied_filters: list[str] = Field(default_factory=list)
    dampening: float = Field(default=0.0, ge=0)
    confidence: float = Field(default=0.8, ge=0.0, le=1.0)

    model_config = {"frozen": True}


class ThreatAssessment(BaseModel):
    """The complete verdict for one subject. Never updated in place."""

    subject: str
    profile: str
    score: int = Field(..., description="Final score rounded for display")
    exact_score: float = Field(..., description="Final score, unrounded")
    raw_score: float = Field(..., description="Aggregated score before dampening")
    level: ThreatLevel
    signals: tuple[Signal, ...] = ()
    false_positive: FalsePositiveAdjustment = Field(default_factory=FalsePositiveAdjustment)
    triggers: list[AlertTrigger] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    confidence: float = Field(..., ge=0.0, le=1.0)
    detectors: list[DetectorTrace] = Field(default_factory=list)
    applied_multipliers: list[str] = Field(default_factory=list)
    summary: str = ""

    model_config = {"frozen": True}

    @property
    def unavailable_detectors(self) -> list[str]:
        return [t.detector for t in self.detectors if t.status.value == "unavailable"]


class AuditEntry(BaseModel):
    """Audit metadata for one verdict."""

    subject: str
    profile: str
    score: int
    level: ThreatLevel
    confidence: float
    triggered_rules: list[str] = Field(default_factory=list)
    unavailable_detectors: list[str] = Field(default_factory=list)

    @classmethod
    def from_assessment(cls, assessment: ThreatAssessment) -> "AuditEntry":
        return cls(
            subject=assessment.subject,
            profile=assessment.profile,
            score=assessment.score,
            level=assessment.level,
            confidence=assessment.confidence,
            triggered_rules=[t.rule_id for t in assessment.triggers],
            unavailable_detectors=assessment.unavailable_detectors,
        )
