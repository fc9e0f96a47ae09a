"""
Scoring Profile Models — read-only configuration of one engine instantiation.

A profile fixes the scale, level thresholds, category multiplier table,
false-positive filters, alert rules and recommendation text. Profiles are
validated once at startup; invalid ones raise ConfigurationError upstream.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, field_validator, model_validator

from threatscope.models.rule_models import AlertRule, ThreatLevel
from threatscope.models.signal_models import SignalCategory


class ScoreScale(BaseModel):
    minimum: float = 0.0
    maximum: float = 100.0

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _check_bounds(self) -> "ScoreScale":
        if self.maximum <= self.minimum:
            raise ValueError(f"Scale maximum {self.maximum} must exceed minimum {self.minimum}")
        return self

    def clamp(self, value: float) -> float:
        return max(self.minimum, min(self.maximum, value))


class LevelThresholds(BaseModel):
    """Lower bounds (inclusive) of each level above MINIMAL."""

    critical: float
    high: float
    medium: float
    low: float

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _check_descending(self) -> "LevelThresholds":
        if not (self.critical > self.high > self.medium > self.low):
            raise ValueError(
                "Level thresholds must be strictly descending: "
                f"critical={self.critical} high={self.high} medium={self.medium} low={self.low}"
            )
        return self

    def ordered(self) -> list[tuple[ThreatLevel, float]]:
        return [
            (ThreatLevel.CRITICAL, self.critical),
            (ThreatLevel.HIGH, self.high),
            (ThreatLevel.MEDIUM, self.medium),
            (ThreatLevel.LOW, self.low),
        ]


class LowSeverityCap(BaseModel):
    """Stops many trivial signals from compounding into a severe score."""

    max_signal_weight: float = Field(..., ge=0)
    ceiling: float = Field(..., ge=0)

    model_config = {"frozen": True}


class MultiplierRule(BaseModel):
    """Amplifies the total when every listed category reaches its count."""

    name: str = Field(..., min_length=1)
    factor: float = Field(..., gt=1.0)
    min_counts: dict[SignalCategory, int] = Field(..., min_length=1)

    model_config = {"frozen": True}

    @field_validator("min_counts")
    @classmethod
    def _positive_counts(cls, value: dict[SignalCategory, int]) -> dict[SignalCategory, int]:
        for category, count in value.items():
            if count < 1:
                raise ValueError(f"Count for category '{category.value}' must be >= 1, got {count}")
        return value

    def matches(self, counts: dict[SignalCategory, int]) -> bool:
        return all(counts.get(cat, 0) >= n for cat, n in self.min_counts.items())


# ── False-positive filters ──


class FilterContext(BaseModel):
    """Facts about the subject that false-positive filters may inspect."""

    subject: str = ""
    sender: str | None = None
    recipient: str | None = None
    method: str | None = None
    observed_at: datetime | None = None


class _FilterBase(BaseModel):
    name: str = Field(..., min_length=1)
    amount: float = Field(..., gt=0, description="Dampening contributed when the filter matches")

    model_config = {"frozen": True}


class AllowListFilter(_FilterBase):
    type: Literal["allow_list"] = "allow_list"
    target: Literal["subject", "sender", "recipient"] = "recipient"
    addresses: list[str] = Field(default_factory=list)

    @field_validator("addresses")
    @classmethod
    def _lowercase(cls, value: list[str]) -> list[str]:
        return [a.lower() for a in value]

    def matches(self, ctx: FilterContext, kinds: frozenset[str]) -> bool:
        address = getattr(ctx, self.target)
        return bool(address) and address.lower() in self.addresses


class CanonicalOperationFilter(_FilterBase):
    type: Literal["canonical_operation"] = "canonical_operation"
    methods: list[str] = Field(..., min_length=1)

    def matches(self, ctx: FilterContext, kinds: frozenset[str]) -> bool:
        return ctx.method is not None and ctx.method in self.methods


class TimeWindowFilter(_FilterBase):
    type: Literal["time_window"] = "time_window"
    start_hour: int = Field(..., ge=0, le=23)
    end_hour: int = Field(..., ge=0, le=23)

    def matches(self, ctx: FilterContext, kinds: frozenset[str]) -> bool:
        if ctx.observed_at is None:
            return False
        hour = ctx.observed_at.hour
        if self.start_hour <= self.end_hour:
            return self.start_hour <= hour <= self.end_hour
        # Window wraps past midnight
        return hour >= self.start_hour or hour <= self.end_hour


class SignalKindFilter(_FilterBase):
    """Signal kinds previously corrected as false positives."""

    type: Literal["signal_kind"] = "signal_kind"
    kinds: list[str] = Field(..., min_length=1)

    def matches(self, ctx: FilterContext, kinds: frozenset[str]) -> bool:
        return any(k in kinds for k in self.kinds)


FilterDefinition = Annotated[
    Union[AllowListFilter, CanonicalOperationFilter, TimeWindowFilter, SignalKindFilter],
    Field(discriminator="type"),
]


class ScoringProfile(BaseModel):
    """Complete read-only configuration of one engine instantiation."""

    name: str = Field(..., min_length=1)
    scale: ScoreScale
    thresholds: LevelThresholds
    multipliers: list[MultiplierRule] = Field(default_factory=list)
    low_severity_cap: LowSeverityCap | None = None
    max_dampening_fraction: float = Field(default=0.5, gt=0.0, le=1.0)
    filter_confidence: float = Field(default=0.8, ge=0.0, le=1.0)
    filters: list[FilterDefinition] = Field(default_factory=list)
    rules: list[AlertRule] = Field(default_factory=list)
    recommendations: dict[ThreatLevel, list[str]] = Field(default_factory=dict)
    signal_recommendations: dict[str, str] = Field(default_factory=dict)

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _check_consistency(self) -> "ScoringProfile":
        if not (self.scale.minimum <= self.thresholds.low and self.thresholds.critical <= self.scale.maximum):
            raise ValueError(
                f"Thresholds of profile '{self.name}' fall outside its scale "
                f"[{self.scale.minimum}, {self.scale.maximum}]"
            )
        for kind, names in (("multiplier", [m.name for m in self.multipliers]),
                            ("filter", [f.name for f in self.filters]),
                            ("rule", [r.id for r in self.rules])):
            duplicates = {n for n in names if names.count(n) > 1}
            if duplicates:
                raise ValueError(f"Duplicate {kind} names in profile '{self.name}': {sorted(duplicates)}")
        return self
