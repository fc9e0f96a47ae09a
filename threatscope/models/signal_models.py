"""
Signal Data Models — observations emitted by detectors, and detector traces.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class SignalCategory(str, Enum):
    """Groups correlated factors so multipliers can detect compounding risk."""

    OWNERSHIP = "ownership"
    APPROVAL = "approval"
    TRANSFER = "transfer"
    LIQUIDITY = "liquidity"
    EXTERNAL_INTEL = "external_intel"
    SENTIMENT = "sentiment"
    VALUE_GAS = "value_gas"
    IDENTITY = "identity"
    ATTACK_PATTERN = "attack_pattern"
    TOKENOMICS = "tokenomics"
    COMMUNITY = "community"
    ACTIVITY = "activity"
    ANALYSIS = "analysis"


class Polarity(str, Enum):
    RISK = "risk"
    MITIGATING = "mitigating"


class Signal(BaseModel):
    """A single typed, weighted observation about one subject."""

    category: SignalCategory
    kind: str = Field(..., min_length=1, description="Stable identifier, e.g. 'UNLIMITED_APPROVAL'")
    weight: float = Field(..., ge=0, description="Base contribution on the profile's scale")
    confidence: float = Field(default=1.0, ge=0.0, le=1.0)
    description: str = ""
    source: str = Field(default="", description="Detector that produced the signal")
    polarity: Polarity = Polarity.RISK
    override: bool = Field(
        default=False,
        description="Hard override: forces the verdict to the highest level",
    )

    model_config = {"frozen": True}

    @property
    def effective_weight(self) -> float:
        return self.weight * self.confidence

    @property
    def is_risk(self) -> bool:
        return self.polarity is Polarity.RISK


class DetectorStatus(str, Enum):
    OK = "ok"
    UNAVAILABLE = "unavailable"


class DetectorTrace(BaseModel):
    """Outcome of one detector for one assessment."""

    detector: str
    status: DetectorStatus
    signal_count: int = 0
    error: str | None = None

    model_config = {"frozen": True}
