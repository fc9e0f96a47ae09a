"""
Rug Factor Detector — Scores named rug-pull risk factors on the 1-10 contract scale.

Factor names come from the contract-introspection layer. Weights and
categories follow the established factor table: critical factors score 7-10,
high 5-7, medium 3-5, low 1-3. Unknown factors score 1.
"""

from __future__ import annotations

from threatscope.models.input_models import ContractProfileInput
from threatscope.models.signal_models import Signal, SignalCategory


DETECTOR_ID = "rug_factors"

UNKNOWN_FACTOR_WEIGHT = 1.0

# Factors that force the verdict to the top level regardless of score
OVERRIDE_FACTORS = frozenset({"UNLIMITED_APPROVAL"})

# factor -> (weight, category, description)
FACTOR_TABLE: dict[str, tuple[float, SignalCategory, str]] = {
    # Critical
    "OWNERSHIP_TRANSFER": (8, SignalCategory.OWNERSHIP, "Contract ownership is being transferred"),
    "DRAIN_PATTERN": (10, SignalCategory.TRANSFER, "Wallet draining pattern detected"),
    "LIQUIDITY_REMOVAL": (9, SignalCategory.LIQUIDITY, "Liquidity being removed from pool"),
    "HONEYPOT_INDICATORS": (9, SignalCategory.TOKENOMICS, "Honeypot contract indicators"),
    # High
    "UNLIMITED_APPROVAL": (6, SignalCategory.APPROVAL, "Unlimited token approval detected"),
    "PERMIT_EXPLOIT": (7, SignalCategory.APPROVAL, "Potential permit signature exploitation"),
    "PRIVILEGE_ESCALATION": (6, SignalCategory.OWNERSHIP, "Admin privileges are being modified"),
    "TRADING_RESTRICTIONS": (5, SignalCategory.TOKENOMICS, "Trading restrictions detected"),
    # Medium
    "SUSPICIOUS_APPROVAL": (4, SignalCategory.APPROVAL, "Approval to suspicious address"),
    "UNEXPECTED_TRANSFER": (4, SignalCategory.TRANSFER, "Unexpected token transfers"),
    "POOL_MANIPULATION": (5, SignalCategory.LIQUIDITY, "Potential pool manipulation"),
    # Low
    "OWNERSHIP_RENOUNCE": (2, SignalCategory.OWNERSHIP, "Contract ownership is being renounced"),
    "ANALYSIS_ERROR": (3, SignalCategory.ANALYSIS, "Error occurred during analysis"),
}


def detect(contract: ContractProfileInput) -> list[Signal]:
    signals: list[Signal] = []
    for raw in contract.risk_factors:
        factor = raw.strip().upper()
        if not factor:
            continue
        weight, category, description = FACTOR_TABLE.get(
            factor, (UNKNOWN_FACTOR_WEIGHT, SignalCategory.ANALYSIS, "Unknown risk factor")
        )
        signals.append(
            Signal(
                category=category,
                kind=factor,
                weight=weight,
                confidence=1.0,
                description=description,
                source=DETECTOR_ID,
                override=factor in OVERRIDE_FACTORS,
            )
        )
    return signals
