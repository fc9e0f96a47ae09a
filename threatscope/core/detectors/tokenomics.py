"""
Tokenomics Detectors — Holder distribution, supply controls, liquidity and bot activity.

Each concern is its own detector so a missing data source is traced as
unavailable without hiding the others. Missing data is never replaced with
synthetic figures.
"""

from __future__ import annotations

from threatscope.core.errors import DetectorUnavailable
from threatscope.models.input_models import ContractProfileInput
from threatscope.models.signal_models import Signal, SignalCategory


DISTRIBUTION_ID = "holder_distribution"
SUPPLY_CONTROLS_ID = "supply_controls"
LIQUIDITY_ID = "liquidity"
BOT_ACTIVITY_ID = "bot_activity"

HIGH_WHALE_PCT = 70
MEDIUM_WHALE_PCT = 50
FEW_HOLDERS = 100
MAX_OWNER_CONTROLS = 2
LOW_LIQUIDITY_SCORE = 30


def detect_distribution(contract: ContractProfileInput) -> list[Signal]:
    """Whale concentration and thin holder base."""
    if contract.whale_concentration is None and contract.holder_count is None:
        raise DetectorUnavailable(DISTRIBUTION_ID, "no holder distribution data")

    signals: list[Signal] = []
    pct = contract.whale_concentration
    if pct is not None and pct > MEDIUM_WHALE_PCT:
        signals.append(
            Signal(
                category=SignalCategory.TOKENOMICS,
                kind="WHALE_CONCENTRATION",
                weight=3.0 if pct > HIGH_WHALE_PCT else 2.0,
                confidence=1.0,
                description=f"Top holders control {pct:g}% of supply",
                source=DISTRIBUTION_ID,
            )
        )

    if contract.holder_count is not None and contract.holder_count < FEW_HOLDERS:
        signals.append(
            Signal(
                category=SignalCategory.TOKENOMICS,
                kind="FEW_HOLDERS",
                weight=1.0,
                confidence=1.0,
                description=f"Only {contract.holder_count} holders",
                source=DISTRIBUTION_ID,
            )
        )
    return signals


def detect_supply_controls(contract: ContractProfileInput) -> list[Signal]:
    """Centralized owner controls and honeypot indicators."""
    signals: list[Signal] = []

    if len(contract.owner_controls) > MAX_OWNER_CONTROLS:
        signals.append(
            Signal(
                category=SignalCategory.OWNERSHIP,
                kind="CENTRALIZED_CONTROL",
                weight=2.5,
                confidence=1.0,
                description=f"Contract has extensive owner controls: {', '.join(contract.owner_controls)}",
                source=SUPPLY_CONTROLS_ID,
            )
        )

    for indicator in contract.honeypot_indicators:
        signals.append(
            Signal(
                category=SignalCategory.TOKENOMICS,
                kind="HONEYPOT_INDICATOR",
                weight=3.5 if indicator.severity == "HIGH" else 2.0,
                confidence=1.0,
                description=indicator.description or "Honeypot indicator",
                source=SUPPLY_CONTROLS_ID,
            )
        )
    return signals


def detect_liquidity(contract: ContractProfileInput) -> list[Signal]:
    if contract.liquidity_score is None:
        raise DetectorUnavailable(LIQUIDITY_ID, "no liquidity data")
    if contract.liquidity_score >= LOW_LIQUIDITY_SCORE:
        return []
    return [
        Signal(
            category=SignalCategory.LIQUIDITY,
            kind="LOW_LIQUIDITY",
            weight=1.5,
            confidence=1.0,
            description=f"Low liquidity (score {contract.liquidity_score:g}) - high slippage risk",
            source=LIQUIDITY_ID,
        )
    ]


def detect_bot_activity(contract: ContractProfileInput) -> list[Signal]:
    if contract.bot_activity is None:
        raise DetectorUnavailable(BOT_ACTIVITY_ID, "no bot-activity data")
    if not contract.bot_activity:
        return []
    return [
        Signal(
            category=SignalCategory.ACTIVITY,
            kind="BOT_ACTIVITY",
            weight=1.0,
            confidence=1.0,
            description="Suspicious bot activity detected",
            source=BOT_ACTIVITY_ID,
        )
    ]
