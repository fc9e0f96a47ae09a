"""
Attack Pattern Detector — Shape-based heuristics for MEV, flash-loan and rug-pull transactions.
"""

from __future__ import annotations

from typing import Iterable

from threatscope.models.input_models import TransactionInput
from threatscope.models.signal_models import Signal, SignalCategory


DETECTOR_ID = "attack_patterns"

MEV_GAS_PRICE_GWEI = 100
FLASH_LOAN_VALUE_NATIVE = 50
FLASH_LOAN_MIN_DATA_CHARS = 200
RUG_PULL_VALUE_NATIVE = 20


class AttackPatternDetector:
    def __init__(self, suspicious_addresses: Iterable[str]) -> None:
        self.suspicious = frozenset(a.lower() for a in suspicious_addresses)

    def __call__(self, tx: TransactionInput) -> list[Signal]:
        signals: list[Signal] = []

        if tx.gas_price_gwei > MEV_GAS_PRICE_GWEI:
            signals.append(
                Signal(
                    category=SignalCategory.ATTACK_PATTERN,
                    kind="mev_bot_activity",
                    weight=15,
                    confidence=0.75,
                    description="Transaction exhibits MEV bot characteristics",
                    source=DETECTOR_ID,
                )
            )

        if tx.value_native > FLASH_LOAN_VALUE_NATIVE and len(tx.data) > FLASH_LOAN_MIN_DATA_CHARS:
            signals.append(
                Signal(
                    category=SignalCategory.ATTACK_PATTERN,
                    kind="flash_loan_attack",
                    weight=35,
                    confidence=0.85,
                    description="Large value with complex call data: potential flash loan exploit",
                    source=DETECTOR_ID,
                )
            )

        recipient = (tx.to_address or "").lower()
        if tx.value_native > RUG_PULL_VALUE_NATIVE and recipient in self.suspicious:
            signals.append(
                Signal(
                    category=SignalCategory.ATTACK_PATTERN,
                    kind="rug_pull_attempt",
                    weight=50,
                    confidence=0.90,
                    description="Large withdrawal to a suspicious recipient: potential rug pull",
                    source=DETECTOR_ID,
                )
            )

        return signals
