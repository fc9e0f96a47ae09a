"""
Address Reputation Detector — Sender/recipient history and contract age.
"""

from __future__ import annotations

from typing import Iterable

from threatscope.models.input_models import TransactionInput
from threatscope.models.signal_models import Signal, SignalCategory


DETECTOR_ID = "address_reputation"

HIGH_FREQUENCY_TX_COUNT = 10
NEW_CONTRACT_DAYS = 7


class AddressReputationDetector:
    def __init__(self, suspicious_addresses: Iterable[str]) -> None:
        self.suspicious = frozenset(a.lower() for a in suspicious_addresses)

    def _signal(self, kind: str, weight: float, description: str) -> Signal:
        return Signal(
            category=SignalCategory.IDENTITY,
            kind=kind,
            weight=weight,
            confidence=1.0,
            description=description,
            source=DETECTOR_ID,
        )

    def __call__(self, tx: TransactionInput) -> list[Signal]:
        signals: list[Signal] = []

        if tx.from_address.lower() in self.suspicious:
            signals.append(self._signal("known_suspicious_sender", 30, "Sender has a suspicious history"))
        if tx.to_address and tx.to_address.lower() in self.suspicious:
            signals.append(self._signal("known_suspicious_recipient", 35, "Recipient has a suspicious history"))

        count = tx.sender_recent_tx_count
        if count == 0:
            signals.append(self._signal("new_sender_address", 5, "Sender has no prior activity"))
        elif count is not None and count > HIGH_FREQUENCY_TX_COUNT:
            signals.append(
                self._signal("high_frequency_sender", 10, f"Sender sent {count} recent transactions (possible bot)")
            )

        if tx.contract_age_days is not None and tx.contract_age_days < NEW_CONTRACT_DAYS:
            signals.append(
                self._signal(
                    "new_contract_interaction", 15,
                    f"Recipient contract is {tx.contract_age_days:.1f} days old",
                )
            )

        return signals
