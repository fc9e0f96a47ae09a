"""
Value/Gas Detector — Flags unusual native value, gas price and gas usage.
"""

from __future__ import annotations

from threatscope.models.input_models import TransactionInput
from threatscope.models.signal_models import Signal, SignalCategory


DETECTOR_ID = "value_gas"

HIGH_VALUE_NATIVE = 10
EXTREME_VALUE_NATIVE = 100
HIGH_GAS_PRICE_GWEI = 50
COMPLEX_GAS_USED = 500_000


def _signal(kind: str, weight: float, description: str) -> Signal:
    return Signal(
        category=SignalCategory.VALUE_GAS,
        kind=kind,
        weight=weight,
        confidence=1.0,
        description=description,
        source=DETECTOR_ID,
    )


def detect(tx: TransactionInput) -> list[Signal]:
    signals: list[Signal] = []
    value = tx.value_native

    if value > HIGH_VALUE_NATIVE:
        signals.append(_signal("high_value_transaction", 15, f"Transfers {value:.4f} native units"))
    if value > EXTREME_VALUE_NATIVE:
        signals.append(_signal("extremely_high_value", 25, "Value above whale/institution threshold"))

    if tx.gas_price_gwei > HIGH_GAS_PRICE_GWEI:
        signals.append(
            _signal("high_gas_price", 5, f"Gas price {tx.gas_price_gwei:.1f} gwei suggests priority/MEV bidding")
        )

    if tx.gas_used > COMPLEX_GAS_USED:
        signals.append(_signal("complex_transaction", 5, f"High gas usage ({tx.gas_used})"))

    if tx.value_wei == 0 and tx.has_call_data:
        signals.append(
            _signal("zero_value_contract_call", 3, "Zero-value call carrying input data may hide a state change")
        )

    return signals
