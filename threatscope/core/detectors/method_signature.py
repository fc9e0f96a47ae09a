"""
Method Signature Detector — Scores a decoded call by its 4-byte selector.

Each known selector carries a static risk tier. Approval-like calls are also
inspected for an unlimited amount (the maximum value of the parameter's
uintN width); that emits a CRITICAL override signal regardless of the
call's own tier, since an unlimited approval is dangerous unconditionally.
"""

from __future__ import annotations

from threatscope.core.calldata import RiskTier, max_uint, uint_bits
from threatscope.models.input_models import TransactionInput
from threatscope.models.signal_models import Signal, SignalCategory


DETECTOR_ID = "method_signature"

TIER_WEIGHTS: dict[RiskTier, float] = {
    RiskTier.LOW: 5.0,
    RiskTier.MEDIUM: 10.0,
    RiskTier.HIGH: 25.0,
    RiskTier.CRITICAL: 40.0,
}

OVERRIDE_WEIGHT = 100.0

FACTOR_DESCRIPTIONS: dict[str, str] = {
    "OWNERSHIP_TRANSFER": "Contract ownership is being transferred",
    "PERMIT_SIGNATURE": "Approval granted through an off-chain signature",
    "BATCH_EXECUTION": "Multiple calls executed in one transaction",
    "PROXY_UPGRADE": "Proxy implementation is being replaced",
}


def _is_true(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "0x1")
    return value is True or value == 1


def detect(tx: TransactionInput) -> list[Signal]:
    """Emit the call's tier signal, factor markers and any unlimited-approval override."""
    call = tx.call
    if call is None:
        return []

    spec = call.spec
    if spec is None:
        return [
            Signal(
                category=SignalCategory.ANALYSIS,
                kind="UNKNOWN_METHOD",
                weight=TIER_WEIGHTS[RiskTier.MEDIUM],
                confidence=0.5,
                description=f"Unknown method {call.selector} - exercise caution",
                source=DETECTOR_ID,
            )
        ]

    signals = [
        Signal(
            category=spec.category,
            kind=f"CALL_{spec.name.upper()}",
            weight=TIER_WEIGHTS[spec.tier],
            confidence=1.0,
            description=f"{spec.signature}: {spec.description}",
            source=DETECTOR_ID,
        )
    ]

    # Factor markers carry no weight; the call signal already scores them
    for factor in spec.factors:
        signals.append(
            Signal(
                category=spec.category,
                kind=factor,
                weight=0.0,
                confidence=1.0,
                description=FACTOR_DESCRIPTIONS.get(factor, factor),
                source=DETECTOR_ID,
            )
        )

    params = call.decoded_params

    if spec.approval_amount_param:
        amount = params.get(spec.approval_amount_param)
        bits = uint_bits(spec.param_type(spec.approval_amount_param))
        if isinstance(amount, int) and bits is not None and amount == max_uint(bits):
            kind = "UNLIMITED_PERMIT" if spec.name == "permit" else "UNLIMITED_APPROVAL"
            spender = params.get("spender", "unknown spender")
            signals.append(
                Signal(
                    category=SignalCategory.APPROVAL,
                    kind=kind,
                    weight=OVERRIDE_WEIGHT,
                    confidence=1.0,
                    override=True,
                    description=f"Unlimited token approval to {spender} via {spec.name}",
                    source=DETECTOR_ID,
                )
            )

    if spec.name == "setApprovalForAll" and _is_true(params.get("approved")):
        signals.append(
            Signal(
                category=SignalCategory.APPROVAL,
                kind="APPROVE_ALL_NFTS",
                weight=OVERRIDE_WEIGHT,
                confidence=1.0,
                override=True,
                description=f"Operator {params.get('operator', 'unknown')} gains control of all NFTs",
                source=DETECTOR_ID,
            )
        )

    return signals
