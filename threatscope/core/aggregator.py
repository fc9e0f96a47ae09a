"""
Signal Aggregator — Combines a SignalSet into one explainable numeric score.

    base      = Σ weight × confidence                    (risk signals)
    amplified = base × Π factor(matching multiplier)     (declaration order)
    capped    = min(amplified, ceiling)  if max single effective weight ≤ cap threshold
    score     = clamp(capped − Σ weight × confidence (mitigating signals), scale)

One algorithm serves every profile; only the profile's tables differ.
"""

from __future__ import annotations

from collections import Counter
from typing import Iterable

from threatscope.models.profile_models import ScoringProfile
from threatscope.models.signal_models import Signal, SignalCategory
from threatscope.models.verdict_models import AggregateScore


def count_categories(signals: Iterable[Signal]) -> dict[SignalCategory, int]:
    """Count risk signals with a positive effective weight per category."""
    counts: Counter[SignalCategory] = Counter()
    for s in signals:
        if s.is_risk and s.effective_weight > 0:
            counts[s.category] += 1
    return dict(counts)


def aggregate(signals: Iterable[Signal], profile: ScoringProfile) -> AggregateScore:
    """
    Aggregate signals into a raw score on the profile's scale.

    Args:
        signals: The subject's signals. Order does not affect the result.
        profile: Scale, multiplier table and low-severity cap to apply.

    Returns:
        AggregateScore with the unrounded raw score and its breakdown.
    """
    signals = tuple(signals)
    risk = [s for s in signals if s.is_risk]
    mitigating = [s for s in signals if not s.is_risk]

    risk_total = sum(s.effective_weight for s in risk)
    mitigation_total = sum(s.effective_weight for s in mitigating)

    counts = count_categories(risk)
    multiplier = 1.0
    applied: list[str] = []
    for rule in profile.multipliers:
        if rule.matches(counts):
            multiplier *= rule.factor
            applied.append(rule.name)

    total = risk_total * multiplier

    capped = False
    cap = profile.low_severity_cap
    if cap is not None and risk:
        max_single = max(s.effective_weight for s in risk)
        if max_single <= cap.max_signal_weight and total > cap.ceiling:
            total = cap.ceiling
            capped = True

    raw_score = profile.scale.clamp(total - mitigation_total)

    return AggregateScore(
        raw_score=raw_score,
        risk_total=round(risk_total, 4),
        mitigation_total=round(mitigation_total, 4),
        multiplier=round(multiplier, 4),
        applied_multipliers=applied,
        category_counts=counts,
        capped=capped,
    )
