"""
False-Positive Filter — bounded dampening for known-benign patterns.

Each matching filter is recorded by name and contributes its fixed amount.
The total never exceeds ``max_dampening_fraction`` of the raw score above the
scale minimum, so an allow-list hit can soften a verdict but never erase it.
"""

from __future__ import annotations

import logging
from typing import Iterable

from threatscope.models.profile_models import FilterContext, ScoringProfile
from threatscope.models.signal_models import Signal
from threatscope.models.verdict_models import FalsePositiveAdjustment

logger = logging.getLogger("threatscope.filters")


def dampen(
    raw_score: float,
    signals: Iterable[Signal],
    context: FilterContext,
    profile: ScoringProfile,
) -> FalsePositiveAdjustment:
    """Evaluate the profile's filters and return the bounded adjustment."""
    kinds = frozenset(s.kind for s in signals)

    applied: list[str] = []
    requested = 0.0
    for definition in profile.filters:
        if definition.matches(context, kinds):
            applied.append(definition.name)
            requested += definition.amount

    headroom = max(raw_score - profile.scale.minimum, 0.0)
    bound = profile.max_dampening_fraction * headroom
    dampening = min(requested, bound)

    if applied and dampening < requested:
        logger.debug(
            f"[{context.subject}] Dampening bounded to {dampening:.2f} "
            f"(requested {requested:.2f} by {applied})"
        )

    return FalsePositiveAdjustment(
        applied_filters=applied,
        dampening=round(dampening, 4),
        confidence=profile.filter_confidence,
    )
