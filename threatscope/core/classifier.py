"""
Classifier — maps a score onto a threat level via fixed thresholds.
"""

from __future__ import annotations

import math

from threatscope.models.profile_models import LevelThresholds
from threatscope.models.rule_models import ThreatLevel


def display_score(exact: float) -> int:
    """Round half up for display; classification always uses the exact score."""
    return int(math.floor(exact + 0.5))


def classify(score: float, thresholds: LevelThresholds) -> ThreatLevel:
    """Highest level whose lower bound the score reaches; MINIMAL otherwise."""
    for level, lower_bound in thresholds.ordered():
        if score >= lower_bound:
            return level
    return ThreatLevel.MINIMAL
