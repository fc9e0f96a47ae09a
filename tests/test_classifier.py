"""
Tests for Classifier — threshold boundaries and monotonicity.
"""

import pytest

from threatscope.core.classifier import classify, display_score
from threatscope.models.profile_models import LevelThresholds
from threatscope.models.rule_models import LEVEL_ORDER, ThreatLevel


@pytest.mark.parametrize(
    "score, expected",
    [
        (0, ThreatLevel.MINIMAL),
        (19.99, ThreatLevel.MINIMAL),
        (20, ThreatLevel.LOW),
        (40, ThreatLevel.MEDIUM),
        (59.5, ThreatLevel.MEDIUM),
        (60, ThreatLevel.HIGH),
        (80, ThreatLevel.CRITICAL),
        (100, ThreatLevel.CRITICAL),
    ],
)
def test_transaction_thresholds(transaction_profile, score, expected):
    assert classify(score, transaction_profile.thresholds) == expected


def test_contract_thresholds(contract_profile):
    thresholds = contract_profile.thresholds
    assert classify(1, thresholds) == ThreatLevel.MINIMAL
    assert classify(3, thresholds) == ThreatLevel.LOW
    assert classify(6.9, thresholds) == ThreatLevel.MEDIUM
    assert classify(9, thresholds) == ThreatLevel.CRITICAL


def test_classification_is_monotonic(transaction_profile):
    ranks = [classify(s / 2, transaction_profile.thresholds).rank for s in range(0, 201)]
    assert ranks == sorted(ranks)


def test_level_order_matches_rank():
    assert [lvl.rank for lvl in LEVEL_ORDER] == sorted(lvl.rank for lvl in LEVEL_ORDER)
    assert LEVEL_ORDER[0] == ThreatLevel.MINIMAL
    assert LEVEL_ORDER[-1] == ThreatLevel.CRITICAL


def test_thresholds_must_descend():
    with pytest.raises(ValueError):
        LevelThresholds(critical=80, high=80, medium=40, low=20)


def test_display_score_rounds_half_up():
    assert display_score(56.5) == 57
    assert display_score(2.5) == 3
    assert display_score(79.49) == 79
    assert display_score(0) == 0
