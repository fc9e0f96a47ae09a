"""
Tests for Signal Aggregator — base sum, multipliers, low-severity cap, mitigation.
"""

import pytest

from threatscope.core.aggregator import aggregate, count_categories
from threatscope.core.classifier import classify
from threatscope.models.rule_models import ThreatLevel
from threatscope.models.signal_models import Polarity, SignalCategory


def test_empty_signal_set_scores_scale_minimum(transaction_profile, contract_profile):
    assert aggregate([], transaction_profile).raw_score == 0
    assert aggregate([], contract_profile).raw_score == 1

    level = classify(aggregate([], transaction_profile).raw_score, transaction_profile.thresholds)
    assert level == ThreatLevel.MINIMAL


def test_effective_weight_uses_confidence(transaction_profile, make_signal):
    result = aggregate(
        [make_signal(weight=10, confidence=0.5, category=SignalCategory.VALUE_GAS)],
        transaction_profile,
    )
    assert result.raw_score == pytest.approx(5.0)


def test_three_same_category_signals_exceed_their_sum(transaction_profile, make_signal):
    signals = [make_signal(kind=f"OWN_{i}", weight=10) for i in range(3)]
    result = aggregate(signals, transaction_profile)

    assert result.applied_multipliers == ["multiple_ownership_issues"]
    assert result.raw_score == pytest.approx(45.0)
    assert result.raw_score > 30


def test_multipliers_compound_in_declaration_order(transaction_profile, make_signal):
    signals = [
        make_signal(kind="OWN_A", weight=10),
        make_signal(kind="OWN_B", weight=10),
        make_signal(kind="LIQ", weight=10, category=SignalCategory.LIQUIDITY),
    ]
    result = aggregate(signals, transaction_profile)

    assert result.applied_multipliers == ["multiple_ownership_issues", "combined_liquidity_ownership"]
    assert result.multiplier == pytest.approx(1.5 * 1.8)
    assert result.raw_score == pytest.approx(30 * 2.7)


def test_zero_weight_markers_do_not_trigger_multipliers(transaction_profile, make_signal):
    signals = [make_signal(kind="CALL", weight=40), make_signal(kind="MARKER", weight=0)]
    result = aggregate(signals, transaction_profile)

    assert result.applied_multipliers == []
    assert result.category_counts == {SignalCategory.OWNERSHIP: 1}
    assert result.raw_score == pytest.approx(40)


def test_low_severity_cap_clamps_many_small_signals(transaction_profile, make_signal):
    signals = [make_signal(kind=f"SMALL_{i}", weight=5, category=SignalCategory.VALUE_GAS) for i in range(5)]
    result = aggregate(signals, transaction_profile)

    assert result.capped is True
    assert result.raw_score == pytest.approx(19)


def test_low_severity_cap_ignored_when_any_signal_is_severe(transaction_profile, make_signal):
    signals = [make_signal(kind=f"SMALL_{i}", weight=5, category=SignalCategory.VALUE_GAS) for i in range(4)]
    signals.append(make_signal(kind="BIG", weight=15, category=SignalCategory.VALUE_GAS))
    result = aggregate(signals, transaction_profile)

    assert result.capped is False
    assert result.raw_score == pytest.approx(35)


def test_contract_low_factor_cap(contract_profile, make_signal):
    """Only low-severity factors: the score never exceeds 4 on the 1-10 scale."""
    signals = [
        make_signal(kind="ANALYSIS_ERROR", weight=3, category=SignalCategory.ANALYSIS),
        make_signal(kind="OWNERSHIP_RENOUNCE", weight=2),
    ]
    result = aggregate(signals, contract_profile)
    assert result.raw_score == pytest.approx(4)


def test_mitigating_signals_subtract_after_amplification(transaction_profile, make_signal):
    signals = [
        make_signal(kind="RISK", weight=30),
        make_signal(kind="VERIFIED", weight=5, category=SignalCategory.IDENTITY, polarity=Polarity.MITIGATING),
    ]
    result = aggregate(signals, transaction_profile)

    assert result.mitigation_total == pytest.approx(5)
    assert result.raw_score == pytest.approx(25)


def test_score_clamped_to_scale(transaction_profile, contract_profile, make_signal):
    assert aggregate([make_signal(weight=150)], transaction_profile).raw_score == 100
    assert aggregate([make_signal(weight=150)], contract_profile).raw_score == 10

    mitigating_only = [make_signal(weight=20, polarity=Polarity.MITIGATING)]
    assert aggregate(mitigating_only, transaction_profile).raw_score == 0


def test_adding_risk_never_lowers_score(transaction_profile, make_signal):
    categories = [SignalCategory.OWNERSHIP, SignalCategory.APPROVAL, SignalCategory.VALUE_GAS,
                  SignalCategory.LIQUIDITY, SignalCategory.OWNERSHIP, SignalCategory.TRANSFER]
    signals = []
    previous = aggregate(signals, transaction_profile).raw_score
    for i, category in enumerate(categories):
        signals.append(make_signal(kind=f"S{i}", weight=3 + i * 4, category=category))
        current = aggregate(signals, transaction_profile).raw_score
        assert current >= previous
        previous = current


def test_adding_mitigation_never_raises_score(transaction_profile, make_signal):
    signals = [make_signal(kind="A", weight=40), make_signal(kind="B", weight=12, category=SignalCategory.APPROVAL)]
    before = aggregate(signals, transaction_profile).raw_score
    signals.append(make_signal(kind="M", weight=5, polarity=Polarity.MITIGATING))
    assert aggregate(signals, transaction_profile).raw_score <= before


def test_count_categories_skips_mitigating(make_signal):
    counts = count_categories([
        make_signal(kind="A"),
        make_signal(kind="B", polarity=Polarity.MITIGATING),
        make_signal(kind="C", category=SignalCategory.APPROVAL),
    ])
    assert counts == {SignalCategory.OWNERSHIP: 1, SignalCategory.APPROVAL: 1}


def test_zero_confidence_signal_contributes_nothing(transaction_profile, make_signal):
    signals = [make_signal(kind="OWN_A"), make_signal(kind="OWN_B")]
    before = aggregate(signals, transaction_profile)

    with_unsure = aggregate(signals + [make_signal(kind="UNSURE", weight=50, confidence=0.0)], transaction_profile)

    assert before.raw_score == pytest.approx(20)
    assert with_unsure.raw_score == pytest.approx(before.raw_score)
    assert with_unsure.category_counts == {SignalCategory.OWNERSHIP: 2}
    assert with_unsure.applied_multipliers == []
