"""
Tests for the Assessment Engine — end-to-end verdicts for all three profiles.
"""

import asyncio
from datetime import datetime

import pytest

from conftest import KNOWN_GOOD, RECIPIENT, SCAM, SENDER, approve_calldata
from threatscope.config import Settings
from threatscope.core.detector_registry import DetectorRegistry
from threatscope.core.detectors import method_signature
from threatscope.core.engine import AssessmentEngine, factor_count_confidence
from threatscope.core.errors import ConfigurationError, InvalidInput
from threatscope.models.input_models import TransactionInput
from threatscope.models.rule_models import ThreatLevel
from threatscope.models.signal_models import DetectorStatus, Signal, SignalCategory
from threatscope.profiles import contract, social, transaction
from threatscope.profiles.transaction import TransactionAdapter


@pytest.fixture
def tx_engine(cfg):
    return transaction.build_engine(cfg)


def _custom_engine(profile, detectors):
    return AssessmentEngine(
        profile=profile,
        registry=DetectorRegistry(detectors, detector_timeout=1.0),
        adapter=TransactionAdapter(),
        deadline_seconds=2.0,
        coverage_penalty=0.5,
    )


# ── Transaction scenarios ──


def test_unlimited_approval_is_critical(tx_engine, unlimited_approval_tx):
    verdict = asyncio.run(tx_engine.assess(unlimited_approval_tx))

    assert verdict.level == ThreatLevel.CRITICAL
    assert verdict.score == 90
    assert [t.rule_id for t in verdict.triggers] == [
        "high_value_alert",
        "critical_threat_alert",
        "unlimited_approval_alert",
    ]
    assert verdict.applied_multipliers == ["multiple_approval_issues"]
    assert verdict.false_positive.applied_filters == ["standard_defi_operation"]
    assert "Consider setting limited approval amounts instead" in verdict.recommendations
    assert "override by UNLIMITED_APPROVAL" in verdict.summary


def test_override_wins_against_every_filter(tx_engine):
    verdict = asyncio.run(
        tx_engine.assess(
            {
                "from_address": SENDER,
                "to_address": KNOWN_GOOD,
                "data": approve_calldata(),
                "observed_at": datetime(2024, 3, 4, 11, 0).isoformat(),
            }
        )
    )
    assert verdict.false_positive.applied_filters == [
        "known_good_recipient",
        "standard_defi_operation",
        "low_risk_time_pattern",
    ]
    assert verdict.false_positive.dampening == pytest.approx(30)
    assert verdict.level == ThreatLevel.CRITICAL
    assert verdict.score == 80


def test_empty_signal_set_with_known_good_recipient(tx_engine):
    verdict = asyncio.run(tx_engine.assess({"from_address": SENDER, "to_address": KNOWN_GOOD}))

    assert verdict.signals == ()
    assert verdict.level == ThreatLevel.MINIMAL
    assert verdict.score == 0
    assert verdict.false_positive.applied_filters == ["known_good_recipient"]
    assert verdict.false_positive.dampening == 0
    assert verdict.triggers == []
    assert verdict.confidence == pytest.approx(0.9)


def test_three_same_category_signals_reflect_multiplier(transaction_profile, plain_transfer):
    def three_ownership(tx):
        return [
            Signal(category=SignalCategory.OWNERSHIP, kind=f"OWN_{i}", weight=10)
            for i in range(3)
        ]

    engine = _custom_engine(transaction_profile, {"ownership": three_ownership})
    verdict = asyncio.run(engine.assess(plain_transfer))

    assert verdict.applied_multipliers == ["multiple_ownership_issues"]
    assert verdict.exact_score == pytest.approx(45)
    assert verdict.exact_score > 30
    assert verdict.level == ThreatLevel.MEDIUM


def test_assess_is_idempotent(tx_engine, unlimited_approval_tx):
    first = asyncio.run(tx_engine.assess(unlimited_approval_tx))
    second = asyncio.run(tx_engine.assess(unlimited_approval_tx))
    assert first == second
    assert first.model_dump() == second.model_dump()


def test_failing_detector_is_isolated(transaction_profile, unlimited_approval_tx):
    def boom(tx):
        raise RuntimeError("detector crashed")

    engine = _custom_engine(transaction_profile, {"boom": boom, "sig": method_signature.detect})
    verdict = asyncio.run(engine.assess(unlimited_approval_tx))

    assert [s.kind for s in verdict.signals] == ["CALL_APPROVE", "UNLIMITED_APPROVAL"]
    assert verdict.level == ThreatLevel.CRITICAL
    assert verdict.unavailable_detectors == ["boom"]
    # base 0.8 (two factors) reduced by half of the unavailable share
    assert verdict.confidence == pytest.approx(0.6)
    assert "unavailable: boom" in verdict.summary


def test_deadline_abandons_slow_detector(transaction_profile, plain_transfer):
    async def slow(tx):
        await asyncio.sleep(5)
        return []

    engine = _custom_engine(transaction_profile, {"slow": slow, "sig": method_signature.detect})
    verdict = asyncio.run(engine.assess(plain_transfer, deadline=0.1))

    statuses = {t.detector: t.status for t in verdict.detectors}
    assert statuses == {"slow": DetectorStatus.UNAVAILABLE, "sig": DetectorStatus.OK}


def test_invalid_input_raises_before_detection(transaction_profile):
    calls = []

    def spy(tx):
        calls.append(tx)
        return []

    engine = _custom_engine(transaction_profile, {"spy": spy})
    with pytest.raises(InvalidInput) as info:
        asyncio.run(engine.assess({"from_address": "not-an-address"}))

    assert calls == []
    assert info.value.errors
    assert info.value.errors[0]["loc"] == ("from_address",)


def test_non_mapping_input_is_invalid(tx_engine):
    with pytest.raises(InvalidInput):
        asyncio.run(tx_engine.assess("0xdeadbeef"))


def test_accepts_model_instance(tx_engine):
    tx = TransactionInput(from_address=SENDER, to_address=RECIPIENT)
    verdict = tx_engine.assess_sync(tx)
    assert verdict.subject == f"{SENDER}->{RECIPIENT}"
    assert verdict.profile == "transaction"
    assert len(verdict.detectors) == len(tx_engine.registry.names)


def test_identity_feed_lowers_score(cfg):
    async def resolve(address):
        return {"identity": "alice.eth"}

    payload = {"from_address": SENDER, "to_address": RECIPIENT, "value_wei": 20 * 10**18}
    plain = transaction.build_engine(cfg).assess_sync(payload)
    verified = transaction.build_engine(cfg, identity_resolver=resolve).assess_sync(payload)

    assert plain.exact_score == pytest.approx(15)
    assert verified.exact_score == pytest.approx(10)
    assert "VERIFIED_IDENTITY" in [s.kind for s in verified.signals]


def test_zero_confidence_signal_is_kept_but_scores_nothing(transaction_profile, plain_transfer):
    def unsure(tx):
        return [Signal(category=SignalCategory.OWNERSHIP, kind="UNSURE", weight=50, confidence=0.0)]

    engine = _custom_engine(transaction_profile, {"unsure": unsure})
    verdict = asyncio.run(engine.assess(plain_transfer))

    assert [s.kind for s in verdict.signals] == ["UNSURE"]
    assert verdict.raw_score == 0
    assert verdict.applied_multipliers == []
    assert verdict.level == ThreatLevel.MINIMAL


def _default_timeout_ratio(detector_timeout):
    """Settings whose timeouts keep the default proportions, shrunk for fast tests."""
    defaults = Settings(_env_file=None)
    scale = detector_timeout / defaults.detector_timeout_seconds
    return Settings(
        _env_file=None,
        scam_addresses=[SCAM],
        detector_timeout_seconds=defaults.detector_timeout_seconds * scale,
        intel_feed_timeout_seconds=defaults.intel_feed_timeout_seconds * scale,
        assessment_deadline_seconds=defaults.assessment_deadline_seconds * scale,
    )


def test_hung_feed_keeps_blocklist_hit_with_default_timeouts():
    async def hangs(address):
        await asyncio.sleep(5)
        return []

    engine = transaction.build_engine(_default_timeout_ratio(0.3), alert_fetcher=hangs)
    verdict = engine.assess_sync({"from_address": SENDER, "to_address": SCAM})

    assert "KNOWN_SCAM_ADDRESS" in [s.kind for s in verdict.signals]
    statuses = {t.detector: t.status for t in verdict.detectors}
    assert statuses["external_intel"] == DetectorStatus.OK


def test_feed_timeout_must_be_below_detector_timeout():
    cfg = Settings(_env_file=None, detector_timeout_seconds=0.5, intel_feed_timeout_seconds=0.5)
    with pytest.raises(ConfigurationError, match="intel_feed_timeout_seconds"):
        transaction.build_engine(cfg)


def test_factor_count_confidence(make_signal):
    assert factor_count_confidence([]) == 0.9
    assert factor_count_confidence([make_signal()]) == 0.8
    assert factor_count_confidence([make_signal()] * 3) == 0.85
    assert factor_count_confidence([make_signal()] * 5) == 0.9
    assert factor_count_confidence([make_signal(kind="ANALYSIS_ERROR")]) == 0.3


# ── Contract ──


def test_contract_drain_scenario(cfg):
    engine = contract.build_engine(cfg)
    verdict = engine.assess_sync(
        {
            "address": RECIPIENT,
            "risk_factors": ["DRAIN_PATTERN", "UNEXPECTED_TRANSFER"],
            "whale_concentration": 80,
            "holder_count": 500,
            "liquidity_score": 50,
            "bot_activity": False,
        }
    )

    assert verdict.score == 10
    assert verdict.level == ThreatLevel.CRITICAL
    assert verdict.applied_multipliers == ["multiple_transfer_issues"]
    assert [t.rule_id for t in verdict.triggers] == [
        "critical_contract_alert",
        "drain_pattern_alert",
        "whale_concentration_alert",
    ]
    assert verdict.recommendations[-2:] == [
        "This transaction may drain your wallet",
        "Monitor whale movements - set alerts for large transfers",
    ]
    assert verdict.confidence == pytest.approx(0.85)


def test_contract_missing_data_lowers_confidence(cfg):
    verdict = contract.build_engine(cfg).assess_sync(
        {"address": RECIPIENT, "risk_factors": ["OWNERSHIP_RENOUNCE"]}
    )

    assert verdict.exact_score == pytest.approx(2)
    assert verdict.level == ThreatLevel.MINIMAL
    assert verdict.unavailable_detectors == ["holder_distribution", "liquidity", "bot_activity"]
    assert verdict.confidence == pytest.approx(0.56)


def test_contract_clean_scores_scale_minimum(cfg):
    verdict = contract.build_engine(cfg).assess_sync(
        {"address": RECIPIENT, "holder_count": 5000, "liquidity_score": 90, "bot_activity": False}
    )
    assert verdict.score == 1
    assert verdict.level == ThreatLevel.MINIMAL
    assert verdict.recommendations == ["Transaction appears relatively safe", "Review transaction details as normal precaution"]


def test_contract_unlimited_approval_forces_critical(cfg):
    verdict = contract.build_engine(cfg).assess_sync(
        {
            "address": RECIPIENT,
            "risk_factors": ["UNLIMITED_APPROVAL"],
            "whale_concentration": 10,
            "holder_count": 5000,
            "liquidity_score": 90,
            "bot_activity": False,
        }
    )

    assert verdict.raw_score == pytest.approx(6)
    assert verdict.level == ThreatLevel.CRITICAL
    assert verdict.score == 9
    assert "override by UNLIMITED_APPROVAL" in verdict.summary


# ── Social ──


def test_social_scam_scenario(cfg):
    verdict = social.build_engine(cfg).assess_sync(
        {
            "subject": "$RUGME",
            "platforms": [
                {"platform": "twitter", "mentions": 30, "sentiment": -0.7, "posts": ["total scam, rug pull"]},
                {"platform": "reddit", "mentions": 10, "sentiment": -0.4, "posts": ["lost money here"]},
            ],
        }
    )

    assert verdict.level == ThreatLevel.CRITICAL
    assert verdict.applied_multipliers == ["negative_with_reports", "multi_platform_reports"]
    assert [t.rule_id for t in verdict.triggers] == [
        "scam_accusation_alert",
        "negative_sentiment_alert",
        "critical_social_alert",
    ]
    assert verdict.confidence == pytest.approx(0.8)


def test_social_without_platforms_is_unavailable(cfg):
    verdict = social.build_engine(cfg).assess_sync({"subject": "$GHOST", "platforms": []})

    assert verdict.signals == ()
    assert verdict.level == ThreatLevel.MINIMAL
    assert len(verdict.unavailable_detectors) == 3
    assert verdict.confidence == pytest.approx(0.25)
