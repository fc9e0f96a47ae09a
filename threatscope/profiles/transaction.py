"""
Transaction Profile — 0-100 threat scoring for single blockchain transactions.

Detectors: method signature, external intel, value/gas, address reputation,
attack patterns. The profile dict below is the built-in default; an operator
file may replace it (see loader.resolve_profile).
"""

from __future__ import annotations

from typing import Any

from threatscope.cache.lookup_cache import LookupCache
from threatscope.config import Settings, settings
from threatscope.core.detector_registry import DetectorRegistry
from threatscope.core.detectors import method_signature, value_gas
from threatscope.core.detectors.address_reputation import AddressReputationDetector
from threatscope.core.detectors.attack_patterns import AttackPatternDetector
from threatscope.core.detectors.external_intel import (
    AlertFetcher,
    AttackAlertFeed,
    BlocklistFeed,
    ExternalIntelDetector,
    IdentityFeed,
    IdentityResolver,
    ThreatFeed,
)
from threatscope.core.engine import AssessmentEngine, factor_count_confidence
from threatscope.core.errors import ConfigurationError
from threatscope.models.input_models import TransactionInput
from threatscope.models.profile_models import FilterContext, ScoringProfile
from threatscope.models.signal_models import Signal
from threatscope.profiles.loader import resolve_profile

PROFILE_NAME = "transaction"

STANDARD_DEFI_METHODS = [
    "transfer",
    "approve",
    "swapExactTokensForTokens",
    "swapExactETHForTokens",
    "addLiquidity",
]


def default_config(cfg: Settings = settings) -> dict[str, Any]:
    return {
        "name": PROFILE_NAME,
        "scale": {"minimum": 0, "maximum": 100},
        "thresholds": {"critical": 80, "high": 60, "medium": 40, "low": 20},
        "multipliers": [
            {"name": "multiple_ownership_issues", "factor": 1.5, "min_counts": {"ownership": 2}},
            {"name": "multiple_transfer_issues", "factor": 1.3, "min_counts": {"transfer": 2}},
            {"name": "multiple_approval_issues", "factor": 1.4, "min_counts": {"approval": 2}},
            {
                "name": "combined_liquidity_ownership",
                "factor": 1.8,
                "min_counts": {"ownership": 1, "liquidity": 1},
            },
            {
                "name": "intel_confirms_pattern",
                "factor": 1.2,
                "min_counts": {"external_intel": 1, "attack_pattern": 1},
            },
        ],
        "low_severity_cap": {"max_signal_weight": 5, "ceiling": 19},
        "max_dampening_fraction": cfg.max_dampening_fraction,
        "filters": [
            {
                "type": "allow_list",
                "name": "known_good_recipient",
                "amount": 15,
                "target": "recipient",
                "addresses": list(cfg.known_good_addresses),
            },
            {
                "type": "canonical_operation",
                "name": "standard_defi_operation",
                "amount": 10,
                "methods": STANDARD_DEFI_METHODS,
            },
            {
                "type": "time_window",
                "name": "low_risk_time_pattern",
                "amount": 5,
                "start_hour": 9,
                "end_hour": 17,
            },
            {
                "type": "signal_kind",
                "name": "historical_false_positive",
                "amount": 8,
                "kinds": ["mev_bot_activity"],
            },
        ],
        "rules": [
            {
                "id": "high_value_alert",
                "name": "High Value Transaction Alert",
                "condition": "score > 50",
                "severity": "HIGH",
                "message": "High-risk transaction detected: {subject} scored {score}",
                "actions": ["notify", "log"],
            },
            {
                "id": "critical_threat_alert",
                "name": "Critical Threat Alert",
                "condition": "level == CRITICAL",
                "severity": "CRITICAL",
                "message": "CRITICAL threat on {subject} (score {score}): block immediately",
                "actions": ["block", "notify", "escalate"],
            },
            {
                "id": "unlimited_approval_alert",
                "name": "Unlimited Approval Alert",
                "condition": "signal UNLIMITED_APPROVAL|UNLIMITED_PERMIT|APPROVE_ALL_NFTS",
                "severity": "CRITICAL",
                "message": "Unlimited approval requested by {subject}",
                "actions": ["block", "notify"],
            },
            {
                "id": "known_scam_alert",
                "name": "Known Scam Recipient",
                "condition": "signal KNOWN_SCAM_ADDRESS",
                "severity": "CRITICAL",
                "message": "{subject} sends to a blocklisted scam address",
                "actions": ["block", "notify"],
            },
            {
                "id": "proxy_upgrade_alert",
                "name": "Proxy Upgrade",
                "condition": "signal PROXY_UPGRADE",
                "severity": "HIGH",
                "message": "Proxy implementation change in {subject} ({level})",
                "actions": ["notify", "log"],
            },
        ],
        "recommendations": {
            "CRITICAL": [
                "Block transaction immediately",
                "Freeze associated accounts",
                "Contact security team",
            ],
            "HIGH": [
                "Flag for manual review",
                "Increase monitoring frequency",
                "Document threat patterns",
            ],
            "MEDIUM": ["Monitor closely", "Track pattern development"],
            "LOW": ["Review transaction details as normal precaution"],
            "MINIMAL": [],
        },
        "signal_recommendations": {
            "UNLIMITED_APPROVAL": "Consider setting limited approval amounts instead",
            "UNLIMITED_PERMIT": "Consider setting limited approval amounts instead",
            "APPROVE_ALL_NFTS": "Grant operator approval only to trusted marketplaces",
            "KNOWN_SCAM_ADDRESS": "Do not send funds to this recipient",
            "PROXY_UPGRADE": "Verify the new implementation before it goes live",
            "rug_pull_attempt": "This transaction may drain liquidity from the pool",
            "flash_loan_attack": "Check the call graph for price-oracle manipulation",
        },
    }


class TransactionAdapter:
    input_model = TransactionInput

    def subject(self, tx: TransactionInput) -> str:
        return tx.subject

    def filter_context(self, tx: TransactionInput) -> FilterContext:
        return FilterContext(
            subject=tx.subject,
            sender=tx.from_address,
            recipient=tx.to_address,
            method=tx.call.method_name if tx.call else None,
            observed_at=tx.observed_at,
        )

    def base_confidence(self, tx: TransactionInput, signals: list[Signal]) -> float:
        return factor_count_confidence(signals)


def build_registry(
    cfg: Settings = settings,
    cache: LookupCache | None = None,
    alert_fetcher: AlertFetcher | None = None,
    identity_resolver: IdentityResolver | None = None,
) -> DetectorRegistry:
    """
    Transaction detectors in verdict order.

    The attack-alert and identity feeds only join the external-intel
    detector when their fetcher or resolver is supplied.
    """
    if cfg.intel_feed_timeout_seconds >= cfg.detector_timeout_seconds:
        # Feeds must time out before the detector does
        raise ConfigurationError(
            f"intel_feed_timeout_seconds ({cfg.intel_feed_timeout_seconds}) must be below "
            f"detector_timeout_seconds ({cfg.detector_timeout_seconds})"
        )

    feeds: list[ThreatFeed] = [BlocklistFeed(cfg.scam_addresses)]
    if alert_fetcher is not None:
        feeds.append(AttackAlertFeed(alert_fetcher))
    if identity_resolver is not None:
        feeds.append(IdentityFeed(identity_resolver, cache=cache))

    registry = DetectorRegistry(detector_timeout=cfg.detector_timeout_seconds)
    registry.register(method_signature.DETECTOR_ID, method_signature.detect)
    registry.register("external_intel", ExternalIntelDetector(feeds, feed_timeout=cfg.intel_feed_timeout_seconds))
    registry.register(value_gas.DETECTOR_ID, value_gas.detect)
    registry.register("address_reputation", AddressReputationDetector(cfg.suspicious_addresses))
    registry.register("attack_patterns", AttackPatternDetector(cfg.suspicious_addresses))
    return registry


def build_engine(
    cfg: Settings = settings,
    profile: ScoringProfile | None = None,
    cache: LookupCache | None = None,
    alert_fetcher: AlertFetcher | None = None,
    identity_resolver: IdentityResolver | None = None,
) -> AssessmentEngine:
    if profile is None:
        profile = resolve_profile(PROFILE_NAME, default_config(cfg), cfg.profile_config_path)
    return AssessmentEngine(
        profile=profile,
        registry=build_registry(cfg, cache, alert_fetcher, identity_resolver),
        adapter=TransactionAdapter(),
        deadline_seconds=cfg.assessment_deadline_seconds,
        coverage_penalty=cfg.coverage_penalty,
    )
