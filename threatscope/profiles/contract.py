"""
Contract Profile — 1-10 rug-pull scoring for a token contract.

Detectors: named rug factors plus the tokenomics family (holder
distribution, supply controls, liquidity, bot activity).
"""

from __future__ import annotations

from typing import Any

from threatscope.config import Settings, settings
from threatscope.core.detector_registry import DetectorRegistry
from threatscope.core.detectors import rug_factors, tokenomics
from threatscope.core.engine import AssessmentEngine, factor_count_confidence
from threatscope.models.input_models import ContractProfileInput
from threatscope.models.profile_models import FilterContext, ScoringProfile
from threatscope.models.signal_models import Signal
from threatscope.profiles.loader import resolve_profile

PROFILE_NAME = "contract"

_AVOID = [
    "High risk - avoid this transaction",
    "Do not proceed without expert review",
    "Multiple serious risk factors detected",
]
_CAUTION = [
    "Exercise increased caution",
    "Review all transaction details carefully",
    "Consider using smaller amounts for testing",
]
_SAFE = [
    "Transaction appears relatively safe",
    "Review transaction details as normal precaution",
]


def default_config(cfg: Settings = settings) -> dict[str, Any]:
    return {
        "name": PROFILE_NAME,
        "scale": {"minimum": 1, "maximum": 10},
        "thresholds": {"critical": 9, "high": 7, "medium": 5, "low": 3},
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
                "name": "whale_with_owner_control",
                "factor": 1.3,
                "min_counts": {"tokenomics": 1, "ownership": 1},
            },
        ],
        # Only low-severity factors present: never above 4
        "low_severity_cap": {"max_signal_weight": 3, "ceiling": 4},
        "max_dampening_fraction": cfg.max_dampening_fraction,
        "filters": [
            {
                "type": "allow_list",
                "name": "known_good_contract",
                "amount": 1.5,
                "target": "subject",
                "addresses": list(cfg.known_good_addresses),
            },
        ],
        "rules": [
            {
                "id": "critical_contract_alert",
                "name": "Critical Contract Risk",
                "condition": "level == CRITICAL",
                "severity": "CRITICAL",
                "message": "Contract {subject} scored {score}/10 ({level})",
                "actions": ["block", "notify"],
            },
            {
                "id": "drain_pattern_alert",
                "name": "Wallet Drain Pattern",
                "condition": "signal DRAIN_PATTERN",
                "severity": "CRITICAL",
                "message": "Wallet draining pattern in {subject}",
                "actions": ["block", "notify"],
            },
            {
                "id": "honeypot_alert",
                "name": "Honeypot Indicators",
                "condition": "signal HONEYPOT_INDICATORS|HONEYPOT_INDICATOR",
                "severity": "HIGH",
                "message": "Honeypot indicators on {subject}",
                "actions": ["notify", "log"],
            },
            {
                "id": "whale_concentration_alert",
                "name": "Whale Concentration",
                "condition": "signal WHALE_CONCENTRATION and score >= 5",
                "severity": "MEDIUM",
                "message": "Supply of {subject} is concentrated in few wallets (score {score})",
                "actions": ["log"],
            },
        ],
        "recommendations": {
            "CRITICAL": _AVOID,
            "HIGH": _AVOID,
            "MEDIUM": _CAUTION,
            "LOW": _SAFE,
            "MINIMAL": _SAFE,
        },
        "signal_recommendations": {
            "UNLIMITED_APPROVAL": "Consider setting limited approval amounts instead",
            "DRAIN_PATTERN": "This transaction may drain your wallet",
            "WHALE_CONCENTRATION": "Monitor whale movements - set alerts for large transfers",
            "LOW_LIQUIDITY": "Check liquidity depth before large trades",
            "CENTRALIZED_CONTROL": "Check whether owner privileges are behind a timelock",
        },
    }


class ContractAdapter:
    input_model = ContractProfileInput

    def subject(self, contract: ContractProfileInput) -> str:
        return contract.subject

    def filter_context(self, contract: ContractProfileInput) -> FilterContext:
        return FilterContext(subject=contract.address)

    def base_confidence(self, contract: ContractProfileInput, signals: list[Signal]) -> float:
        return factor_count_confidence(signals)


def build_registry(cfg: Settings = settings) -> DetectorRegistry:
    registry = DetectorRegistry(detector_timeout=cfg.detector_timeout_seconds)
    registry.register(rug_factors.DETECTOR_ID, rug_factors.detect)
    registry.register(tokenomics.DISTRIBUTION_ID, tokenomics.detect_distribution)
    registry.register(tokenomics.SUPPLY_CONTROLS_ID, tokenomics.detect_supply_controls)
    registry.register(tokenomics.LIQUIDITY_ID, tokenomics.detect_liquidity)
    registry.register(tokenomics.BOT_ACTIVITY_ID, tokenomics.detect_bot_activity)
    return registry


def build_engine(cfg: Settings = settings, profile: ScoringProfile | None = None) -> AssessmentEngine:
    if profile is None:
        profile = resolve_profile(PROFILE_NAME, default_config(cfg), cfg.profile_config_path)
    return AssessmentEngine(
        profile=profile,
        registry=build_registry(cfg),
        adapter=ContractAdapter(),
        deadline_seconds=cfg.assessment_deadline_seconds,
        coverage_penalty=cfg.coverage_penalty,
    )
