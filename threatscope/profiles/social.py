"""
Social Profile — 0-100 risk from platform sentiment, community reports and activity.
"""

from __future__ import annotations

from typing import Any

from threatscope.config import Settings, settings
from threatscope.core.detector_registry import DetectorRegistry
from threatscope.core.detectors import social_sentiment
from threatscope.core.engine import AssessmentEngine
from threatscope.models.input_models import SocialCorpusInput
from threatscope.models.profile_models import FilterContext, ScoringProfile
from threatscope.models.signal_models import Signal
from threatscope.profiles.loader import resolve_profile

PROFILE_NAME = "social"


def default_config(cfg: Settings = settings) -> dict[str, Any]:
    return {
        "name": PROFILE_NAME,
        "scale": {"minimum": 0, "maximum": 100},
        "thresholds": {"critical": 80, "high": 60, "medium": 40, "low": 20},
        "multipliers": [
            {
                "name": "negative_with_reports",
                "factor": 1.5,
                "min_counts": {"sentiment": 1, "community": 1},
            },
            {"name": "multi_platform_reports", "factor": 1.3, "min_counts": {"community": 2}},
        ],
        "low_severity_cap": {"max_signal_weight": 5, "ceiling": 19},
        "max_dampening_fraction": cfg.max_dampening_fraction,
        "filters": [],
        "rules": [
            {
                "id": "scam_accusation_alert",
                "name": "Scam Accusations",
                "condition": "signal scam_accusations",
                "severity": "HIGH",
                "message": "Community scam accusations about {subject}",
                "actions": ["notify", "log"],
            },
            {
                "id": "negative_sentiment_alert",
                "name": "Negative Sentiment",
                "condition": "signal negative_sentiment and score >= 40",
                "severity": "MEDIUM",
                "message": "Negative sentiment around {subject} (score {score})",
                "actions": ["log"],
            },
            {
                "id": "critical_social_alert",
                "name": "Critical Social Risk",
                "condition": "level >= CRITICAL",
                "severity": "CRITICAL",
                "message": "Social risk for {subject} is {level} ({score})",
                "actions": ["notify", "escalate"],
            },
        ],
        "recommendations": {
            "CRITICAL": [
                "Do not interact with this project",
                "High probability of rug pull or scam",
            ],
            "HIGH": [
                "Exercise extreme caution",
                "Conduct thorough research before any interaction",
            ],
            "MEDIUM": ["Proceed with caution", "Monitor closely for any changes"],
            "LOW": ["Continue monitoring for any developments"],
            "MINIMAL": ["Continue monitoring for any developments"],
        },
        "signal_recommendations": {
            "scam_accusations": "Read the accusations and verify the team's identity",
            "activity_spike": "High social media activity detected - verify if organic or artificial",
            "low_social_activity": "Very low activity - the project may be abandoned",
            "contradictory_sentiment": "Contradictory sentiment across platforms - investigate further",
        },
    }


class SocialAdapter:
    input_model = SocialCorpusInput

    def subject(self, corpus: SocialCorpusInput) -> str:
        return corpus.subject

    def filter_context(self, corpus: SocialCorpusInput) -> FilterContext:
        return FilterContext(subject=corpus.subject)

    def base_confidence(self, corpus: SocialCorpusInput, signals: list[Signal]) -> float:
        return social_sentiment.corpus_confidence(corpus)


def build_registry(cfg: Settings = settings) -> DetectorRegistry:
    registry = DetectorRegistry(detector_timeout=cfg.detector_timeout_seconds)
    registry.register(social_sentiment.SENTIMENT_ID, social_sentiment.detect_sentiment)
    registry.register(social_sentiment.COMMUNITY_ID, social_sentiment.detect_community_reports)
    registry.register(social_sentiment.ACTIVITY_ID, social_sentiment.detect_activity)
    return registry


def build_engine(cfg: Settings = settings, profile: ScoringProfile | None = None) -> AssessmentEngine:
    if profile is None:
        profile = resolve_profile(PROFILE_NAME, default_config(cfg), cfg.profile_config_path)
    return AssessmentEngine(
        profile=profile,
        registry=build_registry(cfg),
        adapter=SocialAdapter(),
        deadline_seconds=cfg.assessment_deadline_seconds,
        coverage_penalty=cfg.coverage_penalty,
    )
