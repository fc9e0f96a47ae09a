"""
Social Detectors — Sentiment, community reports and activity for a social corpus.

The corpus arrives already collected per platform (mentions, mean sentiment,
post texts). Platforms flagged unavailable are ignored; when none is
available every social detector reports itself unavailable instead of
guessing.
"""

from __future__ import annotations

from threatscope.core.errors import DetectorUnavailable
from threatscope.models.input_models import PlatformActivity, SocialCorpusInput
from threatscope.models.signal_models import Polarity, Signal, SignalCategory


SENTIMENT_ID = "sentiment"
COMMUNITY_ID = "community_reports"
ACTIVITY_ID = "social_activity"

PLATFORM_WEIGHTS = {
    "twitter": 0.4,
    "reddit": 0.3,
    "telegram": 0.2,
}
DEFAULT_PLATFORM_WEIGHT = 0.1

VERY_NEGATIVE = -0.5
NEGATIVE = -0.1
VERY_POSITIVE = 0.5
CONTRADICTION_SPREAD = 1.0

LOW_ACTIVITY_MENTIONS = 5
ACTIVITY_SPIKE_MENTIONS = 100

# (phrase, severity)
RISK_KEYWORDS: list[tuple[str, str]] = [
    ("rug pull", "HIGH"),
    ("scam", "HIGH"),
    ("honeypot", "HIGH"),
    ("exit scam", "HIGH"),
    ("pump and dump", "HIGH"),
    ("fake team", "HIGH"),
    ("lost money", "HIGH"),
    ("scam alert", "HIGH"),
    ("dumping", "MEDIUM"),
    ("bot activity", "MEDIUM"),
    ("avoid this", "MEDIUM"),
]


def _available(corpus: SocialCorpusInput, detector: str) -> list[PlatformActivity]:
    platforms = corpus.available_platforms
    if not platforms:
        raise DetectorUnavailable(detector, "no social platform data available")
    return platforms


def corpus_confidence(corpus: SocialCorpusInput) -> float:
    """0.5 base, more for mention volume and each extra platform, capped at 1.0."""
    confidence = 0.5
    mentions = corpus.total_mentions
    if mentions > 50:
        confidence += 0.3
    elif mentions > 20:
        confidence += 0.2
    elif mentions > 10:
        confidence += 0.1

    available = len(corpus.available_platforms)
    if available > 1:
        confidence += (available - 1) * 0.1
    return round(min(confidence, 1.0), 4)


def weighted_sentiment(platforms: list[PlatformActivity]) -> float:
    """Mean sentiment weighted by platform weight times mention count."""
    total = 0.0
    weights = 0.0
    for p in platforms:
        if p.mentions <= 0:
            continue
        w = PLATFORM_WEIGHTS.get(p.platform, DEFAULT_PLATFORM_WEIGHT) * p.mentions
        total += p.sentiment * w
        weights += w
    return total / weights if weights else 0.0


def detect_sentiment(corpus: SocialCorpusInput) -> list[Signal]:
    platforms = _available(corpus, SENTIMENT_ID)
    confidence = corpus_confidence(corpus)
    score = weighted_sentiment(platforms)
    signals: list[Signal] = []

    if score <= VERY_NEGATIVE:
        signals.append(
            Signal(
                category=SignalCategory.SENTIMENT,
                kind="negative_sentiment",
                weight=30,
                confidence=confidence,
                description=f"Overwhelmingly negative social sentiment ({score:.2f})",
                source=SENTIMENT_ID,
            )
        )
    elif score <= NEGATIVE:
        signals.append(
            Signal(
                category=SignalCategory.SENTIMENT,
                kind="negative_sentiment",
                weight=15,
                confidence=confidence,
                description=f"Negative social sentiment trending ({score:.2f})",
                source=SENTIMENT_ID,
            )
        )
    elif score > VERY_POSITIVE:
        signals.append(
            Signal(
                category=SignalCategory.SENTIMENT,
                kind="positive_sentiment",
                weight=10,
                confidence=confidence,
                polarity=Polarity.MITIGATING,
                description=f"Strongly positive social sentiment ({score:.2f})",
                source=SENTIMENT_ID,
            )
        )

    rated = [p.sentiment for p in platforms if p.mentions > 0]
    if len(rated) > 1 and max(rated) - min(rated) > CONTRADICTION_SPREAD:
        signals.append(
            Signal(
                category=SignalCategory.SENTIMENT,
                kind="contradictory_sentiment",
                weight=5,
                confidence=confidence,
                description="Contradictory sentiment across platforms",
                source=SENTIMENT_ID,
            )
        )
    return signals


def keyword_hits(posts: list[str]) -> dict[str, int]:
    """Count risk-keyword hits by severity across a platform's posts."""
    hits = {"HIGH": 0, "MEDIUM": 0}
    for post in posts:
        text = post.lower()
        for phrase, severity in RISK_KEYWORDS:
            if phrase in text:
                hits[severity] += 1
    return hits


def detect_community_reports(corpus: SocialCorpusInput) -> list[Signal]:
    signals: list[Signal] = []
    for p in _available(corpus, COMMUNITY_ID):
        hits = keyword_hits(p.posts)
        if hits["HIGH"]:
            signals.append(
                Signal(
                    category=SignalCategory.COMMUNITY,
                    kind="scam_accusations",
                    weight=20,
                    confidence=1.0,
                    description=f"{hits['HIGH']} scam accusation(s) on {p.platform}",
                    source=COMMUNITY_ID,
                )
            )
        elif hits["MEDIUM"]:
            signals.append(
                Signal(
                    category=SignalCategory.COMMUNITY,
                    kind="community_warning",
                    weight=10,
                    confidence=1.0,
                    description=f"{hits['MEDIUM']} community warning(s) on {p.platform}",
                    source=COMMUNITY_ID,
                )
            )
    return signals


def detect_activity(corpus: SocialCorpusInput) -> list[Signal]:
    _available(corpus, ACTIVITY_ID)
    mentions = corpus.total_mentions

    if mentions < LOW_ACTIVITY_MENTIONS:
        return [
            Signal(
                category=SignalCategory.ACTIVITY,
                kind="low_social_activity",
                weight=15,
                confidence=1.0,
                description="Very low social media activity: potential ghost project",
                source=ACTIVITY_ID,
            )
        ]
    if mentions > ACTIVITY_SPIKE_MENTIONS:
        return [
            Signal(
                category=SignalCategory.ACTIVITY,
                kind="activity_spike",
                weight=10,
                confidence=1.0,
                description=f"{mentions} mentions: verify activity is organic",
                source=ACTIVITY_ID,
            )
        ]
    return []
