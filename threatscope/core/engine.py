"""
Assessment Engine — Main orchestrator for one subject type.

Full pipeline:
1. Validate the input → InvalidInput, no partial verdict
2. Run every detector concurrently under the assessment deadline
3. Aggregate signals → raw score
4. False-positive dampening → final score
5. Hard override → at least the critical threshold
6. Classify → evaluate alert rules
7. Recommendations, confidence, summary → immutable ThreatAssessment

The engine holds only read-only configuration, so one instance may serve
concurrent assessments.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Iterable, Protocol

from pydantic import BaseModel, ValidationError

from threatscope.config import settings
from threatscope.core.aggregator import aggregate
from threatscope.core.alert_rules import evaluate_rules
from threatscope.core.classifier import classify, display_score
from threatscope.core.detector_registry import DetectorRegistry
from threatscope.core.errors import InvalidInput
from threatscope.core.fp_filter import dampen
from threatscope.models.profile_models import FilterContext, ScoringProfile
from threatscope.models.rule_models import RuleContext, ThreatLevel
from threatscope.models.signal_models import Signal
from threatscope.models.verdict_models import ThreatAssessment

logger = logging.getLogger("threatscope.engine")


class SubjectAdapter(Protocol):
    """Binds an input model to the engine: subject id, filter context, base confidence."""

    input_model: type[BaseModel]

    def subject(self, data: Any) -> str: ...

    def filter_context(self, data: Any) -> FilterContext: ...

    def base_confidence(self, data: Any, signals: list[Signal]) -> float: ...


def factor_count_confidence(signals: Iterable[Signal]) -> float:
    """
    Confidence from the number of contributing risk factors.

    No factors means a confident "clean". Very few factors are the least
    certain; a broad picture raises confidence again. An analysis error
    drops it to 0.3.
    """
    signals = list(signals)
    if any(s.kind == "ANALYSIS_ERROR" for s in signals):
        return 0.3
    factors = sum(1 for s in signals if s.is_risk and s.effective_weight > 0)
    if factors == 0:
        return 0.9
    if factors <= 2:
        return 0.8
    if factors <= 4:
        return 0.85
    return 0.9


def _dedupe(items: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    out: list[str] = []
    for item in items:
        if item not in seen:
            seen.add(item)
            out.append(item)
    return out


class AssessmentEngine:
    """
    Scores one kind of subject with one ScoringProfile.

    Args:
        profile: Read-only scale, tables, filters and rules.
        registry: Detectors for this subject type.
        adapter: Input binding (model class, subject id, filter context, base confidence).
        deadline_seconds: Default overall deadline for the detector fan-out.
        coverage_penalty: Confidence lost when every detector is unavailable.
    """

    def __init__(
        self,
        profile: ScoringProfile,
        registry: DetectorRegistry,
        adapter: SubjectAdapter,
        deadline_seconds: float | None = None,
        coverage_penalty: float | None = None,
    ) -> None:
        self.profile = profile
        self.registry = registry
        self.adapter = adapter
        self.deadline_seconds = (
            deadline_seconds if deadline_seconds is not None else settings.assessment_deadline_seconds
        )
        self.coverage_penalty = (
            coverage_penalty if coverage_penalty is not None else settings.coverage_penalty
        )

    def validate(self, data: Any) -> BaseModel:
        """Coerce a dict (or an already-built model) into the adapter's input model."""
        model = self.adapter.input_model
        if isinstance(data, model):
            return data
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise InvalidInput(
                f"Invalid {self.profile.name} input: {e.error_count()} error(s)",
                errors=e.errors(include_url=False, include_context=False, include_input=False),
            ) from e

    def _confidence(self, base: float, total: int, unavailable: int) -> float:
        if total == 0:
            return round(base, 4)
        coverage = 1.0 - self.coverage_penalty * (unavailable / total)
        return round(max(0.0, min(1.0, base * coverage)), 4)

    def _recommendations(self, level: ThreatLevel, signals: list[Signal]) -> list[str]:
        items = list(self.profile.recommendations.get(level, []))
        for s in signals:
            hint = self.profile.signal_recommendations.get(s.kind)
            if hint:
                items.append(hint)
        return _dedupe(items)

    async def assess(self, data: Any, deadline: float | None = None) -> ThreatAssessment:
        """
        Run the full assessment pipeline for one subject.

        Args:
            data: Input dict or an instance of the adapter's input model.
            deadline: Overrides the default detector deadline (seconds).

        Returns:
            ThreatAssessment. The same input and detector outcomes always
            produce the same verdict.

        Raises:
            InvalidInput: the input failed validation; no detector ran.
        """
        subject_input = self.validate(data)
        subject = self.adapter.subject(subject_input)
        profile = self.profile

        # ── Detect ──
        detection = await self.registry.run(
            subject_input,
            deadline=deadline if deadline is not None else self.deadline_seconds,
        )
        signals = detection.signals

        # ── Aggregate → dampen ──
        agg = aggregate(signals, profile)
        fp = dampen(agg.raw_score, signals, self.adapter.filter_context(subject_input), profile)
        final = profile.scale.clamp(agg.raw_score - fp.dampening)

        # ── Override → classify ──
        overridden = [s.kind for s in signals if s.override]
        if overridden:
            final = max(final, profile.thresholds.critical)
            level = ThreatLevel.CRITICAL
        else:
            level = classify(final, profile.thresholds)

        # ── Rules ──
        ctx = RuleContext(
            score=final,
            level=level,
            signal_kinds=frozenset(s.kind for s in signals),
            subject=subject,
        )
        triggers = evaluate_rules(profile.rules, ctx)

        # ── Confidence ──
        base = self.adapter.base_confidence(subject_input, signals)
        confidence = self._confidence(base, len(detection.traces), len(detection.unavailable))

        score = display_score(final)
        summary = (
            f"{level.value} risk {score}/{display_score(profile.scale.maximum)} for {subject}: "
            f"{len(signals)} signal(s), {len(triggers)} alert(s)"
        )
        if overridden:
            summary += f", override by {', '.join(_dedupe(overridden))}"
        if detection.unavailable:
            summary += f", unavailable: {', '.join(detection.unavailable)}"

        logger.info(f"[{profile.name}] {summary} (confidence {confidence})")

        return ThreatAssessment(
            subject=subject,
            profile=profile.name,
            score=score,
            exact_score=round(final, 4),
            raw_score=round(agg.raw_score, 4),
            level=level,
            signals=tuple(signals),
            false_positive=fp,
            triggers=triggers,
            recommendations=self._recommendations(level, signals),
            confidence=confidence,
            detectors=detection.traces,
            applied_multipliers=agg.applied_multipliers,
            summary=summary,
        )

    def assess_sync(self, data: Any, deadline: float | None = None) -> ThreatAssessment:
        """Blocking wrapper for callers outside an event loop."""
        return asyncio.run(self.assess(data, deadline=deadline))
