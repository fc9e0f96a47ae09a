"""
Alert Rule Evaluator — fires declarative rules against a verdict in progress.

Triggers come back in rule-declaration order, never sorted by severity, so
downstream consumers can deduplicate on a stable sequence.
"""

from __future__ import annotations

from typing import Iterable

from threatscope.core.classifier import display_score
from threatscope.models.rule_models import AlertRule, AlertTrigger, RuleContext


def render_message(rule: AlertRule, ctx: RuleContext) -> str:
    return rule.message.format(
        score=display_score(ctx.score),
        level=ctx.level.value,
        subject=ctx.subject,
    )


def evaluate_rules(rules: Iterable[AlertRule], ctx: RuleContext) -> list[AlertTrigger]:
    """Return a trigger for every rule whose condition holds."""
    triggers: list[AlertTrigger] = []
    for rule in rules:
        if rule.condition.evaluate(ctx):
            triggers.append(
                AlertTrigger(
                    rule_id=rule.id,
                    name=rule.name,
                    severity=rule.severity,
                    message=render_message(rule, ctx),
                    actions=list(rule.actions),
                )
            )
    return triggers
