"""
Alert Rule Data Models — threat levels, the closed condition grammar, rules and triggers.

Rule conditions are configuration, not code. They are parsed once into one of
a small set of predicate models and only ever compare public verdict fields.
"""

from __future__ import annotations

import re
import string
from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, field_validator


class ThreatLevel(str, Enum):
    MINIMAL = "MINIMAL"
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"

    @property
    def rank(self) -> int:
        return LEVEL_ORDER.index(self)


LEVEL_ORDER: list[ThreatLevel] = [
    ThreatLevel.MINIMAL,
    ThreatLevel.LOW,
    ThreatLevel.MEDIUM,
    ThreatLevel.HIGH,
    ThreatLevel.CRITICAL,
]


class RuleContext(BaseModel):
    """The public verdict fields a rule condition may inspect."""

    score: float
    level: ThreatLevel
    signal_kinds: frozenset[str] = frozenset()
    subject: str = ""


class ScoreGreaterThan(BaseModel):
    op: Literal["score_gt"] = "score_gt"
    value: float

    def evaluate(self, ctx: RuleContext) -> bool:
        return ctx.score > self.value


class ScoreAtLeast(BaseModel):
    op: Literal["score_ge"] = "score_ge"
    value: float

    def evaluate(self, ctx: RuleContext) -> bool:
        return ctx.score >= self.value


class LevelEquals(BaseModel):
    op: Literal["level_eq"] = "level_eq"
    level: ThreatLevel

    def evaluate(self, ctx: RuleContext) -> bool:
        return ctx.level is self.level


class LevelAtLeast(BaseModel):
    op: Literal["level_ge"] = "level_ge"
    level: ThreatLevel

    def evaluate(self, ctx: RuleContext) -> bool:
        return ctx.level.rank >= self.level.rank


class HasSignalKind(BaseModel):
    """True when any of the listed signal kinds is present."""

    op: Literal["has_signal"] = "has_signal"
    kinds: list[str] = Field(..., min_length=1)

    def evaluate(self, ctx: RuleContext) -> bool:
        return any(kind in ctx.signal_kinds for kind in self.kinds)


LeafCondition = Annotated[
    Union[ScoreGreaterThan, ScoreAtLeast, LevelEquals, LevelAtLeast, HasSignalKind],
    Field(discriminator="op"),
]


class AllOf(BaseModel):
    op: Literal["all_of"] = "all_of"
    clauses: list[LeafCondition] = Field(..., min_length=1)

    def evaluate(self, ctx: RuleContext) -> bool:
        return all(clause.evaluate(ctx) for clause in self.clauses)


Condition = Annotated[
    Union[ScoreGreaterThan, ScoreAtLeast, LevelEquals, LevelAtLeast, HasSignalKind, AllOf],
    Field(discriminator="op"),
]


_SCORE_CLAUSE = re.compile(r"score\s*(>=|>)\s*(-?\d+(?:\.\d+)?)")
_LEVEL_CLAUSE = re.compile(r"level\s*(==|>=)\s*[\"']?([A-Za-z]+)[\"']?")
_SIGNAL_CLAUSE = re.compile(r"signal\s+([\w|]+)")

TEMPLATE_FIELDS = frozenset({"score", "level", "subject"})


def parse_condition(text: str) -> dict:
    """
    Parse operator-written condition text into a predicate structure.

    Grammar (clauses joined by ``and``)::

        score > N | score >= N
        level == LEVEL | level >= LEVEL
        signal KIND | signal KIND_A|KIND_B

    Raises:
        ValueError: on any clause outside the grammar.
    """
    if not text or not text.strip():
        raise ValueError("Rule condition is empty")

    clauses: list[dict] = []
    for raw_clause in re.split(r"\s+and\s+", text.strip()):
        clause = raw_clause.strip()

        match = _SCORE_CLAUSE.fullmatch(clause)
        if match:
            op = "score_gt" if match.group(1) == ">" else "score_ge"
            clauses.append({"op": op, "value": float(match.group(2))})
            continue

        match = _LEVEL_CLAUSE.fullmatch(clause)
        if match:
            name = match.group(2).upper()
            if name not in ThreatLevel.__members__:
                raise ValueError(f"Unknown threat level '{match.group(2)}' in condition '{text}'")
            op = "level_eq" if match.group(1) == "==" else "level_ge"
            clauses.append({"op": op, "level": name})
            continue

        match = _SIGNAL_CLAUSE.fullmatch(clause)
        if match:
            kinds = [k for k in match.group(1).split("|") if k]
            if not kinds:
                raise ValueError(f"No signal kind given in condition '{text}'")
            clauses.append({"op": "has_signal", "kinds": kinds})
            continue

        raise ValueError(f"Unrecognized condition clause '{clause}' in '{text}'")

    if len(clauses) == 1:
        return clauses[0]
    return {"op": "all_of", "clauses": clauses}


class AlertRule(BaseModel):
    """A static, declarative alert rule."""

    id: str = Field(..., min_length=1)
    name: str = ""
    condition: Condition
    severity: ThreatLevel
    message: str = Field(..., description="Template; may use {score}, {level}, {subject}")
    actions: list[str] = Field(default_factory=list)

    model_config = {"frozen": True}

    @field_validator("condition", mode="before")
    @classmethod
    def _parse_condition_text(cls, value):
        if isinstance(value, str):
            return parse_condition(value)
        return value

    @field_validator("message")
    @classmethod
    def _check_template_fields(cls, value: str) -> str:
        for _, field_name, _, _ in string.Formatter().parse(value):
            if field_name is not None and field_name not in TEMPLATE_FIELDS:
                raise ValueError(
                    f"Unknown placeholder '{{{field_name}}}' in message template; "
                    f"allowed: {sorted(TEMPLATE_FIELDS)}"
                )
        return value


class AlertTrigger(BaseModel):
    """A fired alert rule."""

    rule_id: str
    name: str = ""
    severity: ThreatLevel
    message: str
    actions: list[str] = Field(default_factory=list)

    model_config = {"frozen": True}
