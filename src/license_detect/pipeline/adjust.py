"""Confidence adjustment pipes.

A pipe hand-tunes a score outside the matcher: if its trigger holds for the current
confidence and its predicate holds for its text, the action is applied and the result
clamped to [0, 100]. Otherwise the confidence passes through unchanged.

    should_run = confidence <condition> value

Predicates:
- RegexPipe: pattern found in a text.
- DiffingPipe: pattern found in the text the modified license inserts relative to the
  original reference (character-level diff, insertions only).
"""

from __future__ import annotations
import difflib
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterable, List, Sequence

from ..errors import MalformedInputError
from ..fingerprints.schema import Match
from .segments import PatternLike, compile_pattern

MIN_CONFIDENCE = 0.0
MAX_CONFIDENCE = 100.0


def clamp_confidence(confidence: float) -> float:
    return max(MIN_CONFIDENCE, min(MAX_CONFIDENCE, float(confidence)))


class TriggerCondition(str, Enum):
    GREATER_THAN = "gt"
    LESS_THAN = "lt"
    GREATER_THAN_OR_EQUAL = "gte"
    LESS_THAN_OR_EQUAL = "lte"
    EQUAL = "eq"
    NOT_EQUAL = "ne"
    ALWAYS = "always"

    @classmethod
    def parse(cls, value: object) -> TriggerCondition:
        """Accept members, short values ("gt") or names ("greater_than", "GreaterThan")."""
        if isinstance(value, cls):
            return value
        key = str(value).strip()
        for member in cls:
            if key.lower() == member.value or key.replace("_", "").lower() == member.name.replace("_", "").lower():
                return member
        raise MalformedInputError(f"Unknown trigger condition: {value!r}")


class ActionType(str, Enum):
    ADD = "add"
    SUBTRACT = "subtract"
    SET = "set"

    @classmethod
    def parse(cls, value: object) -> ActionType:
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as exc:
            raise MalformedInputError(f"Unknown action: {value!r}") from exc


@dataclass(frozen=True)
class TriggerInstruction:
    condition: TriggerCondition
    value: float = 0.0

    def should_run(self, confidence: float) -> bool:
        c, v = confidence, self.value
        if self.condition is TriggerCondition.GREATER_THAN:
            return c > v
        if self.condition is TriggerCondition.LESS_THAN:
            return c < v
        if self.condition is TriggerCondition.GREATER_THAN_OR_EQUAL:
            return c >= v
        if self.condition is TriggerCondition.LESS_THAN_OR_EQUAL:
            return c <= v
        if self.condition is TriggerCondition.EQUAL:
            return c == v
        if self.condition is TriggerCondition.NOT_EQUAL:
            return c != v
        return True


@dataclass(frozen=True)
class Action:
    kind: ActionType
    value: float

    def run(self, confidence: float) -> float:
        if self.kind is ActionType.ADD:
            return clamp_confidence(confidence + self.value)
        if self.kind is ActionType.SUBTRACT:
            return clamp_confidence(confidence - self.value)
        return clamp_confidence(self.value)


class AdjustmentPipe(ABC):
    name: str = "adjustment"

    def __init__(self, pattern: PatternLike, trigger: TriggerInstruction, action: Action):
        self.pattern = compile_pattern(pattern)
        self.trigger = trigger
        self.action = action

    @abstractmethod
    def predicate(self) -> bool:
        ...

    def run(self, confidence: float) -> float:
        if not self.trigger.should_run(confidence):
            return confidence
        if not self.predicate():
            return confidence
        return self.action.run(confidence)


class RegexPipe(AdjustmentPipe):
    name = "regex"

    def __init__(self, pattern: PatternLike, text: str, trigger: TriggerInstruction, action: Action):
        super().__init__(pattern, trigger, action)
        self.text = text

    def predicate(self) -> bool:
        return self.pattern.search(self.text) is not None


def inserted_text(original: str, modified: str) -> str:
    """Characters present in `modified` but not in `original`, in order."""
    matcher = difflib.SequenceMatcher(None, original, modified, autojunk=False)
    parts = [
        modified[j1:j2]
        for tag, _i1, _i2, j1, j2 in matcher.get_opcodes()
        if tag in ("insert", "replace")
    ]
    return "".join(parts)


class DiffingPipe(AdjustmentPipe):
    name = "diff"

    def __init__(
        self,
        pattern: PatternLike,
        original_license: str,
        modified_license: str,
        trigger: TriggerInstruction,
        action: Action,
    ):
        super().__init__(pattern, trigger, action)
        self.original_license = original_license
        self.modified_license = modified_license
        self._inserted = inserted_text(original_license, modified_license)

    def predicate(self) -> bool:
        return self.pattern.search(self._inserted) is not None


def adjust_confidence(confidence: float, pipes: Iterable[AdjustmentPipe]) -> float:
    for pipe in pipes:
        confidence = pipe.run(confidence)
    return confidence


def apply_adjustments(matches: Sequence[Match], pipes: Sequence[AdjustmentPipe]) -> List[Match]:
    """Run every pipe over each match's confidence and re-rank, best first."""
    adjusted = [replace(m, confidence=adjust_confidence(m.confidence, pipes)) for m in matches]
    adjusted.sort(key=lambda m: m.confidence, reverse=True)
    return adjusted
