"""Pipeline segments: text transforms applied between detection rounds.

Each segment consumes the text produced by the previous one. Patterns are compiled
when the segment is built, so an invalid pattern fails before any round runs.

Custom segments also see the rounds recorded so far, which lets a transform depend
on earlier scores (e.g. only rewrite when the previous round found nothing).
"""

from __future__ import annotations
import re
from abc import ABC, abstractmethod
from typing import Callable, List, Sequence, Union

from ..errors import MalformedInputError
from ..fingerprints.schema import Match

History = Sequence[Sequence[Match]]
CustomTransform = Callable[[str, History], str]
PatternLike = Union[str, "re.Pattern[str]"]


def compile_pattern(pattern: PatternLike) -> re.Pattern:
    if isinstance(pattern, re.Pattern):
        return pattern
    try:
        return re.compile(pattern)
    except (re.error, TypeError) as exc:
        raise MalformedInputError(f"invalid pattern {pattern!r}: {exc}") from exc


class Segment(ABC):
    name: str = "segment"

    @abstractmethod
    def apply(self, text: str, history: History) -> str:
        ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name})"


class Remove(Segment):
    """Delete every match of `pattern`."""

    name = "remove"

    def __init__(self, pattern: PatternLike):
        self.pattern = compile_pattern(pattern)

    def apply(self, text: str, history: History) -> str:
        return self.pattern.sub("", text)


class Replace(Segment):
    """Substitute every match of `pattern` with `replacement` (re.sub template syntax)."""

    name = "replace"

    def __init__(self, pattern: PatternLike, replacement: str):
        self.pattern = compile_pattern(pattern)
        if not isinstance(replacement, str):
            raise MalformedInputError(f"replacement must be a string, got {type(replacement).__name__}")
        self.replacement = replacement

    def apply(self, text: str, history: History) -> str:
        return self.pattern.sub(self.replacement, text)


class Custom(Segment):
    def __init__(self, transform: CustomTransform, name: str = ""):
        if not callable(transform):
            raise MalformedInputError(f"custom transform must be callable, got {transform!r}")
        self.transform = transform
        self.name = name or getattr(transform, "__name__", "custom")

    def apply(self, text: str, history: History) -> str:
        return self.transform(text, history)


class Batch(Segment):
    """Run several segments back to back. Scored once, as a single round."""

    name = "batch"

    def __init__(self, segments: Sequence[Segment]):
        self.segments: List[Segment] = list(segments)

    def apply(self, text: str, history: History) -> str:
        for segment in self.segments:
            text = segment.apply(text, history)
        return text

    def __repr__(self) -> str:
        return f"Batch({', '.join(repr(s) for s in self.segments)})"
