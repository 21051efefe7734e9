"""Pipeline run record.

A run keeps every round's ranked matches together with the text that was scored and
the segment that produced it, so a caller can audit how the final answer was reached.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional

from ..fingerprints.schema import Match


def top_confidence(matches: List[Match]) -> float:
    """Best confidence of a ranked list; an empty list scores 0."""
    return matches[0].confidence if matches else 0.0


@dataclass
class PipelineRun:
    rounds: List[List[Match]] = field(default_factory=list)
    texts: List[str] = field(default_factory=list)
    # "initial" for round 0, then the name of the segment applied
    transform_chain: List[str] = field(default_factory=list)

    def record(self, label: str, text: str, matches: List[Match]) -> None:
        self.transform_chain.append(label)
        self.texts.append(text)
        self.rounds.append(matches)

    @property
    def segments_applied(self) -> int:
        return max(0, len(self.rounds) - 1)

    @property
    def final(self) -> List[Match]:
        return self.rounds[-1] if self.rounds else []

    @property
    def best(self) -> Optional[Match]:
        final = self.final
        return final[0] if final else None
