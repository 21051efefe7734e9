"""Confidence refinement pipeline.

Round 0 scores the input as given. Each further round applies the next segment to the
previous round's text and scores again, until the top confidence reaches the target or
the segments run out:

    rounds = [match(text)]
    for segment in segments:
        if top(rounds[-1]) >= target: break
        text = segment.apply(text, rounds)
        rounds.append(match(text))

The target is clamped to [0, 101]; 101 is unreachable, so any target above 100 runs
every segment. The number of rounds returned is 1 + the segments applied.

A failing segment aborts the run with TransformError; no partial result is returned.
Matchers normalize on every query, so segments see raw (already transformed) text.
"""

from __future__ import annotations
import logging
from typing import List, Sequence

from ..errors import LicenseDetectError, TransformError
from ..fingerprints.base import LicenseMatcher
from ..fingerprints.schema import Match
from .context import PipelineRun, top_confidence
from .segments import Segment

logger = logging.getLogger(__name__)

MAX_TARGET_CONFIDENCE = 101.0


def clamp_target(target_confidence: float) -> float:
    return max(0.0, min(MAX_TARGET_CONFIDENCE, float(target_confidence)))


class ConfidencePipeline:
    def __init__(
        self,
        matcher: LicenseMatcher,
        segments: Sequence[Segment] = (),
        target_confidence: float = 100.0,
    ):
        self.matcher = matcher
        self.segments: List[Segment] = list(segments)
        self.target_confidence = clamp_target(target_confidence)

    def run(self, text: str) -> List[List[Match]]:
        """Ranked matches per executed round, round 0 first."""
        return self.run_traced(text).rounds

    def run_traced(self, text: str) -> PipelineRun:
        run = PipelineRun()
        matches = self.matcher.match_by_plain_text(text)
        run.record("initial", text, matches)
        logger.debug("round 0: top=%.2f target=%.2f", top_confidence(matches), self.target_confidence)

        for i, segment in enumerate(self.segments, start=1):
            if self._reached(matches):
                break
            text = self._apply(segment, text, run.rounds)
            matches = self.matcher.match_by_plain_text(text)
            run.record(segment.name, text, matches)
            logger.debug("round %d (%s): top=%.2f", i, segment.name, top_confidence(matches))

        return run

    def _reached(self, matches: List[Match]) -> bool:
        return top_confidence(matches) >= self.target_confidence

    def _apply(self, segment: Segment, text: str, rounds: List[List[Match]]) -> str:
        history = tuple(list(r) for r in rounds)
        try:
            out = segment.apply(text, history)
        except LicenseDetectError:
            raise
        except Exception as exc:
            raise TransformError(f"segment {segment!r} failed: {exc}") from exc
        if not isinstance(out, str):
            raise TransformError(
                f"segment {segment!r} returned {type(out).__name__}, expected str"
            )
        return out
