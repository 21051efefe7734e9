"""Matcher query metrics."""

from __future__ import annotations
from dataclasses import dataclass


@dataclass
class MatchMetrics:
    """Counters for one matcher: queries, scored candidates, rejections, exact hits, early exits."""

    total_queries: int = 0
    empty_results: int = 0
    candidates_scored: int = 0
    sentinel_rejections: int = 0
    below_threshold: int = 0
    exact_matches: int = 0
    early_exits: int = 0

    @property
    def empty_result_rate_pct(self) -> float:
        if self.total_queries == 0:
            return 0.0
        return 100.0 * self.empty_results / self.total_queries

    def record_query(self, n_results: int) -> None:
        self.total_queries += 1
        if n_results == 0:
            self.empty_results += 1

    def reset(self) -> None:
        self.__init__()

    def summary(self) -> str:
        lines = [
            "=== Match Metrics ===",
            f"Total queries: {self.total_queries}",
            f"Empty results: {self.empty_results} ({self.empty_result_rate_pct:.2f}%)",
            f"Candidates scored: {self.candidates_scored}",
            f"Sentinel rejections: {self.sentinel_rejections}",
            f"Below threshold: {self.below_threshold}",
            f"Exact matches: {self.exact_matches}",
            f"Early exits: {self.early_exits}",
        ]
        return "\n".join(lines)
