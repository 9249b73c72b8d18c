"""Scorer protocol for pluggable scoring engines.

Defines the interface the ranker and application service depend on.
MatchScorer is the heuristic implementation.
"""
from typing import Protocol, runtime_checkable

from src.matching.match_scorer import MatchScoreResult
from src.matching.profiles import OpportunityRecord, VolunteerProfile


@runtime_checkable
class Scorer(Protocol):
    """Protocol for match scoring engines."""

    def score(
        self,
        volunteer: VolunteerProfile,
        opportunity: OpportunityRecord,
    ) -> MatchScoreResult:
        """Score a single opportunity for a volunteer."""
        ...
