"""Opportunity ranking for a single volunteer."""
import logging
from dataclasses import dataclass
from typing import Optional

from src.matching.match_scorer import MatchScoreResult, MatchScorer
from src.matching.profiles import OpportunityRecord, VolunteerProfile
from src.matching.scorer_protocol import Scorer

logger = logging.getLogger(__name__)


@dataclass
class RankedOpportunity:
    """An opportunity with its match result."""

    opportunity: OpportunityRecord
    result: MatchScoreResult

    @property
    def score(self) -> int:
        return self.result.total_score

    @property
    def label(self) -> str:
        return self.result.label


class OpportunityRanker:
    """Score and rank opportunities for a volunteer."""

    def __init__(self, scorer: Optional[Scorer] = None, min_score: float = 0):
        """
        Initialize opportunity ranker.

        Args:
            scorer: Scoring engine (defaults to MatchScorer)
            min_score: Minimum score to include (0-100)
        """
        self.scorer = scorer or MatchScorer()
        self.min_score = min_score

    def rank(
        self,
        volunteer: VolunteerProfile,
        opportunities: list[OpportunityRecord],
    ) -> list[RankedOpportunity]:
        """
        Score a list of opportunities.

        Args:
            volunteer: Volunteer to rank for
            opportunities: Opportunities to score

        Returns:
            List of RankedOpportunity objects, sorted by score descending.
            Ties keep their input order.
        """
        ranked: list[RankedOpportunity] = []

        for opportunity in opportunities:
            result = self.scorer.score(volunteer, opportunity)
            if result.total_score < self.min_score:
                continue
            ranked.append(RankedOpportunity(opportunity=opportunity, result=result))

        ranked.sort(key=lambda r: r.score, reverse=True)

        logger.info(
            "Ranked %d of %d opportunities (min score %s)",
            len(ranked),
            len(opportunities),
            self.min_score,
        )
        return ranked

    def filter_by_score(
        self,
        ranked: list[RankedOpportunity],
        min_score: Optional[float] = None,
    ) -> list[RankedOpportunity]:
        """Filter ranked opportunities by minimum score."""
        threshold = min_score if min_score is not None else self.min_score
        return [r for r in ranked if r.score >= threshold]

    def get_top(
        self,
        ranked: list[RankedOpportunity],
        n: int = 10,
    ) -> list[RankedOpportunity]:
        """Get top N opportunities by score."""
        return ranked[:n]
