"""Volunteer-to-opportunity matching and ranking."""
from .match_scorer import (
    MatchBreakdown,
    MatchScorer,
    MatchScoreResult,
    calculate_match_score,
    get_match_label,
)
from .ranker import OpportunityRanker, RankedOpportunity

__all__ = [
    "MatchBreakdown",
    "MatchScorer",
    "MatchScoreResult",
    "OpportunityRanker",
    "RankedOpportunity",
    "calculate_match_score",
    "get_match_label",
]
