"""Volunteer-to-opportunity match scoring.

Six independent dimensions are scored and summed into a 0-100 match score:

- Skills: 40 (importance-weighted share of requested skills)
- Availability: 20 (weekly hours against hours required)
- Location: 15 (remote, same city/state, or haversine distance)
- Cause alignment: 10
- Commitment vs. opportunity duration: 10
- Personalization bonus: 5 (preferred NGO or application history)

Every ladder below is evaluated top-to-bottom and the first matching band
wins. Missing profile fields resolve to the documented default at the top of
each scorer instead of raising.
"""
import logging
import math
from dataclasses import asdict, dataclass, field
from typing import Iterable, Optional

from src.matching.geo import haversine_km
from src.matching.profiles import (
    GeoPoint,
    InteractionEntry,
    OpportunityLocation,
    OpportunityRecord,
    OpportunitySchedule,
    SkillRequirement,
    VolunteerAvailability,
    VolunteerLocation,
    VolunteerProfile,
)

logger = logging.getLogger(__name__)

MAX_TOTAL_SCORE = 100

# === SKILLS (0-40) ===
MAX_SKILL_SCORE = 40
SKILL_IMPORTANCE_WEIGHTS = {"required": 15, "preferred": 8, "bonus": 5}

# === AVAILABILITY (0-20) ===
MAX_AVAILABILITY_SCORE = 20
UNKNOWN_AVAILABILITY_SCORE = 5
# (fraction of required hours covered, points)
AVAILABILITY_BANDS = ((1.0, 20), (0.75, 15), (0.5, 10))
AVAILABILITY_FLOOR_SCORE = 5

# === LOCATION (0-15) ===
MAX_LOCATION_SCORE = 15
SAME_CITY_SCORE = 15
SAME_STATE_SCORE = 10
# (distance strictly below, points)
DISTANCE_BANDS_KM = ((5, 15), (15, 12), (30, 8))
FAR_DISTANCE_SCORE = 5
UNKNOWN_LOCATION_SCORE = 5

# === CAUSE (0-10) ===
MAX_CAUSE_SCORE = 10
NEUTRAL_CAUSE_SCORE = 5

# === COMMITMENT (0-10) ===
MAX_COMMITMENT_SCORE = 10
DEFAULT_COMMITMENT_SCORE = 5
SECONDS_PER_DAY = 60 * 60 * 24
LONG_TERM_MIN_DAYS = 180  # exclusive
SHORT_TERM_MAX_DAYS = 90  # inclusive
ONE_TIME_MAX_DAYS = 7  # inclusive

# === PERSONALIZATION (0-5) ===
MAX_PERSONALIZATION_SCORE = 5
PREFERRED_NGO_SCORE = 5
ENGAGED_HISTORY_SCORE = 3
# Tunable: more than this many applied/completed interactions earns the bonus
ENGAGED_HISTORY_MIN_INTERACTIONS = 3
ENGAGED_ACTIONS = frozenset({"applied", "completed"})

# === LABELS ===
MATCH_LABEL_BANDS = ((70, "High"), (40, "Medium"))
LOWEST_MATCH_LABEL = "Low"

# === RECOMMENDATIONS (tunable) ===
PERFECT_MATCH_THRESHOLD = 85
GREAT_MATCH_THRESHOLD = 70
LOW_SKILL_THRESHOLD = 20
LOW_AVAILABILITY_THRESHOLD = 15

PERFECT_MATCH_MESSAGE = (
    "🌟 Perfect match! This opportunity aligns excellently with your profile."
)
GREAT_MATCH_MESSAGE = "✅ Great match! Highly recommended for you."
DEVELOP_SKILLS_MESSAGE = "💡 Consider developing skills to improve match."
MORE_TIME_MESSAGE = (
    "⏰ This opportunity requires more time than you typically have available."
)


@dataclass(frozen=True)
class MatchBreakdown:
    """Per-dimension sub-scores."""

    skills: float
    availability: float
    location: float
    cause: float
    commitment: float
    personalization: float

    @property
    def total(self) -> float:
        return (
            self.skills
            + self.availability
            + self.location
            + self.cause
            + self.commitment
            + self.personalization
        )

    def as_dict(self) -> dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class MatchScoreResult:
    """Result of scoring one opportunity for one volunteer."""

    total_score: int  # 0-100
    breakdown: MatchBreakdown
    recommendations: list[str] = field(default_factory=list)

    @property
    def label(self) -> str:
        return get_match_label(self.total_score)


def score_skills(
    volunteer_skills: Optional[Iterable[str]],
    required_skills: Optional[Iterable[SkillRequirement]],
) -> float:
    """Importance-weighted share of requested skills the volunteer has (0-40).

    Matching is exact but case-insensitive.
    """
    required_skills = list(required_skills or ())
    known_skills = {s.lower() for s in (volunteer_skills or ())}

    # Nothing requested: anyone is a full match
    if not required_skills:
        return MAX_SKILL_SCORE
    if not known_skills:
        return 0

    achieved = 0
    max_possible = 0
    for requirement in required_skills:
        weight = SKILL_IMPORTANCE_WEIGHTS[requirement.importance]
        max_possible += weight
        if requirement.name.lower() in known_skills:
            achieved += weight

    if max_possible == 0:
        return 0
    return (achieved / max_possible) * MAX_SKILL_SCORE


def score_availability(
    hours_per_week: Optional[float],
    hours_required: float,
) -> float:
    """Weekly hours offered against hours the opportunity needs (0-20)."""
    # Unknown hours: assume a minimal fit instead of zero
    if not hours_per_week:
        return UNKNOWN_AVAILABILITY_SCORE

    for fraction, points in AVAILABILITY_BANDS:
        if hours_per_week >= hours_required * fraction:
            return points
    return AVAILABILITY_FLOOR_SCORE


def score_location(
    volunteer_location: Optional[VolunteerLocation],
    opportunity_location: OpportunityLocation,
) -> float:
    """Remote acceptance, then city, then state, then distance (0-15)."""
    volunteer_location = volunteer_location or VolunteerLocation()

    if opportunity_location.type == "remote" or volunteer_location.remote:
        return MAX_LOCATION_SCORE

    if opportunity_location.city and volunteer_location.city == opportunity_location.city:
        return SAME_CITY_SCORE

    if opportunity_location.state and volunteer_location.state == opportunity_location.state:
        return SAME_STATE_SCORE

    if volunteer_location.coordinates and opportunity_location.coordinates:
        return _score_distance(
            volunteer_location.coordinates, opportunity_location.coordinates
        )

    return UNKNOWN_LOCATION_SCORE


def _score_distance(origin: GeoPoint, destination: GeoPoint) -> float:
    distance = haversine_km(origin, destination)
    for limit_km, points in DISTANCE_BANDS_KM:
        if distance < limit_km:
            return points
    return FAR_DISTANCE_SCORE


def score_cause(
    volunteer_causes: Optional[Iterable[str]],
    opportunity_cause: str,
) -> float:
    """Full credit when the opportunity's cause is one the volunteer cares about (0-10)."""
    volunteer_causes = set(volunteer_causes or ())

    if not volunteer_causes:
        return NEUTRAL_CAUSE_SCORE
    if opportunity_cause in volunteer_causes:
        return MAX_CAUSE_SCORE
    return NEUTRAL_CAUSE_SCORE


def score_commitment(
    commitment: Optional[str],
    schedule: OpportunitySchedule,
) -> float:
    """Preferred engagement length against the opportunity's duration (0-10).

    A near miss (e.g. 100 days for "Short-term") keeps the default score
    rather than dropping to zero.
    """
    if not commitment:
        return DEFAULT_COMMITMENT_SCORE

    duration_days = (
        schedule.end_date - schedule.start_date
    ).total_seconds() / SECONDS_PER_DAY

    if commitment == "Long-term" and duration_days > LONG_TERM_MIN_DAYS:
        return MAX_COMMITMENT_SCORE
    if commitment == "Short-term" and duration_days <= SHORT_TERM_MAX_DAYS:
        return MAX_COMMITMENT_SCORE
    if commitment == "One-time" and duration_days <= ONE_TIME_MAX_DAYS:
        return MAX_COMMITMENT_SCORE

    return DEFAULT_COMMITMENT_SCORE


def score_personalization(
    preferred_ngos: Optional[Iterable[str]],
    interaction_history: Optional[Iterable[InteractionEntry]],
    ngo_id: str,
) -> float:
    """Bonus for a preferred NGO, or for an engaged application history (0-5)."""
    preferred_ngos = set(preferred_ngos or ())
    interaction_history = list(interaction_history or ())

    if ngo_id in preferred_ngos:
        return PREFERRED_NGO_SCORE

    engaged = sum(1 for h in interaction_history if h.action in ENGAGED_ACTIONS)
    if engaged > ENGAGED_HISTORY_MIN_INTERACTIONS:
        return ENGAGED_HISTORY_SCORE
    return 0


def round_half_up(value: float) -> int:
    """Round a non-negative score to the nearest integer, halves going up."""
    return int(math.floor(value + 0.5))


def get_match_label(score: float) -> str:
    """Map a match score to "High", "Medium" or "Low"."""
    for threshold, label in MATCH_LABEL_BANDS:
        if score >= threshold:
            return label
    return LOWEST_MATCH_LABEL


def generate_recommendations(score: float, breakdown: MatchBreakdown) -> list[str]:
    """Human-readable hints derived from the score and its breakdown."""
    recommendations: list[str] = []

    if score >= PERFECT_MATCH_THRESHOLD:
        recommendations.append(PERFECT_MATCH_MESSAGE)
    elif score >= GREAT_MATCH_THRESHOLD:
        recommendations.append(GREAT_MATCH_MESSAGE)

    if breakdown.skills < LOW_SKILL_THRESHOLD:
        recommendations.append(DEVELOP_SKILLS_MESSAGE)

    if breakdown.availability < LOW_AVAILABILITY_THRESHOLD:
        recommendations.append(MORE_TIME_MESSAGE)

    return recommendations


def calculate_match_score(
    volunteer: VolunteerProfile,
    opportunity: OpportunityRecord,
) -> MatchScoreResult:
    """
    Score how well an opportunity fits a volunteer.

    Args:
        volunteer: Volunteer snapshot
        opportunity: Opportunity snapshot

    Returns:
        MatchScoreResult with a 0-100 total, the six sub-scores and
        recommendations
    """
    availability = volunteer.availability or VolunteerAvailability()
    preferences = volunteer.preferences

    breakdown = MatchBreakdown(
        skills=score_skills(volunteer.skills, opportunity.skills),
        availability=score_availability(
            availability.hours_per_week, opportunity.schedule.hours_required
        ),
        location=score_location(volunteer.location, opportunity.location),
        cause=score_cause(volunteer.causes, opportunity.cause),
        commitment=score_commitment(volunteer.commitment, opportunity.schedule),
        personalization=score_personalization(
            preferences.preferred_ngos,
            preferences.interaction_history,
            opportunity.ngo_id,
        ),
    )

    # Each dimension is capped already; the clamp only bounds the sum
    clamped = min(MAX_TOTAL_SCORE, breakdown.total)
    total_score = round_half_up(clamped)

    logger.debug(
        "Scored opportunity %s: %d (%s)", opportunity.id, total_score, breakdown
    )

    return MatchScoreResult(
        total_score=total_score,
        breakdown=breakdown,
        # Recommendations read the unrounded total
        recommendations=generate_recommendations(clamped, breakdown),
    )


class MatchScorer:
    """Heuristic scorer satisfying the Scorer protocol."""

    def score(
        self,
        volunteer: VolunteerProfile,
        opportunity: OpportunityRecord,
    ) -> MatchScoreResult:
        return calculate_match_score(volunteer, opportunity)
