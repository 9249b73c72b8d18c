"""Read-only records consumed by the match scorer.

These mirror what the profile and opportunity stores hand over: a volunteer
snapshot and an opportunity snapshot. The scorer never mutates them.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

SKILL_IMPORTANCES = ("required", "preferred", "bonus")
LOCATION_TYPES = ("remote", "on-site", "hybrid")
COMMITMENT_LEVELS = ("One-time", "Short-term", "Long-term")
INTERACTION_ACTIONS = ("viewed", "applied", "completed")


def _check_choice(value: str, choices: tuple[str, ...], label: str) -> None:
    if value not in choices:
        raise ValueError(f"Invalid {label}: {value!r}. Must be one of {choices}")


@dataclass(frozen=True)
class GeoPoint:
    """Latitude/longitude pair in decimal degrees."""

    latitude: float
    longitude: float


@dataclass(frozen=True)
class SkillRequirement:
    """A skill an opportunity asks for, weighted by importance."""

    name: str
    importance: str = "required"

    def __post_init__(self):
        _check_choice(self.importance, SKILL_IMPORTANCES, "skill importance")


@dataclass(frozen=True)
class VolunteerLocation:
    city: str = ""
    state: str = ""
    remote: bool = False
    coordinates: Optional[GeoPoint] = None


@dataclass(frozen=True)
class VolunteerAvailability:
    hours_per_week: Optional[float] = None
    preferred_days: tuple[str, ...] = ()
    preferred_time: Optional[str] = None  # "Morning", "Evening", "Flexible"


@dataclass(frozen=True)
class InteractionEntry:
    """One past action a volunteer took on an opportunity."""

    opportunity_id: str
    action: str
    timestamp: Optional[datetime] = None

    def __post_init__(self):
        _check_choice(self.action, INTERACTION_ACTIONS, "interaction action")


@dataclass(frozen=True)
class VolunteerPreferences:
    preferred_ngos: frozenset[str] = frozenset()
    interaction_history: tuple[InteractionEntry, ...] = ()


@dataclass(frozen=True)
class VolunteerProfile:
    """Volunteer snapshot used for matching."""

    location: VolunteerLocation = field(default_factory=VolunteerLocation)
    skills: Optional[frozenset[str]] = None
    causes: Optional[frozenset[str]] = None
    availability: Optional[VolunteerAvailability] = None
    commitment: Optional[str] = None
    preferences: VolunteerPreferences = field(default_factory=VolunteerPreferences)

    def __post_init__(self):
        if self.commitment is not None:
            _check_choice(self.commitment, COMMITMENT_LEVELS, "commitment")


@dataclass(frozen=True)
class OpportunityLocation:
    type: str = "on-site"
    city: Optional[str] = None
    state: Optional[str] = None
    coordinates: Optional[GeoPoint] = None

    def __post_init__(self):
        _check_choice(self.type, LOCATION_TYPES, "location type")


@dataclass(frozen=True)
class OpportunitySchedule:
    start_date: datetime
    end_date: datetime
    hours_required: float = 0


@dataclass(frozen=True)
class OpportunityRecord:
    """Opportunity snapshot used for matching."""

    ngo_id: str
    cause: str
    schedule: OpportunitySchedule
    skills: tuple[SkillRequirement, ...] = ()
    location: OpportunityLocation = field(default_factory=OpportunityLocation)
    id: Optional[str] = None
    title: str = ""
