"""Pydantic validation models for volunteer, NGO and opportunity forms."""

import re
from datetime import datetime
from pathlib import Path
from typing import Literal, Optional, TypeVar

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from src.matching.profiles import (
    GeoPoint,
    OpportunityLocation,
    OpportunityRecord,
    OpportunitySchedule,
    SkillRequirement,
    VolunteerAvailability,
    VolunteerLocation,
    VolunteerPreferences,
    VolunteerProfile,
)

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

FormT = TypeVar("FormT", bound=BaseModel)


def _strip_list(v):
    """Remove empty strings from lists."""
    if isinstance(v, list):
        return [item.strip() for item in v if item and item.strip()]
    return v


def _check_email(v: str) -> str:
    v = v.strip()
    if not EMAIL_PATTERN.match(v):
        raise ValueError(f"Invalid email format: {v}")
    return v.lower()


def _check_same_awareness(*values: Optional[datetime]) -> None:
    """Naive and timezone-aware datetimes cannot be compared or subtracted."""
    aware = {v.tzinfo is not None for v in values if v is not None}
    if len(aware) > 1:
        raise ValueError("Dates must either all include a timezone or all omit it")


def _geo_point(latitude: Optional[float], longitude: Optional[float]) -> Optional[GeoPoint]:
    if latitude is None or longitude is None:
        return None
    return GeoPoint(latitude=latitude, longitude=longitude)


class Coordinates(BaseModel):
    """Optional latitude/longitude pair; both or neither."""
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)

    @model_validator(mode="after")
    def both_or_neither(self):
        if (self.latitude is None) != (self.longitude is None):
            raise ValueError("Latitude and longitude must be given together")
        return self


class VolunteerLocationForm(Coordinates):
    city: str = Field(min_length=1)
    state: str = Field(min_length=1)
    remote: bool = Field(default=False)


class AvailabilityForm(BaseModel):
    hours_per_week: Optional[float] = Field(default=None, ge=0)
    preferred_days: list[str] = Field(default_factory=list)
    preferred_time: Optional[str] = Field(default=None)

    @field_validator("preferred_days", mode="before")
    @classmethod
    def filter_empty_strings(cls, v):
        return _strip_list(v)


class VolunteerProfileForm(BaseModel):
    """Volunteer onboarding form."""
    name: str = Field(min_length=1)
    email: str
    phone: Optional[str] = None
    location: VolunteerLocationForm
    skills: list[str] = Field(default_factory=list)
    causes: list[str] = Field(default_factory=list)
    availability: AvailabilityForm = Field(default_factory=AvailabilityForm)
    commitment: Optional[Literal["One-time", "Short-term", "Long-term"]] = None
    experience: Optional[str] = None
    bio: Optional[str] = None
    preferred_ngos: list[str] = Field(default_factory=list)

    @field_validator("skills", "causes", "preferred_ngos", mode="before")
    @classmethod
    def filter_empty_strings(cls, v):
        return _strip_list(v)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        return _check_email(v)

    def to_row_kwargs(self) -> dict:
        """Column values for a new Volunteer row."""
        return {
            "name": self.name.strip(),
            "email": self.email,
            "phone": self.phone,
            "city": self.location.city,
            "state": self.location.state,
            "remote": self.location.remote,
            "latitude": self.location.latitude,
            "longitude": self.location.longitude,
            "skills": self.skills,
            "causes": self.causes,
            "hours_per_week": self.availability.hours_per_week,
            "preferred_days": self.availability.preferred_days,
            "preferred_time": self.availability.preferred_time,
            "commitment": self.commitment,
            "experience": self.experience,
            "bio": self.bio,
            "preferred_ngos": self.preferred_ngos,
        }

    def to_profile(self) -> VolunteerProfile:
        """Matching snapshot of a volunteer with no interaction history."""
        return VolunteerProfile(
            location=VolunteerLocation(
                city=self.location.city,
                state=self.location.state,
                remote=self.location.remote,
                coordinates=_geo_point(self.location.latitude, self.location.longitude),
            ),
            skills=frozenset(self.skills),
            causes=frozenset(self.causes),
            availability=VolunteerAvailability(
                hours_per_week=self.availability.hours_per_week,
                preferred_days=tuple(self.availability.preferred_days),
                preferred_time=self.availability.preferred_time,
            ),
            commitment=self.commitment,
            preferences=VolunteerPreferences(preferred_ngos=frozenset(self.preferred_ngos)),
        )


class NgoLocationForm(BaseModel):
    city: str = Field(min_length=1)
    state: str = Field(min_length=1)
    address: Optional[str] = None


class NgoProfileForm(BaseModel):
    """NGO onboarding form."""
    name: str = Field(min_length=1, description="Contact person")
    email: str
    phone: Optional[str] = None
    organization_name: str = Field(min_length=1)
    description: str = Field(min_length=1)
    impact_areas: list[str] = Field(min_length=1, description="Must have at least one impact area")
    website: Optional[str] = None
    registration_number: Optional[str] = None
    founded_year: Optional[int] = Field(default=None, ge=1800)
    location: NgoLocationForm
    social_media: dict[str, str] = Field(default_factory=dict)

    @field_validator("impact_areas", mode="before")
    @classmethod
    def filter_empty_strings(cls, v):
        return _strip_list(v)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        return _check_email(v)

    @field_validator("founded_year")
    @classmethod
    def validate_founded_year(cls, v):
        if v is not None and v > datetime.now().year:
            raise ValueError("Founded year cannot be in the future")
        return v

    def to_row_kwargs(self) -> dict:
        """Column values for a new Ngo row."""
        return {
            "name": self.name.strip(),
            "email": self.email,
            "phone": self.phone,
            "organization_name": self.organization_name.strip(),
            "description": self.description,
            "impact_areas": self.impact_areas,
            "website": self.website,
            "registration_number": self.registration_number,
            "founded_year": self.founded_year,
            "city": self.location.city,
            "state": self.location.state,
            "address": self.location.address,
            "social_media": self.social_media,
        }


class SkillForm(BaseModel):
    name: str = Field(min_length=1)
    importance: Literal["required", "preferred", "bonus"] = "required"

    @field_validator("name")
    @classmethod
    def strip_name(cls, v):
        return v.strip()


class OpportunityLocationForm(Coordinates):
    type: Literal["remote", "on-site", "hybrid"]
    city: Optional[str] = None
    state: Optional[str] = None
    address: Optional[str] = None

    @model_validator(mode="after")
    def require_city_when_on_site(self):
        """On-site opportunities need a city to be found."""
        if self.type == "on-site" and not self.city:
            raise ValueError("On-site opportunities must have a city")
        return self


class ShiftForm(BaseModel):
    date: datetime
    start_time: str
    end_time: str


class ScheduleForm(BaseModel):
    start_date: datetime
    end_date: datetime
    hours_required: float = Field(ge=0)
    flexible: bool = Field(default=False)
    shifts: list[ShiftForm] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_date_range(self):
        """Ensure the opportunity does not end before it starts."""
        _check_same_awareness(self.start_date, self.end_date)
        if self.end_date < self.start_date:
            raise ValueError("End date must be on or after start date")
        return self


class CapacityForm(BaseModel):
    total: int = Field(ge=1)
    min_required: int = Field(ge=0, default=1)

    @model_validator(mode="after")
    def validate_minimum(self):
        if self.min_required > self.total:
            raise ValueError("Minimum volunteers cannot exceed total capacity")
        return self


class OpportunityForm(BaseModel):
    """Opportunity creation form."""
    title: str = Field(min_length=1)
    description: str = Field(default="")
    requirements: str = Field(default="")
    skills: list[SkillForm] = Field(default_factory=list)
    cause: str = Field(min_length=1)
    location: OpportunityLocationForm
    schedule: ScheduleForm
    capacity: CapacityForm = Field(default_factory=lambda: CapacityForm(total=1))
    deadline: Optional[datetime] = None
    perks: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    status: Literal["draft", "active", "filled", "completed", "cancelled"] = "draft"

    @field_validator("perks", "tags", mode="before")
    @classmethod
    def filter_empty_strings(cls, v):
        return _strip_list(v)

    @model_validator(mode="after")
    def validate_deadline(self):
        _check_same_awareness(self.schedule.start_date, self.deadline)
        return self

    def location_columns(self) -> dict:
        return {
            "location_type": self.location.type,
            "city": self.location.city,
            "state": self.location.state,
            "address": self.location.address,
            "latitude": self.location.latitude,
            "longitude": self.location.longitude,
        }

    def schedule_columns(self) -> dict:
        return {
            "start_date": self.schedule.start_date,
            "end_date": self.schedule.end_date,
            "hours_required": self.schedule.hours_required,
            "flexible": self.schedule.flexible,
            "shifts": [s.model_dump(mode="json") for s in self.schedule.shifts] or None,
        }

    def to_row_kwargs(self) -> dict:
        """Column values for a new Opportunity row (NGO fields excluded)."""
        return {
            "title": self.title.strip(),
            "description": self.description,
            "requirements": self.requirements,
            "skills": [s.model_dump() for s in self.skills],
            "cause": self.cause,
            **self.location_columns(),
            **self.schedule_columns(),
            "capacity_total": self.capacity.total,
            "capacity_min_required": self.capacity.min_required,
            "deadline": self.deadline,
            "perks": self.perks or None,
            "tags": self.tags or None,
            "status": self.status,
        }

    def to_record(self, ngo_id: str, opportunity_id: Optional[str] = None) -> OpportunityRecord:
        """Matching snapshot of this opportunity."""
        return OpportunityRecord(
            id=opportunity_id,
            title=self.title,
            ngo_id=ngo_id,
            cause=self.cause,
            skills=tuple(SkillRequirement(s.name, s.importance) for s in self.skills),
            location=OpportunityLocation(
                type=self.location.type,
                city=self.location.city,
                state=self.location.state,
                coordinates=_geo_point(self.location.latitude, self.location.longitude),
            ),
            schedule=OpportunitySchedule(
                start_date=self.schedule.start_date,
                end_date=self.schedule.end_date,
                hours_required=self.schedule.hours_required,
            ),
        )


def load_yaml_form(path: str | Path, model: type[FormT]) -> FormT:
    """Load a YAML document and validate it against a form model.

    Args:
        path: Path to the YAML file
        model: Form model class to validate against

    Returns:
        Validated form instance

    Raises:
        ValidationError: If validation fails
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    return model.model_validate(data)
