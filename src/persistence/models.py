"""SQLAlchemy models for Volunteer Match."""
import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, relationship

from src.matching.profiles import (
    GeoPoint,
    InteractionEntry,
    OpportunityLocation,
    OpportunityRecord,
    OpportunitySchedule,
    SkillRequirement,
    VolunteerAvailability,
    VolunteerLocation,
    VolunteerPreferences,
    VolunteerProfile,
)


def utcnow() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


def generate_uuid() -> str:
    """Generate a UUID string."""
    return str(uuid.uuid4())


def _geo_point(latitude, longitude):
    if latitude is None or longitude is None:
        return None
    return GeoPoint(latitude=latitude, longitude=longitude)


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class Volunteer(Base):
    """Volunteer profile."""

    __tablename__ = "volunteers"

    id = Column(String, primary_key=True, default=generate_uuid)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=False)
    phone = Column(String)
    avatar = Column(String)

    # Location
    city = Column(String, nullable=False, default="")
    state = Column(String, nullable=False, default="")
    latitude = Column(Float)
    longitude = Column(Float)
    remote = Column(Boolean, default=False)

    # Matching inputs (JSON lists)
    skills = Column(JSON, default=list)  # ["Teaching", "Coding", "Design"]
    causes = Column(JSON, default=list)  # ["Education", "Environment"]
    hours_per_week = Column(Float)
    preferred_days = Column(JSON, default=list)  # ["Monday", "Weekend"]
    preferred_time = Column(String)  # Morning, Evening, Flexible
    commitment = Column(String)  # One-time, Short-term, Long-term
    preferred_ngos = Column(JSON, default=list)

    experience = Column(Text)
    bio = Column(Text)

    # Stats
    total_hours = Column(Float, default=0)
    events_attended = Column(Integer, default=0)
    events_completed = Column(Integer, default=0)

    verified = Column(Boolean, default=False)
    created_at = Column(DateTime, default=utcnow)
    last_active = Column(DateTime, default=utcnow)

    # Relationships
    interactions = relationship(
        "Interaction",
        back_populates="volunteer",
        cascade="all, delete-orphan",
        order_by="Interaction.timestamp",
    )
    applications = relationship("Application", back_populates="volunteer")

    def to_profile(self) -> VolunteerProfile:
        """Snapshot this row as a matching profile."""
        return VolunteerProfile(
            location=VolunteerLocation(
                city=self.city or "",
                state=self.state or "",
                remote=bool(self.remote),
                coordinates=_geo_point(self.latitude, self.longitude),
            ),
            skills=frozenset(self.skills or ()),
            causes=frozenset(self.causes or ()),
            availability=VolunteerAvailability(
                hours_per_week=self.hours_per_week,
                preferred_days=tuple(self.preferred_days or ()),
                preferred_time=self.preferred_time,
            ),
            commitment=self.commitment,
            preferences=VolunteerPreferences(
                preferred_ngos=frozenset(self.preferred_ngos or ()),
                interaction_history=tuple(
                    InteractionEntry(
                        opportunity_id=i.opportunity_id,
                        action=i.action,
                        timestamp=i.timestamp,
                    )
                    for i in self.interactions
                ),
            ),
        )

    def __repr__(self) -> str:
        return f"<Volunteer {self.name} ({self.email})>"


class Interaction(Base):
    """A volunteer viewing, applying to or completing an opportunity."""

    __tablename__ = "interactions"

    id = Column(String, primary_key=True, default=generate_uuid)
    volunteer_id = Column(String, ForeignKey("volunteers.id"), nullable=False)
    opportunity_id = Column(String, ForeignKey("opportunities.id"), nullable=False)
    action = Column(String, nullable=False)  # viewed, applied, completed
    timestamp = Column(DateTime, default=utcnow)

    volunteer = relationship("Volunteer", back_populates="interactions")

    def __repr__(self) -> str:
        return f"<Interaction {self.volunteer_id} {self.action} {self.opportunity_id}>"


class Ngo(Base):
    """Organization posting opportunities."""

    __tablename__ = "ngos"

    VERIFICATION_STATUSES = ["pending", "verified", "rejected"]

    id = Column(String, primary_key=True, default=generate_uuid)
    name = Column(String, nullable=False)  # Contact person
    email = Column(String, unique=True, nullable=False)
    phone = Column(String)
    organization_name = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    impact_areas = Column(JSON, default=list)
    website = Column(String)
    registration_number = Column(String)
    founded_year = Column(Integer)

    city = Column(String, nullable=False, default="")
    state = Column(String, nullable=False, default="")
    address = Column(String)

    verification_status = Column(String, default="pending")
    verified_at = Column(DateTime)

    # Stats
    total_opportunities = Column(Integer, default=0)
    total_volunteers = Column(Integer, default=0)
    total_hours = Column(Float, default=0)

    social_media = Column(JSON, default=dict)  # {"linkedin": ..., "instagram": ...}
    created_at = Column(DateTime, default=utcnow)

    opportunities = relationship("Opportunity", back_populates="ngo")

    def __repr__(self) -> str:
        return f"<Ngo {self.organization_name}>"


class Opportunity(Base):
    """Volunteer opportunity posted by an NGO."""

    __tablename__ = "opportunities"

    # draft -> active -> filled / completed / cancelled
    STATUSES = ["draft", "active", "filled", "completed", "cancelled"]

    id = Column(String, primary_key=True, default=generate_uuid)
    ngo_id = Column(String, ForeignKey("ngos.id"), nullable=False)
    ngo_name = Column(String, nullable=False)

    title = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    requirements = Column(Text, default="")

    # Matching
    skills = Column(JSON, default=list)  # [{"name": ..., "importance": ...}]
    cause = Column(String, nullable=False)

    # Location
    location_type = Column(String, nullable=False, default="on-site")
    city = Column(String)
    state = Column(String)
    address = Column(String)
    latitude = Column(Float)
    longitude = Column(Float)

    # Schedule
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=False)
    hours_required = Column(Float, nullable=False, default=0)
    flexible = Column(Boolean, default=False)
    shifts = Column(JSON)  # [{"date": ..., "start_time": ..., "end_time": ...}]

    # Capacity
    capacity_total = Column(Integer, nullable=False, default=1)
    capacity_filled = Column(Integer, default=0)
    capacity_min_required = Column(Integer, default=1)

    status = Column(String, nullable=False, default="draft")
    deadline = Column(DateTime)

    # Engagement
    views = Column(Integer, default=0)
    applications_count = Column(Integer, default=0)
    completions = Column(Integer, default=0)

    perks = Column(JSON)  # ["Certificate", "Meals provided"]
    tags = Column(JSON)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    ngo = relationship("Ngo", back_populates="opportunities")
    applications = relationship("Application", back_populates="opportunity")

    def to_record(self) -> OpportunityRecord:
        """Snapshot this row as a matching record."""
        return OpportunityRecord(
            id=self.id,
            title=self.title,
            ngo_id=self.ngo_id,
            cause=self.cause,
            skills=tuple(
                SkillRequirement(name=s["name"], importance=s["importance"])
                for s in (self.skills or ())
            ),
            location=OpportunityLocation(
                type=self.location_type,
                city=self.city,
                state=self.state,
                coordinates=_geo_point(self.latitude, self.longitude),
            ),
            schedule=OpportunitySchedule(
                start_date=self.start_date,
                end_date=self.end_date,
                hours_required=self.hours_required or 0,
            ),
        )

    def __repr__(self) -> str:
        return f"<Opportunity {self.title} ({self.status})>"


class Application(Base):
    """A volunteer's application to an opportunity."""

    __tablename__ = "applications"
    __table_args__ = (
        UniqueConstraint("volunteer_id", "opportunity_id", name="uq_application_pair"),
    )

    id = Column(String, primary_key=True, default=generate_uuid)
    opportunity_id = Column(String, ForeignKey("opportunities.id"), nullable=False)
    volunteer_id = Column(String, ForeignKey("volunteers.id"), nullable=False)
    ngo_id = Column(String, ForeignKey("ngos.id"), nullable=False)

    # Statuses: applied, shortlisted, confirmed, completed, rejected, withdrawn
    status = Column(String, nullable=False, default="applied")
    match_score = Column(Integer, nullable=False)  # 0-100
    match_breakdown = Column(JSON)

    # Timeline
    applied_at = Column(DateTime, nullable=False, default=utcnow)
    shortlisted_at = Column(DateTime)
    confirmed_at = Column(DateTime)
    completed_at = Column(DateTime)

    # Communication
    volunteer_message = Column(Text)
    ngo_notes = Column(Text)

    # Attendance
    hours_completed = Column(Float)

    # Relationships
    volunteer = relationship("Volunteer", back_populates="applications")
    opportunity = relationship("Opportunity", back_populates="applications")
    history = relationship(
        "StatusHistory", back_populates="application", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Application {self.volunteer_id} -> {self.opportunity_id} ({self.status})>"


class StatusHistory(Base):
    """Track status changes for applications."""

    __tablename__ = "status_history"

    id = Column(String, primary_key=True, default=generate_uuid)
    application_id = Column(String, ForeignKey("applications.id"), nullable=False)
    old_status = Column(String)
    new_status = Column(String, nullable=False)
    changed_at = Column(DateTime, default=utcnow)
    notes = Column(Text)

    application = relationship("Application", back_populates="history")

    def __repr__(self) -> str:
        return f"<StatusHistory {self.application_id}: {self.old_status} -> {self.new_status}>"
