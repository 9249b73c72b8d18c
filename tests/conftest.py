"""Pytest fixtures for Volunteer Match tests."""
import sys
from datetime import datetime, timedelta
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from src.matching.profiles import (
    OpportunityLocation,
    OpportunityRecord,
    OpportunitySchedule,
    SkillRequirement,
    VolunteerAvailability,
    VolunteerLocation,
    VolunteerProfile,
)
from src.persistence.models import Base, Ngo, Opportunity, Volunteer


# =============================================================================
# MATCHING FIXTURES
# =============================================================================


@pytest.fixture
def pune_volunteer():
    """Volunteer from the reference end-to-end scenario."""
    return VolunteerProfile(
        skills=frozenset({"Coding", "Teaching"}),
        causes=frozenset({"Education"}),
        availability=VolunteerAvailability(hours_per_week=10),
        location=VolunteerLocation(city="Pune", state="Maharashtra", remote=False),
        commitment="Short-term",
    )


@pytest.fixture
def pune_opportunity():
    """Opportunity from the reference end-to-end scenario (30 days, 8 hours)."""
    start = datetime(2026, 3, 1)
    return OpportunityRecord(
        id="opp-1",
        ngo_id="ngo-1",
        cause="Education",
        skills=(
            SkillRequirement("Coding", "required"),
            SkillRequirement("Design", "bonus"),
        ),
        location=OpportunityLocation(type="on-site", city="Pune"),
        schedule=OpportunitySchedule(
            start_date=start,
            end_date=start + timedelta(days=30),
            hours_required=8,
        ),
    )


# =============================================================================
# DATABASE FIXTURES
# =============================================================================


@pytest.fixture(scope="function")
def test_db():
    """Create a fresh in-memory database for each test."""
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(bind=engine)
    Session = sessionmaker(bind=engine)
    session = Session()
    yield session
    session.close()


@pytest.fixture
def sample_ngo(test_db):
    """Create a sample NGO."""
    ngo = Ngo(
        id="ngo-1",
        name="Asha Rao",
        email="contact@learnforward.org",
        organization_name="Learn Forward",
        description="After-school learning programmes.",
        impact_areas=["Education"],
        city="Pune",
        state="Maharashtra",
    )
    test_db.add(ngo)
    test_db.commit()
    return ngo


@pytest.fixture
def sample_volunteer(test_db):
    """Create the reference volunteer as a database row."""
    volunteer = Volunteer(
        id="vol-1",
        name="Test Volunteer",
        email="volunteer@example.com",
        city="Pune",
        state="Maharashtra",
        remote=False,
        skills=["Coding", "Teaching"],
        causes=["Education"],
        hours_per_week=10,
        commitment="Short-term",
    )
    test_db.add(volunteer)
    test_db.commit()
    return volunteer


@pytest.fixture
def sample_opportunity(test_db, sample_ngo):
    """Create the reference opportunity as an active database row."""
    opportunity = Opportunity(
        id="opp-1",
        ngo_id=sample_ngo.id,
        ngo_name=sample_ngo.organization_name,
        title="Weekend coding club mentor",
        cause="Education",
        skills=[
            {"name": "Coding", "importance": "required"},
            {"name": "Design", "importance": "bonus"},
        ],
        location_type="on-site",
        city="Pune",
        start_date=datetime(2026, 3, 1),
        end_date=datetime(2026, 3, 31),
        hours_required=8,
        capacity_total=3,
        status="active",
        created_at=datetime(2026, 2, 1),
    )
    test_db.add(opportunity)
    test_db.commit()
    return opportunity


@pytest.fixture
def opportunity_factory(test_db, sample_ngo):
    """
    Factory fixture to create opportunities for the sample NGO.

    Usage:
        opp = opportunity_factory("Beach clean-up", cause="Environment")
    """
    counter = {"n": 0}

    def _create(title: str, **overrides) -> Opportunity:
        counter["n"] += 1
        values = {
            "ngo_id": sample_ngo.id,
            "ngo_name": sample_ngo.organization_name,
            "title": title,
            "cause": "Education",
            "skills": [],
            "location_type": "remote",
            "start_date": datetime(2026, 3, 1),
            "end_date": datetime(2026, 3, 2),
            "hours_required": 4,
            "capacity_total": 5,
            "status": "active",
            "created_at": datetime(2026, 1, 1) + timedelta(days=counter["n"]),
        }
        values.update(overrides)
        opportunity = Opportunity(**values)
        test_db.add(opportunity)
        test_db.commit()
        return opportunity

    return _create


# =============================================================================
# FORM FIXTURES
# =============================================================================


@pytest.fixture
def volunteer_form_data():
    """Raw volunteer onboarding form."""
    return {
        "name": "Priya Shah",
        "email": "Priya@Example.com",
        "location": {"city": "Pune", "state": "Maharashtra", "remote": False},
        "skills": ["Coding", " ", "Teaching"],
        "causes": ["Education"],
        "availability": {"hours_per_week": 10, "preferred_days": ["Saturday"]},
        "commitment": "Short-term",
    }


@pytest.fixture
def opportunity_form_data():
    """Raw opportunity creation form."""
    return {
        "title": "Weekend coding club mentor",
        "description": "Mentor teenagers learning to code.",
        "skills": [
            {"name": "Coding", "importance": "required"},
            {"name": "Design", "importance": "bonus"},
        ],
        "cause": "Education",
        "location": {"type": "on-site", "city": "Pune", "state": "Maharashtra"},
        "schedule": {
            "start_date": "2026-03-01T09:00:00",
            "end_date": "2026-03-31T09:00:00",
            "hours_required": 8,
        },
        "capacity": {"total": 3, "min_required": 1},
        "status": "active",
    }
