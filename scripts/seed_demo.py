#!/usr/bin/env python3
"""Seed a demo NGO, volunteer and a few opportunities.

Usage:
    python -m scripts.seed_demo

Prints the volunteer id so it can be passed to `src/main.py rank`. Running
it again reuses the rows seeded the first time.
"""
import logging
import sys
from datetime import datetime, timedelta, timezone

from scripts.bootstrap import get_session, init_db, settings
from src.logging_config import setup_logging
from src.onboarding.validators import NgoProfileForm, OpportunityForm, VolunteerProfileForm
from src.persistence.models import Volunteer
from src.tracking.opportunity_service import OpportunityService
from src.tracking.profile_service import ProfileService

logger = logging.getLogger(__name__)


def _opportunity(title, cause, skills, location, days, hours) -> OpportunityForm:
    start = datetime.now(timezone.utc) + timedelta(days=7)
    return OpportunityForm(
        title=title,
        description=f"{title} with our team.",
        cause=cause,
        skills=skills,
        location=location,
        schedule={
            "start_date": start,
            "end_date": start + timedelta(days=days),
            "hours_required": hours,
        },
        capacity={"total": 5, "min_required": 1},
        status="active",
    )


DEMO_OPPORTUNITIES = [
    _opportunity(
        "Weekend coding club mentor",
        "Education",
        [{"name": "Coding", "importance": "required"}, {"name": "Design", "importance": "bonus"}],
        {"type": "on-site", "city": "Pune", "state": "Maharashtra"},
        days=30,
        hours=8,
    ),
    _opportunity(
        "Remote literacy tutor",
        "Education",
        [{"name": "Teaching", "importance": "required"}],
        {"type": "remote"},
        days=200,
        hours=4,
    ),
    _opportunity(
        "Beach clean-up drive",
        "Environment",
        [],
        {"type": "on-site", "city": "Mumbai", "state": "Maharashtra"},
        days=1,
        hours=6,
    ),
    _opportunity(
        "Clinic data entry",
        "Health",
        [{"name": "Data Entry", "importance": "required"}, {"name": "Excel", "importance": "preferred"}],
        {"type": "hybrid", "city": "Delhi", "state": "Delhi"},
        days=120,
        hours=15,
    ),
]


DEMO_NGO = NgoProfileForm(
    name="Asha Rao",
    email="contact@learnforward.org",
    organization_name="Learn Forward",
    description="After-school learning programmes.",
    impact_areas=["Education", "Environment", "Health"],
    location={"city": "Pune", "state": "Maharashtra"},
)

DEMO_VOLUNTEER = VolunteerProfileForm(
    name="Demo Volunteer",
    email="volunteer@example.com",
    location={"city": "Pune", "state": "Maharashtra"},
    skills=["Coding", "Teaching"],
    causes=["Education"],
    availability={"hours_per_week": 10},
    commitment="Short-term",
)


def seed(session) -> Volunteer:
    """Create the demo rows, reusing any already seeded under the same emails."""
    profiles = ProfileService(session)
    opportunities = OpportunityService(session)

    ngo = profiles.get_ngo_by_email(DEMO_NGO.email)
    if ngo is None:
        ngo = profiles.create_ngo(DEMO_NGO)
        for form in DEMO_OPPORTUNITIES:
            opportunities.create_opportunity(ngo.id, form)
        logger.info("Seeded %d opportunities", len(DEMO_OPPORTUNITIES))
    else:
        logger.info("Demo NGO %s already seeded", ngo.id)

    volunteer = profiles.get_volunteer_by_email(DEMO_VOLUNTEER.email)
    if volunteer is None:
        volunteer = profiles.create_volunteer(DEMO_VOLUNTEER)
    return volunteer


def main() -> int:
    setup_logging(settings.log_level)
    init_db()

    with get_session() as session:
        print(seed(session).id)

    return 0


if __name__ == "__main__":
    sys.exit(main())
