"""Application submission and tracking service."""
import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from src.matching.match_scorer import MatchScorer
from src.matching.scorer_protocol import Scorer
from src.persistence.models import Application, Opportunity, StatusHistory, Volunteer
from src.tracking.exceptions import (
    OpportunityClosedError,
    OpportunityNotFoundError,
    VolunteerNotFoundError,
)
from src.tracking.profile_service import ProfileService

logger = logging.getLogger(__name__)


class ApplicationService:
    """Service for managing volunteer applications."""

    # applied -> shortlisted -> confirmed -> completed
    STATUS_ORDER = [
        "applied",
        "shortlisted",
        "confirmed",
        "completed",
    ]
    TERMINAL_STATUSES = ["rejected", "withdrawn"]

    # Status -> timestamp column set on entering it
    STATUS_TIMESTAMPS = {
        "shortlisted": "shortlisted_at",
        "confirmed": "confirmed_at",
        "completed": "completed_at",
    }

    def __init__(self, session: Session, scorer: Optional[Scorer] = None):
        """
        Initialize application service.

        Args:
            session: Database session
            scorer: Scoring engine (defaults to MatchScorer)
        """
        self.session = session
        self.scorer = scorer or MatchScorer()
        self.profiles = ProfileService(session)

    def create_application(
        self,
        volunteer_id: str,
        opportunity_id: str,
        message: Optional[str] = None,
    ) -> Application:
        """
        Score and submit an application.

        At most one application exists per volunteer/opportunity pair; a
        repeat call returns the existing record unchanged.

        Args:
            volunteer_id: Applying volunteer
            opportunity_id: Target opportunity
            message: Optional note to the NGO

        Returns:
            The new or existing Application
        """
        existing = self.get_existing_application(volunteer_id, opportunity_id)
        if existing:
            logger.info(
                "Application already exists for %s -> %s", volunteer_id, opportunity_id
            )
            return existing

        volunteer = self.session.get(Volunteer, volunteer_id)
        if volunteer is None:
            raise VolunteerNotFoundError(volunteer_id)
        opportunity = self.session.get(Opportunity, opportunity_id)
        if opportunity is None:
            raise OpportunityNotFoundError(opportunity_id)
        if opportunity.status != "active":
            raise OpportunityClosedError(opportunity_id, opportunity.status)

        # Score before the new "applied" interaction lands in the history
        result = self.scorer.score(volunteer.to_profile(), opportunity.to_record())

        application = Application(
            volunteer_id=volunteer.id,
            opportunity_id=opportunity.id,
            ngo_id=opportunity.ngo_id,
            status="applied",
            match_score=result.total_score,
            match_breakdown=result.breakdown.as_dict(),
            applied_at=datetime.now(timezone.utc),
            volunteer_message=message,
        )
        self.session.add(application)
        opportunity.applications_count = (opportunity.applications_count or 0) + 1
        self.profiles.record_interaction(
            volunteer.id, opportunity.id, "applied", commit=False
        )

        try:
            self.session.commit()
        except IntegrityError:
            # Lost a race with a concurrent submission for the same pair
            self.session.rollback()
            existing = self.get_existing_application(volunteer_id, opportunity_id)
            if existing is None:
                raise
            return existing

        self.session.refresh(application)
        logger.info(
            "Created application %s (%s -> %s, score %d)",
            application.id,
            volunteer_id,
            opportunity_id,
            application.match_score,
        )
        return application

    def get_existing_application(
        self,
        volunteer_id: str,
        opportunity_id: str,
    ) -> Optional[Application]:
        """Get the application for a volunteer/opportunity pair, if any."""
        stmt = select(Application).where(
            Application.volunteer_id == volunteer_id,
            Application.opportunity_id == opportunity_id,
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def get_application(self, application_id: str) -> Optional[Application]:
        """Get an application by ID."""
        return self.session.get(Application, application_id)

    def get_application_count(self, opportunity_id: str) -> int:
        """Number of applications submitted to an opportunity."""
        stmt = select(func.count(Application.id)).where(
            Application.opportunity_id == opportunity_id
        )
        return self.session.execute(stmt).scalar_one()

    def get_applications_for_opportunity(self, opportunity_id: str) -> list[Application]:
        """Applications to an opportunity with their volunteers, newest first."""
        stmt = (
            select(Application)
            .options(selectinload(Application.volunteer))
            .where(Application.opportunity_id == opportunity_id)
            .order_by(Application.applied_at.desc())
        )
        return list(self.session.execute(stmt).scalars().all())

    def get_applications_for_volunteer(self, volunteer_id: str) -> list[Application]:
        """A volunteer's applications with their opportunities, withdrawn excluded."""
        stmt = (
            select(Application)
            .options(selectinload(Application.opportunity))
            .where(Application.volunteer_id == volunteer_id)
            .where(Application.status != "withdrawn")
            .order_by(Application.status, Application.applied_at.desc())
        )
        return list(self.session.execute(stmt).scalars().all())

    def update_status(
        self,
        application_id: str,
        new_status: str,
        notes: Optional[str] = None,
        hours_completed: Optional[float] = None,
    ) -> Optional[Application]:
        """
        Update application status with history tracking.

        Args:
            application_id: Application ID
            new_status: New status
            notes: Notes about the status change
            hours_completed: Hours credited to the volunteer on completion

        Returns:
            Updated application or None if not found
        """
        valid_statuses = set(self.STATUS_ORDER + self.TERMINAL_STATUSES)
        if new_status not in valid_statuses:
            raise ValueError(f"Invalid status: {new_status}. Must be one of {valid_statuses}")

        application = self.get_application(application_id)
        if not application:
            return None

        old_status = application.status

        # Skip if already at the same status (prevents duplicate history entries)
        if old_status == new_status:
            return application

        history = StatusHistory(
            application_id=application_id,
            old_status=old_status,
            new_status=new_status,
            notes=notes,
        )
        self.session.add(history)

        now = datetime.now(timezone.utc)
        application.status = new_status
        timestamp_column = self.STATUS_TIMESTAMPS.get(new_status)
        if timestamp_column:
            setattr(application, timestamp_column, now)
        if notes:
            application.ngo_notes = notes

        opportunity = application.opportunity
        if new_status == "confirmed":
            opportunity.capacity_filled = (opportunity.capacity_filled or 0) + 1
        elif old_status == "confirmed" and new_status != "completed":
            opportunity.capacity_filled = max(0, (opportunity.capacity_filled or 0) - 1)

        if new_status == "completed":
            self._record_completion(application, hours_completed)

        self.session.commit()
        self.session.refresh(application)

        logger.info(
            "Application %s: %s -> %s", application_id, old_status, new_status
        )
        return application

    def withdraw(self, application_id: str) -> Optional[Application]:
        """Withdraw an application on the volunteer's behalf."""
        return self.update_status(application_id, "withdrawn")

    def _record_completion(
        self,
        application: Application,
        hours_completed: Optional[float],
    ) -> None:
        opportunity = application.opportunity
        volunteer = application.volunteer

        opportunity.completions = (opportunity.completions or 0) + 1
        volunteer.events_completed = (volunteer.events_completed or 0) + 1
        if hours_completed:
            application.hours_completed = hours_completed
            volunteer.total_hours = (volunteer.total_hours or 0) + hours_completed

        self.profiles.record_interaction(
            volunteer.id, opportunity.id, "completed", commit=False
        )
