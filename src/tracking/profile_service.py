"""Volunteer and NGO profile service."""
import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from src.matching.profiles import INTERACTION_ACTIONS
from src.onboarding.validators import NgoProfileForm, VolunteerProfileForm
from src.persistence.models import Interaction, Ngo, Opportunity, Volunteer
from src.tracking.exceptions import (
    NgoNotFoundError,
    OpportunityNotFoundError,
    VolunteerNotFoundError,
)

logger = logging.getLogger(__name__)


class ProfileService:
    """Service for managing volunteer and NGO profiles."""

    def __init__(self, session: Session):
        """
        Initialize profile service.

        Args:
            session: Database session
        """
        self.session = session

    def create_volunteer(self, form: VolunteerProfileForm) -> Volunteer:
        """Create a volunteer profile with empty stats and history."""
        volunteer = Volunteer(
            **form.to_row_kwargs(),
            total_hours=0,
            events_attended=0,
            events_completed=0,
        )
        self.session.add(volunteer)
        self.session.commit()
        self.session.refresh(volunteer)

        logger.info("Created volunteer profile %s", volunteer.id)
        return volunteer

    def get_volunteer(self, volunteer_id: str) -> Optional[Volunteer]:
        """Get a volunteer by ID."""
        return self.session.get(Volunteer, volunteer_id)

    def require_volunteer(self, volunteer_id: str) -> Volunteer:
        volunteer = self.get_volunteer(volunteer_id)
        if volunteer is None:
            raise VolunteerNotFoundError(volunteer_id)
        return volunteer

    def get_volunteer_by_email(self, email: str) -> Optional[Volunteer]:
        stmt = select(Volunteer).where(Volunteer.email == email.strip().lower())
        return self.session.execute(stmt).scalar_one_or_none()

    def create_ngo(self, form: NgoProfileForm) -> Ngo:
        """Create an NGO profile pending verification."""
        ngo = Ngo(
            **form.to_row_kwargs(),
            verification_status="pending",
            total_opportunities=0,
            total_volunteers=0,
            total_hours=0,
        )
        self.session.add(ngo)
        self.session.commit()
        self.session.refresh(ngo)

        logger.info("Created NGO profile %s (%s)", ngo.id, ngo.organization_name)
        return ngo

    def get_ngo(self, ngo_id: str) -> Optional[Ngo]:
        """Get an NGO by ID."""
        return self.session.get(Ngo, ngo_id)

    def require_ngo(self, ngo_id: str) -> Ngo:
        ngo = self.get_ngo(ngo_id)
        if ngo is None:
            raise NgoNotFoundError(ngo_id)
        return ngo

    def get_ngo_by_email(self, email: str) -> Optional[Ngo]:
        stmt = select(Ngo).where(Ngo.email == email.strip().lower())
        return self.session.execute(stmt).scalar_one_or_none()

    def set_verification_status(self, ngo_id: str, status: str) -> Ngo:
        """Mark an NGO pending, verified or rejected."""
        if status not in Ngo.VERIFICATION_STATUSES:
            raise ValueError(
                f"Invalid verification status: {status}. "
                f"Must be one of {Ngo.VERIFICATION_STATUSES}"
            )
        ngo = self.require_ngo(ngo_id)
        ngo.verification_status = status
        ngo.verified_at = datetime.now(timezone.utc) if status == "verified" else None
        self.session.commit()
        return ngo

    def record_interaction(
        self,
        volunteer_id: str,
        opportunity_id: str,
        action: str,
        commit: bool = True,
    ) -> Interaction:
        """
        Append an entry to a volunteer's interaction history.

        Args:
            volunteer_id: Volunteer ID
            opportunity_id: Opportunity ID
            action: One of viewed, applied, completed
            commit: Commit immediately (False when part of a larger write)

        Returns:
            Created Interaction
        """
        if action not in INTERACTION_ACTIONS:
            raise ValueError(f"Invalid action: {action}. Must be one of {INTERACTION_ACTIONS}")

        volunteer = self.require_volunteer(volunteer_id)
        opportunity = self.session.get(Opportunity, opportunity_id)
        if opportunity is None:
            raise OpportunityNotFoundError(opportunity_id)

        interaction = Interaction(
            volunteer_id=volunteer.id,
            opportunity_id=opportunity.id,
            action=action,
            timestamp=datetime.now(timezone.utc),
        )
        volunteer.interactions.append(interaction)
        volunteer.last_active = interaction.timestamp

        if action == "viewed":
            opportunity.views = (opportunity.views or 0) + 1

        if commit:
            self.session.commit()
        return interaction

    def add_preferred_ngo(self, volunteer_id: str, ngo_id: str) -> Volunteer:
        """Add an NGO to a volunteer's preferred list (no duplicates)."""
        volunteer = self.require_volunteer(volunteer_id)
        self.require_ngo(ngo_id)

        preferred = list(volunteer.preferred_ngos or [])
        if ngo_id not in preferred:
            # Reassign so the JSON column is flagged dirty
            volunteer.preferred_ngos = preferred + [ngo_id]
            self.session.commit()
        return volunteer
