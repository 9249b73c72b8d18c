"""Opportunity posting and browsing service."""
import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from config.settings import settings
from src.matching.ranker import OpportunityRanker, RankedOpportunity
from src.onboarding.validators import OpportunityForm
from src.persistence.models import Ngo, Opportunity, Volunteer
from src.tracking.exceptions import (
    NgoNotFoundError,
    OpportunityNotFoundError,
    VolunteerNotFoundError,
)

logger = logging.getLogger(__name__)


class OpportunityService:
    """Service for managing opportunities."""

    # Fields update_opportunity may change; capacity_filled is owned by applications
    UPDATABLE_FIELDS = {
        "title",
        "description",
        "requirements",
        "skills",
        "cause",
        "status",
        "perks",
        "tags",
        "deadline",
        "location_type",
        "city",
        "state",
        "address",
        "latitude",
        "longitude",
        "start_date",
        "end_date",
        "hours_required",
        "flexible",
        "shifts",
        "capacity_total",
        "capacity_min_required",
    }

    def __init__(self, session: Session, ranker: Optional[OpportunityRanker] = None):
        """
        Initialize opportunity service.

        Args:
            session: Database session
            ranker: Ranker used by rank_for_volunteer
        """
        self.session = session
        self.ranker = ranker or OpportunityRanker(min_score=settings.min_match_score)

    def create_opportunity(self, ngo_id: str, form: OpportunityForm) -> Opportunity:
        """
        Create a new opportunity for an NGO.

        Args:
            ngo_id: Posting NGO
            form: Validated opportunity form

        Returns:
            Created Opportunity (coordinates unset, stats zeroed)
        """
        ngo = self.session.get(Ngo, ngo_id)
        if ngo is None:
            raise NgoNotFoundError(ngo_id)

        opportunity = Opportunity(
            ngo_id=ngo.id,
            ngo_name=ngo.organization_name,
            **form.to_row_kwargs(),
            capacity_filled=0,
            views=0,
            applications_count=0,
            completions=0,
        )
        ngo.total_opportunities = (ngo.total_opportunities or 0) + 1

        self.session.add(opportunity)
        self.session.commit()
        self.session.refresh(opportunity)

        logger.info(
            "Created opportunity %s (%s) for %s", opportunity.id, opportunity.status, ngo.id
        )
        return opportunity

    def get_opportunity(self, opportunity_id: str) -> Optional[Opportunity]:
        """Get an opportunity by ID."""
        return self.session.get(Opportunity, opportunity_id)

    def require_opportunity(self, opportunity_id: str) -> Opportunity:
        opportunity = self.get_opportunity(opportunity_id)
        if opportunity is None:
            raise OpportunityNotFoundError(opportunity_id)
        return opportunity

    def get_ngo_opportunities(self, ngo_id: str) -> list[Opportunity]:
        """All opportunities for an NGO, newest first."""
        stmt = (
            select(Opportunity)
            .where(Opportunity.ngo_id == ngo_id)
            .order_by(Opportunity.created_at.desc())
        )
        return list(self.session.execute(stmt).scalars().all())

    def get_active_opportunities(
        self,
        limit: int = 20,
        now: Optional[datetime] = None,
    ) -> list[Opportunity]:
        """
        Get active opportunities open for browsing.

        Args:
            limit: Maximum results
            now: Reference time for deadline filtering (defaults to now)

        Returns:
            Active opportunities with no deadline or a deadline not yet passed,
            newest first
        """
        now = now or datetime.now(timezone.utc)
        stmt = (
            select(Opportunity)
            .where(Opportunity.status == "active")
            .where(or_(Opportunity.deadline.is_(None), Opportunity.deadline >= now))
            .order_by(Opportunity.created_at.desc())
            .limit(limit)
        )
        return list(self.session.execute(stmt).scalars().all())

    def update_opportunity(self, opportunity_id: str, **changes) -> Opportunity:
        """
        Update an opportunity with only the provided fields.

        Args:
            opportunity_id: Opportunity ID
            **changes: Column values to change (None values are skipped)

        Returns:
            Updated Opportunity
        """
        unknown = set(changes) - self.UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update fields: {sorted(unknown)}")

        opportunity = self.require_opportunity(opportunity_id)
        if "status" in changes and changes["status"] not in Opportunity.STATUSES + [None]:
            raise ValueError(
                f"Invalid status: {changes['status']}. Must be one of {Opportunity.STATUSES}"
            )

        for name, value in changes.items():
            if value is not None:
                setattr(opportunity, name, value)
        opportunity.updated_at = datetime.now(timezone.utc)

        self.session.commit()
        self.session.refresh(opportunity)
        return opportunity

    def set_status(self, opportunity_id: str, status: str) -> Opportunity:
        """Move an opportunity to a new status."""
        opportunity = self.update_opportunity(opportunity_id, status=status)
        logger.info("Opportunity %s is now %s", opportunity_id, status)
        return opportunity

    def rank_for_volunteer(
        self,
        volunteer_id: str,
        limit: Optional[int] = None,
    ) -> list[RankedOpportunity]:
        """
        Score active opportunities for a volunteer, best match first.

        Args:
            volunteer_id: Volunteer ID
            limit: How many active opportunities to score

        Returns:
            Ranked opportunities
        """
        volunteer = self.session.get(Volunteer, volunteer_id)
        if volunteer is None:
            raise VolunteerNotFoundError(volunteer_id)

        opportunities = self.get_active_opportunities(
            limit=limit or settings.opportunity_fetch_limit
        )
        profile = volunteer.to_profile()
        return self.ranker.rank(profile, [o.to_record() for o in opportunities])
