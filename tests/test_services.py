"""Tests for profile, opportunity and application services."""
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select

from src.matching.match_scorer import MatchBreakdown, MatchScoreResult
from src.matching.ranker import OpportunityRanker
from src.onboarding.validators import NgoProfileForm, OpportunityForm, VolunteerProfileForm
from src.persistence.models import Application, Interaction, Opportunity, StatusHistory
from src.tracking.application_service import ApplicationService
from src.tracking.exceptions import (
    NgoNotFoundError,
    OpportunityClosedError,
    OpportunityNotFoundError,
    VolunteerNotFoundError,
)
from src.tracking.opportunity_service import OpportunityService
from src.tracking.profile_service import ProfileService


class TestProfileService:
    """Tests for ProfileService."""

    def test_create_volunteer(self, test_db, volunteer_form_data):
        service = ProfileService(test_db)
        volunteer = service.create_volunteer(VolunteerProfileForm(**volunteer_form_data))

        assert volunteer.id is not None
        assert volunteer.email == "priya@example.com"
        assert volunteer.total_hours == 0
        assert volunteer.interactions == []
        assert service.get_volunteer_by_email("PRIYA@example.com").id == volunteer.id

    def test_create_ngo_pending(self, test_db):
        service = ProfileService(test_db)
        ngo = service.create_ngo(
            NgoProfileForm(
                name="Asha",
                email="asha@ngo.org",
                organization_name="Green Pune",
                description="Tree planting.",
                impact_areas=["Environment"],
                location={"city": "Pune", "state": "Maharashtra"},
            )
        )
        assert ngo.verification_status == "pending"
        assert ngo.total_opportunities == 0

    def test_set_verification_status(self, test_db, sample_ngo):
        service = ProfileService(test_db)

        ngo = service.set_verification_status(sample_ngo.id, "verified")
        assert ngo.verification_status == "verified"
        assert ngo.verified_at is not None

        with pytest.raises(ValueError):
            service.set_verification_status(sample_ngo.id, "approved")

    def test_require_missing_profiles(self, test_db):
        service = ProfileService(test_db)
        with pytest.raises(VolunteerNotFoundError):
            service.require_volunteer("missing")
        with pytest.raises(NgoNotFoundError):
            service.require_ngo("missing")

    def test_record_interaction(self, test_db, sample_volunteer, sample_opportunity):
        service = ProfileService(test_db)
        interaction = service.record_interaction(
            sample_volunteer.id, sample_opportunity.id, "viewed"
        )

        assert interaction.action == "viewed"
        assert sample_opportunity.views == 1
        assert len(sample_volunteer.interactions) == 1

    def test_record_interaction_invalid_action(self, test_db, sample_volunteer, sample_opportunity):
        service = ProfileService(test_db)
        with pytest.raises(ValueError):
            service.record_interaction(sample_volunteer.id, sample_opportunity.id, "liked")

    def test_record_interaction_unknown_opportunity(self, test_db, sample_volunteer):
        service = ProfileService(test_db)
        with pytest.raises(OpportunityNotFoundError):
            service.record_interaction(sample_volunteer.id, "missing", "viewed")

    def test_add_preferred_ngo_once(self, test_db, sample_volunteer, sample_ngo):
        service = ProfileService(test_db)
        service.add_preferred_ngo(sample_volunteer.id, sample_ngo.id)
        volunteer = service.add_preferred_ngo(sample_volunteer.id, sample_ngo.id)

        assert volunteer.preferred_ngos == [sample_ngo.id]


class TestOpportunityService:
    """Tests for OpportunityService."""

    def test_create_opportunity(self, test_db, sample_ngo, opportunity_form_data):
        service = OpportunityService(test_db)
        opportunity = service.create_opportunity(
            sample_ngo.id, OpportunityForm(**opportunity_form_data)
        )

        assert opportunity.ngo_name == "Learn Forward"
        assert opportunity.capacity_filled == 0
        assert opportunity.views == 0
        assert opportunity.latitude is None
        assert sample_ngo.total_opportunities == 1

    def test_create_opportunity_unknown_ngo(self, test_db, opportunity_form_data):
        service = OpportunityService(test_db)
        with pytest.raises(NgoNotFoundError):
            service.create_opportunity("missing", OpportunityForm(**opportunity_form_data))

    def test_get_ngo_opportunities_newest_first(self, test_db, opportunity_factory):
        first = opportunity_factory("First")
        second = opportunity_factory("Second")

        service = OpportunityService(test_db)
        found = service.get_ngo_opportunities(first.ngo_id)
        assert [o.id for o in found] == [second.id, first.id]

    def test_get_active_opportunities(self, test_db, opportunity_factory):
        now = datetime(2026, 2, 15)
        open_ = opportunity_factory("Open")
        future_deadline = opportunity_factory("Future", deadline=datetime(2026, 3, 1))
        opportunity_factory("Past", deadline=datetime(2026, 2, 1))
        opportunity_factory("Draft", status="draft")
        opportunity_factory("Cancelled", status="cancelled")

        service = OpportunityService(test_db)
        active = service.get_active_opportunities(now=now)

        assert [o.id for o in active] == [future_deadline.id, open_.id]

    def test_get_active_opportunities_limit(self, test_db, opportunity_factory):
        for i in range(5):
            opportunity_factory(f"Opp {i}")

        service = OpportunityService(test_db)
        assert len(service.get_active_opportunities(limit=3)) == 3

    def test_update_opportunity_only_given_fields(self, test_db, sample_opportunity):
        service = OpportunityService(test_db)
        updated = service.update_opportunity(
            sample_opportunity.id, title="Renamed", description=None
        )

        assert updated.title == "Renamed"
        assert updated.cause == "Education"
        assert updated.updated_at is not None

    def test_update_opportunity_rejects_capacity_filled(self, test_db, sample_opportunity):
        service = OpportunityService(test_db)
        with pytest.raises(ValueError, match="capacity_filled"):
            service.update_opportunity(sample_opportunity.id, capacity_filled=3)

    def test_set_status(self, test_db, sample_opportunity):
        service = OpportunityService(test_db)
        assert service.set_status(sample_opportunity.id, "filled").status == "filled"

        with pytest.raises(ValueError):
            service.set_status(sample_opportunity.id, "archived")

    def test_rank_for_volunteer(self, test_db, sample_volunteer, sample_opportunity, opportunity_factory):
        remote_health = opportunity_factory(
            "Remote health hotline",
            cause="Health",
            skills=[{"name": "Nursing", "importance": "required"}],
            hours_required=30,
        )
        opportunity_factory("Draft", status="draft")

        service = OpportunityService(test_db, ranker=OpportunityRanker())
        ranked = service.rank_for_volunteer(sample_volunteer.id)

        assert [r.opportunity.id for r in ranked] == [sample_opportunity.id, remote_health.id]
        assert ranked[0].score == 85
        assert ranked[0].label == "High"

    def test_rank_for_missing_volunteer(self, test_db):
        service = OpportunityService(test_db)
        with pytest.raises(VolunteerNotFoundError):
            service.rank_for_volunteer("missing")


class TestApplicationService:
    """Tests for ApplicationService."""

    def test_create_application_scores_match(self, test_db, sample_volunteer, sample_opportunity):
        service = ApplicationService(test_db)
        application = service.create_application(
            sample_volunteer.id, sample_opportunity.id, message="Happy to help"
        )

        assert application.status == "applied"
        assert application.ngo_id == sample_opportunity.ngo_id
        assert application.match_score == 85
        assert application.match_breakdown["skills"] == pytest.approx(30)
        assert application.match_breakdown["personalization"] == 0
        assert application.applied_at is not None
        assert application.volunteer_message == "Happy to help"

    def test_create_application_is_idempotent(self, test_db, sample_volunteer, sample_opportunity):
        service = ApplicationService(test_db)
        first = service.create_application(sample_volunteer.id, sample_opportunity.id)
        second = service.create_application(sample_volunteer.id, sample_opportunity.id)

        assert second.id == first.id
        assert service.get_application_count(sample_opportunity.id) == 1
        assert sample_opportunity.applications_count == 1

    def test_create_application_records_interaction(self, test_db, sample_volunteer, sample_opportunity):
        service = ApplicationService(test_db)
        service.create_application(sample_volunteer.id, sample_opportunity.id)

        interactions = test_db.execute(select(Interaction)).scalars().all()
        assert [(i.volunteer_id, i.action) for i in interactions] == [(sample_volunteer.id, "applied")]

    def test_create_application_uses_injected_scorer(self, test_db, sample_volunteer, sample_opportunity):
        class _Scorer:
            def score(self, volunteer, opportunity):
                return MatchScoreResult(
                    total_score=42, breakdown=MatchBreakdown(10, 10, 10, 5, 5, 2)
                )

        service = ApplicationService(test_db, scorer=_Scorer())
        application = service.create_application(sample_volunteer.id, sample_opportunity.id)

        assert application.match_score == 42
        assert application.match_breakdown["personalization"] == 2

    def test_create_application_missing_records(self, test_db, sample_volunteer, sample_opportunity):
        service = ApplicationService(test_db)
        with pytest.raises(VolunteerNotFoundError):
            service.create_application("missing", sample_opportunity.id)
        with pytest.raises(OpportunityNotFoundError):
            service.create_application(sample_volunteer.id, "missing")

    def test_create_application_closed_opportunity(self, test_db, sample_volunteer, opportunity_factory):
        draft = opportunity_factory("Draft", status="draft")
        service = ApplicationService(test_db)
        with pytest.raises(OpportunityClosedError):
            service.create_application(sample_volunteer.id, draft.id)

    def test_applications_for_opportunity_newest_first(
        self, test_db, sample_volunteer, sample_opportunity, volunteer_form_data
    ):
        other = ProfileService(test_db).create_volunteer(VolunteerProfileForm(**volunteer_form_data))
        service = ApplicationService(test_db)
        older = service.create_application(sample_volunteer.id, sample_opportunity.id)
        older.applied_at = datetime(2026, 1, 1)
        newer = service.create_application(other.id, sample_opportunity.id)
        test_db.commit()

        apps = service.get_applications_for_opportunity(sample_opportunity.id)
        assert [a.id for a in apps] == [newer.id, older.id]
        assert apps[0].volunteer.name == "Priya Shah"

    def test_applications_for_volunteer_exclude_withdrawn(
        self, test_db, sample_volunteer, sample_opportunity, opportunity_factory
    ):
        second = opportunity_factory("Second")
        service = ApplicationService(test_db)
        kept = service.create_application(sample_volunteer.id, sample_opportunity.id)
        dropped = service.create_application(sample_volunteer.id, second.id)
        service.withdraw(dropped.id)

        apps = service.get_applications_for_volunteer(sample_volunteer.id)
        assert [a.id for a in apps] == [kept.id]
        assert apps[0].opportunity.title == "Weekend coding club mentor"

    def test_update_status_sets_timestamps(self, test_db, sample_volunteer, sample_opportunity):
        service = ApplicationService(test_db)
        application = service.create_application(sample_volunteer.id, sample_opportunity.id)

        service.update_status(application.id, "shortlisted")
        updated = service.update_status(application.id, "confirmed", notes="See you Saturday")

        assert updated.shortlisted_at is not None
        assert updated.confirmed_at is not None
        assert updated.completed_at is None
        assert updated.ngo_notes == "See you Saturday"
        assert sample_opportunity.capacity_filled == 1

    def test_update_status_creates_history(self, test_db, sample_volunteer, sample_opportunity):
        service = ApplicationService(test_db)
        application = service.create_application(sample_volunteer.id, sample_opportunity.id)
        service.update_status(application.id, "shortlisted")

        stmt = select(StatusHistory).where(StatusHistory.application_id == application.id)
        history = test_db.execute(stmt).scalar_one()
        assert history.old_status == "applied"
        assert history.new_status == "shortlisted"

    def test_update_status_same_status_no_history(self, test_db, sample_volunteer, sample_opportunity):
        service = ApplicationService(test_db)
        application = service.create_application(sample_volunteer.id, sample_opportunity.id)
        service.update_status(application.id, "applied")

        assert test_db.execute(select(StatusHistory)).scalars().all() == []

    def test_update_status_invalid(self, test_db, sample_volunteer, sample_opportunity):
        service = ApplicationService(test_db)
        application = service.create_application(sample_volunteer.id, sample_opportunity.id)
        with pytest.raises(ValueError):
            service.update_status(application.id, "hired")

    def test_update_status_missing_application(self, test_db):
        assert ApplicationService(test_db).update_status("missing", "shortlisted") is None

    def test_rejecting_confirmed_frees_capacity(self, test_db, sample_volunteer, sample_opportunity):
        service = ApplicationService(test_db)
        application = service.create_application(sample_volunteer.id, sample_opportunity.id)
        service.update_status(application.id, "confirmed")
        service.update_status(application.id, "rejected")

        assert sample_opportunity.capacity_filled == 0

    def test_reconfirming_holds_one_seat(self, test_db, sample_volunteer, sample_opportunity):
        service = ApplicationService(test_db)
        application = service.create_application(sample_volunteer.id, sample_opportunity.id)
        service.update_status(application.id, "confirmed")
        service.update_status(application.id, "shortlisted")
        assert sample_opportunity.capacity_filled == 0

        service.update_status(application.id, "confirmed")
        assert sample_opportunity.capacity_filled == 1

    def test_completing_keeps_seat(self, test_db, sample_volunteer, sample_opportunity):
        service = ApplicationService(test_db)
        application = service.create_application(sample_volunteer.id, sample_opportunity.id)
        service.update_status(application.id, "confirmed")
        service.update_status(application.id, "completed")

        assert sample_opportunity.capacity_filled == 1

    def test_completion_credits_volunteer(self, test_db, sample_volunteer, sample_opportunity):
        service = ApplicationService(test_db)
        application = service.create_application(sample_volunteer.id, sample_opportunity.id)
        service.update_status(application.id, "confirmed")
        completed = service.update_status(application.id, "completed", hours_completed=6)

        assert completed.completed_at is not None
        assert completed.hours_completed == 6
        assert sample_volunteer.total_hours == 6
        assert sample_volunteer.events_completed == 1
        assert sample_opportunity.completions == 1
        assert [i.action for i in sample_volunteer.interactions] == ["applied", "completed"]

    def test_history_feeds_personalization(self, test_db, sample_volunteer, opportunity_factory):
        service = ApplicationService(test_db)
        for i in range(4):
            service.create_application(sample_volunteer.id, opportunity_factory(f"Past {i}").id)

        fresh = opportunity_factory("Fresh")
        application = service.create_application(sample_volunteer.id, fresh.id)

        assert application.match_breakdown["personalization"] == 3
