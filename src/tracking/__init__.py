"""Profile, opportunity and application services."""
from .application_service import ApplicationService
from .opportunity_service import OpportunityService
from .profile_service import ProfileService

__all__ = ["ApplicationService", "OpportunityService", "ProfileService"]
