"""Tracking exceptions for Volunteer Match."""


class TrackingError(Exception):
    """Base exception for profile, opportunity and application errors."""

    pass


class VolunteerNotFoundError(TrackingError):
    """Raised when a volunteer profile does not exist."""

    def __init__(self, volunteer_id: str):
        self.volunteer_id = volunteer_id
        super().__init__(f"Volunteer not found: {volunteer_id}")


class NgoNotFoundError(TrackingError):
    """Raised when an NGO profile does not exist."""

    def __init__(self, ngo_id: str):
        self.ngo_id = ngo_id
        super().__init__(f"NGO not found: {ngo_id}")


class OpportunityNotFoundError(TrackingError):
    """Raised when an opportunity does not exist."""

    def __init__(self, opportunity_id: str):
        self.opportunity_id = opportunity_id
        super().__init__(f"Opportunity not found: {opportunity_id}")


class OpportunityClosedError(TrackingError):
    """Raised when applying to an opportunity that is not accepting applications."""

    def __init__(self, opportunity_id: str, status: str):
        self.opportunity_id = opportunity_id
        self.status = status
        super().__init__(f"Opportunity {opportunity_id} is not open for applications ({status})")
