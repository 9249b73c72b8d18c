"""Database persistence layer."""
from .database import get_session, init_db
from .models import Application, Base, Interaction, Ngo, Opportunity, StatusHistory, Volunteer

__all__ = [
    "Base",
    "Volunteer",
    "Interaction",
    "Ngo",
    "Opportunity",
    "Application",
    "StatusHistory",
    "init_db",
    "get_session",
]
