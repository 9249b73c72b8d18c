"""Onboarding forms for volunteers, NGOs and opportunities."""

from .validators import (
    NgoProfileForm,
    OpportunityForm,
    VolunteerProfileForm,
    load_yaml_form,
)

__all__ = [
    "NgoProfileForm",
    "OpportunityForm",
    "VolunteerProfileForm",
    "load_yaml_form",
]
