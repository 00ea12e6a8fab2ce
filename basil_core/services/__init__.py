"""Services — ApiClient, AuthService, ProfileService, OnboardingService, RegistrationService, TrackingService."""

from basil_core.services.api_client import ApiClient
from basil_core.services.auth_service import AuthService
from basil_core.services.profile_service import ProfileService
from basil_core.services.onboarding_service import OnboardingService
from basil_core.services.registration_service import RegistrationService
from basil_core.services.tracking_service import TrackingService

__all__ = [
    "ApiClient",
    "AuthService",
    "ProfileService",
    "OnboardingService",
    "RegistrationService",
    "TrackingService",
]
