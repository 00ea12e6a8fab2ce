"""
Wiring: build a SessionBootstrapper backed by the real HTTP collaborators.
"""

from __future__ import annotations

from typing import Optional

from basil_core.config import get_settings
from basil_core.models.session import Session
from basil_core.persistence.local_store import LocalStore
from basil_core.services import (
    ApiClient,
    AuthService,
    OnboardingService,
    ProfileService,
    RegistrationService,
    TrackingService,
)
from basil_core.session.bootstrapper import SessionBootstrapper


def build_bootstrapper(
    store: Optional[LocalStore] = None,
    api: Optional[ApiClient] = None,
) -> SessionBootstrapper:
    """Create a fresh Session and the bootstrapper that owns it."""
    settings = get_settings()
    store = store or LocalStore(settings.local_store_path)
    api = api or ApiClient(store)
    return SessionBootstrapper(
        session=Session(),
        store=store,
        auth=AuthService(api),
        profiles=ProfileService(api),
        onboarding=OnboardingService(api),
        registration=RegistrationService(api),
        tracking=TrackingService(),
    )
