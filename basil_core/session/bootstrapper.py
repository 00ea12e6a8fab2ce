"""
Session Bootstrapper — resumes, establishes and tears down a user session.

State flow:
    UNAUTHENTICATED → AUTHENTICATING → PROFILE_LOADING
        → ONBOARDING_REQUIRED | REGISTRATION_REQUIRED | READY

Rules:
  1. ``login()`` runs strictly in sequence: credential exchange → profile →
     onboarding check → registration check. Each step needs the previous one.
  2. Only a definitive auth error ends a session. Network / 404 / permission
     failures are logged, kept in ``session.last_error`` and otherwise ignored.
  3. Store selection: the locally persisted choice wins over the backend
     default while it still names one of the user's stores.
  4. Registration and onboarding checks fail safe (treated as required).

No retries and no locking: concurrent refreshes are last-write-wins.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Sequence

from basil_core.errors import LoginError, is_definitive_auth_error, login_error_message
from basil_core.models.enums import LoginMethod, NavigationTarget, SessionState
from basil_core.models.schemas import LoginResponse, ProfileResponse
from basil_core.models.session import Session
from basil_core.persistence.local_store import (
    IS_ADMIN_KEY,
    SELECTED_STORE_KEY,
    TENANT_PERMISSIONS_KEY,
    TENANT_ROLE_KEY,
    USER_DERIVED_KEYS,
    USER_FEATURES_KEY,
    LocalStore,
)
from basil_core.services.tracking_service import TrackingService

logger = logging.getLogger(__name__)


def resolve_store_selection(
    local_id: Optional[str],
    backend_id: Optional[str],
    available_ids: Sequence[str],
) -> Optional[str]:
    """
    Pick the active store: local selection, then backend default, then the
    first store. Ids not present in ``available_ids`` are never returned.
    """
    if local_id and local_id in available_ids:
        return local_id
    if backend_id and backend_id in available_ids:
        return backend_id
    return available_ids[0] if available_ids else None


class SessionBootstrapper:
    """Drives a Session through its lifecycle using injected collaborators."""

    def __init__(
        self,
        session: Session,
        store: LocalStore,
        auth: Any,
        profiles: Any,
        onboarding: Any,
        registration: Any,
        tracking: Optional[TrackingService] = None,
    ):
        self.session = session
        self.store = store
        self.auth = auth
        self.profiles = profiles
        self.onboarding = onboarding
        self.registration = registration
        self.tracking = tracking or TrackingService()

    # ── Startup / refresh ────────────────────────────────

    async def bootstrap(self) -> Session:
        """Silently resume from a persisted token, if there is one."""
        token = self.auth.get_token()
        if not token:
            logger.info("No persisted token; starting unauthenticated")
            self.session.reset()
            return self.session
        self.session.auth_token = token
        return await self.refresh_user()

    async def refresh_user(self) -> Session:
        """
        Re-fetch the profile, then the registration status. A failed fetch
        leaves the session as it was.
        """
        if not await self._load_profile():
            return self.session
        await self.check_registration_status()
        self._settle()
        return self.session

    async def check_registration_status(self) -> bool:
        """Ask the registration collaborator; any failure means "required"."""
        try:
            needs = bool(await self.registration.needs_registration())
        except Exception as e:
            logger.error(f"Error checking registration status, assuming required: {e}")
            needs = True
        self.session.registration_required = needs
        return needs

    # ── Login / logout ───────────────────────────────────

    async def login(
        self,
        method: LoginMethod | str,
        credentials: Optional[Mapping[str, str]] = None,
        **kwargs: str,
    ) -> NavigationTarget:
        """
        Exchange credentials and decide where the user goes next.
        Raises LoginError (with a displayable message) if the exchange fails.
        """
        creds = {**(credentials or {}), **kwargs}
        self.session.state = SessionState.AUTHENTICATING
        try:
            method = LoginMethod(method)
            response = await self._exchange(method, creds)
        except Exception as e:
            logger.warning(f"Login failed ({method}): {e}")
            self.session.state = SessionState.UNAUTHENTICATED
            raise LoginError(login_error_message(e), cause=e) from e

        self.session.auth_token = response.token
        self.tracking.add_breadcrumb("User logged in", "auth", data={"method": method.value})

        # Never trust cached profile data after a login
        await self._load_profile()
        if not self.session.is_authenticated:
            return NavigationTarget.LOGIN

        if await self._needs_onboarding():
            self.session.state = SessionState.ONBOARDING_REQUIRED
            return NavigationTarget.ONBOARDING

        # Re-checked even when the login response says otherwise: a user can
        # pass the credential step and still have no store.
        needs_registration = await self.check_registration_status()
        if needs_registration or response.needs_registration:
            self.session.registration_required = True
            self.session.state = SessionState.REGISTRATION_REQUIRED
            return NavigationTarget.REGISTRATION

        self.session.state = SessionState.READY
        return NavigationTarget.DASHBOARD

    def logout(self) -> None:
        """Forget the credential, the user-derived flags and the session."""
        self.tracking.clear_user()
        self.tracking.add_breadcrumb("User logged out", "auth")
        self.auth.logout()
        for key in USER_DERIVED_KEYS:
            self.store.remove(key)
        self.session.reset()
        logger.info("Session cleared")

    # ── Store switching ──────────────────────────────────

    def select_store(self, store_id: str) -> None:
        """Switch the active store; ids outside the user's stores are ignored."""
        user = self.session.user
        if user is None or store_id not in user.store_ids:
            logger.warning(f"Ignoring selection of unknown store '{store_id}'")
            return
        self.session.selected_tenant_store_id = store_id
        self.store.set(SELECTED_STORE_KEY, store_id)

    # ── Internals ────────────────────────────────────────

    async def _exchange(self, method: LoginMethod, creds: Mapping[str, str]) -> LoginResponse:
        def need(key: str) -> str:
            value = creds.get(key)
            if not value:
                raise ValueError(f"Missing credential: {key}")
            return value

        if method == LoginMethod.PASSWORD:
            return await self.auth.login_with_password(need("identifier"), need("password"))
        if method == LoginMethod.OTP:
            return await self.auth.login_with_otp(need("phone"), need("otp"))
        return await self.auth.login_with_google(need("id_token"))

    async def _needs_onboarding(self) -> bool:
        try:
            return bool(await self.onboarding.needs_onboarding())
        except Exception as e:
            logger.error(f"Error checking onboarding status, assuming required: {e}")
            return True

    async def _load_profile(self) -> bool:
        """Fetch and apply the profile. Returns False if the fetch failed."""
        previous = self.session.state
        self.session.state = SessionState.PROFILE_LOADING
        try:
            profile = await self.profiles.fetch_profile(store_hint=self.store.get(SELECTED_STORE_KEY))
        except Exception as e:
            message = getattr(e, "message", None) or str(e)
            if is_definitive_auth_error(e):
                logger.warning(f"Definitive auth error during profile fetch, logging out: {message}")
                self.logout()
                self.session.last_error = message
            else:
                logger.warning(f"Non-auth error during profile fetch, keeping user logged in: {message}")
                self.session.state = previous
                self.session.last_error = message
            return False

        self._apply_profile(profile)
        return True

    def _apply_profile(self, profile: ProfileResponse) -> None:
        user = profile.user
        self.session.user = user
        self.session.last_error = None

        # Re-read after the await so a store switch made meanwhile is kept
        local_id = self.store.get(SELECTED_STORE_KEY)
        resolved = resolve_store_selection(local_id, profile.selected_store_id, user.store_ids)
        self.session.selected_tenant_store_id = resolved
        if resolved is None:
            self.store.remove(SELECTED_STORE_KEY)
        elif resolved != local_id:
            self.store.set(SELECTED_STORE_KEY, resolved)

        self.store.set(IS_ADMIN_KEY, user.is_admin)
        if user.tenant_role:
            self.store.set(TENANT_ROLE_KEY, user.tenant_role)
        if "tenant_permissions" in user.model_fields_set:
            self.store.set(TENANT_PERMISSIONS_KEY, user.tenant_permissions)
        if profile.features is not None:
            self.store.set(
                USER_FEATURES_KEY,
                {key: access.model_dump(by_alias=True) for key, access in profile.features.items()},
            )

        self.tracking.set_user(user.id, user.email, user.name)
        self.tracking.add_breadcrumb(
            "User profile loaded",
            "auth",
            data={"userId": user.id, "tenantId": user.tenant_id, "hasStores": bool(user.stores)},
        )
        logger.info(f"Profile loaded for {user.id}; store={resolved}")

    def _settle(self) -> None:
        if self.session.registration_required:
            self.session.state = SessionState.REGISTRATION_REQUIRED
        else:
            self.session.state = SessionState.READY
