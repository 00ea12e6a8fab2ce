"""
Onboarding Service — does the user still need a tenant?
"""

from __future__ import annotations

import logging

from basil_core.services.api_client import ApiClient

logger = logging.getLogger(__name__)


class OnboardingService:
    def __init__(self, api: ApiClient):
        self.api = api

    async def needs_onboarding(self) -> bool:
        """True when the profile carries no tenant. Errors count as True."""
        try:
            data = await self.api.get("/shopkeeper/profile")
        except Exception as e:
            logger.error(f"Error checking onboarding status: {e}")
            return True
        if not isinstance(data, dict):
            return True
        user = data.get("user") if isinstance(data.get("user"), dict) else {}
        return not (data.get("tenantId") or user.get("tenantId"))
