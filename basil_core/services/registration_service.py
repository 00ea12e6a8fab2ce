"""
Registration Service — does the tenant still need a store?

A user needs registration only when they have no stores; plan and payment
setup happen later, once the trial ends.
"""

from __future__ import annotations

import logging

from basil_core.services.api_client import ApiClient

logger = logging.getLogger(__name__)


class RegistrationService:
    def __init__(self, api: ApiClient):
        self.api = api

    async def needs_registration(self) -> bool:
        """True when the user has no stores. Any error also counts as True."""
        try:
            stores = await self.api.get("/shopkeeper/stores")
        except Exception as e:
            logger.error(f"Error checking registration status: {e}")
            return True
        return not (isinstance(stores, list) and len(stores) > 0)
