"""
Profile Service — loads the current user's profile, scoped to a store.
"""

from __future__ import annotations

import logging
from typing import Optional

from pydantic import ValidationError

from basil_core.errors import ApiError
from basil_core.models.schemas import ProfileResponse
from basil_core.services.api_client import ApiClient

logger = logging.getLogger(__name__)


class ProfileService:
    def __init__(self, api: ApiClient):
        self.api = api

    async def fetch_profile(self, store_hint: Optional[str] = None) -> ProfileResponse:
        """
        GET the profile. ``store_hint`` asks the backend to scope features and
        data to that store instead of the tenant's first store.
        """
        params = {"storeId": store_hint} if store_hint else None
        data = await self.api.get("/shopkeeper/profile", params=params)
        if not isinstance(data, dict):
            raise ApiError("Invalid profile response", code="INVALID_RESPONSE")
        try:
            return ProfileResponse.model_validate(data)
        except ValidationError as e:
            raise ApiError("Invalid profile response", code="INVALID_RESPONSE", details=str(e)) from e

    async def update_profile(
        self,
        name: Optional[str] = None,
        email: Optional[str] = None,
        phone: Optional[str] = None,
    ) -> None:
        payload = {k: v for k, v in {"name": name, "email": email, "phone": phone}.items() if v is not None}
        await self.api.put("/shopkeeper/profile", payload)
