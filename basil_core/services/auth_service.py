"""
Auth Service — credential exchange with the backend.

Each login method posts credentials, persists the returned bearer token
through the ApiClient and returns the LoginResponse. Session state is not
touched here; that is the SessionBootstrapper's job.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from pydantic import ValidationError

from basil_core.errors import ApiError
from basil_core.models.schemas import LoginResponse
from basil_core.services.api_client import ApiClient

logger = logging.getLogger(__name__)


class AuthService:
    """Password, OTP and Google logins plus token bookkeeping."""

    def __init__(self, api: ApiClient):
        self.api = api

    async def login_with_password(self, identifier: str, password: str) -> LoginResponse:
        # identifier is an email or a phone number
        data = await self.api.post(
            "/shopkeeper/auth/login/password",
            {"identifier": identifier, "password": password},
        )
        return self._accept(data)

    async def send_login_otp(self, phone: str) -> None:
        await self.api.post("/shopkeeper/auth/login/otp/send", {"phone": phone})

    async def login_with_otp(self, phone: str, otp: str) -> LoginResponse:
        data = await self.api.post("/shopkeeper/auth/login/otp/verify", {"phone": phone, "otp": otp})
        return self._accept(data)

    async def login_with_google(self, id_token: str) -> LoginResponse:
        data = await self.api.post("/shopkeeper/auth/login", {"idToken": id_token})
        return self._accept(data)

    def _accept(self, data: Any) -> LoginResponse:
        if not isinstance(data, dict) or "token" not in data or "user" not in data:
            raise ApiError("Invalid response from server", code="INVALID_RESPONSE")
        try:
            response = LoginResponse.model_validate(data)
        except ValidationError as e:
            raise ApiError("Invalid response from server", code="INVALID_RESPONSE", details=str(e)) from e
        self.api.set_token(response.token)
        logger.info("Credential exchange succeeded; token stored")
        return response

    def get_token(self) -> Optional[str]:
        return self.api.get_token()

    def is_authenticated(self) -> bool:
        return bool(self.get_token())

    def logout(self) -> None:
        self.api.set_token(None)
