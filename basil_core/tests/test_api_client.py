"""
Tests: ApiClient and the HTTP collaborators, against httpx.MockTransport.

Run with:
    pytest basil_core/tests/test_api_client.py -v
"""

import asyncio
import json

import httpx
import pytest

from basil_core.errors import ApiError
from basil_core.persistence.local_store import TOKEN_KEY, LocalStore
from basil_core.services import (
    ApiClient,
    AuthService,
    OnboardingService,
    ProfileService,
    RegistrationService,
)

BASE_URL = "http://backend.test/api/v1"


def _client(handler, token=None):
    store = LocalStore()
    if token:
        store.set(TOKEN_KEY, token)
    return ApiClient(store, base_url=BASE_URL, timeout=5, transport=httpx.MockTransport(handler))


def _run(client, call):
    async def go():
        async with client:
            return await call(client)

    return asyncio.run(go())


class TestRequest:
    def test_unwraps_envelope_and_sends_token(self):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["auth"] = request.headers.get("Authorization")
            return httpx.Response(200, json={"success": True, "data": {"id": "u1"}})

        client = _client(handler, token="tok")
        data = _run(client, lambda c: c.get("/shopkeeper/profile", params={"storeId": "S1"}))

        assert data == {"id": "u1"}
        assert seen["url"] == f"{BASE_URL}/shopkeeper/profile?storeId=S1"
        assert seen["auth"] == "Bearer tok"

    def test_no_token_no_header(self):
        seen = {}

        def handler(request):
            seen["auth"] = request.headers.get("Authorization")
            return httpx.Response(200, json={"ok": True})

        assert _run(_client(handler), lambda c: c.get("/ping")) == {"ok": True}
        assert seen["auth"] is None

    def test_envelope_failure(self):
        def handler(request):
            return httpx.Response(200, json={"success": False, "error": "Store limit reached"})

        with pytest.raises(ApiError) as exc_info:
            _run(_client(handler), lambda c: c.post("/shopkeeper/stores", {}))
        assert exc_info.value.message == "Store limit reached"

    def test_expired_token_is_auth_error(self):
        def handler(request):
            return httpx.Response(401, json={"success": False, "error": "Token has expired"})

        with pytest.raises(ApiError) as exc_info:
            _run(_client(handler, token="old"), lambda c: c.get("/shopkeeper/profile"))
        assert exc_info.value.status == 401
        assert exc_info.value.is_auth_error is True

    def test_permission_error_is_not_auth_error(self):
        def handler(request):
            return httpx.Response(403, json={"message": "Forbidden"})

        with pytest.raises(ApiError) as exc_info:
            _run(_client(handler), lambda c: c.get("/admin"))
        assert exc_info.value.status == 403
        assert exc_info.value.is_auth_error is False

    def test_status_used_as_code(self):
        def handler(request):
            return httpx.Response(404, json={"error": "Not found"})

        with pytest.raises(ApiError) as exc_info:
            _run(_client(handler), lambda c: c.get("/missing"))
        assert exc_info.value.code == "404"

    def test_non_json_body(self):
        def handler(request):
            return httpx.Response(200, text="<html>proxy page</html>")

        with pytest.raises(ApiError) as exc_info:
            _run(_client(handler), lambda c: c.get("/shopkeeper/profile"))
        assert exc_info.value.message == "Invalid response format"

    def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(ApiError) as exc_info:
            _run(_client(handler), lambda c: c.get("/slow"))
        assert exc_info.value.code == "TIMEOUT"

    def test_network_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(ApiError) as exc_info:
            _run(_client(handler), lambda c: c.get("/down"))
        assert exc_info.value.code == "NETWORK_ERROR"

    def test_set_token(self):
        client = _client(lambda request: httpx.Response(200, json={}))
        client.set_token("tok")
        assert client.store.get(TOKEN_KEY) == "tok"
        client.set_token(None)
        assert client.get_token() is None


class TestAuthService:
    def test_send_login_otp(self):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.read())
            return httpx.Response(200, json={"success": True, "data": None})

        _run(_client(handler), lambda c: AuthService(c).send_login_otp("9999999999"))

        assert seen["path"] == "/api/v1/shopkeeper/auth/login/otp/send"
        assert seen["body"] == {"phone": "9999999999"}

    def test_password_login_stores_token(self):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            seen["body"] = request.read()
            return httpx.Response(
                200,
                json={"success": True, "data": {"token": "tok", "user": {"id": "u1"}, "needsRegistration": True}},
            )

        client = _client(handler)
        response = _run(client, lambda c: AuthService(c).login_with_password("asha@example.com", "pw"))

        assert response.token == "tok"
        assert response.needs_registration is True
        assert client.get_token() == "tok"
        assert seen["path"] == "/api/v1/shopkeeper/auth/login/password"
        assert b'"identifier":"asha@example.com"' in seen["body"].replace(b" ", b"")

    def test_missing_token_rejected(self):
        def handler(request):
            return httpx.Response(200, json={"success": True, "data": {"user": {"id": "u1"}}})

        client = _client(handler)
        with pytest.raises(ApiError) as exc_info:
            _run(client, lambda c: AuthService(c).login_with_otp("9999999999", "123456"))
        assert exc_info.value.message == "Invalid response from server"
        assert client.get_token() is None

    def test_logout(self):
        client = _client(lambda request: httpx.Response(200, json={}), token="tok")
        auth = AuthService(client)
        assert auth.is_authenticated()
        auth.logout()
        assert not auth.is_authenticated()


class TestProfileService:
    def test_store_hint_sent(self):
        seen = {}

        def handler(request):
            seen["storeId"] = request.url.params.get("storeId")
            return httpx.Response(
                200,
                json={
                    "success": True,
                    "data": {
                        "user": {"id": "u1", "tenantPermissions": {"VIEW_DASHBOARD": True, "EXPORT": "yes"}},
                        "stores": [{"id": "S1", "name": "Main"}],
                        "selectedStoreId": "S1",
                    },
                },
            )

        profile = _run(_client(handler), lambda c: ProfileService(c).fetch_profile(store_hint="S1"))

        assert seen["storeId"] == "S1"
        assert profile.user.store_ids == ["S1"]
        assert profile.user.tenant_permissions == {"VIEW_DASHBOARD": True, "EXPORT": False}

    def test_update_profile_sends_given_fields(self):
        seen = {}

        def handler(request):
            seen["method"] = request.method
            seen["body"] = json.loads(request.read())
            return httpx.Response(200, json={"success": True, "data": {}})

        _run(_client(handler, token="tok"), lambda c: ProfileService(c).update_profile(name="Asha R"))

        assert seen["method"] == "PUT"
        assert seen["body"] == {"name": "Asha R"}

    def test_malformed_profile(self):
        def handler(request):
            return httpx.Response(200, json={"success": True, "data": {"stores": []}})

        with pytest.raises(ApiError) as exc_info:
            _run(_client(handler), lambda c: ProfileService(c).fetch_profile())
        assert exc_info.value.code == "INVALID_RESPONSE"


class TestChecks:
    def test_onboarding_needed_without_tenant(self):
        def handler(request):
            return httpx.Response(200, json={"success": True, "data": {"user": {"id": "u1"}}})

        assert _run(_client(handler), lambda c: OnboardingService(c).needs_onboarding()) is True

    def test_onboarding_done_with_tenant(self):
        def handler(request):
            return httpx.Response(200, json={"success": True, "data": {"user": {"id": "u1", "tenantId": "t1"}}})

        assert _run(_client(handler), lambda c: OnboardingService(c).needs_onboarding()) is False

    def test_registration_needed_without_stores(self):
        def handler(request):
            return httpx.Response(200, json={"success": True, "data": []})

        assert _run(_client(handler), lambda c: RegistrationService(c).needs_registration()) is True

    def test_registration_done_with_stores(self):
        def handler(request):
            return httpx.Response(200, json={"success": True, "data": [{"id": "S1"}]})

        assert _run(_client(handler), lambda c: RegistrationService(c).needs_registration()) is False

    def test_registration_error_fails_safe(self):
        def handler(request):
            return httpx.Response(500, json={"error": "boom"})

        assert _run(_client(handler), lambda c: RegistrationService(c).needs_registration()) is True
