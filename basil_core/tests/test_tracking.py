"""
Tests: TrackingService user context and breadcrumb trail.

Run with:
    pytest basil_core/tests/test_tracking.py -v
"""

from basil_core.services.tracking_service import TrackingService


class TestBreadcrumbs:
    def test_trail_is_bounded(self):
        tracking = TrackingService(max_breadcrumbs=3)
        for i in range(5):
            tracking.add_breadcrumb(f"step {i}", "test")

        messages = [crumb["message"] for crumb in tracking.get_breadcrumbs()]
        assert messages == ["step 2", "step 3", "step 4"]

    def test_zero_keeps_nothing(self):
        tracking = TrackingService(max_breadcrumbs=0)
        crumb = tracking.add_breadcrumb("ignored")

        assert crumb["message"] == "ignored"
        assert tracking.get_breadcrumbs() == []

    def test_breadcrumb_fields(self):
        crumb = TrackingService().add_breadcrumb("User logged in", "auth", data={"method": "otp"})
        assert crumb["category"] == "auth"
        assert crumb["level"] == "info"
        assert crumb["data"] == {"method": "otp"}
        assert crumb["timestamp"]


class TestUserContext:
    def test_set_and_clear(self):
        tracking = TrackingService()
        tracking.set_user("u1", "asha@example.com", "Asha")
        assert tracking.current_user == {"id": "u1", "email": "asha@example.com", "name": "Asha"}

        tracking.clear_user()
        assert tracking.current_user is None
