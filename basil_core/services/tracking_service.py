"""
Tracking Service — error-tracking user context and breadcrumbs.

Keeps the identity attached to error reports and a trail of breadcrumbs
leading up to them. Backed by logging; a hosted error tracker can subscribe
to the same calls.
"""

from __future__ import annotations

import logging
from collections import deque
from datetime import datetime, timezone
from typing import Any, Optional

logger = logging.getLogger(__name__)


class TrackingService:
    """Records the current user and breadcrumbs in memory."""

    def __init__(self, max_breadcrumbs: int = 100):
        self.max_breadcrumbs = max_breadcrumbs
        self.current_user: Optional[dict[str, Any]] = None
        self._breadcrumbs: deque[dict[str, Any]] = deque(maxlen=max_breadcrumbs)

    def set_user(self, user_id: str, email: Optional[str] = None, name: Optional[str] = None) -> None:
        self.current_user = {"id": user_id, "email": email, "name": name}
        logger.debug(f"[TRACKING] user context set: {user_id}")

    def clear_user(self) -> None:
        self.current_user = None
        logger.debug("[TRACKING] user context cleared")

    def add_breadcrumb(
        self,
        message: str,
        category: str = "default",
        level: str = "info",
        data: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        """Record a breadcrumb and return it."""
        crumb = {
            "message": message,
            "category": category,
            "level": level,
            "data": data or {},
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        self._breadcrumbs.append(crumb)
        logger.debug(f"[TRACKING] {category} → {message}")
        return crumb

    def get_breadcrumbs(self) -> list[dict[str, Any]]:
        return list(self._breadcrumbs)
