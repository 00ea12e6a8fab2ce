"""
Local Store — key/value persistence that survives restarts.

Holds the bearer token, the selected store id and a few derived flags
(isAdmin, tenantRole, tenantPermissions, userFeatures) so independently
rendered views can read them without re-fetching the profile.

Every write is broadcast to in-process subscribers, so same-process
listeners refresh without polling.
"""

from __future__ import annotations

import json
import logging
from copy import deepcopy
from pathlib import Path
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

Listener = Callable[[str, Any], None]

# ── Well-known keys ──────────────────────────────────────
TOKEN_KEY = "token"
SELECTED_STORE_KEY = "selectedStoreId"
IS_ADMIN_KEY = "isAdmin"
TENANT_ROLE_KEY = "tenantRole"
TENANT_PERMISSIONS_KEY = "tenantPermissions"
USER_FEATURES_KEY = "userFeatures"

USER_DERIVED_KEYS = (IS_ADMIN_KEY, TENANT_ROLE_KEY, TENANT_PERMISSIONS_KEY, USER_FEATURES_KEY)


class LocalStore:
    """
    JSON-file backed key/value store with change notification.
    An empty ``path`` keeps everything in memory.
    """

    def __init__(self, path: Optional[str | Path] = None):
        self.path = Path(path) if path else None
        self._data: dict[str, Any] = {}
        self._listeners: list[Listener] = []
        self._load()

    # ── Reads ────────────────────────────────────────────

    def get(self, key: str, default: Any = None) -> Any:
        if key not in self._data:
            return default
        return deepcopy(self._data[key])

    def keys(self) -> list[str]:
        return list(self._data.keys())

    def __contains__(self, key: str) -> bool:
        return key in self._data

    # ── Writes (each one notifies subscribers) ───────────

    def set(self, key: str, value: Any) -> None:
        json.dumps(value)  # reject values that could not be persisted
        self._data[key] = deepcopy(value)
        self._save()
        self._notify(key, value)

    def remove(self, key: str) -> None:
        if key not in self._data:
            return
        del self._data[key]
        self._save()
        self._notify(key, None)

    def clear(self) -> None:
        for key in list(self._data.keys()):
            self.remove(key)

    # ── Pub/sub ──────────────────────────────────────────

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener(key, new_value)``; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, key: str, value: Any) -> None:
        for listener in list(self._listeners):
            try:
                listener(key, deepcopy(value))
            except Exception as e:
                logger.error(f"Local store listener failed for key '{key}': {e}")

    # ── File backing ─────────────────────────────────────

    def _load(self) -> None:
        if self.path is None or not self.path.exists():
            return
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Local store at {self.path} unreadable, starting empty: {e}")
            return
        if not isinstance(data, dict):
            logger.warning(f"Local store at {self.path} is not a JSON object, starting empty")
            return
        self._data = data
        logger.debug(f"Loaded {len(self._data)} keys from {self.path}")

    def _save(self) -> None:
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(self._data, indent=2, sort_keys=True), encoding="utf-8")
        tmp.replace(self.path)
