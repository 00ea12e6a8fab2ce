"""
Session: the authenticated identity and store selection of one client.

Design rules:
  1. Constructed explicitly and handed to the SessionBootstrapper; there is
     no module-level session.
  2. Only the bootstrapper writes to it. Consumers read.
  3. ``reset()`` is the single teardown path (logout, failed resume).
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from .enums import SessionState
from .schemas import Store, User


class Session(BaseModel):
    user: Optional[User] = None
    selected_tenant_store_id: Optional[str] = None
    registration_required: Optional[bool] = None  # None = not checked yet
    auth_token: Optional[str] = None
    state: SessionState = SessionState.UNAUTHENTICATED
    last_error: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None or bool(self.auth_token)

    @property
    def selected_store(self) -> Optional[Store]:
        if self.user is None or self.selected_tenant_store_id is None:
            return None
        for store in self.user.stores:
            if store.id == self.selected_tenant_store_id:
                return store
        return None

    def reset(self) -> None:
        self.user = None
        self.selected_tenant_store_id = None
        self.registration_required = None
        self.auth_token = None
        self.state = SessionState.UNAUTHENTICATED
        self.last_error = None
