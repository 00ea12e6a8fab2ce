"""Models — enums, schemas and the Session."""

from basil_core.models.enums import (
    BulkField,
    LoginMethod,
    NavigationTarget,
    PriceField,
    SessionState,
)
from basil_core.models.schemas import (
    FeatureAccess,
    LoginResponse,
    ModeFlags,
    PriceFieldSet,
    ProfileResponse,
    Store,
    User,
)
from basil_core.models.session import Session

__all__ = [
    "BulkField",
    "FeatureAccess",
    "LoginMethod",
    "LoginResponse",
    "ModeFlags",
    "NavigationTarget",
    "PriceField",
    "PriceFieldSet",
    "ProfileResponse",
    "Session",
    "SessionState",
    "Store",
    "User",
]
