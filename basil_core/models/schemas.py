"""
Data schemas shared by the pricing engine, the collaborators and the API.

Python code uses snake_case names; the remote API and the HTTP surface use
the camelCase aliases of the product forms.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── Pricing ──────────────────────────────────────────────


class PriceFieldSet(CamelModel):
    """The pricing fields of a product-edit form. ``None`` means blank."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, allow_inf_nan=False)

    mrp: Optional[float] = None
    cost_price: Optional[float] = None
    cost_price_base: Optional[float] = None
    cost_gst: Optional[float] = Field(default=None, alias="costGST")
    selling_price: Optional[float] = None
    selling_price_base: Optional[float] = None
    selling_gst: Optional[float] = Field(default=None, alias="sellingGST")
    tax_percentage: Optional[float] = None
    margin_percentage: Optional[float] = None
    purchase_margin_percentage: Optional[float] = None

    @field_validator("*", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and value.strip() == "":
            return None
        return value

    def to_wire(self) -> dict[str, float]:
        """camelCase dict of the non-blank fields."""
        return self.model_dump(by_alias=True, exclude_none=True)


class ModeFlags(CamelModel):
    """Which variant of cost / selling price the user edits directly."""
    edit_cost_price_as_base: bool = False
    edit_selling_price_as_base: bool = False


# ── Identity ─────────────────────────────────────────────


class Store(CamelModel):
    id: str
    name: str = ""
    address: Optional[str] = None
    is_active: bool = True


class FeatureAccess(CamelModel):
    allowed: bool = False
    limit_value: Optional[float] = None
    current_usage: Optional[float] = None


class User(CamelModel):
    id: str
    name: str = ""
    email: Optional[str] = None
    phone: Optional[str] = None
    is_active: bool = True
    is_admin: bool = False
    tenant_id: Optional[str] = None
    tenant_role: Optional[str] = None
    tenant_permissions: dict[str, bool] = Field(default_factory=dict)
    stores: list[Store] = Field(default_factory=list)

    @field_validator("is_admin", mode="before")
    @classmethod
    def _strict_admin(cls, value: Any) -> bool:
        return value is True

    @field_validator("tenant_permissions", mode="before")
    @classmethod
    def _normalize_permissions(cls, raw: Any) -> dict[str, bool]:
        # Backend sends either ["VIEW_DASHBOARD", ...] or {"VIEW_DASHBOARD": true, ...}
        if isinstance(raw, (list, tuple)):
            return {p.strip(): True for p in raw if isinstance(p, str) and p.strip()}
        if isinstance(raw, dict):
            return {str(k): v is True for k, v in raw.items()}
        return {}

    @property
    def store_ids(self) -> list[str]:
        return [s.id for s in self.stores]


class ProfileResponse(CamelModel):
    """Payload of ``GET /shopkeeper/profile``."""
    user: User
    stores: list[Store] = Field(default_factory=list)
    selected_store_id: Optional[str] = None
    features: Optional[dict[str, FeatureAccess]] = None
    tenant_id: Optional[str] = None

    @model_validator(mode="after")
    def _attach_stores(self) -> ProfileResponse:
        if self.stores or not self.user.stores:
            self.user.stores = list(self.stores)
        else:
            self.stores = list(self.user.stores)
        return self


class LoginResponse(CamelModel):
    user: Optional[User] = None
    token: str
    needs_registration: bool = False
    has_stores: Optional[bool] = None
    store_id: Optional[str] = None
