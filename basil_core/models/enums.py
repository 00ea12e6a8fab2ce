from __future__ import annotations

from enum import Enum


class PriceField(str, Enum):
    MRP = "mrp"
    COST_PRICE = "cost_price"
    COST_PRICE_BASE = "cost_price_base"
    SELLING_PRICE = "selling_price"
    SELLING_PRICE_BASE = "selling_price_base"
    MARGIN_PERCENTAGE = "margin_percentage"
    PURCHASE_MARGIN_PERCENTAGE = "purchase_margin_percentage"
    TAX_PERCENTAGE = "tax_percentage"

    @classmethod
    def parse(cls, name: str | PriceField) -> PriceField:
        """Accept the enum itself, its snake_case value or the camelCase form name."""
        if isinstance(name, cls):
            return name
        try:
            return cls(name)
        except ValueError:
            pass
        for member in cls:
            if _camel(member.value) == name:
                return member
        raise ValueError(f"Unknown price field: {name!r}")


class BulkField(str, Enum):
    MRP = "mrp"
    TAX_PERCENTAGE = "tax_percentage"
    MARGIN_PERCENTAGE = "margin_percentage"
    PURCHASE_MARGIN_PERCENTAGE = "purchase_margin_percentage"

    @classmethod
    def parse(cls, name: str | BulkField) -> BulkField:
        if isinstance(name, cls):
            return name
        return cls(PriceField.parse(name).value)


class SessionState(str, Enum):
    UNAUTHENTICATED = "UNAUTHENTICATED"
    AUTHENTICATING = "AUTHENTICATING"
    PROFILE_LOADING = "PROFILE_LOADING"
    ONBOARDING_REQUIRED = "ONBOARDING_REQUIRED"
    REGISTRATION_REQUIRED = "REGISTRATION_REQUIRED"
    READY = "READY"


class NavigationTarget(str, Enum):
    LOGIN = "/login"
    ONBOARDING = "/onboarding"
    REGISTRATION = "/register?step=store"
    DASHBOARD = "/dashboard"


class LoginMethod(str, Enum):
    PASSWORD = "password"
    OTP = "otp"
    GOOGLE = "google"


def _camel(snake: str) -> str:
    head, *rest = snake.split("_")
    return head + "".join(part.title() for part in rest)
