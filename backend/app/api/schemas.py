"""
API request/response schemas

Pydantic models for everything that crosses the HTTP boundary. They are not
store records (see app.models); response models serialise with camelCase
aliases because the members-area front end reads `customerName`,
`hasCompletedOnboarding`, and so on.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Accepts and emits camelCase keys; snake_case also accepted on input."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================
# Generic
# ============================================================


class SuccessResponse(CamelModel):
    success: bool = True


class TokenPayload(BaseModel):
    """
    Session token claims

    sub is the user's email; email and name are copied from the user
    credential at signing time.
    """
    sub: str | None = None
    email: str | None = None
    name: str | None = None


# ============================================================
# Auth requests
#
# Fields are optional on purpose: a missing value is reported by the
# AuthService as a 400 ValidationError rather than a schema error.
# ============================================================


class EmailRequest(BaseModel):
    email: str | None = None


class CreatePasswordRequest(BaseModel):
    email: str | None = None
    password: str | None = None
    name: str | None = None


class LoginRequest(BaseModel):
    email: str | None = None
    password: str | None = None


class SimulatePurchaseRequest(BaseModel):
    email: str | None = None
    name: str | None = None


# ============================================================
# Auth responses
# ============================================================


class UserProfile(CamelModel):
    """Public view of a user credential (no password hash)."""
    email: str
    name: str
    has_completed_onboarding: bool = False


class PurchaseCheckData(CamelModel):
    has_purchase: bool = True
    customer_name: str
    purchase_date: datetime


class CredentialCheckData(CamelModel):
    has_credential: bool


class AuthSessionData(CamelModel):
    """Returned by login and create-password."""
    success: bool = True
    token: str
    user: UserProfile


class ProfileData(CamelModel):
    success: bool = True
    user: UserProfile


# ============================================================
# Hotmart webhook payload
#
# Only the fields the members area needs are declared; Hotmart sends many
# more and they are kept verbatim in Purchase.raw_payload.
# ============================================================


class HotmartModel(BaseModel):
    # Hotmart sends product ids as numbers.
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)


class HotmartBuyer(HotmartModel):
    email: str = Field(min_length=1)
    name: str = ""


class HotmartProduct(HotmartModel):
    id: str = Field(min_length=1)


class HotmartPurchaseInfo(HotmartModel):
    transaction: str = Field(min_length=1)
    product: HotmartProduct


class HotmartPurchaseData(HotmartModel):
    buyer: HotmartBuyer
    purchase: HotmartPurchaseInfo


class HotmartWebhook(HotmartModel):
    event: str = ""
    data: dict[str, Any] | None = None
