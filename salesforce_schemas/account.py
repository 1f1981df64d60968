"""Account DTOs."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field, field_validator

from .common import WireModel


class BillingAddress(WireModel):
    street: str | None = None
    city: str | None = None
    state: str | None = None
    postal_code: str | None = None
    country: str | None = None


class Account(WireModel):
    id: str
    name: str
    industry: str | None = None
    account_number: str | None = None
    website: str | None = None
    phone: str | None = None
    billing_address: BillingAddress | None = None
    created_at: datetime
    updated_at: datetime


class CreateAccountInput(WireModel):
    """Payload accepted when creating an account."""

    name: str = Field(..., min_length=1)
    industry: str | None = None
    account_number: str | None = None
    website: str | None = None
    phone: str | None = None
    billing_address: BillingAddress | None = None


class UpdateAccountInput(WireModel):
    """Partial update; only the fields present in the payload are applied."""

    name: str | None = Field(default=None, min_length=1)
    industry: str | None = None
    account_number: str | None = None
    website: str | None = None
    phone: str | None = None
    billing_address: BillingAddress | None = None

    @field_validator("name")
    @classmethod
    def name_not_null(cls, value: str | None) -> str:
        if value is None:
            raise ValueError("name cannot be null")
        return value
