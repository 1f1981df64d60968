"""Contact DTOs."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field, field_validator

from .common import WireModel


class Contact(WireModel):
    id: str
    account_id: str | None = None
    first_name: str
    last_name: str
    email: str | None = None
    phone: str | None = None
    title: str | None = None
    department: str | None = None
    created_at: datetime
    updated_at: datetime


class CreateContactInput(WireModel):
    """Payload accepted when creating a contact; ``account_id`` is not checked."""

    account_id: str | None = None
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    email: str | None = None
    phone: str | None = None
    title: str | None = None
    department: str | None = None


class UpdateContactInput(WireModel):
    account_id: str | None = None
    first_name: str | None = Field(default=None, min_length=1)
    last_name: str | None = Field(default=None, min_length=1)
    email: str | None = None
    phone: str | None = None
    title: str | None = None
    department: str | None = None

    @field_validator("first_name", "last_name")
    @classmethod
    def names_not_null(cls, value: str | None) -> str:
        if value is None:
            raise ValueError("contact names cannot be null")
        return value
