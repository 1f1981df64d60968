from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping


@dataclass(slots=True)
class BillingAddress:
    street: str | None = None
    city: str | None = None
    state: str | None = None
    postal_code: str | None = None
    country: str | None = None

    @classmethod
    def from_mapping(cls, value: Mapping[str, Any] | None) -> "BillingAddress | None":
        """Build an address from a stored document or request payload."""
        if value is None:
            return None
        return cls(
            street=value.get("street"),
            city=value.get("city"),
            state=value.get("state"),
            postal_code=value.get("postal_code"),
            country=value.get("country"),
        )


@dataclass(slots=True)
class Account:
    """Business account; ``id`` never changes after creation."""

    id: str
    name: str
    created_at: datetime
    updated_at: datetime
    industry: str | None = None
    account_number: str | None = None
    website: str | None = None
    phone: str | None = None
    billing_address: BillingAddress | None = None
