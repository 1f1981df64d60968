from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(slots=True)
class Contact:
    """Person attached to an account through a soft ``account_id`` reference."""

    id: str
    first_name: str
    last_name: str
    created_at: datetime
    updated_at: datetime
    account_id: str | None = None
    email: str | None = None
    phone: str | None = None
    title: str | None = None
    department: str | None = None
