from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(slots=True)
class User:
    """Registered API user backing the login/register endpoints."""

    id: str
    email: str
    password_hash: str
    created_at: datetime
    name: str | None = None
