"""Domain-level request contracts shared by multiple layers."""

from __future__ import annotations

from dataclasses import dataclass

from .account import BillingAddress


@dataclass(slots=True)
class CreateAccountInput:
    """Validated inputs required to create an account."""

    name: str
    industry: str | None = None
    account_number: str | None = None
    website: str | None = None
    phone: str | None = None
    billing_address: BillingAddress | None = None


@dataclass(slots=True)
class CreateContactInput:
    first_name: str
    last_name: str
    account_id: str | None = None
    email: str | None = None
    phone: str | None = None
    title: str | None = None
    department: str | None = None


@dataclass(slots=True)
class CreateCartInput:
    account_id: str | None = None


@dataclass(slots=True)
class AddCartItemInput:
    """A cart line to merge into an existing cart."""

    product_id: str
    product_name: str
    quantity: int
    price: float


@dataclass(slots=True)
class RemoveCartItemInput:
    product_id: str
