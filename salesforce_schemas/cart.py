"""Cart DTOs."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field, StrictInt, field_validator

from .common import WireModel


class CartItem(WireModel):
    product_id: str
    product_name: str
    quantity: int
    price: float
    total: float


class Cart(WireModel):
    id: str
    account_id: str | None = None
    items: list[CartItem] = Field(default_factory=list)
    subtotal: float = 0
    created_at: datetime
    updated_at: datetime


class CreateCartInput(WireModel):
    """Carts start empty; items and subtotal are never accepted here."""

    account_id: str | None = None


class AddToCartInput(WireModel):
    """A cart line; JSON booleans and numeric strings are rejected, not coerced."""

    product_id: str = Field(..., min_length=1)
    product_name: str
    quantity: StrictInt
    price: float = Field(allow_inf_nan=False)

    @field_validator("price", mode="before")
    @classmethod
    def price_is_number(cls, value: object) -> object:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError("price must be a number")
        return value


class RemoveFromCartInput(WireModel):
    product_id: str = Field(..., min_length=1)
