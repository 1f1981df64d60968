"""Cart aggregate and the pure functions maintaining its subtotal invariant.

Lines are checked with :func:`validate_line` before any lookup; every mutation
then goes through :func:`merge_item` or :func:`drop_item` followed by
:func:`compute_subtotal`, so ``subtotal == sum(item.total)`` and
``item.total == item.quantity * item.price`` hold after each write. Product ids
are unique within a cart because adding an existing product merges into its line.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Iterable

from .contracts import AddCartItemInput
from .errors import InvalidInputError


@dataclass(slots=True)
class CartItem:
    product_id: str
    product_name: str
    quantity: int
    price: float
    total: float


@dataclass(slots=True)
class Cart:
    """Aggregate root; ``subtotal`` is derived and never set directly by callers."""

    id: str
    created_at: datetime
    updated_at: datetime
    account_id: str | None = None
    items: list[CartItem] = field(default_factory=list)
    subtotal: float = 0


def validate_line(quantity: int, price: float) -> None:
    """Reject non-positive or fractional quantities and negative prices."""
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise InvalidInputError("quantity must be a positive integer")
    if (
        isinstance(price, bool)
        or not isinstance(price, (int, float))
        or not math.isfinite(price)
        or price < 0
    ):
        raise InvalidInputError("price must be a non-negative number")


def merge_item(items: Iterable[CartItem], line: AddCartItemInput) -> list[CartItem]:
    """Return a new item list with ``line`` merged in by product id.

    An existing line keeps its product name, adds the incoming quantity and takes
    the incoming price, so every unit on the line is re-priced at ``line.price``.
    ``line`` must already have passed :func:`validate_line`.
    """
    updated = list(items)
    for index, item in enumerate(updated):
        if item.product_id == line.product_id:
            quantity = item.quantity + line.quantity
            updated[index] = replace(
                item,
                quantity=quantity,
                price=line.price,
                total=quantity * line.price,
            )
            return updated

    updated.append(
        CartItem(
            product_id=line.product_id,
            product_name=line.product_name,
            quantity=line.quantity,
            price=line.price,
            total=line.quantity * line.price,
        )
    )
    return updated


def drop_item(items: Iterable[CartItem], product_id: str) -> list[CartItem]:
    """Return the items without any line for ``product_id``; unknown ids are a no-op."""
    return [item for item in items if item.product_id != product_id]


def compute_subtotal(items: Iterable[CartItem]) -> float:
    # full recompute, never incremental
    return sum(item.total for item in items)
