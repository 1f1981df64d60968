"""HTTP route definitions for accounts, contacts and carts."""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Any, Callable, TypeVar

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from pydantic import BaseModel

from salesforce_schemas import (
    Account,
    AddToCartInput,
    Cart,
    Contact,
    CreateAccountInput,
    CreateCartInput,
    CreateContactInput,
    ListResponse,
    Pagination,
    RemoveFromCartInput,
    UpdateAccountInput,
    UpdateContactInput,
)

from .dependencies import get_cache, get_service
from .errors import http_error_from_domain_error
from ..cache import CacheService
from ..domain import contracts
from ..domain.account import BillingAddress
from ..domain.errors import DomainError
from ..domain.service import SalesforceService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/salesforce", tags=["salesforce"])

ModelT = TypeVar("ModelT", bound=BaseModel)

_RESPONSE_OPTIONS: dict[str, Any] = {"response_model_exclude_none": True}


def _to_wire(model: type[ModelT], record: Any) -> ModelT:
    """Convert a domain dataclass into its wire schema."""
    return model.model_validate(asdict(record))


def _page(model: type[ModelT], records: list[Any], limit: int, offset: int) -> ListResponse[ModelT]:
    return ListResponse[model](
        data=[_to_wire(model, record) for record in records],
        pagination=Pagination(limit=limit, offset=offset, count=len(records)),
    )


def _not_found(entity: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{entity} not found")


def _cached_lookup(
    cache: CacheService,
    key: str,
    model: type[ModelT],
    load: Callable[[], Any],
    entity: str,
) -> ModelT:
    """Read-through lookup: serve from cache, else load, cache and return."""
    cached = cache.get(key)
    if cached is not None:
        logger.debug("cache hit for %s", key)
        return model.model_validate(cached)
    record = load()
    if record is None:
        raise _not_found(entity)
    body = _to_wire(model, record)
    cache.set(key, body.model_dump(mode="json"))
    return body


# Accounts


@router.post("/accounts", response_model=Account, status_code=status.HTTP_201_CREATED, **_RESPONSE_OPTIONS)
def create_account(
    payload: CreateAccountInput,
    service: SalesforceService = Depends(get_service),
) -> Account:
    """Create an account; unknown fields in the payload are ignored."""
    account = service.create_account(
        contracts.CreateAccountInput(
            name=payload.name,
            industry=payload.industry,
            account_number=payload.account_number,
            website=payload.website,
            phone=payload.phone,
            billing_address=BillingAddress.from_mapping(
                payload.billing_address.model_dump() if payload.billing_address else None
            ),
        )
    )
    return _to_wire(Account, account)


@router.get("/accounts", response_model=ListResponse[Account], **_RESPONSE_OPTIONS)
def list_accounts(
    limit: int = Query(default=100, ge=1),
    offset: int = Query(default=0, ge=0),
    service: SalesforceService = Depends(get_service),
) -> ListResponse[Account]:
    return _page(Account, service.list_accounts(limit, offset), limit, offset)


@router.get("/accounts/{account_id}", response_model=Account, **_RESPONSE_OPTIONS)
def get_account(
    account_id: str,
    service: SalesforceService = Depends(get_service),
    cache: CacheService = Depends(get_cache),
) -> Account:
    return _cached_lookup(
        cache, f"account:{account_id}", Account, lambda: service.get_account(account_id), "Account"
    )


@router.api_route(
    "/accounts/{account_id}", methods=["PUT", "PATCH"], response_model=Account, **_RESPONSE_OPTIONS
)
def update_account(
    account_id: str,
    payload: UpdateAccountInput,
    service: SalesforceService = Depends(get_service),
    cache: CacheService = Depends(get_cache),
) -> Account:
    """Apply the fields present in the payload; PUT and PATCH behave the same."""
    account = service.update_account(account_id, payload.model_dump(exclude_unset=True))
    cache.delete(f"account:{account_id}")
    if account is None:
        raise _not_found("Account")
    return _to_wire(Account, account)


@router.delete("/accounts/{account_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_account(
    account_id: str,
    service: SalesforceService = Depends(get_service),
    cache: CacheService = Depends(get_cache),
) -> Response:
    """Delete the account only; contacts and carts referencing it are left in place."""
    deleted = service.delete_account(account_id)
    cache.delete(f"account:{account_id}")
    if not deleted:
        raise _not_found("Account")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Contacts


@router.post("/contacts", response_model=Contact, status_code=status.HTTP_201_CREATED, **_RESPONSE_OPTIONS)
def create_contact(
    payload: CreateContactInput,
    service: SalesforceService = Depends(get_service),
) -> Contact:
    contact = service.create_contact(contracts.CreateContactInput(**payload.model_dump()))
    return _to_wire(Contact, contact)


@router.get("/contacts", response_model=ListResponse[Contact], **_RESPONSE_OPTIONS)
def list_contacts(
    limit: int = Query(default=100, ge=1),
    offset: int = Query(default=0, ge=0),
    account_id: str | None = Query(default=None, alias="accountId"),
    service: SalesforceService = Depends(get_service),
) -> ListResponse[Contact]:
    """List contacts, optionally only those referencing ``accountId``."""
    contacts = service.list_contacts(limit, offset, account_id=account_id)
    return _page(Contact, contacts, limit, offset)


@router.get("/contacts/{contact_id}", response_model=Contact, **_RESPONSE_OPTIONS)
def get_contact(
    contact_id: str,
    service: SalesforceService = Depends(get_service),
    cache: CacheService = Depends(get_cache),
) -> Contact:
    return _cached_lookup(
        cache, f"contact:{contact_id}", Contact, lambda: service.get_contact(contact_id), "Contact"
    )


@router.api_route(
    "/contacts/{contact_id}", methods=["PUT", "PATCH"], response_model=Contact, **_RESPONSE_OPTIONS
)
def update_contact(
    contact_id: str,
    payload: UpdateContactInput,
    service: SalesforceService = Depends(get_service),
    cache: CacheService = Depends(get_cache),
) -> Contact:
    contact = service.update_contact(contact_id, payload.model_dump(exclude_unset=True))
    cache.delete(f"contact:{contact_id}")
    if contact is None:
        raise _not_found("Contact")
    return _to_wire(Contact, contact)


@router.delete("/contacts/{contact_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_contact(
    contact_id: str,
    service: SalesforceService = Depends(get_service),
    cache: CacheService = Depends(get_cache),
) -> Response:
    deleted = service.delete_contact(contact_id)
    cache.delete(f"contact:{contact_id}")
    if not deleted:
        raise _not_found("Contact")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Carts


@router.post("/carts", response_model=Cart, status_code=status.HTTP_201_CREATED, **_RESPONSE_OPTIONS)
def create_cart(
    payload: CreateCartInput | None = None,
    service: SalesforceService = Depends(get_service),
) -> Cart:
    """Create an empty cart; items and subtotal in the payload are ignored."""
    account_id = payload.account_id if payload else None
    cart = service.create_cart(contracts.CreateCartInput(account_id=account_id))
    return _to_wire(Cart, cart)


@router.get("/carts", response_model=ListResponse[Cart], **_RESPONSE_OPTIONS)
def list_carts(
    limit: int = Query(default=100, ge=1),
    offset: int = Query(default=0, ge=0),
    account_id: str | None = Query(default=None, alias="accountId"),
    service: SalesforceService = Depends(get_service),
) -> ListResponse[Cart]:
    carts = service.list_carts(limit, offset, account_id=account_id)
    return _page(Cart, carts, limit, offset)


@router.get("/carts/{cart_id}", response_model=Cart, **_RESPONSE_OPTIONS)
def get_cart(
    cart_id: str,
    service: SalesforceService = Depends(get_service),
    cache: CacheService = Depends(get_cache),
) -> Cart:
    return _cached_lookup(cache, f"cart:{cart_id}", Cart, lambda: service.get_cart(cart_id), "Cart")


@router.post("/carts/{cart_id}/items", response_model=Cart, **_RESPONSE_OPTIONS)
def add_to_cart(
    cart_id: str,
    payload: AddToCartInput,
    service: SalesforceService = Depends(get_service),
    cache: CacheService = Depends(get_cache),
) -> Cart:
    """Merge a product line into the cart; 400 for non-positive quantity or negative price."""
    try:
        cart = service.add_to_cart(cart_id, contracts.AddCartItemInput(**payload.model_dump()))
    except DomainError as exc:
        raise http_error_from_domain_error(exc) from exc
    cache.delete(f"cart:{cart_id}")
    if cart is None:
        raise _not_found("Cart")
    return _to_wire(Cart, cart)


@router.delete("/carts/{cart_id}/items", response_model=Cart, **_RESPONSE_OPTIONS)
def remove_from_cart(
    cart_id: str,
    payload: RemoveFromCartInput,
    service: SalesforceService = Depends(get_service),
    cache: CacheService = Depends(get_cache),
) -> Cart:
    cart = service.remove_from_cart(cart_id, contracts.RemoveCartItemInput(product_id=payload.product_id))
    cache.delete(f"cart:{cart_id}")
    if cart is None:
        raise _not_found("Cart")
    return _to_wire(Cart, cart)


@router.delete("/carts/{cart_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_cart(
    cart_id: str,
    service: SalesforceService = Depends(get_service),
    cache: CacheService = Depends(get_cache),
) -> Response:
    deleted = service.delete_cart(cart_id)
    cache.delete(f"cart:{cart_id}")
    if not deleted:
        raise _not_found("Cart")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
