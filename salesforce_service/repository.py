"""Repositories mapping domain records onto the configured document store."""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from dataclasses import asdict, replace
from datetime import datetime, timezone
from typing import Any, Generic, Mapping, TypeVar

from .domain.account import Account, BillingAddress
from .domain.cart import Cart, CartItem, compute_subtotal, drop_item, merge_item, validate_line
from .domain.contact import Contact
from .domain.contracts import (
    AddCartItemInput,
    CreateAccountInput,
    CreateCartInput,
    CreateContactInput,
    RemoveCartItemInput,
)
from .domain.user import User
from .storage import DocumentStore

ACCOUNTS_COLLECTION = "salesforce_accounts"
CONTACTS_COLLECTION = "salesforce_contacts"
CARTS_COLLECTION = "salesforce_carts"
USERS_COLLECTION = "users"

RecordT = TypeVar("RecordT")


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


def _to_document(record: Any) -> dict[str, Any]:
    """Serialise a domain dataclass into a JSON-compatible document."""
    document = asdict(record)
    for key in ("created_at", "updated_at"):
        if isinstance(document.get(key), datetime):
            document[key] = document[key].isoformat()
    return document


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


class _DocumentRepository(ABC, Generic[RecordT]):
    """Shared CRUD plumbing; subclasses provide the collection and document mapping."""

    collection: str

    def __init__(self, store: DocumentStore) -> None:
        """Store the document backend used for all persistence calls."""
        self._store = store

    @abstractmethod
    def _map_document(self, document: Mapping[str, Any]) -> RecordT:
        """Build the domain record from a stored document."""

    def _insert(self, record: RecordT) -> RecordT:
        self._store.insert(self.collection, _to_document(record))
        return record

    def find_by_id(self, record_id: str) -> RecordT | None:
        """Return the record or ``None`` when it does not exist."""
        document = self._store.get(self.collection, record_id)
        if document is None:
            return None
        return self._map_document(document)

    def find_all(self, limit: int = 100, offset: int = 0) -> list[RecordT]:
        """Return a page of records in backend order."""
        documents = self._store.find(self.collection, limit=limit, offset=offset)
        return [self._map_document(document) for document in documents]

    def delete(self, record_id: str) -> bool:
        """Hard-delete a record; ``False`` when it was already absent."""
        return self._store.delete(self.collection, record_id)


class _UpdatableRepository(_DocumentRepository[RecordT]):
    """Repositories whose records accept partial field updates."""

    updatable_fields: frozenset[str] = frozenset()

    def _coerce_changes(self, changes: dict[str, Any]) -> dict[str, Any]:
        return changes

    def update(self, record_id: str, changes: Mapping[str, Any]) -> RecordT | None:
        """Merge the provided fields over the stored record and bump ``updated_at``.

        Unknown keys in ``changes`` are ignored so ``id`` and ``created_at`` stay fixed.
        """
        existing = self.find_by_id(record_id)
        if existing is None:
            return None

        fields = self._coerce_changes(
            {key: value for key, value in changes.items() if key in self.updatable_fields}
        )
        updated = replace(existing, **fields, updated_at=_now())
        document = _to_document(updated)
        written = self._store.update(
            self.collection,
            record_id,
            {key: document[key] for key in (*fields, "updated_at")},
        )
        return updated if written else None


class AccountRepository(_UpdatableRepository[Account]):
    collection = ACCOUNTS_COLLECTION
    updatable_fields = frozenset(
        {"name", "industry", "account_number", "website", "phone", "billing_address"}
    )

    def create(self, payload: CreateAccountInput) -> Account:
        """Persist a new account with a fresh id and timestamps."""
        now = _now()
        return self._insert(
            Account(
                id=_new_id(),
                name=payload.name,
                industry=payload.industry,
                account_number=payload.account_number,
                website=payload.website,
                phone=payload.phone,
                billing_address=payload.billing_address,
                created_at=now,
                updated_at=now,
            )
        )

    def _coerce_changes(self, changes: dict[str, Any]) -> dict[str, Any]:
        address = changes.get("billing_address")
        if isinstance(address, Mapping):
            changes["billing_address"] = BillingAddress.from_mapping(address)
        return changes

    def _map_document(self, document: Mapping[str, Any]) -> Account:
        return Account(
            id=document["id"],
            name=document["name"],
            industry=document.get("industry"),
            account_number=document.get("account_number"),
            website=document.get("website"),
            phone=document.get("phone"),
            billing_address=BillingAddress.from_mapping(document.get("billing_address")),
            created_at=_parse_timestamp(document["created_at"]),
            updated_at=_parse_timestamp(document["updated_at"]),
        )


class ContactRepository(_UpdatableRepository[Contact]):
    collection = CONTACTS_COLLECTION
    updatable_fields = frozenset(
        {"account_id", "first_name", "last_name", "email", "phone", "title", "department"}
    )

    def create(self, payload: CreateContactInput) -> Contact:
        now = _now()
        return self._insert(
            Contact(
                id=_new_id(),
                account_id=payload.account_id,
                first_name=payload.first_name,
                last_name=payload.last_name,
                email=payload.email,
                phone=payload.phone,
                title=payload.title,
                department=payload.department,
                created_at=now,
                updated_at=now,
            )
        )

    def find_by_account_id(
        self, account_id: str, limit: int | None = None, offset: int = 0
    ) -> list[Contact]:
        """Return contacts whose soft ``account_id`` reference matches."""
        documents = self._store.find(
            self.collection, filters={"account_id": account_id}, limit=limit, offset=offset
        )
        return [self._map_document(document) for document in documents]

    def _map_document(self, document: Mapping[str, Any]) -> Contact:
        return Contact(
            id=document["id"],
            account_id=document.get("account_id"),
            first_name=document["first_name"],
            last_name=document["last_name"],
            email=document.get("email"),
            phone=document.get("phone"),
            title=document.get("title"),
            department=document.get("department"),
            created_at=_parse_timestamp(document["created_at"]),
            updated_at=_parse_timestamp(document["updated_at"]),
        )


class CartRepository(_DocumentRepository[Cart]):
    """Cart persistence; item mutations rewrite the full line list and subtotal.

    ``add_item`` and ``remove_item`` read, compute and write without a transaction,
    so concurrent mutations of one cart can overwrite each other (last write wins).
    """

    collection = CARTS_COLLECTION

    def create(self, payload: CreateCartInput) -> Cart:
        now = _now()
        return self._insert(
            Cart(
                id=_new_id(),
                account_id=payload.account_id,
                items=[],
                subtotal=0,
                created_at=now,
                updated_at=now,
            )
        )

    def find_by_account_id(
        self, account_id: str, limit: int | None = None, offset: int = 0
    ) -> list[Cart]:
        documents = self._store.find(
            self.collection, filters={"account_id": account_id}, limit=limit, offset=offset
        )
        return [self._map_document(document) for document in documents]

    def add_item(self, cart_id: str, line: AddCartItemInput) -> Cart | None:
        """Merge a line into the cart; ``None`` when the cart does not exist."""
        validate_line(line.quantity, line.price)
        cart = self.find_by_id(cart_id)
        if cart is None:
            return None
        return self._save_items(cart, merge_item(cart.items, line))

    def remove_item(self, cart_id: str, line: RemoveCartItemInput) -> Cart | None:
        """Drop a product line; unknown products still re-save the cart and bump ``updated_at``."""
        cart = self.find_by_id(cart_id)
        if cart is None:
            return None
        return self._save_items(cart, drop_item(cart.items, line.product_id))

    def _save_items(self, cart: Cart, items: list[CartItem]) -> Cart | None:
        updated = replace(cart, items=items, subtotal=compute_subtotal(items), updated_at=_now())
        document = _to_document(updated)
        written = self._store.update(
            self.collection,
            cart.id,
            {
                "items": document["items"],
                "subtotal": document["subtotal"],
                "updated_at": document["updated_at"],
            },
        )
        return updated if written else None

    def _map_document(self, document: Mapping[str, Any]) -> Cart:
        return Cart(
            id=document["id"],
            account_id=document.get("account_id"),
            items=[
                CartItem(
                    product_id=item["product_id"],
                    product_name=item["product_name"],
                    quantity=item["quantity"],
                    price=item["price"],
                    total=item["total"],
                )
                for item in document.get("items", [])
            ],
            subtotal=document.get("subtotal", 0),
            created_at=_parse_timestamp(document["created_at"]),
            updated_at=_parse_timestamp(document["updated_at"]),
        )


class UserRepository(_DocumentRepository[User]):
    """Credential records for the auth endpoints."""

    collection = USERS_COLLECTION

    def create(self, *, email: str, password_hash: str, name: str | None = None) -> User:
        return self._insert(
            User(
                id=_new_id(),
                email=email,
                password_hash=password_hash,
                name=name,
                created_at=_now(),
            )
        )

    def find_by_email(self, email: str) -> User | None:
        documents = self._store.find(self.collection, filters={"email": email}, limit=1)
        if not documents:
            return None
        return self._map_document(documents[0])

    def _map_document(self, document: Mapping[str, Any]) -> User:
        return User(
            id=document["id"],
            email=document["email"],
            password_hash=document["password_hash"],
            name=document.get("name"),
            created_at=_parse_timestamp(document["created_at"]),
        )
