"""Salesforce service façade forwarding to the entity repositories."""

from __future__ import annotations

from typing import Any, Mapping

from .account import Account
from .cart import Cart
from .contact import Contact
from .contracts import (
    AddCartItemInput,
    CreateAccountInput,
    CreateCartInput,
    CreateContactInput,
    RemoveCartItemInput,
)
from ..repository import AccountRepository, CartRepository, ContactRepository


class SalesforceService:
    """Account, contact and cart workflows; holds no state beyond its repositories."""

    def __init__(
        self,
        accounts: AccountRepository,
        contacts: ContactRepository,
        carts: CartRepository,
    ) -> None:
        """Store the repositories the service forwards to."""
        self._accounts = accounts
        self._contacts = contacts
        self._carts = carts

    # Accounts
    def create_account(self, payload: CreateAccountInput) -> Account:
        return self._accounts.create(payload)

    def get_account(self, account_id: str) -> Account | None:
        return self._accounts.find_by_id(account_id)

    def list_accounts(self, limit: int = 100, offset: int = 0) -> list[Account]:
        return self._accounts.find_all(limit, offset)

    def update_account(self, account_id: str, changes: Mapping[str, Any]) -> Account | None:
        return self._accounts.update(account_id, changes)

    def delete_account(self, account_id: str) -> bool:
        return self._accounts.delete(account_id)

    # Contacts
    def create_contact(self, payload: CreateContactInput) -> Contact:
        return self._contacts.create(payload)

    def get_contact(self, contact_id: str) -> Contact | None:
        return self._contacts.find_by_id(contact_id)

    def list_contacts(
        self, limit: int = 100, offset: int = 0, account_id: str | None = None
    ) -> list[Contact]:
        """List contacts, optionally narrowed to one account id."""
        if account_id:
            return self._contacts.find_by_account_id(account_id, limit, offset)
        return self._contacts.find_all(limit, offset)

    def update_contact(self, contact_id: str, changes: Mapping[str, Any]) -> Contact | None:
        return self._contacts.update(contact_id, changes)

    def delete_contact(self, contact_id: str) -> bool:
        return self._contacts.delete(contact_id)

    # Carts
    def create_cart(self, payload: CreateCartInput) -> Cart:
        return self._carts.create(payload)

    def get_cart(self, cart_id: str) -> Cart | None:
        return self._carts.find_by_id(cart_id)

    def list_carts(
        self, limit: int = 100, offset: int = 0, account_id: str | None = None
    ) -> list[Cart]:
        if account_id:
            return self._carts.find_by_account_id(account_id, limit, offset)
        return self._carts.find_all(limit, offset)

    def add_to_cart(self, cart_id: str, line: AddCartItemInput) -> Cart | None:
        """Merge a line into a cart; raises ``InvalidInputError`` for bad quantity or price."""
        return self._carts.add_item(cart_id, line)

    def remove_from_cart(self, cart_id: str, line: RemoveCartItemInput) -> Cart | None:
        return self._carts.remove_item(cart_id, line)

    def delete_cart(self, cart_id: str) -> bool:
        return self._carts.delete(cart_id)
