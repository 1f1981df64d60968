"""Synchronous client mirroring the service's HTTP endpoints."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import BaseModel

from salesforce_schemas import (
    Account,
    AddToCartInput,
    AuthResponse,
    Cart,
    Contact,
    CreateAccountInput,
    CreateCartInput,
    CreateContactInput,
    ListResponse,
    LoginRequest,
    RegisterRequest,
    RemoveFromCartInput,
    UpdateAccountInput,
    UpdateContactInput,
)

from .errors import ApiError, NetworkError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0

_API_PREFIX = "/api/salesforce"


def _dump(payload: BaseModel, *, partial: bool = False) -> dict[str, Any]:
    return payload.model_dump(mode="json", by_alias=True, exclude_none=not partial, exclude_unset=partial)


def _response_payload(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


class SalesforceCartClient:
    """Client for the accounts, contacts, carts and auth endpoints.

    Parameters
    ----------
    base_url:
        Service root, e.g. ``http://localhost:3000``. Optional when ``client`` is given.
    api_key:
        Bearer token sent in the ``Authorization`` header.
    timeout:
        Per-request timeout in seconds for the internally created client.
    client:
        Pre-configured ``httpx.Client`` to send requests through; it is not closed
        by :meth:`close`.
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        api_key: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        client: httpx.Client | None = None,
    ) -> None:
        if client is None and not base_url:
            raise ValueError("base_url is required when no client is supplied")
        self._owns_client = client is None
        self._client = client or httpx.Client(base_url=base_url, timeout=timeout)
        self._headers: dict[str, str] = {"Accept": "application/json"}
        if api_key:
            self.set_api_key(api_key)

    def set_api_key(self, api_key: str | None) -> None:
        """Replace (or clear) the bearer token sent with each request."""
        if api_key:
            self._headers["Authorization"] = f"Bearer {api_key}"
        else:
            self._headers.pop("Authorization", None)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "SalesforceCartClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _request(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """Send a request, raising ``ApiError`` on non-2xx and ``NetworkError`` without a response."""
        try:
            response = self._client.request(method, path, json=json, params=params, headers=self._headers)
        except httpx.RequestError as exc:
            logger.warning("%s %s failed without a response: %s", method, path, exc)
            raise NetworkError(f"Network Error: No response received from server ({exc})") from exc

        if not response.is_success:
            raise ApiError(response.status_code, _response_payload(response))
        return response

    # Health / auth
    def health(self) -> dict[str, Any]:
        return self._request("GET", "/health").json()

    def login(self, email: str, password: str) -> AuthResponse:
        payload = _dump(LoginRequest(email=email, password=password))
        return AuthResponse.model_validate(self._request("POST", "/api/auth/login", json=payload).json())

    def register(self, email: str, password: str, name: str | None = None) -> AuthResponse:
        payload = _dump(RegisterRequest(email=email, password=password, name=name))
        return AuthResponse.model_validate(self._request("POST", "/api/auth/register", json=payload).json())

    # Accounts
    def create_account(self, payload: CreateAccountInput) -> Account:
        response = self._request("POST", f"{_API_PREFIX}/accounts", json=_dump(payload))
        return Account.model_validate(response.json())

    def get_account(self, account_id: str) -> Account:
        return Account.model_validate(self._request("GET", f"{_API_PREFIX}/accounts/{account_id}").json())

    def list_accounts(self, limit: int = 100, offset: int = 0) -> ListResponse[Account]:
        response = self._request(
            "GET", f"{_API_PREFIX}/accounts", params={"limit": limit, "offset": offset}
        )
        return ListResponse[Account].model_validate(response.json())

    def update_account(self, account_id: str, payload: UpdateAccountInput) -> Account:
        """Send only the fields explicitly set on ``payload``."""
        response = self._request(
            "PUT", f"{_API_PREFIX}/accounts/{account_id}", json=_dump(payload, partial=True)
        )
        return Account.model_validate(response.json())

    def delete_account(self, account_id: str) -> None:
        self._request("DELETE", f"{_API_PREFIX}/accounts/{account_id}")

    # Contacts
    def create_contact(self, payload: CreateContactInput) -> Contact:
        response = self._request("POST", f"{_API_PREFIX}/contacts", json=_dump(payload))
        return Contact.model_validate(response.json())

    def get_contact(self, contact_id: str) -> Contact:
        return Contact.model_validate(self._request("GET", f"{_API_PREFIX}/contacts/{contact_id}").json())

    def list_contacts(
        self, limit: int = 100, offset: int = 0, account_id: str | None = None
    ) -> ListResponse[Contact]:
        params: dict[str, Any] = {"limit": limit, "offset": offset}
        if account_id:
            params["accountId"] = account_id
        response = self._request("GET", f"{_API_PREFIX}/contacts", params=params)
        return ListResponse[Contact].model_validate(response.json())

    def get_contacts_by_account(self, account_id: str) -> ListResponse[Contact]:
        return self.list_contacts(100, 0, account_id)

    def update_contact(self, contact_id: str, payload: UpdateContactInput) -> Contact:
        response = self._request(
            "PUT", f"{_API_PREFIX}/contacts/{contact_id}", json=_dump(payload, partial=True)
        )
        return Contact.model_validate(response.json())

    def delete_contact(self, contact_id: str) -> None:
        self._request("DELETE", f"{_API_PREFIX}/contacts/{contact_id}")

    # Carts
    def create_cart(self, payload: CreateCartInput | None = None) -> Cart:
        body = _dump(payload) if payload is not None else {}
        return Cart.model_validate(self._request("POST", f"{_API_PREFIX}/carts", json=body).json())

    def get_cart(self, cart_id: str) -> Cart:
        return Cart.model_validate(self._request("GET", f"{_API_PREFIX}/carts/{cart_id}").json())

    def list_carts(
        self, limit: int = 100, offset: int = 0, account_id: str | None = None
    ) -> ListResponse[Cart]:
        params: dict[str, Any] = {"limit": limit, "offset": offset}
        if account_id:
            params["accountId"] = account_id
        response = self._request("GET", f"{_API_PREFIX}/carts", params=params)
        return ListResponse[Cart].model_validate(response.json())

    def get_carts_by_account(self, account_id: str) -> ListResponse[Cart]:
        return self.list_carts(100, 0, account_id)

    def add_to_cart(self, cart_id: str, payload: AddToCartInput) -> Cart:
        response = self._request("POST", f"{_API_PREFIX}/carts/{cart_id}/items", json=_dump(payload))
        return Cart.model_validate(response.json())

    def remove_from_cart(self, cart_id: str, payload: RemoveFromCartInput) -> Cart:
        response = self._request("DELETE", f"{_API_PREFIX}/carts/{cart_id}/items", json=_dump(payload))
        return Cart.model_validate(response.json())

    def delete_cart(self, cart_id: str) -> None:
        self._request("DELETE", f"{_API_PREFIX}/carts/{cart_id}")
