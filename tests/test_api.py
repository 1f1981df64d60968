from __future__ import annotations

import fakeredis
import pytest
from fastapi.testclient import TestClient

from salesforce_service.cache import MemoryCache, RedisCache
from salesforce_service.domain.service import SalesforceService
from salesforce_service.main import create_app

ACCOUNTS = "/api/salesforce/accounts"
CONTACTS = "/api/salesforce/contacts"
CARTS = "/api/salesforce/carts"


def create_account(client: TestClient, **overrides) -> dict:
    payload = {"name": "Acme Corporation", "industry": "Technology", **overrides}
    response = client.post(ACCOUNTS, json=payload)
    assert response.status_code == 201
    return response.json()


def create_cart(client: TestClient, **payload) -> dict:
    response = client.post(CARTS, json=payload)
    assert response.status_code == 201
    return response.json()


def add_item(client: TestClient, cart_id: str, **overrides):
    payload = {"productId": "p1", "productName": "Product 1", "quantity": 2, "price": 10, **overrides}
    return client.post(f"{CARTS}/{cart_id}/items", json=payload)


def test_create_account_returns_camel_case_record(api_client):
    body = create_account(
        api_client,
        accountNumber="ACC-001",
        billingAddress={"street": "1 Market St", "city": "San Francisco", "postalCode": "94105"},
    )

    assert body["name"] == "Acme Corporation"
    assert body["accountNumber"] == "ACC-001"
    assert body["billingAddress"]["postalCode"] == "94105"
    assert body["createdAt"] == body["updatedAt"]
    assert "website" not in body


def test_get_account_matches_created(api_client):
    created = create_account(api_client)

    response = api_client.get(f"{ACCOUNTS}/{created['id']}")

    assert response.status_code == 200
    assert response.json() == created


def test_create_account_requires_name(api_client):
    response = api_client.post(ACCOUNTS, json={"industry": "Technology"})

    assert response.status_code == 400
    assert response.json()["detail"] == "validation failed"


def test_create_account_ignores_unknown_fields(api_client):
    body = create_account(api_client, id="client-chosen", favouriteColour="blue")

    assert body["id"] != "client-chosen"
    assert "favouriteColour" not in body


def test_list_accounts_pagination_envelope(api_client):
    for index in range(3):
        create_account(api_client, name=f"Account {index}")

    response = api_client.get(ACCOUNTS, params={"limit": 2, "offset": 1})

    assert response.status_code == 200
    body = response.json()
    assert body["pagination"] == {"limit": 2, "offset": 1, "count": 2}
    assert [account["name"] for account in body["data"]] == ["Account 1", "Account 2"]


def test_list_accounts_defaults(api_client):
    create_account(api_client)

    body = api_client.get(ACCOUNTS).json()

    assert body["pagination"] == {"limit": 100, "offset": 0, "count": 1}


@pytest.mark.parametrize("params", [{"limit": 0}, {"limit": "abc"}, {"offset": -1}])
def test_list_accounts_rejects_bad_paging(api_client, params):
    assert api_client.get(ACCOUNTS, params=params).status_code == 400


@pytest.mark.parametrize("method", ["put", "patch"])
def test_update_account_merges_fields(api_client, method):
    created = create_account(api_client, phone="555-0100")

    response = getattr(api_client, method)(
        f"{ACCOUNTS}/{created['id']}", json={"industry": "Retail", "id": "other"}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["id"] == created["id"]
    assert body["industry"] == "Retail"
    assert body["phone"] == "555-0100"
    assert body["createdAt"] == created["createdAt"]
    assert body["updatedAt"] >= created["updatedAt"]


def test_update_account_rejects_null_name(api_client):
    created = create_account(api_client)

    response = api_client.put(f"{ACCOUNTS}/{created['id']}", json={"name": None})

    assert response.status_code == 400


def test_update_missing_account_returns_404(api_client):
    response = api_client.put(f"{ACCOUNTS}/missing", json={"name": "Nobody"})

    assert response.status_code == 404
    assert response.json() == {"detail": "Account not found"}


def test_delete_account_then_404(api_client):
    created = create_account(api_client)
    url = f"{ACCOUNTS}/{created['id']}"
    api_client.get(url)

    assert api_client.delete(url).status_code == 204
    assert api_client.get(url).status_code == 404
    assert api_client.delete(url).status_code == 404


def test_cached_account_is_invalidated_on_update(api_client):
    created = create_account(api_client)
    url = f"{ACCOUNTS}/{created['id']}"
    assert api_client.get(url).json()["name"] == "Acme Corporation"

    api_client.patch(url, json={"name": "Acme Holdings"})

    assert api_client.get(url).json()["name"] == "Acme Holdings"


def test_contact_crud_and_account_filter(api_client):
    account = create_account(api_client)
    payload = {"firstName": "Ada", "lastName": "Lovelace", "email": "ada@example.com"}
    first = api_client.post(CONTACTS, json={**payload, "accountId": account["id"]})
    api_client.post(CONTACTS, json={"firstName": "Alan", "lastName": "Turing"})
    assert first.status_code == 201
    contact = first.json()

    filtered = api_client.get(CONTACTS, params={"accountId": account["id"]}).json()
    assert [item["id"] for item in filtered["data"]] == [contact["id"]]
    assert filtered["pagination"]["count"] == 1
    assert api_client.get(CONTACTS).json()["pagination"]["count"] == 2

    updated = api_client.put(f"{CONTACTS}/{contact['id']}", json={"title": "Engineer"})
    assert updated.json()["title"] == "Engineer"
    assert updated.json()["firstName"] == "Ada"

    assert api_client.delete(f"{CONTACTS}/{contact['id']}").status_code == 204
    assert api_client.get(f"{CONTACTS}/{contact['id']}").status_code == 404


def test_create_contact_requires_names(api_client):
    response = api_client.post(CONTACTS, json={"firstName": "Ada"})

    assert response.status_code == 400


def test_contact_survives_account_deletion(api_client):
    account = create_account(api_client)
    contact = api_client.post(
        CONTACTS, json={"firstName": "Ada", "lastName": "Lovelace", "accountId": account["id"]}
    ).json()

    api_client.delete(f"{ACCOUNTS}/{account['id']}")

    assert api_client.get(f"{CONTACTS}/{contact['id']}").json()["accountId"] == account["id"]


def test_cart_lifecycle(api_client):
    cart = create_cart(api_client, accountId="account-123")
    assert cart["items"] == []
    assert cart["subtotal"] == 0

    first = add_item(api_client, cart["id"])
    assert first.status_code == 200
    assert first.json()["items"] == [
        {"productId": "p1", "productName": "Product 1", "quantity": 2, "price": 10, "total": 20}
    ]
    assert first.json()["subtotal"] == 20

    second = add_item(api_client, cart["id"], quantity=3)
    assert second.json()["items"][0]["quantity"] == 5
    assert second.json()["items"][0]["total"] == 50
    assert second.json()["subtotal"] == 50

    removed = api_client.request("DELETE", f"{CARTS}/{cart['id']}/items", json={"productId": "p1"})
    assert removed.status_code == 200
    assert removed.json()["items"] == []
    assert removed.json()["subtotal"] == 0

    assert api_client.delete(f"{CARTS}/{cart['id']}").status_code == 204
    assert api_client.get(f"{CARTS}/{cart['id']}").status_code == 404


def test_create_cart_without_body(api_client):
    response = api_client.post(CARTS)

    assert response.status_code == 201
    assert response.json()["items"] == []
    assert "accountId" not in response.json()


def test_create_cart_ignores_client_items_and_subtotal(api_client):
    cart = create_cart(
        api_client,
        items=[{"productId": "p1", "productName": "X", "quantity": 1, "price": 1, "total": 1}],
        subtotal=99,
    )

    assert cart["items"] == []
    assert cart["subtotal"] == 0


def test_add_item_takes_latest_price(api_client):
    cart = create_cart(api_client)
    add_item(api_client, cart["id"], quantity=2, price=10)

    body = add_item(api_client, cart["id"], quantity=1, price=12).json()

    assert body["items"][0]["price"] == 12
    assert body["items"][0]["total"] == 36
    assert body["subtotal"] == 36


@pytest.mark.parametrize(
    "overrides",
    [
        {"quantity": 0},
        {"quantity": -1},
        {"quantity": 1.5},
        {"quantity": True},
        {"quantity": "2"},
        {"price": -1},
        {"price": True},
        {"price": "1.5"},
        {"productId": ""},
    ],
)
def test_add_item_rejects_invalid_lines(api_client, overrides):
    cart = create_cart(api_client)

    response = add_item(api_client, cart["id"], **overrides)

    assert response.status_code == 400
    assert api_client.get(f"{CARTS}/{cart['id']}").json()["items"] == []


def test_add_item_to_missing_cart_returns_404(api_client):
    response = add_item(api_client, "missing")

    assert response.status_code == 404
    assert response.json() == {"detail": "Cart not found"}
    assert api_client.get(CARTS).json()["data"] == []


def test_remove_unknown_product_returns_unchanged_items(api_client):
    cart = create_cart(api_client)
    before = add_item(api_client, cart["id"]).json()

    response = api_client.request("DELETE", f"{CARTS}/{cart['id']}/items", json={"productId": "nope"})

    assert response.status_code == 200
    assert response.json()["items"] == before["items"]
    assert response.json()["updatedAt"] >= before["updatedAt"]


def test_remove_from_missing_cart_returns_404(api_client):
    response = api_client.request("DELETE", f"{CARTS}/missing/items", json={"productId": "p1"})

    assert response.status_code == 404


def test_cached_cart_reflects_item_changes(api_client):
    cart = create_cart(api_client)
    url = f"{CARTS}/{cart['id']}"
    assert api_client.get(url).json()["items"] == []

    add_item(api_client, cart["id"])

    assert api_client.get(url).json()["subtotal"] == 20


def test_list_carts_by_account(api_client):
    create_cart(api_client, accountId="acc-1")
    create_cart(api_client, accountId="acc-2")
    create_cart(api_client, accountId="acc-1")

    body = api_client.get(CARTS, params={"accountId": "acc-1"}).json()

    assert body["pagination"]["count"] == 2
    assert {cart["accountId"] for cart in body["data"]} == {"acc-1"}


def test_unexpected_error_returns_500(settings, store, monkeypatch):
    def explode(self, *args, **kwargs):
        raise RuntimeError("storage exploded")

    monkeypatch.setattr(SalesforceService, "list_accounts", explode)
    app = create_app(settings, store=store, cache=MemoryCache())

    with TestClient(app, raise_server_exceptions=False) as client:
        response = client.get(ACCOUNTS)

    assert response.status_code == 500
    assert response.json() == {"detail": "internal server error"}


def test_cors_preflight(api_client):
    response = api_client.options(
        ACCOUNTS,
        headers={"Origin": "http://example.com", "Access-Control-Request-Method": "POST"},
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"


def test_corrupt_cache_entry_falls_back_to_store(settings, store):
    redis_client = fakeredis.FakeRedis()
    app = create_app(settings, store=store, cache=RedisCache(redis_client))

    with TestClient(app) as client:
        cart = create_cart(client)
        redis_client.set(f"salesforce:cart:{cart['id']}", b"{not json")

        response = client.get(f"{CARTS}/{cart['id']}")

    assert response.status_code == 200
    assert response.json()["id"] == cart["id"]
