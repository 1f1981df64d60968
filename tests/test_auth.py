from __future__ import annotations

from dataclasses import replace

import jwt
import pytest
from fastapi.testclient import TestClient

from salesforce_service.main import create_app
from salesforce_service.security.passwords import hash_password, verify_password
from salesforce_service.security.tokens import decode_access_token, issue_access_token

REGISTER = "/api/auth/register"
LOGIN = "/api/auth/login"


def register(client: TestClient, email: str = "ada@example.com", password: str = "s3cret", **extra):
    return client.post(REGISTER, json={"email": email, "password": password, **extra})


def test_register_returns_token_and_user(api_client, settings):
    response = register(api_client, name="Ada")

    assert response.status_code == 201
    body = response.json()
    assert body["user"]["email"] == "ada@example.com"
    assert body["user"]["name"] == "Ada"
    assert "password" not in body["user"]
    assert "passwordHash" not in body["user"]

    claims = decode_access_token(body["token"], settings=settings)
    assert claims["sub"] == body["user"]["id"]
    assert claims["userId"] == body["user"]["id"]
    assert claims["email"] == "ada@example.com"
    assert claims["exp"] - claims["iat"] == settings.jwt_ttl_seconds


def test_register_duplicate_email_conflicts(api_client):
    register(api_client)

    response = register(api_client, email="ADA@example.com")

    assert response.status_code == 409
    assert response.json() == {"detail": "user already exists"}


def test_login_with_valid_credentials(api_client):
    registered = register(api_client).json()

    response = api_client.post(LOGIN, json={"email": "Ada@Example.com", "password": "s3cret"})

    assert response.status_code == 200
    assert response.json()["user"]["id"] == registered["user"]["id"]


@pytest.mark.parametrize(
    "email,password",
    [("ada@example.com", "wrong"), ("nobody@example.com", "s3cret")],
)
def test_login_with_bad_credentials(api_client, email, password):
    register(api_client)

    response = api_client.post(LOGIN, json={"email": email, "password": password})

    assert response.status_code == 401
    assert response.json() == {"detail": "invalid credentials"}


@pytest.mark.parametrize(
    "payload",
    [{"email": "not-an-email", "password": "x"}, {"email": "ada@example.com"}, {}],
)
def test_auth_payload_validation(api_client, payload):
    assert api_client.post(LOGIN, json=payload).status_code == 400
    assert api_client.post(REGISTER, json=payload).status_code == 400


def test_passwords_are_hashed_with_salt():
    first = hash_password("s3cret")
    second = hash_password("s3cret")

    assert first != second
    assert first.startswith("pbkdf2_sha256$")
    assert verify_password("s3cret", first)
    assert not verify_password("other", first)
    assert not verify_password("s3cret", "garbage")


def test_token_from_other_issuer_is_rejected(settings):
    token, _ = issue_access_token(subject="user-1", settings=replace(settings, jwt_issuer="elsewhere"))

    with pytest.raises(jwt.InvalidIssuerError):
        decode_access_token(token, settings=settings)


@pytest.fixture
def guarded_client(settings, store):
    app = create_app(replace(settings, auth_required=True), store=store)
    with TestClient(app) as client:
        yield client


def test_guarded_api_requires_token(guarded_client):
    response = guarded_client.get("/api/salesforce/accounts")

    assert response.status_code == 401
    assert response.json() == {"detail": "No token provided"}


def test_guarded_api_rejects_invalid_token(guarded_client):
    response = guarded_client.get(
        "/api/salesforce/accounts", headers={"Authorization": "Bearer not-a-jwt"}
    )

    assert response.status_code == 401
    assert response.json() == {"detail": "Invalid or expired token"}


def test_guarded_api_rejects_expired_token(guarded_client, settings):
    token, _ = issue_access_token(subject="user-1", settings=replace(settings, jwt_ttl_seconds=-10))

    response = guarded_client.get(
        "/api/salesforce/accounts", headers={"Authorization": f"Bearer {token}"}
    )

    assert response.status_code == 401


def test_guarded_api_accepts_registered_token(guarded_client):
    token = register(guarded_client).json()["token"]

    response = guarded_client.get(
        "/api/salesforce/accounts", headers={"Authorization": f"Bearer {token}"}
    )

    assert response.status_code == 200
    assert guarded_client.get("/health").status_code == 200
