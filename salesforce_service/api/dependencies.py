"""FastAPI dependencies resolving objects stored on the application state."""

from __future__ import annotations

import logging
from typing import Any

import jwt
from fastapi import Header, HTTPException, Request, status

from ..cache import CacheService
from ..config import Settings
from ..domain.auth import AuthService
from ..domain.service import SalesforceService
from ..security.tokens import decode_access_token

logger = logging.getLogger(__name__)


def get_service(request: Request) -> SalesforceService:
    """Resolve the `SalesforceService` stored on the FastAPI application state."""
    service: SalesforceService = request.app.state.salesforce_service
    return service


def get_auth_service(request: Request) -> AuthService:
    service: AuthService = request.app.state.auth_service
    return service


def get_cache(request: Request) -> CacheService:
    cache: CacheService = request.app.state.cache
    return cache


def get_app_settings(request: Request) -> Settings:
    settings: Settings = request.app.state.settings
    return settings


def require_bearer_token(
    request: Request,
    authorization: str | None = Header(default=None),
) -> dict[str, Any]:
    """Reject requests without a valid ``Authorization: Bearer`` JWT."""
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="No token provided")

    token = authorization[len("Bearer "):]
    try:
        claims = decode_access_token(token, settings=get_app_settings(request))
    except jwt.PyJWTError as exc:
        logger.info("rejected bearer token: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired token"
        ) from exc
    request.state.user = claims
    return claims
