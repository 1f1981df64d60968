"""Registration and login routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from salesforce_schemas import AuthResponse, AuthUser, LoginRequest, RegisterRequest

from .dependencies import get_auth_service
from .errors import http_error_from_domain_error
from ..domain.auth import AuthResult, AuthService
from ..domain.errors import DomainError

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _auth_response(result: AuthResult) -> AuthResponse:
    return AuthResponse(
        token=result.token,
        user=AuthUser(id=result.user.id, email=result.user.email, name=result.user.name),
    )


@router.post(
    "/login",
    response_model=AuthResponse,
    response_model_exclude_none=True,
)
def login(payload: LoginRequest, service: AuthService = Depends(get_auth_service)) -> AuthResponse:
    """Exchange email/password for a bearer token."""
    try:
        result = service.login(payload.email, payload.password)
    except DomainError as exc:
        raise http_error_from_domain_error(exc) from exc
    return _auth_response(result)


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    response_model_exclude_none=True,
)
def register(
    payload: RegisterRequest, service: AuthService = Depends(get_auth_service)
) -> AuthResponse:
    """Create a user and return a bearer token; 409 when the email is already registered."""
    try:
        result = service.register(payload.email, payload.password, payload.name)
    except DomainError as exc:
        raise http_error_from_domain_error(exc) from exc
    return _auth_response(result)
