"""Utilities for issuing and validating application JWTs."""

from __future__ import annotations

import time
from typing import Any

import jwt

from ..config import Settings


def issue_access_token(
    *, subject: str, settings: Settings, claims: dict[str, Any] | None = None
) -> tuple[str, int]:
    """Create a signed JWT representing an authenticated user.

    Parameters
    ----------
    subject:
        User identifier embedded in the ``sub`` and ``userId`` claims.
    settings:
        Source of the signing secret, issuer and TTL.
    claims:
        Extra public claims, e.g. the user's email.

    Returns
    -------
    tuple[str, int]
        The encoded JWT string and its TTL (in seconds).
    """

    now = int(time.time())
    expires_in = settings.jwt_ttl_seconds
    payload: dict[str, Any] = {
        **(claims or {}),
        "iss": settings.jwt_issuer,
        "sub": subject,
        "userId": subject,
        "iat": now,
        "exp": now + expires_in,
    }

    token = jwt.encode(payload, settings.jwt_secret, algorithm="HS256")
    return token, expires_in


def decode_access_token(token: str, *, settings: Settings) -> dict[str, Any]:
    """Decode and verify a JWT returning its payload.

    Raises
    ------
    jwt.PyJWTError
        Propagated when the token is invalid, expired, or signed by another issuer.
    """

    return jwt.decode(
        token,
        settings.jwt_secret,
        algorithms=["HS256"],
        issuer=settings.jwt_issuer,
    )
