"""Registration and login backed by the users collection."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .errors import AuthenticationError, ConflictError
from .user import User
from ..config import Settings
from ..repository import UserRepository
from ..security.passwords import hash_password, verify_password
from ..security.tokens import issue_access_token

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AuthResult:
    """Bearer token returned to API consumers together with its user."""

    token: str
    user: User


class AuthService:
    def __init__(self, users: UserRepository, settings: Settings) -> None:
        self._users = users
        self._settings = settings

    def register(self, email: str, password: str, name: str | None = None) -> AuthResult:
        """Create a user and issue a token; ``ConflictError`` when the email is taken."""
        email = email.lower()
        if self._users.find_by_email(email) is not None:
            raise ConflictError("user already exists")
        user = self._users.create(email=email, password_hash=hash_password(password), name=name)
        logger.info("registered user %s", user.id)
        return AuthResult(token=self._issue(user), user=user)

    def login(self, email: str, password: str) -> AuthResult:
        """Issue a token for matching credentials; ``AuthenticationError`` otherwise."""
        user = self._users.find_by_email(email.lower())
        if user is None or not verify_password(password, user.password_hash):
            raise AuthenticationError("invalid credentials")
        return AuthResult(token=self._issue(user), user=user)

    def _issue(self, user: User) -> str:
        token, _ = issue_access_token(
            subject=user.id,
            settings=self._settings,
            claims={"email": user.email},
        )
        return token
