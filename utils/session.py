"""
SessionManager: register/login/refresh/logout on top of the security helpers.

Session state per user is a single stored refresh-token hash:
- login overwrites it (a new session replaces any previous one)
- refresh swaps it for a new one, conditional on the presented token's hash
  still being the stored one, so each refresh token works exactly once
- logout clears it

Persistence and hashing failures are logged here and surfaced as
InternalError; callers only ever see the kinds in utils.exceptions.
"""
from __future__ import annotations

import logging
import secrets
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from argon2.exceptions import HashingError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from models.user_repository import ANY, UserRepository
from utils.exceptions import (
    EmailAlreadyRegistered,
    InternalError,
    InvalidCredentials,
    InvalidRefreshToken,
    SessionError,
    ValidationError,
)
from utils.security import (
    AccessTokens,
    CredentialVerifier,
    TokenSettings,
    hash_refresh_token,
    issue_refresh_token,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenPair:
    user_id: str
    access_token: str
    refresh_token: str


class SessionManager:
    def __init__(
        self,
        users: UserRepository,
        settings: TokenSettings,
        credentials: CredentialVerifier | None = None,
        access_tokens: AccessTokens | None = None,
    ):
        self.users = users
        self.settings = settings
        self.credentials = credentials or CredentialVerifier()
        self.access_tokens = access_tokens or AccessTokens(settings)
        self._dummy_hash: Optional[str] = None

    @classmethod
    def from_config(cls, config: Mapping[str, Any], users: UserRepository) -> "SessionManager":
        """Build a manager from a Flask-style config mapping. Raises ConfigurationError."""
        return cls(users, TokenSettings.from_mapping(config), CredentialVerifier.from_mapping(config))

    @contextmanager
    def _guard(self, action: str):
        try:
            yield
        except SessionError:
            raise
        except (SQLAlchemyError, HashingError) as exc:
            logger.exception("Error during %s", action)
            raise InternalError(f"An error occurred during {action}") from exc

    @staticmethod
    def _require_credentials(email, password):
        if not isinstance(email, str) or not email.strip() or not isinstance(password, str) or not password:
            raise ValidationError("Email and password are required")

    def register(self, email: str, password: str) -> str:
        """Create a user and return its id."""
        self._require_credentials(email, password)
        email = email.strip()
        with self._guard("registration"):
            if self.users.find_by_email(email) is not None:
                raise EmailAlreadyRegistered()
            try:
                user = self.users.create(email, self.credentials.hash(password))
            except IntegrityError as exc:
                # lost a race against a concurrent registration of the same email
                raise EmailAlreadyRegistered() from exc
        logger.info("Registered user %s", user.id)
        return user.id

    def _compare_against_dummy(self, password: str) -> None:
        # Unknown emails still pay for one hash check
        if self._dummy_hash is None:
            self._dummy_hash = self.credentials.hash(secrets.token_hex(16))
        self.credentials.verify(password, self._dummy_hash)

    def login(self, email: str, password: str) -> TokenPair:
        self._require_credentials(email, password)
        email = email.strip()
        with self._guard("login"):
            user = self.users.find_by_email(email)
            if user is None:
                self._compare_against_dummy(password)
                logger.warning("Login failed: unknown email")
                raise InvalidCredentials()
            if not self.credentials.verify(password, user.password_hash):
                logger.warning("Login failed: bad password for user %s", user.id)
                raise InvalidCredentials()

            if self.credentials.needs_rehash(user.password_hash):
                self.users.update_password_hash(user.id, self.credentials.hash(password))

            pair = self._issue_pair(user.id)
            self.users.update_refresh_hash(user.id, hash_refresh_token(pair.refresh_token))
        logger.info("User %s logged in", user.id)
        return pair

    def _issue_pair(self, user_id: str) -> TokenPair:
        return TokenPair(
            user_id=str(user_id),
            access_token=self.access_tokens.issue(user_id),
            refresh_token=issue_refresh_token(),
        )

    def rotate(self, presented_token: str) -> TokenPair:
        """
        Exchange a live refresh token for a new access/refresh pair.

        The stored hash is swapped only if it still equals the presented
        token's hash. Of two concurrent rotations with the same token, one
        wins and the other raises InvalidRefreshToken.
        """
        presented_hash = hash_refresh_token(presented_token)
        with self._guard("token refresh"):
            user = self.users.find_by_refresh_hash(presented_hash)
            if user is None:
                logger.warning("Refresh rejected: token does not match any session")
                raise InvalidRefreshToken()

            pair = self._issue_pair(user.id)
            swapped = self.users.update_refresh_hash(
                user.id, hash_refresh_token(pair.refresh_token), expected=presented_hash
            )
            if not swapped:
                logger.warning("Refresh rejected: token for user %s was already rotated", user.id)
                raise InvalidRefreshToken()
        return pair

    def refresh(self, presented_token: Optional[str]) -> TokenPair:
        if not presented_token:
            raise InvalidRefreshToken("Refresh token is required")
        return self.rotate(presented_token)

    def revoke(self, user_id: str) -> None:
        """Clear the stored refresh hash. Safe to call repeatedly."""
        with self._guard("logout"):
            self.users.update_refresh_hash(user_id, None, expected=ANY)

    def logout(self, user_id: str) -> None:
        self.revoke(user_id)
        logger.info("User %s logged out", user_id)

    def authenticate(self, access_token: Optional[str]) -> Optional[str]:
        """Return the user id carried by a valid access token, else None."""
        claims = self.access_tokens.verify(access_token)
        return claims["user_id"] if claims else None
