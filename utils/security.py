"""
security helpers:
- Argon2 password hashing via argon2-cffi
- JWT access tokens via PyJWT, configured from an explicit TokenSettings
- Opaque refresh tokens (random hex) and their SHA-256 lookup digests
"""
from __future__ import annotations

import hashlib
import logging
import secrets
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Mapping, Optional

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

from utils.exceptions import ConfigurationError, InternalError

logger = logging.getLogger(__name__)

ACCESS_TOKEN_LIFETIME = timedelta(minutes=15)
REFRESH_TOKEN_LIFETIME = timedelta(days=7)
REFRESH_TOKEN_BYTES = 40


@dataclass(frozen=True)
class TokenSettings:
    """Signing configuration handed to AccessTokens at construction time."""

    secret: str
    algorithm: str = "HS256"
    access_lifetime: timedelta = ACCESS_TOKEN_LIFETIME
    refresh_lifetime: timedelta = REFRESH_TOKEN_LIFETIME
    issuer: str = "task-manager-api"

    def __post_init__(self):
        if not self.secret:
            raise ConfigurationError("JWT_SECRET is not set")

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> "TokenSettings":
        return cls(
            secret=config.get("JWT_SECRET") or "",
            algorithm=config.get("JWT_ALGORITHM", "HS256"),
            access_lifetime=config.get("ACCESS_TOKEN_EXPIRES", ACCESS_TOKEN_LIFETIME),
            refresh_lifetime=config.get("REFRESH_TOKEN_EXPIRES", REFRESH_TOKEN_LIFETIME),
            issuer=config.get("JWT_ISSUER", "task-manager-api"),
        )


class CredentialVerifier:
    """Hash and check passwords with Argon2 using a fixed work factor."""

    def __init__(self, hasher: PasswordHasher | None = None):
        self._ph = hasher or PasswordHasher()

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> "CredentialVerifier":
        return cls(
            PasswordHasher(
                time_cost=int(config.get("ARGON2_TIME_COST", 3)),
                memory_cost=int(config.get("ARGON2_MEMORY_COST", 65536)),
                parallelism=int(config.get("ARGON2_PARALLELISM", 4)),
            )
        )

    def hash(self, password: str) -> str:
        """Hash a plaintext password; the result embeds salt and cost."""
        return self._ph.hash(password)

    def verify(self, password: str, password_hash: str) -> bool:
        """
        Verify a plaintext password against a stored Argon2 hash.
        A mismatch returns False. A corrupt stored hash is logged and raised
        as InternalError.
        """
        try:
            return self._ph.verify(password_hash, password)
        except VerifyMismatchError:
            return False
        except (InvalidHashError, VerificationError) as exc:
            logger.exception("Stored password hash could not be verified")
            raise InternalError() from exc

    def needs_rehash(self, password_hash: str) -> bool:
        try:
            return self._ph.check_needs_rehash(password_hash)
        except InvalidHashError:
            return False


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AccessTokens:
    """Issue and verify short-lived HS256 access tokens."""

    token_type = "access"

    def __init__(self, settings: TokenSettings, clock: Callable[[], datetime] = _utcnow):
        self.settings = settings
        self._clock = clock

    def issue(self, user_id: str) -> str:
        now = self._clock()
        payload = {
            "iss": self.settings.issuer,
            "sub": str(user_id),
            "iat": int(now.timestamp()),
            "exp": int((now + self.settings.access_lifetime).timestamp()),
            "type": self.token_type,
            "jti": str(uuid.uuid4()),
        }
        return jwt.encode(payload, self.settings.secret, algorithm=self.settings.algorithm)

    def verify(self, token: Optional[str]) -> Optional[Dict[str, str]]:
        """
        Return {"user_id": ...} for a valid, unexpired access token, None otherwise.
        """
        if not token:
            return None
        try:
            decoded = jwt.decode(
                token,
                self.settings.secret,
                algorithms=[self.settings.algorithm],
                issuer=self.settings.issuer,
                options={"require": ["exp", "sub", "iat"]},
            )
        except jwt.ExpiredSignatureError:
            logger.debug("Access token expired")
            return None
        except jwt.InvalidTokenError as exc:
            logger.debug("Access token rejected: %s", exc)
            return None

        if decoded.get("type") != self.token_type or not decoded.get("sub"):
            return None
        return {"user_id": decoded["sub"]}


def issue_refresh_token() -> str:
    """Generate an opaque refresh token: 40 random bytes, hex-encoded."""
    return secrets.token_hex(REFRESH_TOKEN_BYTES)


def hash_refresh_token(token: str) -> str:
    """Deterministic SHA-256 digest used to look a refresh token up by equality."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()
