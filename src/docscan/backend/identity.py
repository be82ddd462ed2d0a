from __future__ import annotations

import hashlib
import logging
import secrets
from typing import Any

import jwt

from .base import IdentityProvider, Session

logger = logging.getLogger(__name__)


def _token_id(token: str, claims: dict[str, Any] | None = None) -> str:
    # Hosted auth services stamp a session id or jti; fall back to the token digest.
    if claims:
        for name in ("session_id", "jti"):
            if claims.get(name):
                return str(claims[name])
    return hashlib.sha256(token.encode()).hexdigest()


class MemoryIdentity(IdentityProvider):
    """Opaque-token identity kept in process memory.

    Used by tests and local runs:

        >>> identity = MemoryIdentity()
        >>> token = identity.issue("user_123", email="a@example.com")
    """

    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}

    def issue(
        self,
        user_id: str,
        *,
        email: str | None = None,
        user_metadata: dict[str, Any] | None = None,
    ) -> str:
        token = secrets.token_urlsafe(24)
        claims = {"user_metadata": dict(user_metadata)} if user_metadata else {}
        self._sessions[token] = Session(user_id=user_id, email=email, token=token, claims=claims)
        return token

    async def get_current_user(self, token: str | None) -> Session | None:
        if not token:
            return None
        return self._sessions.get(token)

    async def sign_out(self, token: str) -> None:
        self._sessions.pop(token, None)


class JwtIdentity(IdentityProvider):
    """Verifies bearer JWTs signed by the hosted auth service.

    The subject claim is the user id. Tokens signed out through this process
    are remembered and rejected until the process restarts; the hosted service
    is expected to stop refreshing them.
    """

    def __init__(
        self,
        secret: str,
        *,
        algorithm: str = "HS256",
        audience: str | None = "authenticated",
        leeway: int = 0,
    ):
        if not secret:
            raise ValueError("JWT identity requires a signing secret")
        self._secret = secret
        self._algorithm = algorithm
        self._audience = audience
        self._leeway = leeway
        self._revoked: set[str] = set()

    def _decode(self, token: str) -> dict[str, Any]:
        options = {"require": ["sub", "exp"]}
        if self._audience is None:
            options["verify_aud"] = False  # type: ignore[assignment]
        return jwt.decode(
            token,
            self._secret,
            algorithms=[self._algorithm],
            audience=self._audience,
            leeway=self._leeway,
            options=options,
        )

    async def get_current_user(self, token: str | None) -> Session | None:
        if not token:
            return None
        try:
            claims = self._decode(token)
        except jwt.ExpiredSignatureError:
            logger.info("Rejected expired token")
            return None
        except jwt.PyJWTError as exc:
            logger.info("Rejected invalid token: %s", exc)
            return None

        if _token_id(token, claims) in self._revoked:
            logger.debug("Rejected signed-out token for sub=%s", claims.get("sub"))
            return None

        return Session(
            user_id=str(claims["sub"]),
            email=claims.get("email"),
            token=token,
            claims=claims,
        )

    async def sign_out(self, token: str) -> None:
        try:
            claims = self._decode(token)
        except jwt.PyJWTError:
            claims = None
        self._revoked.add(_token_id(token, claims))
