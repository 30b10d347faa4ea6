"""Access and refresh token issuance."""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import uuid4

import jwt
import structlog
from jwt import ExpiredSignatureError
from jwt import InvalidTokenError as PyJWTInvalidTokenError

from ..db.models import RefreshToken, User
from ..domain.constants import ACCESS_TOKEN_TTL, REFRESH_TOKEN_BYTES, REFRESH_TOKEN_TTL
from ..exceptions import TokenValidationError

logger = structlog.get_logger(__name__)

ALGORITHM = "HS512"
FULL_ACCESS_SCOPE = "full"
COMPLETE_ACCOUNT_SCOPE = "complete_account"


def _utcnow() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(tz=timezone.utc)


@dataclass(slots=True)
class TokenService:
    """Issue JWT access tokens and opaque refresh tokens."""

    signing_key: str
    issuer: str
    audience: str
    access_token_ttl: timedelta = ACCESS_TOKEN_TTL
    refresh_token_ttl: timedelta = REFRESH_TOKEN_TTL

    def __post_init__(self) -> None:
        if not self.signing_key:
            raise RuntimeError("JWT signing key is not configured")

    def generate_access_token(
        self,
        user: User,
        shortname: str | None = None,
        *,
        scope: str = FULL_ACCESS_SCOPE,
        ttl: timedelta | None = None,
    ) -> str:
        issued_at = _utcnow()
        payload: dict[str, Any] = {
            "sub": str(user.id),
            "name": user.fullname,
            "scope": scope,
            "jti": uuid4().hex,
            "iss": self.issuer,
            "aud": self.audience,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + (ttl or self.access_token_ttl)).timestamp()),
        }
        if shortname:
            payload["unique_name"] = shortname
        return jwt.encode(payload, self.signing_key, algorithm=ALGORITHM)

    def generate_temporary_access_token(self, user: User) -> str:
        """Token that only allows finishing account registration."""

        return self.generate_access_token(user, scope=COMPLETE_ACCOUNT_SCOPE)

    def generate_refresh_token(
        self,
        user: User,
        access_token: str,
        *,
        user_agent: str | None = None,
        device_id: str | None = None,
    ) -> RefreshToken:
        now = _utcnow()
        return RefreshToken(
            id=uuid4(),
            user_id=user.id,
            token=secrets.token_hex(REFRESH_TOKEN_BYTES),
            access_token_jti=self._jti_of(access_token),
            is_revoked=False,
            user_agent=user_agent,
            device_id=device_id,
            created_at=now,
            expires_at=now + self.refresh_token_ttl,
        )

    def update_refresh_token(self, existing: RefreshToken, access_token: str) -> RefreshToken:
        """Rotate ``existing`` in place; its previous value stops matching anything."""

        now = _utcnow()
        existing.token = secrets.token_hex(REFRESH_TOKEN_BYTES)
        existing.access_token_jti = self._jti_of(access_token)
        existing.is_revoked = False
        existing.revoked_at = None
        existing.created_at = now
        existing.expires_at = now + self.refresh_token_ttl
        return existing

    def decode_access_token(self, token: str, required_scope: str | None = None) -> dict[str, Any]:
        try:
            payload: dict[str, Any] = jwt.decode(
                token,
                self.signing_key,
                algorithms=[ALGORITHM],
                audience=self.audience,
                issuer=self.issuer,
                options={"require": ["exp", "iat", "sub", "jti"]},
            )
        except ExpiredSignatureError as exc:
            raise TokenValidationError("Token expired") from exc
        except PyJWTInvalidTokenError as exc:
            raise TokenValidationError("Invalid token") from exc

        if required_scope and payload.get("scope") != required_scope:
            raise TokenValidationError("Insufficient scope")
        return payload

    def _jti_of(self, access_token: str) -> str | None:
        try:
            claims = jwt.decode(access_token, options={"verify_signature": False})
        except PyJWTInvalidTokenError:
            logger.warning("tokens.access_token.unreadable")
            return None
        return claims.get("jti")


__all__ = [
    "ALGORITHM",
    "COMPLETE_ACCOUNT_SCOPE",
    "FULL_ACCESS_SCOPE",
    "TokenService",
]
