from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt

from recipe_service.core.config import Settings, settings as default_settings
from recipe_service.core.errors import AuthError

ISSUER = "recipes-api"
AUDIENCE = "recipes-app"
ALGORITHM = "HS256"

ACCESS = "access"
REFRESH = "refresh"


@dataclass(frozen=True)
class TokenIdentity:
    """Claims carried by an access token."""

    user_id: str
    email: str | None = None
    name: str | None = None


class TokenService:
    """Issues and verifies HS256 access/refresh tokens."""

    def __init__(self, config: Settings | None = None) -> None:
        self.config = config or default_settings

    def _encode(self, claims: dict, token_type: str, ttl_seconds: int) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            **claims,
            "type": token_type,
            "iss": ISSUER,
            "aud": AUDIENCE,
            "iat": now,
            "exp": now + timedelta(seconds=ttl_seconds),
        }
        return jwt.encode(payload, self.config.jwt_secret, algorithm=ALGORITHM)

    def _decode(self, token: str, token_type: str) -> dict:
        try:
            payload = jwt.decode(
                token,
                self.config.jwt_secret,
                algorithms=[ALGORITHM],
                issuer=ISSUER,
                audience=AUDIENCE,
            )
        except jwt.PyJWTError as exc:
            raise AuthError("Invalid or expired token") from exc
        if payload.get("type") != token_type or not payload.get("userId"):
            raise AuthError("Invalid or expired token")
        return payload

    def create_access_token(self, identity: TokenIdentity) -> str:
        claims = {"userId": identity.user_id, "email": identity.email, "name": identity.name}
        return self._encode(claims, ACCESS, self.config.access_token_ttl_seconds)

    def create_refresh_token(self, user_id: str) -> str:
        return self._encode({"userId": user_id}, REFRESH, self.config.refresh_token_ttl_seconds)

    def verify_access_token(self, token: str) -> TokenIdentity:
        payload = self._decode(token, ACCESS)
        return TokenIdentity(user_id=payload["userId"], email=payload.get("email"), name=payload.get("name"))

    def verify_refresh_token(self, token: str) -> str:
        return self._decode(token, REFRESH)["userId"]


def extract_bearer_token(authorization: str | None) -> str | None:
    if not authorization or not authorization.startswith("Bearer "):
        return None
    token = authorization[len("Bearer "):].strip()
    return token or None
