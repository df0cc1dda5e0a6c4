"""Signed session tokens carried in the ``auth-token`` cookie."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from jose import ExpiredSignatureError, JWTError, jwt

from .config import DEFAULT_TOKEN_TTL
from .errors import TokenError, TokenExpiredError
from .models import User, UserRole

ALGORITHM = "HS256"


@dataclass(frozen=True)
class TokenClaims:
    """Identity asserted by a verified session token."""

    user_id: int
    email: str
    role: UserRole


class SessionTokens:
    """Issue and verify HS256 tokens for logged-in accounts."""

    def __init__(self, secret: str, *, ttl: timedelta = DEFAULT_TOKEN_TTL) -> None:
        if not secret:
            raise ValueError("A signing secret must be provided")
        self._secret = secret
        self._ttl = ttl

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    @property
    def cookie_max_age(self) -> int:
        return int(self._ttl.total_seconds())

    def issue(self, user: User) -> str:
        issued_at = self._now()
        payload: Dict[str, Any] = {
            "userId": user.id,
            "email": user.email,
            "role": user.role.value,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self._ttl).timestamp()),
        }
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    def decode(self, token: str) -> TokenClaims:
        """Verify ``token`` and return its claims.

        Raises :class:`TokenExpiredError` once the expiry has passed and
        :class:`TokenError` for any other signature or payload problem.
        """

        try:
            payload = jwt.decode(token, self._secret, algorithms=[ALGORITHM])
        except ExpiredSignatureError as exc:
            raise TokenExpiredError("Token expired") from exc
        except JWTError as exc:
            raise TokenError("Invalid token") from exc

        try:
            return TokenClaims(
                user_id=int(payload["userId"]),
                email=str(payload["email"]),
                role=UserRole(payload["role"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise TokenError("Invalid token") from exc

    def _now(self) -> datetime:
        return datetime.now(timezone.utc)


__all__ = ["ALGORITHM", "SessionTokens", "TokenClaims"]
