"""Cookie-based authentication dependencies for the portal API."""
from __future__ import annotations

from typing import Optional

from fastapi import Request, Response

from .database import Database
from .errors import AuthError
from .models import User, UserRole
from .sessions import SessionTokens, TokenClaims

AUTH_COOKIE_NAME = "auth-token"


class AuthGuard:
    """Resolve the signed-in account from the ``auth-token`` cookie.

    ``current_user`` and ``admin`` are meant to be used with
    ``Depends(...)``. Both verify the token and then re-read the account so a
    suspended or demoted user loses access immediately, even while holding a
    token that has not expired yet.
    """

    def __init__(self, database: Database, tokens: SessionTokens, *, secure_cookies: bool = False) -> None:
        self._database = database
        self._tokens = tokens
        self._secure_cookies = secure_cookies

    @property
    def tokens(self) -> SessionTokens:
        return self._tokens

    def claims(self, request: Request) -> TokenClaims:
        token = request.cookies.get(AUTH_COOKIE_NAME)
        if not token:
            raise AuthError("Unauthorized")
        return self._tokens.decode(token)

    def _load_approved(self, claims: TokenClaims) -> User:
        user = self._database.get_user(claims.user_id)
        if user is None:
            raise AuthError("User not found")
        if not user.is_approved:
            raise AuthError("Account is not active")
        return user

    async def current_user(self, request: Request) -> User:
        return self._load_approved(self.claims(request))

    async def admin(self, request: Request) -> User:
        claims = self.claims(request)
        if claims.role is not UserRole.ADMIN:
            raise AuthError("Unauthorized")
        user = self._load_approved(claims)
        if not user.is_admin:
            raise AuthError("Unauthorized")
        return user

    async def optional_user(self, request: Request) -> Optional[User]:
        if not request.cookies.get(AUTH_COOKIE_NAME):
            return None
        try:
            return self._load_approved(self.claims(request))
        except AuthError:
            return None

    def issue_cookie(self, response: Response, user: User) -> str:
        token = self._tokens.issue(user)
        response.set_cookie(
            AUTH_COOKIE_NAME,
            token,
            max_age=self._tokens.cookie_max_age,
            secure=self._secure_cookies,
            httponly=True,
            samesite="strict",
            path="/",
        )
        return token

    def clear_cookie(self, response: Response) -> None:
        response.delete_cookie(
            AUTH_COOKIE_NAME,
            path="/",
            secure=self._secure_cookies,
            httponly=True,
            samesite="strict",
        )


__all__ = ["AUTH_COOKIE_NAME", "AuthGuard"]
