"""Registration, login and self-service profile endpoints."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, FastAPI, Request, Response, status

from .database import Database
from .errors import AuthError, ForbiddenError, NotFoundError, ValidationError
from .membership import RegistrationForm, submit_registration
from .models import User
from .schemas import (
    LoginRequest,
    LoginResponse,
    MeResponse,
    ProfileUpdate,
    SuccessResponse,
    UserOut,
    UserWithRegistration,
    user_with_registration,
)
from .security import AuthGuard
from .uploads import UploadStore

logger = logging.getLogger("arivelab.accounts")


def register_account_routes(
    app: FastAPI,
    *,
    database: Database,
    guard: AuthGuard,
    store: UploadStore,
) -> None:
    auth_router = APIRouter(prefix="/api/auth", tags=["auth"])
    user_router = APIRouter(prefix="/api/user", tags=["users"])

    @auth_router.post("/register", response_model=UserOut, status_code=status.HTTP_201_CREATED)
    async def register(request: Request) -> UserOut:
        form = RegistrationForm.from_form(await request.form())
        user = await submit_registration(database, store, form)
        return UserOut.model_validate(user)

    @auth_router.post("/login", response_model=LoginResponse)
    async def login(payload: LoginRequest, response: Response) -> LoginResponse:
        email = payload.email.strip().lower()
        if not email or not payload.password:
            raise ValidationError("Email and password are required")

        user = database.get_user_by_email(email)
        if user is None:
            logger.info("Rejected login for unknown account %s", email)
            raise AuthError("Invalid credentials")
        # Inactive accounts get the same answer whatever password was sent.
        if not user.is_approved:
            logger.info("Rejected login for %s account %s", user.status.value, email)
            raise ForbiddenError("Account is not approved. Please wait for admin approval.")
        if not database.verify_user_password(user.id, payload.password):
            logger.info("Rejected login with a wrong password for %s", email)
            raise AuthError("Invalid credentials")

        token = guard.issue_cookie(response, user)
        logger.info("User %s logged in", email)
        return LoginResponse(user=UserOut.model_validate(user), token=token)

    @auth_router.post("/logout", response_model=SuccessResponse, response_model_exclude_none=True)
    async def logout(response: Response) -> SuccessResponse:
        guard.clear_cookie(response)
        return SuccessResponse()

    @auth_router.get("/me", response_model=MeResponse)
    async def read_me(current_user: User = Depends(guard.current_user)) -> MeResponse:
        return MeResponse(user_id=current_user.id, email=current_user.email, role=current_user.role)

    def _load_visible_user(user_id: int, current_user: User) -> User:
        if current_user.id != user_id and not current_user.is_admin:
            raise ForbiddenError("Forbidden")
        user = database.get_user(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    @user_router.get("/{user_id}", response_model=UserWithRegistration)
    async def read_user(user_id: int, current_user: User = Depends(guard.current_user)) -> UserWithRegistration:
        user = _load_visible_user(user_id, current_user)
        return user_with_registration(user, database.get_registration(user_id))

    @user_router.put("/{user_id}", response_model=UserOut)
    async def update_user(
        user_id: int,
        payload: ProfileUpdate,
        current_user: User = Depends(guard.current_user),
    ) -> UserOut:
        _load_visible_user(user_id, current_user)
        try:
            user = database.update_user_profile(user_id, **payload.model_dump(exclude_unset=True))
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc
        if user is None:
            raise NotFoundError("User not found")
        logger.info("Profile of user %d updated by %s", user_id, current_user.email)
        return UserOut.model_validate(user)

    app.include_router(auth_router)
    app.include_router(user_router)


__all__ = ["register_account_routes"]
