"""Admin-only endpoints for reviewing members and their notifications."""
from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, FastAPI, Query

from .database import Database
from .errors import NotFoundError, ValidationError
from .membership import apply_decision
from .models import NotificationType, User, UserStatus
from .schemas import (
    NotificationListResponse,
    NotificationUpdateRequest,
    NotificationUpdateResponse,
    Pagination,
    RegistrationListResponse,
    SuccessResponse,
    UserOut,
    UserWithRegistration,
    notification_out,
    user_with_registration,
)
from .security import AuthGuard

logger = logging.getLogger("arivelab.admin")


def _parse_status_filter(value: Optional[str]) -> Optional[UserStatus]:
    if value is None or not value.strip() or value.strip().lower() == "all":
        return None
    try:
        return UserStatus(value.strip().upper())
    except ValueError as exc:
        raise ValidationError(f"Unknown status '{value}'") from exc


def register_admin_routes(app: FastAPI, *, database: Database, guard: AuthGuard) -> None:
    router = APIRouter(prefix="/api/admin", tags=["admin"])

    def _with_registrations(users: List[User]) -> List[UserWithRegistration]:
        registrations = database.get_registrations(user.id for user in users)
        return [user_with_registration(user, registrations.get(user.id)) for user in users]

    @router.get("/notifications", response_model=NotificationListResponse)
    async def list_notifications(admin: User = Depends(guard.admin)) -> NotificationListResponse:
        entries = database.list_notifications()
        unread = [notification for notification, _ in entries if not notification.is_read]
        return NotificationListResponse(
            notifications=[notification_out(notification, user) for notification, user in entries],
            unread_count=len(unread),
            new_registration_count=sum(
                1 for notification in unread if notification.type is NotificationType.NEW_REGISTRATION
            ),
        )

    @router.patch("/notifications", response_model=NotificationUpdateResponse)
    async def update_notifications(
        payload: NotificationUpdateRequest,
        admin: User = Depends(guard.admin),
    ) -> NotificationUpdateResponse:
        updated = database.set_notifications_read(payload.notification_ids, payload.mark_as_read)
        return NotificationUpdateResponse(updated=updated)

    @router.get("/registrations", response_model=RegistrationListResponse)
    async def list_registrations(
        status_filter: Optional[str] = Query(default=None, alias="status"),
        page: int = Query(default=1, ge=1),
        limit: int = Query(default=10, ge=1, le=100),
        search: str = Query(default=""),
        admin: User = Depends(guard.admin),
    ) -> RegistrationListResponse:
        users, total = database.search_users(
            status=_parse_status_filter(status_filter),
            search=search,
            limit=limit,
            offset=(page - 1) * limit,
        )
        return RegistrationListResponse(
            registrations=_with_registrations(users),
            pagination=Pagination.build(page, limit, total),
        )

    @router.delete("/registrations", response_model=SuccessResponse)
    async def delete_registration(
        user_id: Optional[int] = Query(default=None, alias="userId"),
        admin: User = Depends(guard.admin),
    ) -> SuccessResponse:
        if user_id is None:
            raise ValidationError("User ID is required")
        if not database.delete_user(user_id):
            raise NotFoundError("User not found")
        logger.info("User %d and their registration deleted by %s", user_id, admin.email)
        return SuccessResponse(message="User and registration deleted successfully")

    @router.get("/users", response_model=List[UserWithRegistration])
    async def list_users(admin: User = Depends(guard.admin)) -> List[UserWithRegistration]:
        return _with_registrations(database.list_users())

    @router.get("/users/{user_id}/registration", response_model=UserWithRegistration)
    async def read_user_registration(user_id: int, admin: User = Depends(guard.admin)) -> UserWithRegistration:
        user = database.get_user(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user_with_registration(user, database.get_registration(user_id))

    @router.patch("/users/{user_id}/{action}", response_model=UserOut)
    async def decide_user(user_id: int, action: str, admin: User = Depends(guard.admin)) -> UserOut:
        return UserOut.model_validate(apply_decision(database, user_id, action, actor=admin))

    app.include_router(router)


__all__ = ["register_admin_routes"]
