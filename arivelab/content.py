"""Public site-content endpoints and their admin mutations."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Type

from fastapi import APIRouter, Body, Depends, FastAPI, Query, status
from pydantic import ValidationError as PydanticValidationError

from .database import Database
from .errors import NotFoundError, ValidationError, validation_error_from
from .models import FEATURED_TEAM_ROLES, CategoryType, User
from .schemas import (
    AboutOut,
    AboutUpdate,
    CamelModel,
    CategoryCreate,
    CategoryOut,
    CategoryUpdate,
    ContactInfoOut,
    ContactInfoUpdate,
    ContactSubmissionCreate,
    ContactSubmissionListResponse,
    ContactSubmissionOut,
    CoreValueCreate,
    CoreValueOut,
    CoreValueUpdate,
    HomepageOut,
    HomepageUpdate,
    Pagination,
    SocialLinkCreate,
    SocialLinkOut,
    SocialLinkUpdate,
    SuccessResponse,
    TeamMemberCreate,
    TeamMemberOut,
    TeamMemberUpdate,
    TimelineMilestoneCreate,
    TimelineMilestoneOut,
    TimelineMilestoneUpdate,
)
from .security import AuthGuard

logger = logging.getLogger("arivelab.content")

DEFAULT_ABOUT: Dict[str, object] = {
    "title": "About Arive Lab",
    "description": (
        "Arive Lab is at the forefront of automotive research and innovation, pioneering the future "
        "of transportation through cutting-edge technology and groundbreaking research."
    ),
    "image": None,
}

DEFAULT_HOMEPAGE: Dict[str, object] = {
    "hero_title": "Welcome to Arive Lab",
    "hero_subtitle": "Innovating the Future of Automotive Research",
    "hero_cta_text": "Join Now",
    "hero_cta_link": "/register",
    "banner_image": None,
    "banner_video": None,
    "seo_title": "Arive Lab - Automotive Research Innovation",
    "seo_description": "Leading the future of automotive research and innovation",
}

DEFAULT_CONTACT_INFO: Dict[str, object] = {
    "email": "contact@arivelab.com",
    "phone": "+1 (555) 123-4567",
    "address": "123 Innovation Drive, Tech City, TC 12345",
    "map_embed": "https://www.google.com/maps/embed?pb=!1m18!1m12!1m3!1d3022.1422937950147!2d-73.98731968459391!3d40.75889497932681",
}


@dataclass(frozen=True)
class _Collection:
    """A list resource with create, update and delete by id."""

    path: str
    table: str
    label: str
    out: Type[CamelModel]
    create: Type[CamelModel]
    update: Type[CamelModel]
    upsert_on_create: bool = False


COLLECTIONS = (
    _Collection("/api/categories", "categories", "Category", CategoryOut, CategoryCreate, CategoryUpdate),
    _Collection("/api/core-values", "core_values", "Core value", CoreValueOut, CoreValueCreate, CoreValueUpdate),
    _Collection(
        "/api/social",
        "social_links",
        "Social link",
        SocialLinkOut,
        SocialLinkCreate,
        SocialLinkUpdate,
        upsert_on_create=True,
    ),
    _Collection(
        "/api/team-members",
        "team_members",
        "Team member",
        TeamMemberOut,
        TeamMemberCreate,
        TeamMemberUpdate,
    ),
    _Collection(
        "/api/timeline-milestones",
        "timeline_milestones",
        "Timeline milestone",
        TimelineMilestoneOut,
        TimelineMilestoneCreate,
        TimelineMilestoneUpdate,
    ),
)


def _parse(model: Type[CamelModel], payload: Dict[str, Any]) -> CamelModel:
    try:
        return model.model_validate(payload)
    except PydanticValidationError as exc:
        raise validation_error_from(exc) from exc


def _register_collection(router: APIRouter, collection: _Collection, database: Database, guard: AuthGuard) -> None:
    """Attach POST, PUT and DELETE routes for ``collection`` to ``router``."""

    @router.post(collection.path, response_model=collection.out, status_code=status.HTTP_201_CREATED)
    async def create_item(payload: Dict[str, Any] = Body(...), admin: User = Depends(guard.admin)):
        values = _parse(collection.create, payload).model_dump()
        item_id = values.pop("id", None)
        if collection.upsert_on_create and item_id is not None:
            item = database.update_content(collection.table, item_id, values)
            if item is not None:
                logger.info("%s %d updated by %s", collection.label, item.id, admin.email)
                return collection.out.model_validate(item)
        try:
            item = database.create_content(collection.table, values)
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc
        logger.info("%s %d created by %s", collection.label, item.id, admin.email)
        return collection.out.model_validate(item)

    @router.put(f"{collection.path}/{{item_id}}", response_model=collection.out)
    async def update_item(item_id: int, payload: Dict[str, Any] = Body(...), admin: User = Depends(guard.admin)):
        values = _parse(collection.update, payload).model_dump(exclude_unset=True)
        try:
            item = database.update_content(collection.table, item_id, values)
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc
        if item is None:
            raise NotFoundError(f"{collection.label} not found")
        logger.info("%s %d updated by %s", collection.label, item_id, admin.email)
        return collection.out.model_validate(item)

    @router.delete(f"{collection.path}/{{item_id}}", response_model=SuccessResponse)
    async def delete_item(item_id: int, admin: User = Depends(guard.admin)):
        if not database.delete_content(collection.table, item_id):
            raise NotFoundError(f"{collection.label} not found")
        logger.info("%s %d deleted by %s", collection.label, item_id, admin.email)
        return SuccessResponse(message=f"{collection.label} deleted successfully")


def register_content_routes(app: FastAPI, *, database: Database, guard: AuthGuard) -> None:
    router = APIRouter(tags=["content"])

    def _singleton(table: str, defaults: Dict[str, object], values: Dict[str, object]) -> object:
        try:
            return database.upsert_singleton(table, values, defaults=defaults)
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc

    @router.get("/api/about", response_model=AboutOut)
    async def read_about() -> AboutOut:
        about = database.latest_content("about")
        return AboutOut.model_validate(about if about is not None else DEFAULT_ABOUT)

    @router.put("/api/about", response_model=AboutOut)
    async def update_about(payload: AboutUpdate, admin: User = Depends(guard.admin)) -> AboutOut:
        about = _singleton("about", DEFAULT_ABOUT, payload.model_dump(exclude_unset=True))
        logger.info("About section updated by %s", admin.email)
        return AboutOut.model_validate(about)

    @router.get("/api/homepage", response_model=HomepageOut)
    async def read_homepage() -> HomepageOut:
        settings = database.latest_content("homepage_settings")
        return HomepageOut.model_validate(settings if settings is not None else DEFAULT_HOMEPAGE)

    @router.put("/api/homepage", response_model=HomepageOut)
    async def update_homepage(payload: HomepageUpdate, admin: User = Depends(guard.admin)) -> HomepageOut:
        settings = _singleton("homepage_settings", DEFAULT_HOMEPAGE, payload.model_dump(exclude_unset=True))
        logger.info("Homepage settings updated by %s", admin.email)
        return HomepageOut.model_validate(settings)

    @router.get("/api/contact-info", response_model=ContactInfoOut)
    async def read_contact_info() -> ContactInfoOut:
        info = database.latest_content("contact_info")
        return ContactInfoOut.model_validate(info if info is not None else DEFAULT_CONTACT_INFO)

    @router.put("/api/contact-info", response_model=ContactInfoOut)
    async def update_contact_info(payload: ContactInfoUpdate, admin: User = Depends(guard.admin)) -> ContactInfoOut:
        info = _singleton("contact_info", DEFAULT_CONTACT_INFO, payload.model_dump(exclude_unset=True))
        logger.info("Contact info updated by %s", admin.email)
        return ContactInfoOut.model_validate(info)

    @router.get("/api/categories", response_model=List[CategoryOut])
    async def list_categories(category_type: Optional[CategoryType] = Query(default=None, alias="type")):
        where = {"type": category_type} if category_type is not None else None
        return [CategoryOut.model_validate(item) for item in database.list_content("categories", where=where)]

    @router.get("/api/core-values", response_model=List[CoreValueOut])
    async def list_core_values():
        return [CoreValueOut.model_validate(item) for item in database.list_content("core_values")]

    @router.get("/api/social", response_model=List[SocialLinkOut])
    async def list_social_links():
        return [SocialLinkOut.model_validate(item) for item in database.list_content("social_links")]

    @router.get("/api/team-members", response_model=List[TeamMemberOut])
    async def list_team_members(featured: bool = Query(default=False)):
        where = {"team_role": FEATURED_TEAM_ROLES} if featured else None
        return [TeamMemberOut.model_validate(item) for item in database.list_content("team_members", where=where)]

    @router.get("/api/timeline-milestones", response_model=List[TimelineMilestoneOut])
    async def list_timeline_milestones():
        return [
            TimelineMilestoneOut.model_validate(item) for item in database.list_content("timeline_milestones")
        ]

    for collection in COLLECTIONS:
        _register_collection(router, collection, database, guard)

    @router.post(
        "/api/contact-submissions",
        response_model=ContactSubmissionOut,
        status_code=status.HTTP_201_CREATED,
    )
    async def create_contact_submission(
        payload: ContactSubmissionCreate,
        current_user: Optional[User] = Depends(guard.optional_user),
    ) -> ContactSubmissionOut:
        values = payload.model_dump()
        values["user_id"] = current_user.id if current_user is not None else None
        submission = database.create_content("contact_submissions", values)
        logger.info("Contact submission %d received from %s", submission.id, submission.email)
        return ContactSubmissionOut.model_validate(submission)

    @router.get("/api/contact-submissions", response_model=ContactSubmissionListResponse)
    async def list_contact_submissions(
        page: int = Query(default=1, ge=1),
        limit: int = Query(default=20, ge=1, le=100),
        admin: User = Depends(guard.admin),
    ) -> ContactSubmissionListResponse:
        total = database.count_content("contact_submissions")
        submissions = database.list_content("contact_submissions", limit=limit, offset=(page - 1) * limit)
        return ContactSubmissionListResponse(
            submissions=[ContactSubmissionOut.model_validate(item) for item in submissions],
            pagination=Pagination.build(page, limit, total),
        )

    app.include_router(router)


__all__ = [
    "COLLECTIONS",
    "DEFAULT_ABOUT",
    "DEFAULT_CONTACT_INFO",
    "DEFAULT_HOMEPAGE",
    "register_content_routes",
]
