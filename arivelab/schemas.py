"""Pydantic request and response models for the portal API.

Field names are snake_case in Python and camelCase on the wire.
"""
from __future__ import annotations

from dataclasses import asdict
from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .models import (
    CategoryType,
    Notification,
    NotificationType,
    Publication,
    TeamRole,
    User,
    UserRegistration,
    UserRole,
    UserStatus,
)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# ----------------------------------------------------------------------
# Accounts
# ----------------------------------------------------------------------
class UserOut(CamelModel):
    id: int
    name: str
    email: str
    role: UserRole
    status: UserStatus
    phone: Optional[str] = None
    gender: Optional[str] = None
    date_of_birth: Optional[date] = None
    country: Optional[str] = None
    city: Optional[str] = None
    bio: Optional[str] = None
    profile_photo: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class RegistrationOut(CamelModel):
    id: int
    user_id: int
    motivation: str
    field_category: str
    has_experience: bool
    experience_description: Optional[str] = None
    teamwork_feelings: str
    future_goals: str
    skills: Optional[str] = None
    other_skills: Optional[str] = None
    hobbies: str
    availability_days: int
    availability_hours: int
    linkedin: Optional[str] = None
    github: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class UserWithRegistration(UserOut):
    registration: Optional[RegistrationOut] = None


def user_with_registration(user: User, registration: Optional[UserRegistration]) -> UserWithRegistration:
    return UserWithRegistration.model_validate(
        {
            **asdict(user),
            "registration": asdict(registration) if registration is not None else None,
        }
    )


class LoginRequest(CamelModel):
    email: str = ""
    password: str = ""


class LoginResponse(CamelModel):
    user: UserOut
    token: str


class MeResponse(CamelModel):
    user_id: int
    email: str
    role: UserRole


class ProfileUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    bio: Optional[str] = None
    phone: Optional[str] = None
    gender: Optional[str] = None
    date_of_birth: Optional[date] = None
    country: Optional[str] = None
    city: Optional[str] = None


class SuccessResponse(CamelModel):
    success: bool = True
    message: Optional[str] = None


# ----------------------------------------------------------------------
# Admin review
# ----------------------------------------------------------------------
class NotificationUser(CamelModel):
    id: int
    name: str
    email: str
    status: UserStatus


class NotificationOut(CamelModel):
    id: int
    user_id: int
    type: NotificationType
    title: str
    message: str
    is_read: bool
    created_at: datetime
    user: Optional[NotificationUser] = None


def notification_out(notification: Notification, user: Optional[User] = None) -> NotificationOut:
    return NotificationOut.model_validate(
        {
            **asdict(notification),
            "user": NotificationUser.model_validate(user) if user is not None else None,
        }
    )


class NotificationListResponse(CamelModel):
    notifications: List[NotificationOut]
    unread_count: int
    new_registration_count: int


class NotificationUpdateRequest(CamelModel):
    notification_ids: List[int]
    mark_as_read: bool = True


class NotificationUpdateResponse(CamelModel):
    success: bool = True
    updated: int


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    pages: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(page=page, limit=limit, total=total, pages=(total + limit - 1) // limit if limit else 0)


class RegistrationListResponse(CamelModel):
    registrations: List[UserWithRegistration]
    pagination: Pagination


# ----------------------------------------------------------------------
# Site content
# ----------------------------------------------------------------------
class AboutOut(CamelModel):
    id: Optional[int] = None
    title: str
    description: str
    image: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AboutUpdate(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = Field(default=None, min_length=1)
    image: Optional[str] = None


class HomepageOut(CamelModel):
    id: Optional[int] = None
    hero_title: str
    hero_subtitle: str
    hero_cta_text: str
    hero_cta_link: str
    banner_image: Optional[str] = None
    banner_video: Optional[str] = None
    seo_title: Optional[str] = None
    seo_description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class HomepageUpdate(CamelModel):
    hero_title: Optional[str] = Field(default=None, min_length=1)
    hero_subtitle: Optional[str] = Field(default=None, min_length=1)
    hero_cta_text: Optional[str] = Field(default=None, min_length=1)
    hero_cta_link: Optional[str] = Field(default=None, min_length=1)
    banner_image: Optional[str] = None
    banner_video: Optional[str] = None
    seo_title: Optional[str] = None
    seo_description: Optional[str] = None


class ContactInfoOut(CamelModel):
    id: Optional[int] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    map_embed: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ContactInfoUpdate(CamelModel):
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    map_embed: Optional[str] = None


class CategoryOut(CamelModel):
    id: int
    name: str
    type: CategoryType
    description: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class CategoryCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    type: CategoryType
    description: Optional[str] = None


class CategoryUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    type: Optional[CategoryType] = None
    description: Optional[str] = None


class CoreValueOut(CamelModel):
    id: int
    title: str
    description: str
    icon: Optional[str] = None
    display_order: int
    created_at: datetime
    updated_at: datetime


class CoreValueCreate(CamelModel):
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    icon: Optional[str] = None
    display_order: int = 0


class CoreValueUpdate(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = Field(default=None, min_length=1)
    icon: Optional[str] = None
    display_order: Optional[int] = None


class SocialLinkOut(CamelModel):
    id: int
    platform: str
    url: str
    icon: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class SocialLinkCreate(CamelModel):
    id: Optional[int] = None
    platform: str = Field(..., min_length=1)
    url: str = Field(..., min_length=1)
    icon: Optional[str] = None


class SocialLinkUpdate(CamelModel):
    platform: Optional[str] = Field(default=None, min_length=1)
    url: Optional[str] = Field(default=None, min_length=1)
    icon: Optional[str] = None


class TeamMemberOut(CamelModel):
    id: int
    name: str
    role: str
    team_role: TeamRole
    bio: Optional[str] = None
    image: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    linkedin: Optional[str] = None
    twitter: Optional[str] = None
    github: Optional[str] = None
    display_order: int
    created_at: datetime
    updated_at: datetime


class TeamMemberCreate(CamelModel):
    name: str = Field(..., min_length=1)
    role: str = Field(..., min_length=1)
    team_role: TeamRole = TeamRole.MEMBER
    bio: Optional[str] = None
    image: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    linkedin: Optional[str] = None
    twitter: Optional[str] = None
    github: Optional[str] = None
    display_order: int = 0


class TeamMemberUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1)
    role: Optional[str] = Field(default=None, min_length=1)
    team_role: Optional[TeamRole] = None
    bio: Optional[str] = None
    image: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    linkedin: Optional[str] = None
    twitter: Optional[str] = None
    github: Optional[str] = None
    display_order: Optional[int] = None


def _year_as_text(value: object) -> object:
    # Years are free text ("2021", "Q3 2022") but clients often send numbers.
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


class TimelineMilestoneOut(CamelModel):
    id: int
    year: str
    title: str
    description: Optional[str] = None
    display_order: int
    created_at: datetime
    updated_at: datetime


class TimelineMilestoneCreate(CamelModel):
    year: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    display_order: int = 0

    normalize_year = field_validator("year", mode="before")(_year_as_text)


class TimelineMilestoneUpdate(CamelModel):
    year: Optional[str] = Field(default=None, min_length=1)
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    display_order: Optional[int] = None

    normalize_year = field_validator("year", mode="before")(_year_as_text)


class ContactSubmissionCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    email: str = Field(..., min_length=3, max_length=320)
    phone: Optional[str] = None
    message: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def _validate_email(cls, value: str) -> str:
        candidate = value.strip()
        if "@" not in candidate or candidate.startswith("@") or candidate.endswith("@"):
            raise ValueError("Invalid email address")
        return candidate


class ContactSubmissionOut(CamelModel):
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    message: str
    user_id: Optional[int] = None
    created_at: datetime


class ContactSubmissionListResponse(CamelModel):
    submissions: List[ContactSubmissionOut]
    pagination: Pagination


# ----------------------------------------------------------------------
# Research and projects
# ----------------------------------------------------------------------
class PublicationCategory(CamelModel):
    id: int
    name: Optional[str] = None


class PublicationAuthor(CamelModel):
    id: int
    name: Optional[str] = None
    email: Optional[str] = None


class PublicationOut(CamelModel):
    id: int
    title: str
    description: str
    content: Optional[str] = None
    image: Optional[str] = None
    images: List[str] = Field(default_factory=list)
    video: Optional[str] = None
    tags: Optional[str] = None
    category_id: Optional[int] = None
    author_id: Optional[int] = None
    published: bool
    featured: bool
    created_at: datetime
    updated_at: datetime
    category: Optional[PublicationCategory] = None
    author: Optional[PublicationAuthor] = None


def publication_out(publication: Publication) -> PublicationOut:
    category = None
    if publication.category_id is not None:
        category = PublicationCategory(id=publication.category_id, name=publication.category_name)
    author = None
    if publication.author_id is not None:
        author = PublicationAuthor(
            id=publication.author_id,
            name=publication.author_name,
            email=publication.author_email,
        )
    return PublicationOut(
        id=publication.id,
        title=publication.title,
        description=publication.description,
        content=publication.content,
        image=publication.image,
        images=list(publication.images),
        video=publication.video,
        tags=publication.tags,
        category_id=publication.category_id,
        author_id=publication.author_id,
        published=publication.published,
        featured=publication.featured,
        created_at=publication.created_at,
        updated_at=publication.updated_at,
        category=category,
        author=author,
    )


class PublicationCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=300)
    description: str = Field(..., min_length=1)
    content: Optional[str] = None
    image: Optional[str] = None
    images: List[str] = Field(default_factory=list)
    video: Optional[str] = None
    tags: Optional[str] = None
    category_id: Optional[int] = None
    published: bool = False
    featured: bool = False


class PublicationUpdate(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=300)
    description: Optional[str] = Field(default=None, min_length=1)
    content: Optional[str] = None
    image: Optional[str] = None
    images: Optional[List[str]] = None
    video: Optional[str] = None
    tags: Optional[str] = None
    category_id: Optional[int] = None
    published: Optional[bool] = None
    featured: Optional[bool] = None


# ----------------------------------------------------------------------
# Uploads
# ----------------------------------------------------------------------
class UploadResponse(CamelModel):
    success: bool = True
    image_url: str
    file_name: str
    file_size: int
    file_type: str
    folder: str


__all__ = [
    "AboutOut",
    "AboutUpdate",
    "CamelModel",
    "CategoryCreate",
    "CategoryOut",
    "CategoryUpdate",
    "ContactInfoOut",
    "ContactInfoUpdate",
    "ContactSubmissionCreate",
    "ContactSubmissionListResponse",
    "ContactSubmissionOut",
    "CoreValueCreate",
    "CoreValueOut",
    "CoreValueUpdate",
    "HomepageOut",
    "HomepageUpdate",
    "LoginRequest",
    "LoginResponse",
    "MeResponse",
    "NotificationListResponse",
    "NotificationOut",
    "NotificationUpdateRequest",
    "NotificationUpdateResponse",
    "NotificationUser",
    "Pagination",
    "ProfileUpdate",
    "PublicationCreate",
    "PublicationOut",
    "PublicationUpdate",
    "RegistrationListResponse",
    "RegistrationOut",
    "SocialLinkCreate",
    "SocialLinkOut",
    "SocialLinkUpdate",
    "SuccessResponse",
    "TeamMemberCreate",
    "TeamMemberOut",
    "TeamMemberUpdate",
    "TimelineMilestoneCreate",
    "TimelineMilestoneOut",
    "TimelineMilestoneUpdate",
    "UploadResponse",
    "UserOut",
    "UserWithRegistration",
    "notification_out",
    "publication_out",
    "user_with_registration",
]
