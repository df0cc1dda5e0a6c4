"""Domain models for the Arive Lab portal."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Optional, Tuple


class UserRole(str, Enum):
    """Access level granted to an account."""

    MEMBER = "MEMBER"
    ADMIN = "ADMIN"


class UserStatus(str, Enum):
    """Lifecycle state of a registered account."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    SUSPENDED = "SUSPENDED"


class NotificationType(str, Enum):
    NEW_REGISTRATION = "NEW_REGISTRATION"
    USER_APPROVED = "USER_APPROVED"
    USER_REJECTED = "USER_REJECTED"
    USER_SUSPENDED = "USER_SUSPENDED"


class TeamRole(str, Enum):
    """Position of a team member on the public team page."""

    FOUNDER = "FOUNDER"
    ADMIN = "ADMIN"
    COORDINATOR = "COORDINATOR"
    MEMBER = "MEMBER"
    INTERN = "INTERN"


FEATURED_TEAM_ROLES = (TeamRole.FOUNDER, TeamRole.ADMIN, TeamRole.COORDINATOR)


class CategoryType(str, Enum):
    RESEARCH = "RESEARCH"
    PROJECT = "PROJECT"


class PublicationKind(str, Enum):
    """The two kinds of post an author can publish.

    The value doubles as the URL segment (``/api/research``,
    ``/api/projects``) and the backing table name.
    """

    RESEARCH = "research"
    PROJECT = "projects"

    @property
    def label(self) -> str:
        return "Research" if self is PublicationKind.RESEARCH else "Project"


@dataclass(frozen=True)
class User:
    """An account stored in the portal database.

    The password hash never leaves the database layer.
    """

    id: int
    name: str
    email: str
    role: UserRole
    status: UserStatus
    phone: Optional[str]
    gender: Optional[str]
    date_of_birth: Optional[date]
    country: Optional[str]
    city: Optional[str]
    bio: Optional[str]
    profile_photo: Optional[str]
    created_at: datetime
    updated_at: datetime

    @property
    def is_admin(self) -> bool:
        return self.role is UserRole.ADMIN

    @property
    def is_approved(self) -> bool:
        return self.status is UserStatus.APPROVED


@dataclass(frozen=True)
class UserRegistration:
    """Questionnaire answers submitted alongside a registration."""

    id: int
    user_id: int
    motivation: str
    field_category: str
    has_experience: bool
    experience_description: Optional[str]
    teamwork_feelings: str
    future_goals: str
    skills: Optional[str]
    other_skills: Optional[str]
    hobbies: str
    availability_days: int
    availability_hours: int
    linkedin: Optional[str]
    github: Optional[str]
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class Notification:
    id: int
    user_id: int
    type: NotificationType
    title: str
    message: str
    is_read: bool
    created_at: datetime


@dataclass(frozen=True)
class NotificationDraft:
    """A notification that has not been stored yet."""

    type: NotificationType
    title: str
    message: str


@dataclass(frozen=True)
class Category:
    id: int
    name: str
    type: CategoryType
    description: Optional[str]
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class Publication:
    """A research or project post together with its joined labels."""

    id: int
    kind: PublicationKind
    title: str
    description: str
    content: Optional[str]
    image: Optional[str]
    images: Tuple[str, ...]
    video: Optional[str]
    tags: Optional[str]
    category_id: Optional[int]
    author_id: Optional[int]
    published: bool
    featured: bool
    created_at: datetime
    updated_at: datetime
    category_name: Optional[str] = None
    author_name: Optional[str] = None
    author_email: Optional[str] = None


@dataclass(frozen=True)
class TeamMember:
    id: int
    name: str
    role: str
    team_role: TeamRole
    bio: Optional[str]
    image: Optional[str]
    email: Optional[str]
    phone: Optional[str]
    linkedin: Optional[str]
    twitter: Optional[str]
    github: Optional[str]
    display_order: int
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class CoreValue:
    id: int
    title: str
    description: str
    icon: Optional[str]
    display_order: int
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class SocialLink:
    id: int
    platform: str
    url: str
    icon: Optional[str]
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class TimelineMilestone:
    id: int
    year: str
    title: str
    description: Optional[str]
    display_order: int
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class ContactInfo:
    id: int
    email: Optional[str]
    phone: Optional[str]
    address: Optional[str]
    map_embed: Optional[str]
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class HomepageSettings:
    id: int
    hero_title: str
    hero_subtitle: str
    hero_cta_text: str
    hero_cta_link: str
    banner_image: Optional[str]
    banner_video: Optional[str]
    seo_title: Optional[str]
    seo_description: Optional[str]
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class About:
    id: int
    title: str
    description: str
    image: Optional[str]
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class ContactSubmission:
    id: int
    name: str
    email: str
    phone: Optional[str]
    message: str
    user_id: Optional[int]
    created_at: datetime


__all__ = [
    "About",
    "Category",
    "CategoryType",
    "ContactInfo",
    "ContactSubmission",
    "CoreValue",
    "FEATURED_TEAM_ROLES",
    "HomepageSettings",
    "Notification",
    "NotificationDraft",
    "NotificationType",
    "Publication",
    "PublicationKind",
    "SocialLink",
    "TeamMember",
    "TeamRole",
    "TimelineMilestone",
    "User",
    "UserRegistration",
    "UserRole",
    "UserStatus",
]
