"""Registration intake and the admin approval workflow."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Mapping, Optional

from starlette.datastructures import UploadFile

from .database import Database
from .errors import ConflictError, NotFoundError, ValidationError
from .models import NotificationDraft, NotificationType, User, UserStatus
from .uploads import PROFILE_FOLDER, StoredImage, UploadStore, has_content

logger = logging.getLogger("arivelab.membership")

_PERSONAL_FIELDS = ("name", "email", "password", "phone", "gender", "dateOfBirth", "country", "city")
_QUESTIONNAIRE_FIELDS = (
    "motivation",
    "fieldCategory",
    "teamworkFeelings",
    "futureGoals",
    "hobbies",
    "availabilityDays",
    "availabilityHours",
)
_TRUE_VALUES = {"1", "true", "yes", "on"}


def _text(form: Mapping[str, Any], key: str) -> str:
    value = form.get(key)
    if value is None or not isinstance(value, str):
        return ""
    return value.strip()


def _optional_text(form: Mapping[str, Any], key: str) -> Optional[str]:
    return _text(form, key) or None


def _whole_number(value: str, label: str) -> int:
    try:
        number = int(value)
    except ValueError as exc:
        raise ValidationError(f"{label} must be a whole number") from exc
    if number < 0:
        raise ValidationError(f"{label} must not be negative")
    return number


def _join_skills(raw: str) -> Optional[str]:
    """Accept a JSON array of skills or plain text and store it comma-joined."""

    if not raw:
        return None
    try:
        parsed = json.loads(raw)
    except ValueError:
        return raw
    if isinstance(parsed, list):
        joined = ", ".join(str(item).strip() for item in parsed if str(item).strip())
        return joined or None
    return raw


@dataclass(frozen=True)
class RegistrationForm:
    """A validated registration submission."""

    profile: Dict[str, object]
    password: str
    answers: Dict[str, object]
    photo: Optional[UploadFile] = None

    @property
    def email(self) -> str:
        return str(self.profile["email"])

    @property
    def name(self) -> str:
        return str(self.profile["name"])

    @classmethod
    def from_form(cls, form: Mapping[str, Any]) -> "RegistrationForm":
        if any(not _text(form, key) for key in _PERSONAL_FIELDS):
            raise ValidationError("All personal details are required")
        if any(not _text(form, key) for key in _QUESTIONNAIRE_FIELDS):
            raise ValidationError("All research and motivation details are required")

        email = _text(form, "email").lower()
        if "@" not in email or email.startswith("@") or email.endswith("@"):
            raise ValidationError("Invalid email address")

        try:
            date_of_birth = date.fromisoformat(_text(form, "dateOfBirth")[:10])
        except ValueError as exc:
            raise ValidationError("Date of birth must be a valid date (YYYY-MM-DD)") from exc

        profile: Dict[str, object] = {
            "name": _text(form, "name"),
            "email": email,
            "phone": _text(form, "phone"),
            "gender": _text(form, "gender"),
            "date_of_birth": date_of_birth,
            "country": _text(form, "country"),
            "city": _text(form, "city"),
        }
        answers: Dict[str, object] = {
            "motivation": _text(form, "motivation"),
            "field_category": _text(form, "fieldCategory"),
            "has_experience": _text(form, "hasExperience").lower() in _TRUE_VALUES,
            "experience_description": _optional_text(form, "experienceDescription"),
            "teamwork_feelings": _text(form, "teamworkFeelings"),
            "future_goals": _text(form, "futureGoals"),
            "skills": _join_skills(_text(form, "skills")),
            "other_skills": _optional_text(form, "otherSkills"),
            "hobbies": _text(form, "hobbies"),
            "availability_days": _whole_number(_text(form, "availabilityDays"), "Availability days"),
            "availability_hours": _whole_number(_text(form, "availabilityHours"), "Availability hours"),
            "linkedin": _optional_text(form, "linkedin"),
            "github": _optional_text(form, "github"),
        }

        photo = form.get("profilePhoto")
        if not isinstance(photo, UploadFile) or not has_content(photo):
            photo = None

        # Stored exactly as typed; login compares the unstripped value.
        password = str(form.get("password"))
        return cls(profile=profile, password=password, answers=answers, photo=photo)


def new_registration_notice(name: str) -> NotificationDraft:
    return NotificationDraft(
        type=NotificationType.NEW_REGISTRATION,
        title="New User Registration",
        message=f"New user {name} has registered and is pending approval.",
    )


async def submit_registration(database: Database, store: UploadStore, form: RegistrationForm) -> User:
    """Create a pending account from a validated registration.

    The profile photo is written before the database transaction and removed
    again if the transaction fails.
    """

    if database.get_user_by_email(form.email) is not None:
        raise ConflictError("User already exists")

    stored: Optional[StoredImage] = None
    profile = dict(form.profile)
    if form.photo is not None:
        stored = await store.save_image(form.photo, PROFILE_FOLDER)
        profile["profile_photo"] = stored.url

    try:
        user, _ = database.create_registration(
            profile,
            form.password,
            form.answers,
            notification=new_registration_notice(form.name),
        )
    except ValueError as exc:
        if stored is not None:
            await store.discard(stored)
        raise ConflictError("User already exists") from exc
    except Exception:
        if stored is not None:
            await store.discard(stored)
        raise

    logger.info("New registration for %s (user %d) is pending approval", user.email, user.id)
    return user


@dataclass(frozen=True)
class Decision:
    """What an admin action does to an account."""

    action: str
    status: UserStatus
    notification_type: NotificationType
    title: str
    message: str
    resolves_registration: bool = False

    def notification(self) -> NotificationDraft:
        return NotificationDraft(type=self.notification_type, title=self.title, message=self.message)


DECISIONS: Dict[str, Decision] = {
    decision.action: decision
    for decision in (
        Decision(
            "approve",
            UserStatus.APPROVED,
            NotificationType.USER_APPROVED,
            "Account Approved",
            "Your account has been approved! Welcome to Arive Lab.",
        ),
        Decision(
            "reject",
            UserStatus.REJECTED,
            NotificationType.USER_REJECTED,
            "Account Rejected",
            "Your account registration has been rejected.",
            resolves_registration=True,
        ),
        Decision(
            "suspend",
            UserStatus.SUSPENDED,
            NotificationType.USER_SUSPENDED,
            "Account Suspended",
            "Your account has been suspended.",
        ),
    )
}


def resolve_decision(action: str) -> Decision:
    decision = DECISIONS.get(action)
    if decision is None:
        raise ValidationError("Invalid action")
    return decision


def apply_decision(database: Database, user_id: int, action: str, *, actor: Optional[User] = None) -> User:
    """Apply an admin decision to ``user_id`` and return the updated account.

    The status change, the outcome notification and (for ``reject``) the
    clearing of pending registration notices happen in one transaction.
    Any current status may be moved to any decision's target status.
    """

    decision = resolve_decision(action)
    user = database.apply_status_change(
        user_id,
        decision.status,
        decision.notification(),
        resolve_registration_notices=decision.resolves_registration,
    )
    if user is None:
        raise NotFoundError("User not found")

    logger.info(
        "User %d (%s) set to %s by %s",
        user.id,
        user.email,
        user.status.value,
        actor.email if actor is not None else "system",
    )
    return user


__all__ = [
    "DECISIONS",
    "Decision",
    "RegistrationForm",
    "apply_decision",
    "new_registration_notice",
    "resolve_decision",
    "submit_registration",
]
