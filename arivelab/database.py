"""SQLite-backed persistence for accounts, workflow records and site content."""
from __future__ import annotations

import json
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass, field, fields
from datetime import date, datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple

from passlib.context import CryptContext

from .config import resolve_database_path
from .models import (
    About,
    Category,
    CategoryType,
    ContactInfo,
    ContactSubmission,
    CoreValue,
    HomepageSettings,
    Notification,
    NotificationDraft,
    NotificationType,
    Publication,
    PublicationKind,
    SocialLink,
    TeamMember,
    TeamRole,
    TimelineMilestone,
    User,
    UserRegistration,
    UserRole,
    UserStatus,
)


def _ensure_directory(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def _current_timestamp() -> datetime:
    return datetime.now(timezone.utc)


def _serialize_datetime(value: datetime) -> str:
    return value.isoformat()


def _parse_datetime(value: str) -> datetime:
    return datetime.fromisoformat(value)


def _parse_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    return date.fromisoformat(value)


def _to_column_value(value: object) -> object:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


_pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def _hash_password(password: str) -> str:
    return _pwd_context.hash(password)


def _verify_password(password: str, hashed: str) -> bool:
    try:
        return _pwd_context.verify(password, hashed)
    except (ValueError, TypeError):
        return False


@dataclass(frozen=True)
class ContentTable:
    """Describes one of the simple content tables managed through the API."""

    name: str
    model: type
    columns: Tuple[str, ...]
    required: Tuple[str, ...]
    order_by: str
    converters: Mapping[str, Callable[[Any], Any]] = field(default_factory=dict)
    has_updated_at: bool = True


_NEWEST_FIRST = "created_at DESC, id DESC"
_DISPLAY_ORDER = "display_order ASC, id ASC"

CONTENT_TABLES: Dict[str, ContentTable] = {
    table.name: table
    for table in (
        ContentTable(
            "about",
            About,
            ("title", "description", "image"),
            ("title", "description"),
            _NEWEST_FIRST,
        ),
        ContentTable(
            "homepage_settings",
            HomepageSettings,
            (
                "hero_title",
                "hero_subtitle",
                "hero_cta_text",
                "hero_cta_link",
                "banner_image",
                "banner_video",
                "seo_title",
                "seo_description",
            ),
            ("hero_title", "hero_subtitle", "hero_cta_text", "hero_cta_link"),
            _NEWEST_FIRST,
        ),
        ContentTable(
            "contact_info",
            ContactInfo,
            ("email", "phone", "address", "map_embed"),
            (),
            _NEWEST_FIRST,
        ),
        ContentTable(
            "categories",
            Category,
            ("name", "type", "description"),
            ("name", "type"),
            _NEWEST_FIRST,
            converters={"type": CategoryType},
        ),
        ContentTable(
            "core_values",
            CoreValue,
            ("title", "description", "icon", "display_order"),
            ("title", "description", "display_order"),
            _DISPLAY_ORDER,
        ),
        ContentTable(
            "social_links",
            SocialLink,
            ("platform", "url", "icon"),
            ("platform", "url"),
            _NEWEST_FIRST,
        ),
        ContentTable(
            "team_members",
            TeamMember,
            (
                "name",
                "role",
                "team_role",
                "bio",
                "image",
                "email",
                "phone",
                "linkedin",
                "twitter",
                "github",
                "display_order",
            ),
            ("name", "role", "team_role", "display_order"),
            _DISPLAY_ORDER,
            converters={"team_role": TeamRole},
        ),
        ContentTable(
            "timeline_milestones",
            TimelineMilestone,
            ("year", "title", "description", "display_order"),
            ("year", "title", "display_order"),
            _DISPLAY_ORDER,
        ),
        ContentTable(
            "contact_submissions",
            ContactSubmission,
            ("name", "email", "phone", "message", "user_id"),
            ("name", "email", "message"),
            _NEWEST_FIRST,
            has_updated_at=False,
        ),
    )
}

_SEED_TABLES = {
    "homepage": "homepage_settings",
    "about": "about",
    "contact_info": "contact_info",
    "categories": "categories",
    "core_values": "core_values",
    "social_links": "social_links",
    "team_members": "team_members",
    "timeline_milestones": "timeline_milestones",
}

_USER_PROFILE_COLUMNS = ("name", "bio", "phone", "gender", "date_of_birth", "country", "city", "profile_photo")

_REGISTRATION_COLUMNS = (
    "motivation",
    "field_category",
    "has_experience",
    "experience_description",
    "teamwork_feelings",
    "future_goals",
    "skills",
    "other_skills",
    "hobbies",
    "availability_days",
    "availability_hours",
    "linkedin",
    "github",
)

_PUBLICATION_COLUMNS = (
    "title",
    "description",
    "content",
    "image",
    "images",
    "video",
    "tags",
    "category_id",
    "published",
    "featured",
)
_PUBLICATION_REQUIRED = {"title", "description", "published", "featured"}


class Database:
    """Thin wrapper around SQLite for the portal's accounts and content."""

    def __init__(self, path: Path) -> None:
        _ensure_directory(path)
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        """Yield a connection whose statements commit together or not at all."""

        conn = self._connect()
        try:
            with conn:
                yield conn
        finally:
            conn.close()

    def initialize(self) -> None:
        """Create the required tables if they do not already exist."""

        with self._transaction() as conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS users (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    email TEXT NOT NULL UNIQUE,
                    password_hash TEXT NOT NULL,
                    role TEXT NOT NULL DEFAULT 'MEMBER',
                    status TEXT NOT NULL DEFAULT 'PENDING',
                    phone TEXT,
                    gender TEXT,
                    date_of_birth TEXT,
                    country TEXT,
                    city TEXT,
                    bio TEXT,
                    profile_photo TEXT,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS user_registrations (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id INTEGER NOT NULL UNIQUE REFERENCES users(id) ON DELETE CASCADE,
                    motivation TEXT NOT NULL,
                    field_category TEXT NOT NULL,
                    has_experience INTEGER NOT NULL DEFAULT 0,
                    experience_description TEXT,
                    teamwork_feelings TEXT NOT NULL,
                    future_goals TEXT NOT NULL,
                    skills TEXT,
                    other_skills TEXT,
                    hobbies TEXT NOT NULL,
                    availability_days INTEGER NOT NULL,
                    availability_hours INTEGER NOT NULL,
                    linkedin TEXT,
                    github TEXT,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS notifications (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
                    type TEXT NOT NULL,
                    title TEXT NOT NULL,
                    message TEXT NOT NULL,
                    is_read INTEGER NOT NULL DEFAULT 0,
                    created_at TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS categories (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    type TEXT NOT NULL,
                    description TEXT,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS research (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    title TEXT NOT NULL,
                    description TEXT NOT NULL,
                    content TEXT,
                    image TEXT,
                    images TEXT NOT NULL DEFAULT '[]',
                    video TEXT,
                    tags TEXT,
                    category_id INTEGER REFERENCES categories(id) ON DELETE SET NULL,
                    author_id INTEGER REFERENCES users(id) ON DELETE SET NULL,
                    published INTEGER NOT NULL DEFAULT 0,
                    featured INTEGER NOT NULL DEFAULT 0,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS projects (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    title TEXT NOT NULL,
                    description TEXT NOT NULL,
                    content TEXT,
                    image TEXT,
                    images TEXT NOT NULL DEFAULT '[]',
                    video TEXT,
                    tags TEXT,
                    category_id INTEGER REFERENCES categories(id) ON DELETE SET NULL,
                    author_id INTEGER REFERENCES users(id) ON DELETE SET NULL,
                    published INTEGER NOT NULL DEFAULT 0,
                    featured INTEGER NOT NULL DEFAULT 0,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS team_members (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    role TEXT NOT NULL,
                    team_role TEXT NOT NULL DEFAULT 'MEMBER',
                    bio TEXT,
                    image TEXT,
                    email TEXT,
                    phone TEXT,
                    linkedin TEXT,
                    twitter TEXT,
                    github TEXT,
                    display_order INTEGER NOT NULL DEFAULT 0,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS core_values (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    title TEXT NOT NULL,
                    description TEXT NOT NULL,
                    icon TEXT,
                    display_order INTEGER NOT NULL DEFAULT 0,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS social_links (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    platform TEXT NOT NULL,
                    url TEXT NOT NULL,
                    icon TEXT,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS timeline_milestones (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    year TEXT NOT NULL,
                    title TEXT NOT NULL,
                    description TEXT,
                    display_order INTEGER NOT NULL DEFAULT 0,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS contact_info (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    email TEXT,
                    phone TEXT,
                    address TEXT,
                    map_embed TEXT,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS homepage_settings (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    hero_title TEXT NOT NULL,
                    hero_subtitle TEXT NOT NULL,
                    hero_cta_text TEXT NOT NULL,
                    hero_cta_link TEXT NOT NULL,
                    banner_image TEXT,
                    banner_video TEXT,
                    seo_title TEXT,
                    seo_description TEXT,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS about (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    title TEXT NOT NULL,
                    description TEXT NOT NULL,
                    image TEXT,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS contact_submissions (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    email TEXT NOT NULL,
                    phone TEXT,
                    message TEXT NOT NULL,
                    user_id INTEGER REFERENCES users(id) ON DELETE SET NULL,
                    created_at TEXT NOT NULL
                );

                CREATE INDEX IF NOT EXISTS idx_notifications_user_id ON notifications(user_id);
                CREATE INDEX IF NOT EXISTS idx_research_author_id ON research(author_id);
                CREATE INDEX IF NOT EXISTS idx_projects_author_id ON projects(author_id);
                CREATE INDEX IF NOT EXISTS idx_users_status ON users(status);
                """
            )

    # ------------------------------------------------------------------
    # User management
    # ------------------------------------------------------------------
    def create_user(
        self,
        name: str,
        email: str,
        password: str,
        *,
        role: UserRole = UserRole.MEMBER,
        status: UserStatus = UserStatus.PENDING,
        **profile: object,
    ) -> User:
        """Create an account directly, without a registration questionnaire."""

        with self._transaction() as conn:
            user_id = self._insert_user(conn, name, email, password, role=role, status=status, profile=profile)
            return self._load_user(conn, user_id)

    def create_registration(
        self,
        profile: Mapping[str, object],
        password: str,
        answers: Mapping[str, object],
        *,
        notification: NotificationDraft,
    ) -> Tuple[User, UserRegistration]:
        """Persist a pending member, its questionnaire and the admin notice.

        All three rows are written in a single transaction; a failure part way
        leaves nothing behind.
        """

        details = dict(profile)
        name = str(details.pop("name", "") or "")
        email = str(details.pop("email", "") or "")

        with self._transaction() as conn:
            user_id = self._insert_user(
                conn,
                name,
                email,
                password,
                role=UserRole.MEMBER,
                status=UserStatus.PENDING,
                profile=details,
            )
            registration_id = self._insert_registration(conn, user_id, answers)
            self._insert_notification(conn, user_id, notification)
            user = self._load_user(conn, user_id)
            row = conn.execute(
                "SELECT * FROM user_registrations WHERE id = ?",
                (registration_id,),
            ).fetchone()

        return user, self._row_to_registration(row)

    def get_user(self, user_id: int) -> Optional[User]:
        with self._transaction() as conn:
            row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
        if row is None:
            return None
        return self._row_to_user(row)

    def get_user_by_email(self, email: str) -> Optional[User]:
        with self._transaction() as conn:
            row = conn.execute(
                "SELECT * FROM users WHERE email = ?",
                (email.strip().lower(),),
            ).fetchone()
        if row is None:
            return None
        return self._row_to_user(row)

    def authenticate_user(self, email: str, password: str) -> Optional[User]:
        user = self.get_user_by_email(email)
        if user is None or not self.verify_user_password(user.id, password):
            return None
        return user

    def verify_user_password(self, user_id: int, password: str) -> bool:
        """Return ``True`` if the supplied password matches the stored hash."""

        with self._transaction() as conn:
            row = conn.execute(
                "SELECT password_hash FROM users WHERE id = ?",
                (user_id,),
            ).fetchone()

        if row is None:
            return False

        stored_hash = row["password_hash"]
        if not stored_hash:
            return False

        return _verify_password(password, stored_hash)

    def set_user_password(self, user_id: int, password: str) -> None:
        if not password:
            raise ValueError("Password must not be empty")
        with self._transaction() as conn:
            conn.execute(
                "UPDATE users SET password_hash = ?, updated_at = ? WHERE id = ?",
                (_hash_password(password), _serialize_datetime(_current_timestamp()), user_id),
            )

    def list_users(self) -> List[User]:
        with self._transaction() as conn:
            rows = conn.execute("SELECT * FROM users ORDER BY created_at DESC, id DESC").fetchall()
        return [self._row_to_user(row) for row in rows]

    def search_users(
        self,
        *,
        status: Optional[UserStatus] = None,
        search: str = "",
        limit: int = 10,
        offset: int = 0,
    ) -> Tuple[List[User], int]:
        """Return one page of users matching the filters plus the total count.

        ``search`` matches the name, email or registration field category,
        case-insensitively.
        """

        clauses: List[str] = []
        params: List[object] = []
        if status is not None:
            clauses.append("u.status = ?")
            params.append(status.value)
        term = search.strip()
        if term:
            pattern = f"%{_escape_like(term)}%"
            clauses.append(
                "(u.name LIKE ? ESCAPE '\\' OR u.email LIKE ? ESCAPE '\\'"
                " OR r.field_category LIKE ? ESCAPE '\\')"
            )
            params.extend([pattern, pattern, pattern])

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        base = f"FROM users u LEFT JOIN user_registrations r ON r.user_id = u.id {where}"

        with self._transaction() as conn:
            total = conn.execute(f"SELECT COUNT(*) {base}", params).fetchone()[0]
            rows = conn.execute(
                f"SELECT u.* {base} ORDER BY u.created_at DESC, u.id DESC LIMIT ? OFFSET ?",
                [*params, limit, offset],
            ).fetchall()

        return [self._row_to_user(row) for row in rows], int(total)

    def update_user_profile(self, user_id: int, **fields: object) -> Optional[User]:
        """Update the self-service profile fields of an account."""

        updates: List[str] = []
        values: List[object] = []
        for column in _USER_PROFILE_COLUMNS:
            if column not in fields:
                continue
            value = fields[column]
            if column == "name":
                if value is None:
                    continue
                value = str(value).strip()
                if not value:
                    raise ValueError("Name must not be empty")
            updates.append(f"{column} = ?")
            values.append(_to_column_value(value))

        with self._transaction() as conn:
            if updates:
                updates.append("updated_at = ?")
                values.append(_serialize_datetime(_current_timestamp()))
                cursor = conn.execute(
                    f"UPDATE users SET {', '.join(updates)} WHERE id = ?",
                    [*values, user_id],
                )
                if cursor.rowcount == 0:
                    return None
            row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()

        if row is None:
            return None
        return self._row_to_user(row)

    def apply_status_change(
        self,
        user_id: int,
        status: UserStatus,
        notification: NotificationDraft,
        *,
        resolve_registration_notices: bool = False,
    ) -> Optional[User]:
        """Move an account to ``status`` and record the matching notification.

        When ``resolve_registration_notices`` is set, unread
        ``NEW_REGISTRATION`` notifications for the account are marked read in
        the same transaction. Returns ``None`` if the account does not exist.
        """

        with self._transaction() as conn:
            cursor = conn.execute(
                "UPDATE users SET status = ?, updated_at = ? WHERE id = ?",
                (status.value, _serialize_datetime(_current_timestamp()), user_id),
            )
            if cursor.rowcount == 0:
                return None

            self._insert_notification(conn, user_id, notification)

            if resolve_registration_notices:
                conn.execute(
                    "UPDATE notifications SET is_read = 1 WHERE user_id = ? AND type = ? AND is_read = 0",
                    (user_id, NotificationType.NEW_REGISTRATION.value),
                )

            return self._load_user(conn, user_id)

    def delete_user(self, user_id: int) -> bool:
        """Delete an account; its registration and notifications go with it."""

        with self._transaction() as conn:
            cursor = conn.execute("DELETE FROM users WHERE id = ?", (user_id,))
            return cursor.rowcount > 0

    # ------------------------------------------------------------------
    # Registrations
    # ------------------------------------------------------------------
    def get_registration(self, user_id: int) -> Optional[UserRegistration]:
        with self._transaction() as conn:
            row = conn.execute(
                "SELECT * FROM user_registrations WHERE user_id = ?",
                (user_id,),
            ).fetchone()
        if row is None:
            return None
        return self._row_to_registration(row)

    def get_registrations(self, user_ids: Iterable[int]) -> Dict[int, UserRegistration]:
        ids = list(dict.fromkeys(user_ids))
        if not ids:
            return {}
        placeholders = ", ".join("?" for _ in ids)
        with self._transaction() as conn:
            rows = conn.execute(
                f"SELECT * FROM user_registrations WHERE user_id IN ({placeholders})",
                ids,
            ).fetchall()
        registrations = [self._row_to_registration(row) for row in rows]
        return {registration.user_id: registration for registration in registrations}

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------
    def list_notifications(self) -> List[Tuple[Notification, User]]:
        """Return every notification, newest first, with its account."""

        with self._transaction() as conn:
            rows = conn.execute(
                "SELECT * FROM notifications ORDER BY created_at DESC, id DESC"
            ).fetchall()
            user_ids = sorted({int(row["user_id"]) for row in rows})
            users: Dict[int, User] = {}
            if user_ids:
                placeholders = ", ".join("?" for _ in user_ids)
                user_rows = conn.execute(
                    f"SELECT * FROM users WHERE id IN ({placeholders})",
                    user_ids,
                ).fetchall()
                users = {int(row["id"]): self._row_to_user(row) for row in user_rows}

        return [
            (self._row_to_notification(row), users[int(row["user_id"])])
            for row in rows
            if int(row["user_id"]) in users
        ]

    def list_notifications_for_user(self, user_id: int) -> List[Notification]:
        with self._transaction() as conn:
            rows = conn.execute(
                "SELECT * FROM notifications WHERE user_id = ? ORDER BY created_at DESC, id DESC",
                (user_id,),
            ).fetchall()
        return [self._row_to_notification(row) for row in rows]

    def set_notifications_read(self, notification_ids: Sequence[int], is_read: bool = True) -> int:
        """Set the read flag on the given notifications and return how many changed."""

        ids = list(dict.fromkeys(int(item) for item in notification_ids))
        if not ids:
            return 0
        placeholders = ", ".join("?" for _ in ids)
        with self._transaction() as conn:
            cursor = conn.execute(
                f"UPDATE notifications SET is_read = ? WHERE id IN ({placeholders})",
                [int(bool(is_read)), *ids],
            )
            return cursor.rowcount

    # ------------------------------------------------------------------
    # Research and projects
    # ------------------------------------------------------------------
    def create_publication(
        self,
        kind: PublicationKind,
        *,
        author_id: Optional[int],
        title: str,
        description: str,
        content: Optional[str] = None,
        image: Optional[str] = None,
        images: Sequence[str] = (),
        video: Optional[str] = None,
        tags: Optional[str] = None,
        category_id: Optional[int] = None,
        published: bool = False,
        featured: bool = False,
    ) -> Publication:
        now = _serialize_datetime(_current_timestamp())
        with self._transaction() as conn:
            cursor = conn.execute(
                f"""
                INSERT INTO {kind.value} (
                    title, description, content, image, images, video, tags,
                    category_id, author_id, published, featured, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    title,
                    description,
                    content,
                    image,
                    json.dumps(list(images)),
                    video,
                    tags,
                    category_id,
                    author_id,
                    int(bool(published)),
                    int(bool(featured)),
                    now,
                    now,
                ),
            )
            publication_id = cursor.lastrowid
            row = self._select_publications(conn, kind, "p.id = ?", [publication_id]).fetchone()

        if row is None:
            raise RuntimeError(f"Failed to load {kind.label.lower()} after creation")
        return self._row_to_publication(kind, row)

    def get_publication(self, kind: PublicationKind, publication_id: int) -> Optional[Publication]:
        with self._transaction() as conn:
            row = self._select_publications(conn, kind, "p.id = ?", [publication_id]).fetchone()
        if row is None:
            return None
        return self._row_to_publication(kind, row)

    def list_publications(
        self,
        kind: PublicationKind,
        *,
        published: Optional[bool] = None,
        featured: Optional[bool] = None,
        author_id: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> List[Publication]:
        clauses: List[str] = []
        params: List[object] = []
        if published is not None:
            clauses.append("p.published = ?")
            params.append(int(published))
        if featured is not None:
            clauses.append("p.featured = ?")
            params.append(int(featured))
        if author_id is not None:
            clauses.append("p.author_id = ?")
            params.append(author_id)

        with self._transaction() as conn:
            rows = self._select_publications(
                conn,
                kind,
                " AND ".join(clauses) or None,
                params,
                limit=limit,
            ).fetchall()
        return [self._row_to_publication(kind, row) for row in rows]

    def update_publication(
        self,
        kind: PublicationKind,
        publication_id: int,
        **fields: object,
    ) -> Optional[Publication]:
        updates: List[str] = []
        values: List[object] = []
        for column in _PUBLICATION_COLUMNS:
            if column not in fields:
                continue
            value = fields[column]
            if value is None and column in _PUBLICATION_REQUIRED:
                continue
            if column == "images":
                value = json.dumps(list(value or ()))
            updates.append(f"{column} = ?")
            values.append(_to_column_value(value))

        with self._transaction() as conn:
            if updates:
                updates.append("updated_at = ?")
                values.append(_serialize_datetime(_current_timestamp()))
                cursor = conn.execute(
                    f"UPDATE {kind.value} SET {', '.join(updates)} WHERE id = ?",
                    [*values, publication_id],
                )
                if cursor.rowcount == 0:
                    return None
            row = self._select_publications(conn, kind, "p.id = ?", [publication_id]).fetchone()

        if row is None:
            return None
        return self._row_to_publication(kind, row)

    def delete_publication(self, kind: PublicationKind, publication_id: int) -> bool:
        with self._transaction() as conn:
            cursor = conn.execute(f"DELETE FROM {kind.value} WHERE id = ?", (publication_id,))
            return cursor.rowcount > 0

    # ------------------------------------------------------------------
    # Site content
    # ------------------------------------------------------------------
    def list_content(
        self,
        table_name: str,
        *,
        where: Optional[Mapping[str, object]] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[Any]:
        """List rows of a content table in its natural order.

        ``where`` maps column names to a value or a sequence of accepted
        values.
        """

        table = CONTENT_TABLES[table_name]
        clause, params = self._where_clause(table, where)
        query = f"SELECT * FROM {table.name}{clause} ORDER BY {table.order_by}"
        if limit is not None:
            query += " LIMIT ? OFFSET ?"
            params.extend([limit, offset])
        with self._transaction() as conn:
            rows = conn.execute(query, params).fetchall()
        return [self._row_to_content(table, row) for row in rows]

    def count_content(self, table_name: str, *, where: Optional[Mapping[str, object]] = None) -> int:
        table = CONTENT_TABLES[table_name]
        clause, params = self._where_clause(table, where)
        with self._transaction() as conn:
            return int(conn.execute(f"SELECT COUNT(*) FROM {table.name}{clause}", params).fetchone()[0])

    def get_content(self, table_name: str, item_id: int) -> Optional[Any]:
        table = CONTENT_TABLES[table_name]
        with self._transaction() as conn:
            row = conn.execute(f"SELECT * FROM {table.name} WHERE id = ?", (item_id,)).fetchone()
        if row is None:
            return None
        return self._row_to_content(table, row)

    def latest_content(self, table_name: str) -> Optional[Any]:
        """Return the most recently created row of a singleton table."""

        table = CONTENT_TABLES[table_name]
        with self._transaction() as conn:
            row = conn.execute(
                f"SELECT * FROM {table.name} ORDER BY {_NEWEST_FIRST} LIMIT 1"
            ).fetchone()
        if row is None:
            return None
        return self._row_to_content(table, row)

    def create_content(self, table_name: str, values: Mapping[str, object]) -> Any:
        table = CONTENT_TABLES[table_name]
        with self._transaction() as conn:
            item_id = self._insert_content(conn, table, values)
            row = conn.execute(f"SELECT * FROM {table.name} WHERE id = ?", (item_id,)).fetchone()
        return self._row_to_content(table, row)

    def update_content(self, table_name: str, item_id: int, values: Mapping[str, object]) -> Optional[Any]:
        table = CONTENT_TABLES[table_name]
        with self._transaction() as conn:
            if not self._update_content(conn, table, item_id, values):
                return None
            row = conn.execute(f"SELECT * FROM {table.name} WHERE id = ?", (item_id,)).fetchone()
        return self._row_to_content(table, row)

    def upsert_singleton(
        self,
        table_name: str,
        values: Mapping[str, object],
        *,
        defaults: Mapping[str, object],
    ) -> Any:
        """Update the newest row of a singleton table, creating it if needed.

        A new row starts from ``defaults`` overlaid with ``values``.
        """

        table = CONTENT_TABLES[table_name]
        with self._transaction() as conn:
            existing = conn.execute(
                f"SELECT id FROM {table.name} ORDER BY {_NEWEST_FIRST} LIMIT 1"
            ).fetchone()
            if existing is not None:
                item_id = int(existing["id"])
                self._update_content(conn, table, item_id, values)
            else:
                merged = dict(defaults)
                merged.update({key: value for key, value in values.items() if value is not None})
                item_id = self._insert_content(conn, table, merged)
            row = conn.execute(f"SELECT * FROM {table.name} WHERE id = ?", (item_id,)).fetchone()
        return self._row_to_content(table, row)

    def delete_content(self, table_name: str, item_id: int) -> bool:
        table = CONTENT_TABLES[table_name]
        with self._transaction() as conn:
            cursor = conn.execute(f"DELETE FROM {table.name} WHERE id = ?", (item_id,))
            return cursor.rowcount > 0

    def seed_content(self, content: Mapping[str, object]) -> Dict[str, int]:
        """Insert default site content into tables that are still empty.

        Returns the number of rows inserted per seed section.
        """

        inserted: Dict[str, int] = {}
        with self._transaction() as conn:
            for section, table_name in _SEED_TABLES.items():
                if section not in content:
                    continue
                table = CONTENT_TABLES[table_name]
                if conn.execute(f"SELECT COUNT(*) FROM {table.name}").fetchone()[0]:
                    inserted[section] = 0
                    continue
                raw = content[section]
                items = [raw] if isinstance(raw, Mapping) else list(raw or [])
                for item in items:
                    self._insert_content(conn, table, item)
                inserted[section] = len(items)
        return inserted

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _insert_user(
        self,
        conn: sqlite3.Connection,
        name: str,
        email: str,
        password: str,
        *,
        role: UserRole,
        status: UserStatus,
        profile: Mapping[str, object],
    ) -> int:
        normalized_name = name.strip()
        if not normalized_name:
            raise ValueError("Name must not be empty")
        normalized_email = email.strip().lower()
        if not normalized_email:
            raise ValueError("Email must not be empty")
        if not password:
            raise ValueError("Password must not be empty")

        unknown = set(profile) - set(_USER_PROFILE_COLUMNS)
        if unknown:
            raise ValueError(f"Unknown profile fields: {', '.join(sorted(unknown))}")

        now = _serialize_datetime(_current_timestamp())
        columns = ["name", "email", "password_hash", "role", "status"]
        values: List[object] = [normalized_name, normalized_email, _hash_password(password), role.value, status.value]
        for column in _USER_PROFILE_COLUMNS:
            if column in profile and column != "name":
                columns.append(column)
                values.append(_to_column_value(profile[column]))
        columns.extend(["created_at", "updated_at"])
        values.extend([now, now])

        placeholders = ", ".join("?" for _ in columns)
        try:
            cursor = conn.execute(
                f"INSERT INTO users ({', '.join(columns)}) VALUES ({placeholders})",
                values,
            )
        except sqlite3.IntegrityError as exc:
            raise ValueError("A user with that email already exists") from exc
        return int(cursor.lastrowid)

    def _insert_registration(
        self,
        conn: sqlite3.Connection,
        user_id: int,
        answers: Mapping[str, object],
    ) -> int:
        unknown = set(answers) - set(_REGISTRATION_COLUMNS)
        if unknown:
            raise ValueError(f"Unknown registration fields: {', '.join(sorted(unknown))}")

        now = _serialize_datetime(_current_timestamp())
        columns = ["user_id", *[column for column in _REGISTRATION_COLUMNS if column in answers]]
        values: List[object] = [user_id, *[_to_column_value(answers[column]) for column in columns[1:]]]
        columns.extend(["created_at", "updated_at"])
        values.extend([now, now])

        placeholders = ", ".join("?" for _ in columns)
        try:
            cursor = conn.execute(
                f"INSERT INTO user_registrations ({', '.join(columns)}) VALUES ({placeholders})",
                values,
            )
        except sqlite3.IntegrityError as exc:
            raise ValueError("Registration details are incomplete or already recorded") from exc
        return int(cursor.lastrowid)

    def _insert_notification(
        self,
        conn: sqlite3.Connection,
        user_id: int,
        notification: NotificationDraft,
    ) -> int:
        cursor = conn.execute(
            """
            INSERT INTO notifications (user_id, type, title, message, is_read, created_at)
            VALUES (?, ?, ?, ?, 0, ?)
            """,
            (
                user_id,
                notification.type.value,
                notification.title,
                notification.message,
                _serialize_datetime(_current_timestamp()),
            ),
        )
        return int(cursor.lastrowid)

    def _load_user(self, conn: sqlite3.Connection, user_id: int) -> User:
        row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
        if row is None:
            raise RuntimeError(f"Failed to load user {user_id}")
        return self._row_to_user(row)

    def _select_publications(
        self,
        conn: sqlite3.Connection,
        kind: PublicationKind,
        where: Optional[str],
        params: Sequence[object],
        *,
        limit: Optional[int] = None,
    ) -> sqlite3.Cursor:
        query = f"""
            SELECT p.*, c.name AS category_name, u.name AS author_name, u.email AS author_email
              FROM {kind.value} p
              LEFT JOIN categories c ON c.id = p.category_id
              LEFT JOIN users u ON u.id = p.author_id
        """
        values = list(params)
        if where:
            query += f" WHERE {where}"
        query += " ORDER BY p.created_at DESC, p.id DESC"
        if limit is not None:
            query += " LIMIT ?"
            values.append(limit)
        return conn.execute(query, values)

    def _prepare_content_values(self, table: ContentTable, values: Mapping[str, object]) -> Dict[str, object]:
        prepared: Dict[str, object] = {}
        for column in table.columns:
            if column not in values:
                continue
            value = values[column]
            converter = table.converters.get(column)
            if converter is not None and value is not None:
                value = converter(value)
            prepared[column] = _to_column_value(value)
        return prepared

    def _insert_content(self, conn: sqlite3.Connection, table: ContentTable, values: Mapping[str, object]) -> int:
        prepared = self._prepare_content_values(table, values)
        missing = [column for column in table.required if prepared.get(column) is None and column != "display_order"]
        if missing:
            raise ValueError(f"Missing required fields: {', '.join(missing)}")
        if "display_order" in table.columns and prepared.get("display_order") is None:
            prepared["display_order"] = 0

        now = _serialize_datetime(_current_timestamp())
        prepared["created_at"] = now
        if table.has_updated_at:
            prepared["updated_at"] = now

        columns = list(prepared)
        placeholders = ", ".join("?" for _ in columns)
        cursor = conn.execute(
            f"INSERT INTO {table.name} ({', '.join(columns)}) VALUES ({placeholders})",
            [prepared[column] for column in columns],
        )
        return int(cursor.lastrowid)

    def _update_content(
        self,
        conn: sqlite3.Connection,
        table: ContentTable,
        item_id: int,
        values: Mapping[str, object],
    ) -> bool:
        prepared = {
            column: value
            for column, value in self._prepare_content_values(table, values).items()
            if value is not None or column not in table.required
        }
        if table.has_updated_at:
            prepared["updated_at"] = _serialize_datetime(_current_timestamp())
        if not prepared:
            row = conn.execute(f"SELECT 1 FROM {table.name} WHERE id = ?", (item_id,)).fetchone()
            return row is not None

        assignments = ", ".join(f"{column} = ?" for column in prepared)
        cursor = conn.execute(
            f"UPDATE {table.name} SET {assignments} WHERE id = ?",
            [*prepared.values(), item_id],
        )
        return cursor.rowcount > 0

    def _where_clause(
        self,
        table: ContentTable,
        where: Optional[Mapping[str, object]],
    ) -> Tuple[str, List[object]]:
        if not where:
            return "", []
        clauses: List[str] = []
        params: List[object] = []
        for column, value in where.items():
            if column not in table.columns:
                raise ValueError(f"Cannot filter {table.name} by '{column}'")
            if isinstance(value, (list, tuple, set, frozenset)):
                options = [_to_column_value(item) for item in value]
                if not options:
                    clauses.append("0")
                    continue
                clauses.append(f"{column} IN ({', '.join('?' for _ in options)})")
                params.extend(options)
            else:
                clauses.append(f"{column} = ?")
                params.append(_to_column_value(value))
        return " WHERE " + " AND ".join(clauses), params

    def _row_to_user(self, row: sqlite3.Row) -> User:
        return User(
            id=int(row["id"]),
            name=str(row["name"]),
            email=str(row["email"]),
            role=UserRole(row["role"]),
            status=UserStatus(row["status"]),
            phone=row["phone"],
            gender=row["gender"],
            date_of_birth=_parse_date(row["date_of_birth"]),
            country=row["country"],
            city=row["city"],
            bio=row["bio"],
            profile_photo=row["profile_photo"],
            created_at=_parse_datetime(str(row["created_at"])),
            updated_at=_parse_datetime(str(row["updated_at"])),
        )

    def _row_to_registration(self, row: sqlite3.Row) -> UserRegistration:
        return UserRegistration(
            id=int(row["id"]),
            user_id=int(row["user_id"]),
            motivation=str(row["motivation"]),
            field_category=str(row["field_category"]),
            has_experience=bool(row["has_experience"]),
            experience_description=row["experience_description"],
            teamwork_feelings=str(row["teamwork_feelings"]),
            future_goals=str(row["future_goals"]),
            skills=row["skills"],
            other_skills=row["other_skills"],
            hobbies=str(row["hobbies"]),
            availability_days=int(row["availability_days"]),
            availability_hours=int(row["availability_hours"]),
            linkedin=row["linkedin"],
            github=row["github"],
            created_at=_parse_datetime(str(row["created_at"])),
            updated_at=_parse_datetime(str(row["updated_at"])),
        )

    def _row_to_notification(self, row: sqlite3.Row) -> Notification:
        return Notification(
            id=int(row["id"]),
            user_id=int(row["user_id"]),
            type=NotificationType(row["type"]),
            title=str(row["title"]),
            message=str(row["message"]),
            is_read=bool(row["is_read"]),
            created_at=_parse_datetime(str(row["created_at"])),
        )

    def _row_to_publication(self, kind: PublicationKind, row: sqlite3.Row) -> Publication:
        images = json.loads(row["images"] or "[]")
        return Publication(
            id=int(row["id"]),
            kind=kind,
            title=str(row["title"]),
            description=str(row["description"]),
            content=row["content"],
            image=row["image"],
            images=tuple(str(item) for item in images),
            video=row["video"],
            tags=row["tags"],
            category_id=row["category_id"],
            author_id=row["author_id"],
            published=bool(row["published"]),
            featured=bool(row["featured"]),
            created_at=_parse_datetime(str(row["created_at"])),
            updated_at=_parse_datetime(str(row["updated_at"])),
            category_name=row["category_name"],
            author_name=row["author_name"],
            author_email=row["author_email"],
        )

    def _row_to_content(self, table: ContentTable, row: sqlite3.Row) -> Any:
        values: Dict[str, object] = {}
        for item in fields(table.model):
            raw = row[item.name]
            if item.name in ("created_at", "updated_at"):
                raw = _parse_datetime(str(raw))
            elif raw is not None and item.name in table.converters:
                raw = table.converters[item.name](raw)
            values[item.name] = raw
        return table.model(**values)


__all__ = ["CONTENT_TABLES", "ContentTable", "Database", "resolve_database_path"]
