import json
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from jose import jwt

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from arivelab.config import Settings
from arivelab.database import Database
from arivelab.membership import DECISIONS
from arivelab.models import NotificationType, UserRole, UserStatus
from arivelab.security import AUTH_COOKIE_NAME
from arivelab.service import create_app
from arivelab.sessions import SessionTokens

SECRET = "tests-secret-key"
ADMIN_EMAIL = "admin@arivelab.com"
ADMIN_PASSWORD = "admin-password-123"
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


def registration_form(**overrides):
    form = {
        "name": "Alice Example",
        "email": "alice@example.com",
        "password": "alice-password-1",
        "phone": "+1 555 0100",
        "gender": "female",
        "dateOfBirth": "1995-04-12",
        "country": "Kenya",
        "city": "Nairobi",
        "motivation": "I want to work on electric drivetrains",
        "fieldCategory": "Electric Vehicles",
        "hasExperience": "true",
        "experienceDescription": "Formula Student team",
        "teamworkFeelings": "I enjoy working in teams",
        "futureGoals": "Publish research",
        "skills": json.dumps(["Python", "CAD"]),
        "hobbies": "Cycling",
        "availabilityDays": "3",
        "availabilityHours": "10",
    }
    form.update(overrides)
    return form


@pytest.fixture()
def portal(tmp_path):
    database = Database(tmp_path / "portal.sqlite3")
    database.initialize()
    settings = Settings(database_path=database.path, jwt_secret=SECRET, upload_root=tmp_path / "uploads")
    app = create_app(settings=settings, database=database)
    with TestClient(app) as client:
        yield client, database, settings


def _login(client, email, password):
    return client.post("/api/auth/login", json={"email": email, "password": password})


def test_register_creates_pending_member(portal):
    client, database, _ = portal

    response = client.post("/api/auth/register", data=registration_form())

    assert response.status_code == 201, response.text
    body = response.json()
    assert body["email"] == "alice@example.com"
    assert body["status"] == "PENDING"
    assert body["role"] == "MEMBER"
    assert body["dateOfBirth"] == "1995-04-12"
    assert "password" not in body
    assert "passwordHash" not in body

    registration = database.get_registration(body["id"])
    assert registration.skills == "Python, CAD"
    assert registration.has_experience is True
    notices = database.list_notifications_for_user(body["id"])
    assert len(notices) == 1
    assert notices[0].type is NotificationType.NEW_REGISTRATION
    assert notices[0].title == "New User Registration"
    assert notices[0].message == "New user Alice Example has registered and is pending approval."


def test_register_with_existing_email_creates_nothing(portal):
    client, database, _ = portal
    assert client.post("/api/auth/register", data=registration_form()).status_code == 201

    response = client.post("/api/auth/register", data=registration_form(name="Impostor", email="ALICE@example.com"))

    assert response.status_code == 400
    assert response.json() == {"error": "User already exists"}
    assert len(database.list_users()) == 1


@pytest.mark.parametrize("field", ["name", "email", "password", "phone", "gender", "dateOfBirth", "country", "city"])
def test_register_requires_personal_details(portal, field):
    client, database, _ = portal

    response = client.post("/api/auth/register", data=registration_form(**{field: ""}))

    assert response.status_code == 400
    assert response.json() == {"error": "All personal details are required"}
    assert database.list_users() == []


@pytest.mark.parametrize("field", ["motivation", "fieldCategory", "hobbies", "availabilityHours"])
def test_register_requires_questionnaire(portal, field):
    client, _, _ = portal

    response = client.post("/api/auth/register", data=registration_form(**{field: " "}))

    assert response.status_code == 400
    assert response.json() == {"error": "All research and motivation details are required"}


def test_register_rejects_bad_numbers_and_dates(portal):
    client, _, _ = portal

    days = client.post("/api/auth/register", data=registration_form(availabilityDays="three"))
    assert days.status_code == 400
    assert "whole number" in days.json()["error"]

    birthday = client.post("/api/auth/register", data=registration_form(dateOfBirth="12/04/1995"))
    assert birthday.status_code == 400


def test_register_stores_profile_photo(portal):
    client, database, settings = portal

    response = client.post(
        "/api/auth/register",
        data=registration_form(),
        files={"profilePhoto": ("me.png", PNG_BYTES, "image/png")},
    )

    assert response.status_code == 201, response.text
    photo = response.json()["profilePhoto"]
    assert photo.startswith("/uploads/profiles/")
    stored = settings.upload_root / photo[len("/uploads/"):]
    assert stored.read_bytes() == PNG_BYTES

    served = client.get(photo)
    assert served.status_code == 200
    assert served.content == PNG_BYTES


def test_register_with_invalid_photo_writes_nothing(portal):
    client, database, settings = portal

    response = client.post(
        "/api/auth/register",
        data=registration_form(),
        files={"profilePhoto": ("notes.txt", b"hello", "text/plain")},
    )

    assert response.status_code == 400
    assert database.list_users() == []
    assert not (settings.upload_root / "profiles").exists()


def test_duplicate_registration_does_not_keep_uploaded_photo(portal):
    client, _, settings = portal
    assert client.post("/api/auth/register", data=registration_form()).status_code == 201

    response = client.post(
        "/api/auth/register",
        data=registration_form(),
        files={"profilePhoto": ("me.png", PNG_BYTES, "image/png")},
    )

    assert response.status_code == 400
    profiles = settings.upload_root / "profiles"
    assert not profiles.exists() or list(profiles.iterdir()) == []


@pytest.mark.parametrize("status", [UserStatus.PENDING, UserStatus.SUSPENDED, UserStatus.REJECTED])
def test_login_refuses_inactive_accounts_whatever_the_password(portal, status):
    client, database, _ = portal
    database.create_user("Bob", "bob@example.com", "bob-password-1", status=status)

    right = _login(client, "bob@example.com", "bob-password-1")
    wrong = _login(client, "bob@example.com", "not-the-password")

    assert right.status_code == 403
    assert wrong.status_code == 403
    assert right.json() == wrong.json()
    assert AUTH_COOKIE_NAME not in right.cookies


def test_login_failures(portal):
    client, database, _ = portal
    database.create_user("Bob", "bob@example.com", "bob-password-1", status=UserStatus.APPROVED)

    assert _login(client, "", "").status_code == 400
    assert client.post("/api/auth/login", json={"email": "bob@example.com"}).status_code == 400

    unknown = _login(client, "nobody@example.com", "whatever")
    assert unknown.status_code == 401
    assert unknown.json() == {"error": "Invalid credentials"}

    wrong = _login(client, "bob@example.com", "wrong-password")
    assert wrong.status_code == 401
    assert wrong.json() == {"error": "Invalid credentials"}


def test_login_sets_strict_http_only_cookie_with_stored_role(portal):
    client, database, _ = portal
    admin = database.create_user(
        "Admin", ADMIN_EMAIL, ADMIN_PASSWORD, role=UserRole.ADMIN, status=UserStatus.APPROVED
    )

    response = _login(client, ADMIN_EMAIL.upper(), ADMIN_PASSWORD)

    assert response.status_code == 200, response.text
    body = response.json()
    assert body["user"]["id"] == admin.id
    assert body["user"]["role"] == "ADMIN"

    cookie_header = response.headers["set-cookie"].lower()
    assert cookie_header.startswith(f"{AUTH_COOKIE_NAME}=")
    assert "httponly" in cookie_header
    assert "samesite=strict" in cookie_header
    assert "max-age=86400" in cookie_header
    assert "; secure" not in cookie_header

    token = response.cookies[AUTH_COOKIE_NAME]
    assert token == body["token"]
    assert jwt.get_unverified_claims(token)["userId"] == admin.id
    claims = SessionTokens(SECRET).decode(token)
    assert claims.user_id == admin.id
    assert claims.role is UserRole.ADMIN


def test_secure_cookie_flag_follows_settings(tmp_path):
    database = Database(tmp_path / "portal.sqlite3")
    database.initialize()
    database.create_user("Bob", "bob@example.com", "bob-password-1", status=UserStatus.APPROVED)
    settings = Settings(
        database_path=database.path,
        jwt_secret=SECRET,
        upload_root=tmp_path / "uploads",
        secure_cookies=True,
    )

    with TestClient(create_app(settings=settings, database=database)) as client:
        response = _login(client, "bob@example.com", "bob-password-1")

    assert response.status_code == 200
    assert "; secure" in response.headers["set-cookie"].lower()


def test_me_and_logout(portal):
    client, database, _ = portal
    bob = database.create_user("Bob", "bob@example.com", "bob-password-1", status=UserStatus.APPROVED)

    assert client.get("/api/auth/me").status_code == 401

    assert _login(client, "bob@example.com", "bob-password-1").status_code == 200
    me = client.get("/api/auth/me")
    assert me.status_code == 200
    assert me.json() == {"userId": bob.id, "email": "bob@example.com", "role": "MEMBER"}

    logout = client.post("/api/auth/logout")
    assert logout.status_code == 200
    assert logout.json() == {"success": True}
    assert client.get("/api/auth/me").status_code == 401


def test_me_rejects_token_of_suspended_account(portal):
    client, database, _ = portal
    bob = database.create_user("Bob", "bob@example.com", "bob-password-1", status=UserStatus.APPROVED)
    assert _login(client, "bob@example.com", "bob-password-1").status_code == 200

    database.apply_status_change(bob.id, UserStatus.SUSPENDED, DECISIONS["suspend"].notification())

    assert client.get("/api/auth/me").status_code == 401


def test_profile_access_rules(portal):
    client, database, _ = portal
    bob = database.create_user("Bob", "bob@example.com", "bob-password-1", status=UserStatus.APPROVED)
    carol = database.create_user("Carol", "carol@example.com", "carol-password-1", status=UserStatus.APPROVED)
    database.create_user("Admin", ADMIN_EMAIL, ADMIN_PASSWORD, role=UserRole.ADMIN, status=UserStatus.APPROVED)

    assert client.get(f"/api/user/{bob.id}").status_code == 401

    assert _login(client, "bob@example.com", "bob-password-1").status_code == 200
    own = client.get(f"/api/user/{bob.id}")
    assert own.status_code == 200
    assert own.json()["name"] == "Bob"
    assert own.json()["registration"] is None

    assert client.get(f"/api/user/{carol.id}").status_code == 403
    assert client.put(f"/api/user/{carol.id}", json={"bio": "hijacked"}).status_code == 403

    updated = client.put(f"/api/user/{bob.id}", json={"bio": "EV researcher", "city": "Mombasa", "dateOfBirth": "1990-01-02"})
    assert updated.status_code == 200, updated.text
    assert updated.json()["bio"] == "EV researcher"
    assert updated.json()["dateOfBirth"] == "1990-01-02"
    assert database.get_user(bob.id).city == "Mombasa"

    client.cookies.clear()
    assert _login(client, ADMIN_EMAIL, ADMIN_PASSWORD).status_code == 200
    assert client.get(f"/api/user/{carol.id}").json()["email"] == "carol@example.com"
    assert client.get("/api/user/9999").status_code == 404


def test_password_with_surrounding_spaces_logs_in_as_typed(portal):
    client, database, _ = portal
    password = "  spaced-password-1 "
    registered = client.post("/api/auth/register", data=registration_form(password=password))
    assert registered.status_code == 201, registered.text
    user_id = registered.json()["id"]
    database.apply_status_change(user_id, UserStatus.APPROVED, DECISIONS["approve"].notification())

    assert _login(client, "alice@example.com", "spaced-password-1").status_code == 401
    response = _login(client, "alice@example.com", password)

    assert response.status_code == 200, response.text
    assert response.json()["user"]["id"] == user_id


def test_profile_includes_registration_answers(portal):
    client, database, _ = portal
    registered = client.post("/api/auth/register", data=registration_form())
    user_id = registered.json()["id"]
    database.apply_status_change(user_id, UserStatus.APPROVED, DECISIONS["approve"].notification())
    assert _login(client, "alice@example.com", "alice-password-1").status_code == 200

    profile = client.get(f"/api/user/{user_id}")

    assert profile.status_code == 200, profile.text
    body = profile.json()
    assert body["email"] == "alice@example.com"
    assert body["registration"]["fieldCategory"] == "Electric Vehicles"
    assert body["registration"]["skills"] == "Python, CAD"
    assert body["registration"]["availabilityHours"] == 10
    assert "passwordHash" not in body
