import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from arivelab.config import Settings
from arivelab.database import Database
from arivelab.models import UserRole, UserStatus
from arivelab.service import create_app
from arivelab.uploads import _describe_size

SECRET = "tests-secret-key"
ADMIN_EMAIL = "admin@arivelab.com"
ADMIN_PASSWORD = "admin-password-123"
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


@pytest.fixture()
def portal(tmp_path):
    database = Database(tmp_path / "portal.sqlite3")
    database.initialize()
    database.create_user("Admin", ADMIN_EMAIL, ADMIN_PASSWORD, role=UserRole.ADMIN, status=UserStatus.APPROVED)
    database.create_user("Bob", "bob@example.com", "bob-password-1", status=UserStatus.APPROVED)
    settings = Settings(
        database_path=database.path,
        jwt_secret=SECRET,
        upload_root=tmp_path / "uploads",
        max_upload_bytes=1024,
    )
    with TestClient(create_app(settings=settings, database=database)) as client:
        yield client, settings


def _login(client, email=ADMIN_EMAIL, password=ADMIN_PASSWORD):
    response = client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text


def test_admin_upload_is_stored_and_served(portal):
    client, settings = portal
    _login(client)

    response = client.post(
        "/api/upload/image",
        data={"folder": "team"},
        files={"image": ("portrait.png", PNG_BYTES, "image/png")},
    )

    assert response.status_code == 200, response.text
    body = response.json()
    assert body["success"] is True
    assert body["fileName"] == "portrait.png"
    assert body["fileSize"] == len(PNG_BYTES)
    assert body["fileType"] == "image/png"
    assert body["folder"] == "team"
    assert body["imageUrl"].startswith("/uploads/team/")
    assert body["imageUrl"].endswith(".png")

    stored = settings.upload_root / body["imageUrl"][len("/uploads/"):]
    assert stored.read_bytes() == PNG_BYTES
    assert client.get(body["imageUrl"]).content == PNG_BYTES


def test_upload_defaults_to_general_folder(portal):
    client, _ = portal
    _login(client)

    response = client.post("/api/upload/image", files={"image": ("logo.svg", b"<svg/>", "image/svg+xml")})

    assert response.status_code == 200, response.text
    assert response.json()["imageUrl"].startswith("/uploads/general/")
    assert response.json()["imageUrl"].endswith(".svg")


def test_upload_requires_admin(portal):
    client, settings = portal

    anonymous = client.post("/api/upload/image", files={"image": ("a.png", PNG_BYTES, "image/png")})
    assert anonymous.status_code == 401

    _login(client, "bob@example.com", "bob-password-1")
    member = client.post("/api/upload/image", files={"image": ("a.png", PNG_BYTES, "image/png")})
    assert member.status_code == 401
    assert not (settings.upload_root / "general").exists()


@pytest.mark.parametrize(
    "files, data, message",
    [
        ({"image": ("notes.txt", b"hello", "text/plain")}, {}, "Invalid file type"),
        ({"image": ("huge.png", b"\x00" * 2048, "image/png")}, {}, "File too large"),
        ({"image": ("a.png", PNG_BYTES, "image/png")}, {"folder": "../etc"}, "Invalid folder name"),
        (None, {"folder": "general"}, "No file uploaded"),
    ],
)
def test_upload_rejections(portal, files, data, message):
    client, settings = portal
    _login(client)

    response = client.post("/api/upload/image", data=data, files=files)

    assert response.status_code == 400
    assert response.json()["error"].startswith(message)
    assert not any(path.is_file() for path in settings.upload_root.rglob("*"))


def test_size_limit_is_reported_in_readable_units(portal):
    client, _ = portal
    _login(client)

    response = client.post("/api/upload/image", files={"image": ("huge.png", b"\x00" * 2048, "image/png")})

    assert response.status_code == 400
    assert response.json() == {"error": "File too large. Maximum size is 1KB."}


@pytest.mark.parametrize(
    "max_bytes, expected",
    [(10 * 1024 * 1024, "10MB"), (1536 * 1024, "1.5MB"), (2048, "2KB"), (500, "500 bytes")],
)
def test_describe_size(max_bytes, expected):
    assert _describe_size(max_bytes) == expected
