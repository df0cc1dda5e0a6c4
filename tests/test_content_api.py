import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from arivelab.config import Settings
from arivelab.content import DEFAULT_ABOUT, DEFAULT_CONTACT_INFO, DEFAULT_HOMEPAGE
from arivelab.database import Database
from arivelab.models import UserRole, UserStatus
from arivelab.service import create_app

SECRET = "tests-secret-key"
ADMIN_EMAIL = "admin@arivelab.com"
ADMIN_PASSWORD = "admin-password-123"


@pytest.fixture()
def portal(tmp_path):
    database = Database(tmp_path / "portal.sqlite3")
    database.initialize()
    database.create_user("Admin", ADMIN_EMAIL, ADMIN_PASSWORD, role=UserRole.ADMIN, status=UserStatus.APPROVED)
    database.create_user("Bob", "bob@example.com", "bob-password-1", status=UserStatus.APPROVED)
    settings = Settings(database_path=database.path, jwt_secret=SECRET, upload_root=tmp_path / "uploads")
    with TestClient(create_app(settings=settings, database=database)) as client:
        yield client, database


def _login(client, email=ADMIN_EMAIL, password=ADMIN_PASSWORD):
    response = client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text


def test_singletons_fall_back_to_defaults_without_writing(portal):
    client, database = portal

    about = client.get("/api/about")
    assert about.status_code == 200
    assert about.json()["title"] == DEFAULT_ABOUT["title"]
    assert about.json()["id"] is None

    homepage = client.get("/api/homepage").json()
    assert homepage["heroTitle"] == DEFAULT_HOMEPAGE["hero_title"]
    assert homepage["heroCtaLink"] == "/register"

    contact = client.get("/api/contact-info").json()
    assert contact["email"] == DEFAULT_CONTACT_INFO["email"]
    assert contact["mapEmbed"].startswith("https://www.google.com/maps/embed")

    assert database.latest_content("about") is None
    assert database.latest_content("homepage_settings") is None


def test_singleton_update_requires_admin(portal):
    client, _ = portal

    assert client.put("/api/about", json={"title": "Hacked"}).status_code == 401

    _login(client, "bob@example.com", "bob-password-1")
    assert client.put("/api/homepage", json={"heroTitle": "Hacked"}).status_code == 401


def test_singleton_update_merges_with_defaults(portal):
    client, _ = portal
    _login(client)

    first = client.put("/api/homepage", json={"heroTitle": "Drive the future"})
    assert first.status_code == 200, first.text
    assert first.json()["heroTitle"] == "Drive the future"
    assert first.json()["heroSubtitle"] == DEFAULT_HOMEPAGE["hero_subtitle"]

    second = client.put("/api/homepage", json={"bannerVideo": "/uploads/general/intro.mp4"})
    assert second.json()["id"] == first.json()["id"]
    assert second.json()["heroTitle"] == "Drive the future"

    public = client.get("/api/homepage").json()
    assert public["bannerVideo"] == "/uploads/general/intro.mp4"

    assert client.put("/api/about", json={"title": ""}).status_code == 400


def test_category_crud_and_type_filter(portal):
    client, _ = portal
    _login(client)

    research = client.post("/api/categories", json={"name": "Batteries", "type": "RESEARCH"})
    assert research.status_code == 201, research.text
    project = client.post("/api/categories", json={"name": "Race car", "type": "PROJECT"})
    assert project.status_code == 201

    assert client.post("/api/categories", json={"name": "No type"}).status_code == 400
    assert client.post("/api/categories", json={"name": "Bad", "type": "GARDEN"}).status_code == 400

    only_projects = client.get("/api/categories", params={"type": "PROJECT"}).json()
    assert [item["name"] for item in only_projects] == ["Race car"]
    assert len(client.get("/api/categories").json()) == 2

    category_id = research.json()["id"]
    renamed = client.put(f"/api/categories/{category_id}", json={"name": "Battery cells"})
    assert renamed.json()["name"] == "Battery cells"
    assert renamed.json()["type"] == "RESEARCH"

    assert client.delete(f"/api/categories/{category_id}").json()["success"] is True
    missing = client.delete(f"/api/categories/{category_id}")
    assert missing.status_code == 404
    assert missing.json() == {"error": "Category not found"}
    assert client.put("/api/categories/9999", json={"name": "x"}).status_code == 404


def test_collection_mutations_require_admin(portal):
    client, database = portal
    value = database.create_content("core_values", {"title": "Safety", "description": "First"})

    assert client.post("/api/core-values", json={"title": "x", "description": "y"}).status_code == 401
    _login(client, "bob@example.com", "bob-password-1")
    assert client.put(f"/api/core-values/{value.id}", json={"title": "x"}).status_code == 401
    assert client.delete(f"/api/core-values/{value.id}").status_code == 401

    assert [item["title"] for item in client.get("/api/core-values").json()] == ["Safety"]


def test_team_members_ordering_and_featured_filter(portal):
    client, _ = portal
    _login(client)
    members = [
        {"name": "Intern", "role": "Intern", "teamRole": "INTERN", "displayOrder": 1},
        {"name": "Founder", "role": "CEO", "teamRole": "FOUNDER", "displayOrder": 4},
        {"name": "Coordinator", "role": "Lead", "teamRole": "COORDINATOR", "displayOrder": 2},
        {"name": "Member", "role": "Engineer", "displayOrder": 3},
    ]
    for member in members:
        assert client.post("/api/team-members", json=member).status_code == 201

    everyone = client.get("/api/team-members").json()
    assert [item["name"] for item in everyone] == ["Intern", "Coordinator", "Member", "Founder"]
    assert everyone[2]["teamRole"] == "MEMBER"

    featured = client.get("/api/team-members", params={"featured": "true"}).json()
    assert [item["name"] for item in featured] == ["Coordinator", "Founder"]


def test_social_links_upsert_by_id(portal):
    client, _ = portal
    _login(client)

    created = client.post("/api/social", json={"platform": "LinkedIn", "url": "https://linkedin.com/arive"})
    assert created.status_code == 201
    link_id = created.json()["id"]

    updated = client.post(
        "/api/social",
        json={"id": link_id, "platform": "LinkedIn", "url": "https://linkedin.com/company/arive"},
    )
    assert updated.json()["id"] == link_id
    assert updated.json()["url"] == "https://linkedin.com/company/arive"
    assert len(client.get("/api/social").json()) == 1

    unknown = client.post("/api/social", json={"id": 9999, "platform": "GitHub", "url": "https://github.com/arive"})
    assert unknown.status_code == 201
    assert unknown.json()["id"] != 9999
    assert len(client.get("/api/social").json()) == 2


def test_timeline_accepts_numeric_years(portal):
    client, _ = portal
    _login(client)

    response = client.post("/api/timeline-milestones", json={"year": 2021, "title": "Founded", "displayOrder": 1})
    assert response.status_code == 201, response.text
    assert response.json()["year"] == "2021"

    client.post("/api/timeline-milestones", json={"year": "2019", "title": "Idea", "displayOrder": 0})
    assert [item["title"] for item in client.get("/api/timeline-milestones").json()] == ["Idea", "Founded"]


def test_contact_submission_flow(portal):
    client, database = portal

    anonymous = client.post(
        "/api/contact-submissions",
        json={"name": "Visitor", "email": "visitor@example.com", "message": "Hello"},
    )
    assert anonymous.status_code == 201, anonymous.text
    assert anonymous.json()["userId"] is None

    assert client.post("/api/contact-submissions", json={"name": "x", "email": "nope", "message": "Hi"}).status_code == 400
    assert client.post("/api/contact-submissions", json={"name": "x", "email": "a@b.c"}).status_code == 400

    _login(client, "bob@example.com", "bob-password-1")
    signed_in = client.post(
        "/api/contact-submissions",
        json={"name": "Bob", "email": "bob@example.com", "message": "Question"},
    )
    bob = database.get_user_by_email("bob@example.com")
    assert signed_in.json()["userId"] == bob.id
    assert client.get("/api/contact-submissions").status_code == 401

    client.cookies.clear()
    _login(client)
    listing = client.get("/api/contact-submissions", params={"limit": 1})
    assert listing.status_code == 200
    body = listing.json()
    assert body["pagination"] == {"page": 1, "limit": 1, "total": 2, "pages": 2}
    assert body["submissions"][0]["message"] == "Question"
