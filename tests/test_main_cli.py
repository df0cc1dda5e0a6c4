import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from arivelab.database import Database
from arivelab.models import UserRole, UserStatus
from main import _parse_args, main

SEED_FILE = ROOT / "config" / "seed.yaml"


@pytest.fixture()
def db_path(tmp_path, monkeypatch):
    path = tmp_path / "portal.sqlite3"
    monkeypatch.setenv("ARIVELAB_DB_PATH", str(path))
    return path


def test_default_command_invokes_serve() -> None:
    args = _parse_args([])
    assert args.command == "serve"
    assert args.port == 8000


def test_default_command_accepts_options_without_subcommand() -> None:
    args = _parse_args(["--host", "127.0.0.1", "--port", "8080"])
    assert args.command == "serve"
    assert args.host == "127.0.0.1"
    assert args.port == 8080


def test_seed_subcommand_accepts_file() -> None:
    args = _parse_args(["seed", "--file", "content.yaml"])
    assert args.command == "seed"
    assert args.seed_file == "content.yaml"


def test_init_db_creates_schema(db_path, capsys) -> None:
    assert main(["init-db"]) == 0

    assert db_path.exists()
    assert "Database initialisation complete." in capsys.readouterr().out


def test_seed_fills_empty_tables_once(db_path, capsys) -> None:
    assert main(["seed", "--file", str(SEED_FILE)]) == 0
    first = capsys.readouterr().out
    assert "homepage: inserted 1 row(s)" in first
    assert "team_members: inserted 6 row(s)" in first

    database = Database(db_path)
    assert database.latest_content("homepage_settings").hero_title == "Welcome to Arive Lab"
    assert len(database.list_content("team_members")) == 6

    assert main(["seed", "--file", str(SEED_FILE)]) == 0
    assert "team_members: already populated, skipped" in capsys.readouterr().out
    assert len(database.list_content("team_members")) == 6


def test_seed_reports_missing_or_invalid_file(db_path, tmp_path, capsys) -> None:
    assert main(["seed", "--file", str(tmp_path / "missing.yaml")]) == 1
    assert "Seed file not found" in capsys.readouterr().err

    broken = tmp_path / "broken.yaml"
    broken.write_text("gallery:\n  - title: nope\n", encoding="utf-8")
    assert main(["seed", "--file", str(broken)]) == 1
    assert "Unknown seed sections: gallery" in capsys.readouterr().err


def test_users_command_lists_accounts(db_path, capsys) -> None:
    assert main(["users"]) == 0
    assert "No users are currently registered." in capsys.readouterr().out

    database = Database(db_path)
    database.create_user("Admin", "admin@arivelab.com", "admin-password-123", role=UserRole.ADMIN, status=UserStatus.APPROVED)
    database.create_user("Bob", "bob@example.com", "bob-password-1")

    assert main(["users"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[0].split() == ["ID", "Name", "Email", "Role", "Status"]
    assert any("admin@arivelab.com" in line and "ADMIN" in line and "APPROVED" in line for line in lines)
    assert any("bob@example.com" in line and "PENDING" in line for line in lines)


def test_serve_requires_jwt_secret(db_path, monkeypatch) -> None:
    monkeypatch.delenv("ARIVELAB_JWT_SECRET", raising=False)

    with pytest.raises(SystemExit) as excinfo:
        main(["serve", "--port", "8123"])
    assert "ARIVELAB_JWT_SECRET" in str(excinfo.value)


def test_serve_rejects_half_configured_tls(db_path, monkeypatch) -> None:
    monkeypatch.setenv("ARIVELAB_JWT_SECRET", "cli-secret")

    with pytest.raises(SystemExit) as excinfo:
        main(["--ssl-certfile", "cert.pem"])
    assert "--ssl-keyfile" in str(excinfo.value)
