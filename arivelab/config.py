"""Runtime settings and seed-content loading for the Arive Lab portal."""
from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Dict, List, Mapping, Optional

import yaml

PROJECT_ROOT = Path(__file__).resolve().parent.parent

DEFAULT_TOKEN_TTL = timedelta(hours=24)
DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024

SINGLETON_SECTIONS = ("homepage", "about", "contact_info")
LIST_SECTIONS = ("categories", "core_values", "social_links", "team_members", "timeline_milestones")


def env_flag(value: Optional[str], default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def resolve_database_path(env_value: Optional[str]) -> Path:
    """Resolve the on-disk path for the portal database."""

    if env_value:
        return Path(env_value).expanduser().resolve(strict=False)
    return (PROJECT_ROOT / "data" / "arivelab.sqlite3").resolve(strict=False)


def resolve_upload_root(env_value: Optional[str]) -> Path:
    if env_value:
        return Path(env_value).expanduser().resolve(strict=False)
    return (PROJECT_ROOT / "public" / "uploads").resolve(strict=False)


def resolve_seed_path(env_value: Optional[str]) -> Path:
    """Resolve the path to the YAML file holding the default site content."""
    if env_value:
        return Path(env_value).expanduser().resolve(strict=False)
    return (PROJECT_ROOT / "config" / "seed.yaml").resolve(strict=False)


@dataclass(frozen=True)
class Settings:
    """Configuration consumed by :func:`arivelab.service.create_app`."""

    database_path: Path
    jwt_secret: str
    upload_root: Path
    secure_cookies: bool = False
    token_ttl: timedelta = DEFAULT_TOKEN_TTL
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES

    @staticmethod
    def from_env(environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ

        secret = (env.get("ARIVELAB_JWT_SECRET") or "").strip()
        if not secret:
            raise RuntimeError("ARIVELAB_JWT_SECRET must be configured to sign session tokens")

        production = (env.get("ARIVELAB_ENV") or "development").strip().lower() == "production"
        secure_cookies = env_flag(env.get("ARIVELAB_COOKIE_SECURE"), production)

        return Settings(
            database_path=resolve_database_path(env.get("ARIVELAB_DB_PATH")),
            jwt_secret=secret,
            upload_root=resolve_upload_root(env.get("ARIVELAB_UPLOAD_DIR")),
            secure_cookies=secure_cookies,
        )


def trusted_proxy_hosts(env_value: Optional[str]) -> List[str] | str:
    if not env_value:
        return "*"
    hosts = [item.strip() for item in env_value.split(",") if item.strip()]
    return hosts or "*"


def load_seed_content(path: Path) -> Dict[str, object]:
    """Load default site content from a YAML file.

    The file is a mapping whose keys are the section names listed in
    ``SINGLETON_SECTIONS`` (each a mapping of fields) and ``LIST_SECTIONS``
    (each a list of mappings). Unknown sections are rejected so typos do not
    silently drop content.
    """
    with path.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}

    if not isinstance(raw, dict):
        raise ValueError("Seed file must contain a mapping of sections")

    unknown = set(raw) - set(SINGLETON_SECTIONS) - set(LIST_SECTIONS)
    if unknown:
        raise ValueError(f"Unknown seed sections: {', '.join(sorted(unknown))}")

    for section in SINGLETON_SECTIONS:
        if section in raw and not isinstance(raw[section], dict):
            raise ValueError(f"Seed section '{section}' must be a mapping")
    for section in LIST_SECTIONS:
        if section not in raw:
            continue
        items = raw[section]
        if not isinstance(items, list) or not all(isinstance(item, dict) for item in items):
            raise ValueError(f"Seed section '{section}' must be a list of mappings")

    return raw


__all__ = [
    "LIST_SECTIONS",
    "SINGLETON_SECTIONS",
    "Settings",
    "env_flag",
    "load_seed_content",
    "resolve_database_path",
    "resolve_seed_path",
    "resolve_upload_root",
    "trusted_proxy_hosts",
]
