"""FastAPI application factory for the Arive Lab portal."""

from __future__ import annotations

import logging
import os
from typing import Dict, Optional

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from .accounts import register_account_routes
from .admin import register_admin_routes
from .config import Settings, trusted_proxy_hosts
from .content import register_content_routes
from .database import Database
from .errors import install_error_handlers
from .middleware import RequestLoggingMiddleware
from .publications import register_publication_routes
from .security import AuthGuard
from .sessions import SessionTokens
from .uploads import UPLOAD_URL_PREFIX, UploadStore, register_upload_routes

logger = logging.getLogger("arivelab.service")


def create_app(
    *,
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
) -> FastAPI:
    """Instantiate the portal API.

    ``settings`` defaults to :meth:`Settings.from_env`; ``database`` defaults
    to a :class:`Database` at ``settings.database_path``. The schema is
    created on startup if it does not exist yet.
    """

    settings = settings or Settings.from_env()
    db = database or Database(settings.database_path)
    db.initialize()

    if not settings.secure_cookies:
        logger.warning(
            "Session cookies are not marked as secure. Only disable secure cookies for local development."
        )

    tokens = SessionTokens(settings.jwt_secret, ttl=settings.token_ttl)
    guard = AuthGuard(db, tokens, secure_cookies=settings.secure_cookies)
    store = UploadStore(settings.upload_root, max_bytes=settings.max_upload_bytes)
    settings.upload_root.mkdir(parents=True, exist_ok=True)

    app = FastAPI(
        title="Arive Lab Portal API",
        version="1.0.0",
        description="Site content, membership registration and admin review for Arive Lab.",
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        ProxyHeadersMiddleware,
        trusted_hosts=trusted_proxy_hosts(os.getenv("ARIVELAB_TRUSTED_PROXIES")),
    )
    install_error_handlers(app)

    app.state.settings = settings
    app.state.database = db
    app.state.guard = guard
    app.state.upload_store = store

    @app.get("/healthz")
    async def healthcheck() -> Dict[str, str]:
        return {"status": "ok"}

    register_account_routes(app, database=db, guard=guard, store=store)
    register_admin_routes(app, database=db, guard=guard)
    register_content_routes(app, database=db, guard=guard)
    register_publication_routes(app, database=db, guard=guard, store=store)
    register_upload_routes(app, guard=guard, store=store)

    app.mount(UPLOAD_URL_PREFIX, StaticFiles(directory=settings.upload_root, check_dir=False), name="uploads")

    return app


__all__ = ["create_app"]
