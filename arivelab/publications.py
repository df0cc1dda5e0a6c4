"""Research and project posts: public listings and the author dashboard."""
from __future__ import annotations

import logging
from typing import Callable, List, Optional

from fastapi import APIRouter, Depends, FastAPI, Query, Request, status
from starlette.datastructures import UploadFile

from .database import Database
from .errors import ForbiddenError, NotFoundError, ValidationError
from .models import Publication, PublicationKind, User
from .schemas import PublicationCreate, PublicationOut, PublicationUpdate, SuccessResponse, publication_out
from .security import AuthGuard
from .uploads import PUBLICATION_FOLDER, StoredImage, UploadStore, has_content

logger = logging.getLogger("arivelab.publications")

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _form_text(value: object) -> Optional[str]:
    if not isinstance(value, str):
        return None
    return value.strip() or None


def _form_int(value: object, label: str) -> Optional[int]:
    text = _form_text(value)
    if text is None:
        return None
    try:
        return int(text)
    except ValueError as exc:
        raise ValidationError(f"{label} must be a number") from exc


def can_manage(user: User, publication: Publication) -> bool:
    return user.is_admin or publication.author_id == user.id


def register_publication_routes(
    app: FastAPI,
    *,
    database: Database,
    guard: AuthGuard,
    store: UploadStore,
) -> None:
    router = APIRouter(tags=["publications"])

    def _check_category(category_id: Optional[int]) -> None:
        if category_id is not None and database.get_content("categories", category_id) is None:
            raise ValidationError("Category not found")

    for kind in PublicationKind:
        _register_kind(router, kind, database, guard, store, _check_category)

    app.include_router(router)


def _register_kind(
    router: APIRouter,
    kind: PublicationKind,
    database: Database,
    guard: AuthGuard,
    store: UploadStore,
    check_category: Callable[[Optional[int]], None],
) -> None:
    label = kind.label
    public_path = f"/api/{kind.value}"
    dashboard_path = f"/api/dashboard/{kind.value}"

    def _load_owned(publication_id: int, user: User) -> Publication:
        publication = database.get_publication(kind, publication_id)
        if publication is None:
            raise NotFoundError(f"{label} not found")
        if not can_manage(user, publication):
            raise ForbiddenError("Forbidden")
        return publication

    @router.get(public_path, response_model=List[PublicationOut])
    async def list_published(
        featured: bool = Query(default=False),
        author_id: Optional[int] = Query(default=None, alias="authorId"),
        limit: Optional[int] = Query(default=None, ge=1, le=100),
        current_user: Optional[User] = Depends(guard.optional_user),
    ):
        if featured:
            items = database.list_publications(kind, published=True, featured=True, limit=limit)
        elif author_id is not None:
            with_drafts = current_user is not None and (current_user.is_admin or current_user.id == author_id)
            items = database.list_publications(
                kind,
                author_id=author_id,
                published=None if with_drafts else True,
                limit=limit,
            )
        else:
            items = database.list_publications(kind, published=True, limit=limit)
        return [publication_out(item) for item in items]

    @router.get(f"{public_path}/{{publication_id}}", response_model=PublicationOut)
    async def read_published(publication_id: int):
        publication = database.get_publication(kind, publication_id)
        if publication is None or not publication.published:
            raise NotFoundError(f"{label} not found")
        return publication_out(publication)

    @router.post(public_path, response_model=PublicationOut, status_code=status.HTTP_201_CREATED)
    async def submit_publication(request: Request, current_user: User = Depends(guard.current_user)):
        form = await request.form()
        title = _form_text(form.get("title"))
        description = _form_text(form.get("description"))
        if title is None or description is None:
            raise ValidationError("Title and description are required")
        category_id = _form_int(form.get("categoryId"), "Category")
        check_category(category_id)

        uploads = [item for item in form.getlist("images") if isinstance(item, UploadFile) and has_content(item)]
        stored: List[StoredImage] = []
        try:
            for upload in uploads:
                stored.append(await store.save_image(upload, PUBLICATION_FOLDER))
            publication = database.create_publication(
                kind,
                author_id=current_user.id,
                title=title,
                description=description,
                content=_form_text(form.get("content")),
                image=stored[0].url if stored else None,
                images=[image.url for image in stored],
                video=_form_text(form.get("video")),
                tags=_form_text(form.get("tags")),
                category_id=category_id,
                published=(_form_text(form.get("published")) or "").lower() in _TRUE_VALUES,
                featured=False,
            )
        except Exception:
            for image in stored:
                await store.discard(image)
            raise

        logger.info("%s %d submitted by %s", label, publication.id, current_user.email)
        return publication_out(publication)

    @router.get(dashboard_path, response_model=List[PublicationOut])
    async def list_dashboard(current_user: User = Depends(guard.current_user)):
        author_id = None if current_user.is_admin else current_user.id
        return [publication_out(item) for item in database.list_publications(kind, author_id=author_id)]

    @router.post(dashboard_path, response_model=PublicationOut, status_code=status.HTTP_201_CREATED)
    async def create_from_dashboard(payload: PublicationCreate, current_user: User = Depends(guard.current_user)):
        check_category(payload.category_id)
        values = payload.model_dump()
        if not current_user.is_admin:
            values["featured"] = False
        publication = database.create_publication(kind, author_id=current_user.id, **values)
        logger.info("%s %d created by %s", label, publication.id, current_user.email)
        return publication_out(publication)

    @router.get(f"{dashboard_path}/{{publication_id}}", response_model=PublicationOut)
    async def read_dashboard_item(publication_id: int, current_user: User = Depends(guard.current_user)):
        return publication_out(_load_owned(publication_id, current_user))

    @router.put(f"{dashboard_path}/{{publication_id}}", response_model=PublicationOut)
    async def update_dashboard_item(
        publication_id: int,
        payload: PublicationUpdate,
        current_user: User = Depends(guard.current_user),
    ):
        _load_owned(publication_id, current_user)
        values = payload.model_dump(exclude_unset=True)
        if not current_user.is_admin:
            values.pop("featured", None)
        if "category_id" in values:
            check_category(values["category_id"])
        publication = database.update_publication(kind, publication_id, **values)
        if publication is None:
            raise NotFoundError(f"{label} not found")
        logger.info("%s %d updated by %s", label, publication_id, current_user.email)
        return publication_out(publication)

    @router.delete(f"{dashboard_path}/{{publication_id}}", response_model=SuccessResponse)
    async def delete_dashboard_item(publication_id: int, current_user: User = Depends(guard.current_user)):
        _load_owned(publication_id, current_user)
        if not database.delete_publication(kind, publication_id):
            raise NotFoundError(f"{label} not found")
        logger.info("%s %d deleted by %s", label, publication_id, current_user.email)
        return SuccessResponse(message=f"{label} deleted successfully")


__all__ = ["can_manage", "register_publication_routes"]
