"""Image upload storage and the admin upload endpoint."""
from __future__ import annotations

import logging
import re
import uuid
from dataclasses import dataclass
from functools import partial
from pathlib import Path, PurePosixPath
from typing import Dict, Optional

import anyio
from fastapi import APIRouter, Depends, FastAPI, File, Form, UploadFile

from .config import DEFAULT_MAX_UPLOAD_BYTES
from .errors import ValidationError
from .models import User
from .schemas import UploadResponse
from .security import AuthGuard

logger = logging.getLogger("arivelab.uploads")

ALLOWED_IMAGE_TYPES: Dict[str, str] = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
    "image/svg+xml": "svg",
}
_ALLOWED_EXTENSIONS = {"jpg", "jpeg", "png", "gif", "webp", "svg"}
_FOLDER_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")

UPLOAD_URL_PREFIX = "/uploads"
DEFAULT_FOLDER = "general"
PROFILE_FOLDER = "profiles"
PUBLICATION_FOLDER = "publications"


@dataclass(frozen=True)
class StoredImage:
    url: str
    path: Path
    original_name: str
    size: int
    content_type: str
    folder: str


def _describe_size(num_bytes: int) -> str:
    if num_bytes >= 1024 * 1024:
        return f"{num_bytes / (1024 * 1024):g}MB"
    if num_bytes >= 1024:
        return f"{num_bytes / 1024:g}KB"
    return f"{num_bytes} bytes"


def has_content(upload: Optional[UploadFile]) -> bool:
    """Browsers submit an empty part for file inputs left blank."""

    return upload is not None and bool(upload.filename)


class UploadStore:
    """Validate images and write them under ``<root>/<folder>/``."""

    def __init__(self, root: Path, *, max_bytes: int = DEFAULT_MAX_UPLOAD_BYTES) -> None:
        self._root = root
        self._max_bytes = max_bytes

    @property
    def root(self) -> Path:
        return self._root

    @property
    def max_bytes(self) -> int:
        return self._max_bytes

    def check_folder(self, folder: str) -> str:
        candidate = (folder or DEFAULT_FOLDER).strip()
        if not _FOLDER_PATTERN.fullmatch(candidate):
            raise ValidationError("Invalid folder name")
        return candidate

    async def read_image(self, upload: UploadFile) -> bytes:
        """Return the file's bytes once its type and size have been checked."""

        content_type = (upload.content_type or "").lower()
        if content_type not in ALLOWED_IMAGE_TYPES:
            raise ValidationError("Invalid file type. Only JPEG, PNG, GIF, WebP, and SVG are allowed.")

        data = await upload.read(self._max_bytes + 1)
        if len(data) > self._max_bytes:
            raise ValidationError(f"File too large. Maximum size is {_describe_size(self._max_bytes)}.")
        if not data:
            raise ValidationError("Uploaded file is empty")
        return data

    async def save_image(self, upload: UploadFile, folder: str = DEFAULT_FOLDER) -> StoredImage:
        folder = self.check_folder(folder)
        data = await self.read_image(upload)
        content_type = (upload.content_type or "").lower()

        original_name = PurePosixPath(upload.filename or "").name
        extension = PurePosixPath(original_name).suffix.lstrip(".").lower()
        if extension not in _ALLOWED_EXTENSIONS:
            extension = ALLOWED_IMAGE_TYPES[content_type]

        file_name = f"{uuid.uuid4().hex}.{extension}"
        target = self._root / folder / file_name
        await anyio.to_thread.run_sync(self._write, target, data)

        logger.info("Stored upload %s (%s, %d bytes)", target, content_type, len(data))
        return StoredImage(
            url=f"{UPLOAD_URL_PREFIX}/{folder}/{file_name}",
            path=target,
            original_name=original_name or file_name,
            size=len(data),
            content_type=content_type,
            folder=folder,
        )

    async def discard(self, image: StoredImage) -> None:
        await anyio.to_thread.run_sync(partial(image.path.unlink, missing_ok=True))
        logger.info("Removed upload %s", image.path)

    @staticmethod
    def _write(path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)


def register_upload_routes(app: FastAPI, *, guard: AuthGuard, store: UploadStore) -> None:
    router = APIRouter(prefix="/api/upload", tags=["uploads"])

    @router.post("/image", response_model=UploadResponse)
    async def upload_image(
        image: Optional[UploadFile] = File(default=None),
        folder: str = Form(default=DEFAULT_FOLDER),
        admin: User = Depends(guard.admin),
    ) -> UploadResponse:
        if not has_content(image):
            raise ValidationError("No file uploaded")
        stored = await store.save_image(image, folder)
        logger.info("Admin %s uploaded %s", admin.email, stored.url)
        return UploadResponse(
            image_url=stored.url,
            file_name=stored.original_name,
            file_size=stored.size,
            file_type=stored.content_type,
            folder=stored.folder,
        )

    app.include_router(router)


__all__ = [
    "ALLOWED_IMAGE_TYPES",
    "DEFAULT_FOLDER",
    "PROFILE_FOLDER",
    "PUBLICATION_FOLDER",
    "StoredImage",
    "UploadStore",
    "has_content",
    "register_upload_routes",
]
