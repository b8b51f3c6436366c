"""Filesystem storage for user avatar uploads."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from fastapi import HTTPException, UploadFile, status

from app.config import get_settings

_CHUNK_SIZE: Final[int] = 1024 * 1024


@dataclass(slots=True)
class StoredFile:
    file_name: str
    content_type: str | None
    file_size: int
    relative_path: str


def _media_root() -> Path:
    root = get_settings().media_root
    root.mkdir(parents=True, exist_ok=True)
    return root


async def store_user_avatar(user_id: int, upload: UploadFile) -> StoredFile:
    """Persist an avatar image, replacing whatever the user uploaded before."""

    if not upload.content_type or not upload.content_type.startswith("image/"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Avatar must be an image file",
        )

    limit = get_settings().max_upload_size
    target_dir = _media_root() / "avatars" / f"user_{user_id}"
    target_dir.mkdir(parents=True, exist_ok=True)
    for existing in target_dir.iterdir():
        if existing.is_file():
            existing.unlink(missing_ok=True)

    original_name = upload.filename or "avatar.png"
    absolute_path = target_dir / f"avatar{Path(original_name).suffix or '.png'}"

    total_size = 0
    try:
        with absolute_path.open("wb") as buffer:
            while chunk := await upload.read(_CHUNK_SIZE):
                total_size += len(chunk)
                if total_size > limit:
                    raise HTTPException(
                        status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                        detail="Avatar exceeds allowed size",
                    )
                buffer.write(chunk)
    except HTTPException:
        absolute_path.unlink(missing_ok=True)
        raise
    finally:
        await upload.close()

    return StoredFile(
        file_name=original_name,
        content_type=upload.content_type,
        file_size=total_size,
        relative_path=os.path.relpath(absolute_path, _media_root()),
    )


def resolve_path(relative_path: str) -> Path:
    """Map a stored relative path back to a file under the media root."""

    root = _media_root().resolve()
    candidate = (root / relative_path).resolve()
    if not candidate.is_relative_to(root):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid file path")
    if not candidate.is_file():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found")
    return candidate
