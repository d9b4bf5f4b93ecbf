"""
전단지(포스터) API

업로드 이미지는 WebP(품질 85)로 변환해 posters/ 아래에 저장한다.
"""

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import List, Optional, Tuple
import uuid
import logging
import re

from app.core.config import settings
from app.core.database import get_db
from app.core.i18n import get_lang, t
from app.core.security import get_current_active_user
from app.dependencies import get_image_composer, get_or_404, get_storage_backend
from app.models.poster import Poster
from app.models.user import User
from app.schemas.common import MessageResponse
from app.schemas.poster import PosterResponse
from app.services.image_composer import ImageComposer
from app.services.storage import Storage, delete_quietly, now_ms

logger = logging.getLogger(__name__)

router = APIRouter()


def poster_key(name: str) -> str:
    return f"posters/{now_ms()}_{re.sub(r'[^a-zA-Z0-9]', '_', name)}.webp"


async def _store_poster_file(
    file: UploadFile,
    name: str,
    storage: Storage,
    composer: ImageComposer,
    lang: str,
) -> Tuple[str, str, int, int]:
    """검증 → WebP 변환 → 저장. (url, key, 변환 크기, 원본 크기)"""
    if not (file.content_type or "").startswith("image/"):
        raise HTTPException(status_code=400, detail=t("images_only", lang))
    data = await file.read()
    if len(data) > settings.MAX_POSTER_BYTES:
        raise HTTPException(
            status_code=400,
            detail=t("file_too_large", lang, limit=settings.MAX_POSTER_BYTES // (1024 * 1024)),
        )
    try:
        webp = composer.to_webp(data)
    except ValueError:
        raise HTTPException(status_code=400, detail=t("invalid_image", lang))

    key = poster_key(name)
    try:
        url = storage.save_bytes(webp, content_type="image/webp", key=key)
    except Exception as e:
        logger.exception(f"[posters] upload failed: {e}")
        raise HTTPException(status_code=500, detail=t("upload_failed", lang))
    return url, key, len(webp), len(data)


@router.get("", response_model=List[PosterResponse])
async def list_posters(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    res = await db.execute(select(Poster).order_by(Poster.created_at.desc()))
    return list(res.scalars().all())


@router.get("/{poster_id}", response_model=PosterResponse)
async def get_poster(
    poster_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    lang: str = Depends(get_lang),
):
    return await get_or_404(db, Poster, poster_id, "poster", lang)


@router.post("", response_model=PosterResponse, status_code=status.HTTP_201_CREATED)
async def create_poster(
    name: str = Form(""),
    file: Optional[UploadFile] = File(None),
    db: AsyncSession = Depends(get_db),
    storage: Storage = Depends(get_storage_backend),
    composer: ImageComposer = Depends(get_image_composer),
    current_user: User = Depends(get_current_active_user),
    lang: str = Depends(get_lang),
):
    """전단지 등록"""
    name = name.strip()
    if not name or file is None:
        raise HTTPException(status_code=400, detail=t("missing_fields", lang, fields="name, file"))

    url, key, size, original_size = await _store_poster_file(file, name, storage, composer, lang)
    try:
        poster = Poster(
            name=name,
            url=url,
            storage_key=key,
            size=size,
            original_size=original_size,
            original_name=file.filename,
            created_by=str(current_user.id),
            updated_by=str(current_user.id),
        )
        db.add(poster)
        await db.commit()
        await db.refresh(poster)
        return poster
    except Exception as e:
        await db.rollback()
        delete_quietly(storage, key, tag="posters")
        logger.exception(f"[posters] create failed: {e}")
        raise HTTPException(status_code=500, detail=t("save_failed", lang, name="poster"))


@router.put("/{poster_id}", response_model=PosterResponse)
async def update_poster(
    poster_id: uuid.UUID,
    name: str = Form(""),
    file: Optional[UploadFile] = File(None),
    db: AsyncSession = Depends(get_db),
    storage: Storage = Depends(get_storage_backend),
    composer: ImageComposer = Depends(get_image_composer),
    current_user: User = Depends(get_current_active_user),
    lang: str = Depends(get_lang),
):
    """전단지 수정. 파일을 교체하면 이전 파일은 삭제한다(실패 무시)."""
    poster = await get_or_404(db, Poster, poster_id, "poster", lang)
    name = name.strip()
    if not name:
        raise HTTPException(status_code=400, detail=t("missing_fields", lang, fields="name"))

    old_key = new_key = None
    if file is not None and file.filename:
        url, new_key, size, original_size = await _store_poster_file(file, name, storage, composer, lang)
        old_key = poster.storage_key
        poster.url = url
        poster.storage_key = new_key
        poster.size = size
        poster.original_size = original_size
        poster.original_name = file.filename

    try:
        poster.name = name
        poster.updated_by = str(current_user.id)
        await db.commit()
        await db.refresh(poster)
    except Exception as e:
        await db.rollback()
        delete_quietly(storage, new_key, tag="posters")
        logger.exception(f"[posters] update failed: {e}")
        raise HTTPException(status_code=500, detail=t("update_failed", lang, name="poster"))

    if old_key:
        delete_quietly(storage, old_key, tag="posters")
    return poster


@router.delete("/{poster_id}", response_model=MessageResponse)
async def delete_poster(
    poster_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    storage: Storage = Depends(get_storage_backend),
    current_user: User = Depends(get_current_active_user),
    lang: str = Depends(get_lang),
):
    poster = await get_or_404(db, Poster, poster_id, "poster", lang)
    key = poster.storage_key
    try:
        await db.delete(poster)
        await db.commit()
    except Exception as e:
        await db.rollback()
        logger.exception(f"[posters] delete failed: {e}")
        raise HTTPException(status_code=500, detail=t("delete_failed", lang, name="poster"))

    delete_quietly(storage, key, tag="posters")
    return MessageResponse(message=t("deleted", lang, name="poster"))
