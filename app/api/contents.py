"""
여행정보 콘텐츠 API
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import List, Optional
import uuid
import logging

from app.core.database import get_db
from app.core.i18n import get_lang, t
from app.core.security import get_current_active_user
from app.dependencies import get_or_404, get_storage_backend
from app.models.content import Content
from app.models.user import User
from app.schemas.common import MessageResponse
from app.schemas.content import ContentCategory, ContentCreate, ContentUpdate, ContentResponse
from app.services.storage import Storage, delete_quietly

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=List[ContentResponse])
async def list_contents(
    category: Optional[ContentCategory] = Query(None),
    published_only: bool = Query(False, alias="publishedOnly"),
    db: AsyncSession = Depends(get_db),
):
    stmt = select(Content)
    if category:
        stmt = stmt.where(Content.category == category)
    if published_only:
        stmt = stmt.where(Content.is_published == True)  # noqa: E712
    res = await db.execute(stmt.order_by(Content.created_at.desc()))
    return list(res.scalars().all())


@router.get("/{content_id}", response_model=ContentResponse)
async def get_content(
    content_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    lang: str = Depends(get_lang),
):
    return await get_or_404(db, Content, content_id, "content", lang)


@router.post("", response_model=ContentResponse, status_code=status.HTTP_201_CREATED)
async def create_content(
    payload: ContentCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    lang: str = Depends(get_lang),
):
    if not payload.title.ko:
        raise HTTPException(status_code=400, detail=t("missing_fields", lang, fields="title.ko"))
    try:
        content = Content(**payload.model_dump())
        db.add(content)
        await db.commit()
        await db.refresh(content)
        return content
    except Exception as e:
        await db.rollback()
        logger.exception(f"[contents] create failed: {e}")
        raise HTTPException(status_code=500, detail=t("save_failed", lang, name="content"))


@router.put("/{content_id}", response_model=ContentResponse)
async def update_content(
    content_id: uuid.UUID,
    payload: ContentUpdate,
    db: AsyncSession = Depends(get_db),
    storage: Storage = Depends(get_storage_backend),
    current_user: User = Depends(get_current_active_user),
    lang: str = Depends(get_lang),
):
    content = await get_or_404(db, Content, content_id, "content", lang)
    before = set(content.image_urls or [])
    try:
        for field, value in payload.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(content, field, value)
        await db.commit()
        await db.refresh(content)
    except Exception as e:
        await db.rollback()
        logger.exception(f"[contents] update failed: {e}")
        raise HTTPException(status_code=500, detail=t("update_failed", lang, name="content"))

    for url in before - set(content.image_urls or []):
        delete_quietly(storage, url, tag="contents")
    return content


@router.delete("/{content_id}", response_model=MessageResponse)
async def delete_content(
    content_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    storage: Storage = Depends(get_storage_backend),
    current_user: User = Depends(get_current_active_user),
    lang: str = Depends(get_lang),
):
    content = await get_or_404(db, Content, content_id, "content", lang)
    image_urls = list(content.image_urls or [])
    try:
        await db.delete(content)
        await db.commit()
    except Exception as e:
        await db.rollback()
        logger.exception(f"[contents] delete failed: {e}")
        raise HTTPException(status_code=500, detail=t("delete_failed", lang, name="content"))

    for url in image_urls:
        delete_quietly(storage, url, tag="contents")
    return MessageResponse(message=t("deleted", lang, name="content"))
