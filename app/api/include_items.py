"""
포함/불포함 사항 프리셋 API
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import List, Literal, Optional
import uuid
import logging

from app.core.database import get_db
from app.core.i18n import get_lang, t
from app.core.security import get_current_active_user
from app.dependencies import get_or_404
from app.models.include_item import IncludeItem
from app.models.user import User
from app.schemas.common import MessageResponse
from app.schemas.spot import IncludeItemCreate, IncludeItemUpdate, IncludeItemResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=List[IncludeItemResponse])
async def list_include_items(
    kind: Optional[Literal["included", "not_included"]] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    stmt = select(IncludeItem)
    if kind:
        stmt = stmt.where(IncludeItem.kind == kind)
    res = await db.execute(stmt.order_by(IncludeItem.created_at.asc()))
    return list(res.scalars().all())


@router.post("", response_model=IncludeItemResponse, status_code=status.HTTP_201_CREATED)
async def create_include_item(
    payload: IncludeItemCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    lang: str = Depends(get_lang),
):
    if not payload.text.ko:
        raise HTTPException(status_code=400, detail=t("missing_fields", lang, fields="text.ko"))
    try:
        item = IncludeItem(kind=payload.kind, text=payload.text.model_dump())
        db.add(item)
        await db.commit()
        await db.refresh(item)
        return item
    except Exception as e:
        await db.rollback()
        logger.exception(f"[include-items] create failed: {e}")
        raise HTTPException(status_code=500, detail=t("save_failed", lang, name="include_item"))


@router.put("/{item_id}", response_model=IncludeItemResponse)
async def update_include_item(
    item_id: uuid.UUID,
    payload: IncludeItemUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    lang: str = Depends(get_lang),
):
    item = await get_or_404(db, IncludeItem, item_id, "include_item", lang)
    try:
        for field, value in payload.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(item, field, value)
        await db.commit()
        await db.refresh(item)
        return item
    except Exception as e:
        await db.rollback()
        logger.exception(f"[include-items] update failed: {e}")
        raise HTTPException(status_code=500, detail=t("update_failed", lang, name="include_item"))


@router.delete("/{item_id}", response_model=MessageResponse)
async def delete_include_item(
    item_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    lang: str = Depends(get_lang),
):
    item = await get_or_404(db, IncludeItem, item_id, "include_item", lang)
    try:
        await db.delete(item)
        await db.commit()
    except Exception as e:
        await db.rollback()
        logger.exception(f"[include-items] delete failed: {e}")
        raise HTTPException(status_code=500, detail=t("delete_failed", lang, name="include_item"))
    return MessageResponse(message=t("deleted", lang, name="include_item"))
