"""
메인 배너 API

- 목록/상세: 공개 (activeOnly=true 로 노출 배너만)
- 생성/수정/삭제/순서변경: 로그인 사용자
"""

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from typing import List
import uuid
import logging

from app.core.database import get_db
from app.core.i18n import get_lang, t, localize
from app.core.security import get_current_active_user
from app.dependencies import get_or_404, get_storage_backend
from app.models.banner import Banner
from app.models.user import User
from app.schemas.banner import BannerCreate, BannerUpdate, BannerOrderUpdate, BannerResponse
from app.schemas.common import MessageResponse
from app.services.activity_service import log_activity
from app.services.storage import Storage, delete_quietly

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=List[BannerResponse])
async def list_banners(
    active_only: bool = Query(False, alias="activeOnly"),
    db: AsyncSession = Depends(get_db),
):
    """배너 목록 (order 오름차순)"""
    stmt = select(Banner)
    if active_only:
        stmt = stmt.where(Banner.active == True)  # noqa: E712
    stmt = stmt.order_by(Banner.order.asc(), Banner.created_at.asc())
    res = await db.execute(stmt)
    return list(res.scalars().all())


@router.put("/order", response_model=MessageResponse)
async def reorder_banners(
    payload: BannerOrderUpdate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    lang: str = Depends(get_lang),
):
    """드래그앤드롭 순서 저장. ids 순서대로 order = 1..n"""
    if len(set(payload.ids)) != len(payload.ids):
        raise HTTPException(status_code=400, detail=t("duplicate_ids", lang))

    res = await db.execute(select(Banner).where(Banner.id.in_(payload.ids)))
    by_id = {b.id: b for b in res.scalars().all()}
    if len(by_id) != len(payload.ids):
        raise HTTPException(status_code=404, detail=t("not_found", lang, name="banner"))

    try:
        for idx, banner_id in enumerate(payload.ids):
            by_id[banner_id].order = idx + 1
        await db.commit()
    except Exception as e:
        await db.rollback()
        logger.exception(f"[banners] reorder failed: {e}")
        raise HTTPException(status_code=500, detail=t("save_failed", lang, name="banner"))

    await log_activity(current_user, "bannerOrderChange", f"배너 순서 변경 ({len(payload.ids)}개)", request)
    return MessageResponse(message=t("order_saved", lang))


@router.get("/{banner_id}", response_model=BannerResponse)
async def get_banner(
    banner_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    lang: str = Depends(get_lang),
):
    return await get_or_404(db, Banner, banner_id, "banner", lang)


@router.post("", response_model=BannerResponse, status_code=status.HTTP_201_CREATED)
async def create_banner(
    payload: BannerCreate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    lang: str = Depends(get_lang),
):
    """배너 생성 (맨 뒤에 추가)"""
    try:
        max_order = (await db.execute(select(func.max(Banner.order)))).scalar_one_or_none() or 0
        data = payload.model_dump()
        banner = Banner(**data, order=max_order + 1)
        db.add(banner)
        await db.commit()
        await db.refresh(banner)
    except Exception as e:
        await db.rollback()
        logger.exception(f"[banners] create failed: {e}")
        raise HTTPException(status_code=500, detail=t("save_failed", lang, name="banner"))

    await log_activity(current_user, "bannerCreate", f"배너 생성: {localize(banner.title, 'ko') or banner.url}", request)
    return banner


@router.put("/{banner_id}", response_model=BannerResponse)
async def update_banner(
    banner_id: uuid.UUID,
    payload: BannerUpdate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    lang: str = Depends(get_lang),
):
    """배너 수정 (보낸 필드만 반영)"""
    banner = await get_or_404(db, Banner, banner_id, "banner", lang)
    try:
        for field, value in payload.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(banner, field, value)
        await db.commit()
        await db.refresh(banner)
    except Exception as e:
        await db.rollback()
        logger.exception(f"[banners] update failed: {e}")
        raise HTTPException(status_code=500, detail=t("update_failed", lang, name="banner"))

    await log_activity(current_user, "bannerEdit", f"배너 수정: {localize(banner.title, 'ko') or banner.id}", request)
    return banner


@router.delete("/{banner_id}", response_model=MessageResponse)
async def delete_banner(
    banner_id: uuid.UUID,
    request: Request,
    db: AsyncSession = Depends(get_db),
    storage: Storage = Depends(get_storage_backend),
    current_user: User = Depends(get_current_active_user),
    lang: str = Depends(get_lang),
):
    """배너 삭제 + 스토리지 파일 정리(실패 무시)"""
    banner = await get_or_404(db, Banner, banner_id, "banner", lang)
    url = banner.url
    title = localize(banner.title, "ko")
    try:
        await db.delete(banner)
        await db.commit()
    except Exception as e:
        await db.rollback()
        logger.exception(f"[banners] delete failed: {e}")
        raise HTTPException(status_code=500, detail=t("delete_failed", lang, name="banner"))

    delete_quietly(storage, url, tag="banners")
    await log_activity(current_user, "bannerDelete", f"배너 삭제: {title or banner_id}", request)
    return MessageResponse(message=t("deleted", lang, name="banner"))
