"""
스팟 API
"""

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import List, Optional
import uuid
import logging

from app.core.database import get_db
from app.core.i18n import get_lang, t, localize
from app.core.security import get_current_active_user
from app.dependencies import get_or_404, get_storage_backend
from app.models.spot import Spot
from app.models.user import User
from app.schemas.common import MessageResponse
from app.schemas.spot import SpotCreate, SpotUpdate, SpotResponse
from app.services.activity_service import log_activity
from app.services.storage import Storage, delete_quietly

logger = logging.getLogger(__name__)

router = APIRouter()


def missing_spot_fields(spot: SpotCreate) -> List[str]:
    """등록 필수값 점검. 누락된 필드 이름(camelCase) 목록"""
    missing = []
    for field, alias in (("name", "name"), ("description", "description"), ("address", "address"), ("region", "region")):
        if not getattr(spot, field).is_complete():
            missing.append(alias)
    if not [x for x in spot.type if x.strip()]:
        missing.append("type")
    if not [x for x in spot.tags if x.strip()]:
        missing.append("tags")
    if not (spot.image_url or "").strip():
        missing.append("imageUrl")
    if not [x for x in spot.best_time if x.strip()]:
        missing.append("bestTime")
    return missing


def _matches(spot: Spot, q: str) -> bool:
    needle = q.lower()
    fields = [spot.name, spot.description, spot.address, spot.region]
    texts = [localize(f, "ko") for f in fields] + [localize(f, "en") for f in fields]
    texts += list(spot.tags or [])
    return any(needle in (x or "").lower() for x in texts)


@router.get("", response_model=List[SpotResponse])
async def list_spots(
    country: Optional[str] = Query(None),
    region: Optional[str] = Query(None),
    spot_type: Optional[str] = Query(None, alias="type"),
    q: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """스팟 목록 (한국어 이름순). 다국어 필드 필터는 ko/en 어느 쪽이든 일치하면 포함"""
    res = await db.execute(select(Spot))
    spots = list(res.scalars().all())

    def same(value, wanted: str) -> bool:
        return wanted in (localize(value, "ko"), localize(value, "en"))

    if country:
        spots = [s for s in spots if same(s.country, country)]
    if region:
        spots = [s for s in spots if same(s.region, region)]
    if spot_type:
        spots = [s for s in spots if spot_type in (s.type or [])]
    if q and q.strip():
        spots = [s for s in spots if _matches(s, q.strip())]
    spots.sort(key=lambda s: localize(s.name, "ko"))
    return spots


@router.get("/{spot_id}", response_model=SpotResponse)
async def get_spot(
    spot_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    lang: str = Depends(get_lang),
):
    return await get_or_404(db, Spot, spot_id, "spot", lang)


@router.post("", response_model=SpotResponse, status_code=status.HTTP_201_CREATED)
async def create_spot(
    payload: SpotCreate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    lang: str = Depends(get_lang),
):
    """스팟 등록"""
    missing = missing_spot_fields(payload)
    if missing:
        raise HTTPException(status_code=400, detail=t("missing_fields", lang, fields=", ".join(missing)))
    try:
        spot = Spot(**payload.model_dump())
        db.add(spot)
        await db.commit()
        await db.refresh(spot)
    except Exception as e:
        await db.rollback()
        logger.exception(f"[spots] create failed: {e}")
        raise HTTPException(status_code=500, detail=t("save_failed", lang, name="spot"))

    await log_activity(current_user, "spotCreate", f"스팟 등록: {localize(spot.name, 'ko')}", request)
    return spot


@router.put("/{spot_id}", response_model=SpotResponse)
async def update_spot(
    spot_id: uuid.UUID,
    payload: SpotUpdate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    storage: Storage = Depends(get_storage_backend),
    current_user: User = Depends(get_current_active_user),
    lang: str = Depends(get_lang),
):
    """스팟 수정. 교체/제거된 이미지는 스토리지에서 정리한다."""
    spot = await get_or_404(db, Spot, spot_id, "spot", lang)
    before = {spot.image_url, *(spot.extra_images or [])}
    try:
        for field, value in payload.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(spot, field, value)
        await db.commit()
        await db.refresh(spot)
    except Exception as e:
        await db.rollback()
        logger.exception(f"[spots] update failed: {e}")
        raise HTTPException(status_code=500, detail=t("update_failed", lang, name="spot"))

    after = {spot.image_url, *(spot.extra_images or [])}
    for url in before - after:
        delete_quietly(storage, url, tag="spots")
    await log_activity(current_user, "spotEdit", f"스팟 수정: {localize(spot.name, 'ko')}", request)
    return spot


@router.delete("/{spot_id}", response_model=MessageResponse)
async def delete_spot(
    spot_id: uuid.UUID,
    request: Request,
    db: AsyncSession = Depends(get_db),
    storage: Storage = Depends(get_storage_backend),
    current_user: User = Depends(get_current_active_user),
    lang: str = Depends(get_lang),
):
    """스팟 삭제 + 대표/추가 이미지 정리(실패 무시)"""
    spot = await get_or_404(db, Spot, spot_id, "spot", lang)
    urls = [spot.image_url, *(spot.extra_images or [])]
    name = localize(spot.name, "ko")
    try:
        await db.delete(spot)
        await db.commit()
    except Exception as e:
        await db.rollback()
        logger.exception(f"[spots] delete failed: {e}")
        raise HTTPException(status_code=500, detail=t("delete_failed", lang, name="spot"))

    for url in urls:
        delete_quietly(storage, url, tag="spots")
    await log_activity(current_user, "spotDelete", f"스팟 삭제: {name}", request)
    return MessageResponse(message=t("deleted", lang, name="spot"))
