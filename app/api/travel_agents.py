"""
TA(여행사 파트너) API

- 로고가 있는 TA는 수정 시 오버레이 배너(2480x250 PNG)를 새로 만든다.
- 오버레이 생성 실패는 수정 자체를 실패시키지 않는다.
"""

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import List, Optional
import uuid
import logging
import re

from app.core.database import get_db
from app.core.i18n import get_lang, t
from app.core.security import get_current_active_user
from app.dependencies import get_image_composer, get_or_404, get_storage_backend
from app.models.email_history import EmailHistory
from app.models.travel_agent import TravelAgent
from app.models.user import User
from app.schemas.common import MessageResponse
from app.schemas.travel_agent import (
    EmailHistoryResponse,
    TravelAgentBase,
    TravelAgentCreate,
    TravelAgentResponse,
    TravelAgentUpdate,
)
from app.services.activity_service import log_activity
from app.services.image_composer import ImageComposer
from app.services.storage import Storage, delete_quietly, now_ms

logger = logging.getLogger(__name__)

router = APIRouter()

REQUIRED_FIELDS = (
    ("company_name", "companyName"),
    ("ta_code", "taCode"),
    ("phone", "phone"),
    ("address", "address"),
    ("email", "email"),
)
EMAIL_HISTORY_LIMIT = 50


def missing_ta_fields(payload: TravelAgentBase) -> List[str]:
    return [alias for field, alias in REQUIRED_FIELDS if not getattr(payload, field)]


def overlay_key(company_name: str) -> str:
    return f"ta-overlays/{re.sub(r'[^a-zA-Z0-9]', '_', company_name) or 'ta'}_{now_ms()}.png"


async def render_overlay(ta: TravelAgent, storage: Storage, composer: ImageComposer) -> Optional[str]:
    """로고가 있으면 오버레이를 만들어 저장하고 URL 반환. 실패 시 None"""
    if not ta.logo:
        return None
    try:
        logo = await composer.fetch_bytes(ta.logo, storage)
        png = composer.render_ta_overlay(ta.company_name, ta.phone, ta.email, logo)
        return storage.save_bytes(png, content_type="image/png", key=overlay_key(ta.company_name))
    except Exception as e:
        logger.warning(f"[tas] 오버레이 생성 실패 ({ta.company_name}): {e}")
        return None


@router.get("", response_model=List[TravelAgentResponse])
async def list_tas(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    res = await db.execute(select(TravelAgent).order_by(TravelAgent.created_at.desc()))
    return list(res.scalars().all())


@router.get("/{ta_id}", response_model=TravelAgentResponse)
async def get_ta(
    ta_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    lang: str = Depends(get_lang),
):
    return await get_or_404(db, TravelAgent, ta_id, "ta", lang)


@router.post("", response_model=TravelAgentResponse, status_code=status.HTTP_201_CREATED)
async def create_ta(
    payload: TravelAgentCreate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    lang: str = Depends(get_lang),
):
    """TA 등록"""
    missing = missing_ta_fields(payload)
    if missing:
        raise HTTPException(status_code=400, detail=t("missing_fields", lang, fields=", ".join(missing)))
    try:
        ta = TravelAgent(
            **payload.model_dump(exclude={"contact_persons"}),
            contact_persons=[p.model_dump() for p in payload.contact_persons],
            updated_by=current_user.email,
        )
        db.add(ta)
        await db.commit()
        await db.refresh(ta)
    except Exception as e:
        await db.rollback()
        logger.exception(f"[tas] create failed: {e}")
        raise HTTPException(status_code=500, detail=t("save_failed", lang, name="ta"))

    await log_activity(current_user, "taCreate", f"TA 등록: {ta.company_name}", request)
    return ta


@router.put("/{ta_id}", response_model=TravelAgentResponse)
async def update_ta(
    ta_id: uuid.UUID,
    payload: TravelAgentUpdate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    storage: Storage = Depends(get_storage_backend),
    composer: ImageComposer = Depends(get_image_composer),
    current_user: User = Depends(get_current_active_user),
    lang: str = Depends(get_lang),
):
    """TA 수정. 이전 오버레이는 지우고 로고가 있으면 새로 만든다."""
    ta = await get_or_404(db, TravelAgent, ta_id, "ta", lang)
    missing = missing_ta_fields(payload)
    if missing:
        raise HTTPException(status_code=400, detail=t("missing_fields", lang, fields=", ".join(missing)))

    old_logo = ta.logo
    old_overlay = ta.overlay_image
    for field, value in payload.model_dump(exclude={"contact_persons"}).items():
        setattr(ta, field, value)
    ta.contact_persons = [p.model_dump() for p in payload.contact_persons]
    ta.updated_by = current_user.email
    new_overlay = await render_overlay(ta, storage, composer)
    ta.overlay_image = new_overlay

    try:
        await db.commit()
        await db.refresh(ta)
    except Exception as e:
        await db.rollback()
        delete_quietly(storage, new_overlay, tag="tas")
        logger.exception(f"[tas] update failed: {e}")
        raise HTTPException(status_code=500, detail=t("update_failed", lang, name="ta"))

    delete_quietly(storage, old_overlay, tag="tas")
    if old_logo and old_logo != ta.logo:
        delete_quietly(storage, old_logo, tag="tas")

    await log_activity(current_user, "taEdit", f"TA 수정: {ta.company_name}", request)
    return ta


@router.post("/{ta_id}/regenerate-overlay", response_model=TravelAgentResponse)
async def regenerate_overlay(
    ta_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    storage: Storage = Depends(get_storage_backend),
    composer: ImageComposer = Depends(get_image_composer),
    current_user: User = Depends(get_current_active_user),
    lang: str = Depends(get_lang),
):
    """오버레이만 다시 생성"""
    ta = await get_or_404(db, TravelAgent, ta_id, "ta", lang)
    if not ta.logo:
        raise HTTPException(status_code=400, detail=t("missing_fields", lang, fields="logo"))

    url = await render_overlay(ta, storage, composer)
    if not url:
        raise HTTPException(status_code=500, detail=t("image_generation_failed", lang))

    old_overlay = ta.overlay_image
    try:
        ta.overlay_image = url
        await db.commit()
        await db.refresh(ta)
    except Exception as e:
        await db.rollback()
        delete_quietly(storage, url, tag="tas")
        logger.exception(f"[tas] overlay update failed: {e}")
        raise HTTPException(status_code=500, detail=t("update_failed", lang, name="ta"))

    delete_quietly(storage, old_overlay, tag="tas")
    return ta


@router.delete("/{ta_id}/logo", response_model=MessageResponse)
async def delete_logo(
    ta_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    storage: Storage = Depends(get_storage_backend),
    current_user: User = Depends(get_current_active_user),
    lang: str = Depends(get_lang),
):
    """로고와 오버레이 삭제"""
    ta = await get_or_404(db, TravelAgent, ta_id, "ta", lang)
    logo, overlay = ta.logo, ta.overlay_image
    try:
        ta.logo = None
        ta.overlay_image = None
        ta.updated_by = current_user.email
        await db.commit()
    except Exception as e:
        await db.rollback()
        logger.exception(f"[tas] logo delete failed: {e}")
        raise HTTPException(status_code=500, detail=t("update_failed", lang, name="ta"))

    delete_quietly(storage, logo, tag="tas")
    delete_quietly(storage, overlay, tag="tas")
    return MessageResponse(message=t("logo_deleted", lang))


@router.delete("/{ta_id}", response_model=MessageResponse)
async def delete_ta(
    ta_id: uuid.UUID,
    request: Request,
    db: AsyncSession = Depends(get_db),
    storage: Storage = Depends(get_storage_backend),
    current_user: User = Depends(get_current_active_user),
    lang: str = Depends(get_lang),
):
    ta = await get_or_404(db, TravelAgent, ta_id, "ta", lang)
    company_name = ta.company_name
    delete_quietly(storage, ta.logo, tag="tas")
    delete_quietly(storage, ta.overlay_image, tag="tas")
    try:
        await db.delete(ta)
        await db.commit()
    except Exception as e:
        await db.rollback()
        logger.exception(f"[tas] delete failed: {e}")
        raise HTTPException(status_code=500, detail=t("delete_failed", lang, name="ta"))

    await log_activity(current_user, "taDelete", f"TA 삭제: {company_name}", request)
    return MessageResponse(message=t("deleted", lang, name="ta"))


@router.get("/{ta_id}/email-history", response_model=List[EmailHistoryResponse])
async def get_email_history(
    ta_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    lang: str = Depends(get_lang),
):
    """TA 이메일 발송 이력 (최근 50건)"""
    await get_or_404(db, TravelAgent, ta_id, "ta", lang)
    res = await db.execute(
        select(EmailHistory)
        .where(EmailHistory.ta_id == str(ta_id))
        .order_by(EmailHistory.sent_at.desc())
        .limit(EMAIL_HISTORY_LIMIT)
    )
    return list(res.scalars().all())
