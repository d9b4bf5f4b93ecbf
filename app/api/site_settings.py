"""
사이트 설정 API (key="site" 단일 문서)
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
import logging

from app.core.database import get_db
from app.core.i18n import get_lang, t
from app.core.security import get_current_admin
from app.models.site_config import SiteConfig
from app.models.user import User
from app.schemas.content import SiteSettings

logger = logging.getLogger(__name__)

router = APIRouter()

SITE_KEY = "site"


async def _get_row(db: AsyncSession):
    res = await db.execute(select(SiteConfig).where(SiteConfig.key == SITE_KEY))
    return res.scalar_one_or_none()


@router.get("/site", response_model=SiteSettings)
async def get_site_settings(db: AsyncSession = Depends(get_db)):
    """저장된 설정, 없으면 기본값"""
    row = await _get_row(db)
    if row is None:
        return SiteSettings()
    return SiteSettings.model_validate(row.value or {})


@router.put("/site", response_model=SiteSettings)
async def update_site_settings(
    payload: SiteSettings,
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
    lang: str = Depends(get_lang),
):
    """설정 저장 (없으면 생성)"""
    value = payload.model_dump(mode="json")
    try:
        row = await _get_row(db)
        if row is None:
            row = SiteConfig(key=SITE_KEY, value=value, updated_by=current_admin.email)
            db.add(row)
        else:
            row.value = value
            row.updated_by = current_admin.email
        await db.commit()
    except Exception as e:
        await db.rollback()
        logger.exception(f"[settings] save failed: {e}")
        raise HTTPException(status_code=500, detail=t("save_failed", lang, name="settings"))

    logger.info(f"[settings] 사이트 설정 저장 by {current_admin.email}")
    return payload
