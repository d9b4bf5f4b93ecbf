"""
사용자 관리 / 활동 기록 API
"""

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
import uuid
import logging

from app.core.database import get_db
from app.core.i18n import get_lang, t
from app.core.security import get_current_active_user, get_current_admin, get_password_hash
from app.dependencies import get_or_404
from app.models.user import User
from app.schemas.user import (
    ActivityCreate,
    ActivityListResponse,
    ActivityResponse,
    UserCreate,
    UserListResponse,
    UserResponse,
    UserStatsResponse,
    UserUpdate,
)
from app.services import activity_service
from app.services.user_service import create_user, get_user_by_email, list_users

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=UserListResponse)
async def get_users(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin),
):
    """전체 사용자 목록 (관리자)"""
    users, total = await list_users(db)
    return {"users": users, "total": total}


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def add_user(
    payload: UserCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin),
    lang: str = Depends(get_lang),
):
    """사용자 생성 (관리자)"""
    if await get_user_by_email(db, payload.email):
        raise HTTPException(status_code=400, detail=t("email_taken", lang))
    try:
        return await create_user(
            db,
            email=payload.email,
            password_hash=get_password_hash(payload.password),
            display_name=payload.display_name,
            role=payload.role,
            team=payload.team,
        )
    except Exception as e:
        await db.rollback()
        logger.exception(f"[users] create failed: {e}")
        raise HTTPException(status_code=500, detail=t("save_failed", lang, name="user"))


@router.post("/activity", response_model=ActivityResponse, status_code=status.HTTP_201_CREATED)
async def add_activity(
    payload: ActivityCreate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    lang: str = Depends(get_lang),
):
    """활동 기록 저장"""
    if not payload.action.strip() or not payload.details.strip():
        raise HTTPException(status_code=400, detail=t("activity_required", lang))
    try:
        return await activity_service.record_activity(
            db,
            action=payload.action.strip(),
            details=payload.details.strip(),
            user_id=payload.user_id or current_user.id,
            user_email=payload.user_email or current_user.email,
            request=request,
            workspace=payload.workspace,
        )
    except Exception as e:
        await db.rollback()
        logger.exception(f"[users] activity record failed: {e}")
        raise HTTPException(status_code=500, detail=t("save_failed", lang, name="activity"))


@router.get("/activity", response_model=ActivityListResponse)
async def get_activities(
    user_id: Optional[uuid.UUID] = Query(None, alias="userId"),
    limit: int = Query(100, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin),
):
    """활동 기록 조회 (최신순, 관리자)"""
    activities = await activity_service.list_activities(db, user_id=user_id, limit=limit)
    return {"activities": activities, "total": len(activities)}


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin),
    lang: str = Depends(get_lang),
):
    return await get_or_404(db, User, user_id, "user", lang)


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: uuid.UUID,
    payload: UserUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin),
    lang: str = Depends(get_lang),
):
    """사용자 비활성화/권한 변경 (관리자)"""
    user = await get_or_404(db, User, user_id, "user", lang)
    try:
        if payload.disabled is not None:
            user.disabled = payload.disabled
        if payload.role is not None:
            user.role = payload.role
        if payload.team is not None:
            user.team = payload.team
        await db.commit()
        await db.refresh(user)
        return user
    except Exception as e:
        await db.rollback()
        logger.exception(f"[users] update failed: {e}")
        raise HTTPException(status_code=500, detail=t("update_failed", lang, name="user"))


@router.get("/{user_id}/stats", response_model=UserStatsResponse)
async def get_user_stats(
    user_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin),
    lang: str = Depends(get_lang),
):
    """사용자별 활동 통계 (관리자)"""
    user = await get_or_404(db, User, user_id, "user", lang)
    total, counts, last = await activity_service.activity_stats(db, user.id)
    return UserStatsResponse(
        user_id=user.id,
        total_activities=total,
        action_counts=counts,
        last_activity_at=user.last_activity_at or last,
    )
