"""
협업 요청 API (팀 단위 수신함/발신함)
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
import uuid
import logging

from app.core.database import get_db
from app.core.i18n import get_lang, t
from app.core.security import get_current_active_user
from app.dependencies import get_or_404
from app.models.collaboration import CollaborationRequest
from app.models.user import User
from app.schemas.collaboration import CollaborationList, CollaborationResponse, CollaborationUpdate
from app.schemas.common import MessageResponse
from app.services import collaboration_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=CollaborationList)
async def list_collaborations(
    requested_to_team: Optional[str] = Query(None, alias="requestedToTeam"),
    requested_by_team: Optional[str] = Query(None, alias="requestedByTeam"),
    collab_status: Optional[str] = Query(None, alias="status"),
    collab_type: Optional[str] = Query(None, alias="type"),
    limit: int = Query(20, ge=1, le=200),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    requests = await collaboration_service.list_requests(
        db,
        requested_to_team=requested_to_team,
        requested_by_team=requested_by_team,
        status=collab_status,
        collab_type=collab_type,
        limit=limit,
    )
    return CollaborationList(
        requests=[CollaborationResponse.model_validate(r) for r in requests],
        total_count=len(requests),
    )


@router.get("/{request_id}", response_model=CollaborationResponse)
async def get_collaboration(
    request_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    lang: str = Depends(get_lang),
):
    return await get_or_404(db, CollaborationRequest, request_id, "collaboration", lang)


@router.put("/{request_id}", response_model=CollaborationResponse)
async def update_collaboration(
    request_id: uuid.UUID,
    payload: CollaborationUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    lang: str = Depends(get_lang),
):
    """상태/응답/메모/담당자/우선순위/기한 수정"""
    req = await get_or_404(db, CollaborationRequest, request_id, "collaboration", lang)
    error_key = collaboration_service.apply_update(req, payload, current_user)
    if error_key:
        raise HTTPException(status_code=400, detail=t(error_key, lang))
    try:
        await db.commit()
        await db.refresh(req)
    except Exception as e:
        await db.rollback()
        logger.exception(f"[collaborations] update failed: {e}")
        raise HTTPException(status_code=500, detail=t("update_failed", lang, name="collaboration"))
    return req


@router.delete("/{request_id}", response_model=MessageResponse)
async def delete_collaboration(
    request_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    lang: str = Depends(get_lang),
):
    req = await get_or_404(db, CollaborationRequest, request_id, "collaboration", lang)
    try:
        await db.delete(req)
        await db.commit()
    except Exception as e:
        await db.rollback()
        logger.exception(f"[collaborations] delete failed: {e}")
        raise HTTPException(status_code=500, detail=t("delete_failed", lang, name="collaboration"))
    return MessageResponse(message=t("deleted", lang, name="collaboration"))
