"""
예약 API

- 목록: 팀/타입/상태/단계/담당자/우선순위/태그/검색어 필터 + 정렬 + 페이지네이션
- 생성: 유저당 분당 요청 제한, 타입별 필수 정보 검증, 예약번호 자동 발번
- 상태 변경: 워크플로우 전환 규칙 검증 후 이력 기록
- 확정: confirmedAt/confirmedBy 기록, 확정 예약 전용 조회/수정
- 협업: 다른 팀(AIR ↔ CINT)에 요청 생성/조회
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import delete
from typing import Optional
import uuid
import logging

from app.core.config import settings
from app.core.database import get_db
from app.core.i18n import get_lang, t
from app.core.rate_limit import check_rate_limit
from app.core.security import get_current_active_user, get_current_admin
from app.models.booking import Booking, WorkflowHistory
from app.models.collaboration import CollaborationRequest
from app.models.user import User
from app.schemas.booking import (
    BookingCreate,
    BookingListResponse,
    BookingResponse,
    BookingUpdate,
    ConfirmResponse,
    StatusChangeRequest,
    StatusChangeResponse,
    WorkflowHistoryList,
    WorkflowHistoryResponse,
)
from app.schemas.collaboration import CollaborationCreate, CollaborationList, CollaborationResponse
from app.schemas.common import MessageResponse
from app.services import booking_service, collaboration_service
from app.services.booking_service import TEAMS, TransitionError

logger = logging.getLogger(__name__)

router = APIRouter()


async def _get_booking_or_404(db: AsyncSession, booking_id: uuid.UUID, lang: str) -> Booking:
    booking = await booking_service.get_booking(db, booking_id)
    if booking is None:
        raise HTTPException(status_code=404, detail=t("not_found", lang, name="booking"))
    return booking


@router.get("", response_model=BookingListResponse)
async def list_bookings(
    team: Optional[str] = Query(None),
    project_type: Optional[str] = Query(None, alias="projectType"),
    booking_status: Optional[str] = Query(None, alias="status"),
    current_step: Optional[str] = Query(None, alias="currentStep"),
    assigned_to: Optional[str] = Query(None, alias="assignedTo"),
    priority: Optional[str] = Query(None, description="콤마 구분"),
    tags: Optional[str] = Query(None, description="콤마 구분, 하나라도 일치"),
    search_text: Optional[str] = Query(None, alias="searchText"),
    sort_field: str = Query("createdAt", alias="sortField"),
    sort_direction: str = Query("desc", alias="sortDirection", pattern="^(asc|desc)$"),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, alias="pageSize", ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    lang: str = Depends(get_lang),
):
    """예약 목록"""
    if team and team not in TEAMS:
        raise HTTPException(status_code=400, detail=t("invalid_team", lang))
    try:
        bookings, total = await booking_service.list_bookings(
            db,
            team=team,
            project_type=project_type,
            status=booking_status,
            current_step=current_step,
            assigned_to=assigned_to,
            priority=priority,
            tags=tags,
            search_text=search_text,
            sort_field=sort_field,
            sort_direction=sort_direction,
            page=page,
            page_size=page_size,
        )
    except Exception as e:
        logger.exception(f"[bookings] list failed: {e}")
        raise HTTPException(status_code=500, detail=t("list_failed", lang, name="booking"))
    return {
        "bookings": bookings,
        "total_count": total,
        "page": page,
        "page_size": page_size,
        "has_more": page * page_size < total,
    }


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    payload: BookingCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    lang: str = Depends(get_lang),
):
    """예약 생성"""
    allowed, _count = await check_rate_limit(
        f"booking-create:{current_user.id}",
        settings.BOOKING_RATE_LIMIT_PER_MINUTE,
        60,
    )
    if not allowed:
        raise HTTPException(status_code=429, detail=t("rate_limited", lang))

    error_key = booking_service.validate_booking_create(payload)
    if error_key:
        raise HTTPException(status_code=400, detail=t(error_key, lang))

    try:
        return await booking_service.create_booking(db, payload, created_by=str(current_user.id))
    except Exception as e:
        await db.rollback()
        logger.exception(f"[bookings] create failed: {e}")
        raise HTTPException(status_code=500, detail=t("save_failed", lang, name="booking"))


async def _get_confirmed_or_400(db: AsyncSession, booking_id: uuid.UUID, lang: str) -> Booking:
    booking = await _get_booking_or_404(db, booking_id, lang)
    if booking.confirmed_at is None:
        raise HTTPException(status_code=400, detail=t("booking_not_confirmed", lang))
    return booking


@router.get("/confirmed/{booking_id}", response_model=BookingResponse)
async def get_confirmed_booking(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    lang: str = Depends(get_lang),
):
    """확정 예약 조회 (미확정이면 400)"""
    return await _get_confirmed_or_400(db, booking_id, lang)


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    lang: str = Depends(get_lang),
):
    return await _get_booking_or_404(db, booking_id, lang)


async def _apply_update(
    db: AsyncSession,
    booking: Booking,
    payload: BookingUpdate,
    current_user: User,
    lang: str,
) -> Booking:
    """보낸 필드만 반영하고 승객 합계를 다시 계산한다."""
    data = payload.model_dump(mode="json", exclude_unset=True, exclude_none=True)
    dates = data.pop("dates", None)
    if dates is not None:
        start = payload.dates.start or booking.start_date
        end = payload.dates.end or booking.end_date
        if end < start:
            raise HTTPException(status_code=400, detail=t("invalid_date_range", lang))
        booking.start_date = start
        booking.end_date = end
    if "pax_info" in data:
        if payload.pax_info.adults < 1:
            raise HTTPException(status_code=400, detail=t("adults_required", lang))
        data["pax_info"] = booking_service.pax_with_total(data["pax_info"])

    try:
        for field, value in data.items():
            setattr(booking, field, value)
        booking.updated_by = str(current_user.id)
        await db.commit()
        await db.refresh(booking)
        return booking
    except Exception as e:
        await db.rollback()
        logger.exception(f"[bookings] update failed: {e}")
        raise HTTPException(status_code=500, detail=t("update_failed", lang, name="booking"))


@router.put("/{booking_id}", response_model=BookingResponse)
async def update_booking(
    booking_id: uuid.UUID,
    payload: BookingUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    lang: str = Depends(get_lang),
):
    """예약 수정"""
    booking = await _get_booking_or_404(db, booking_id, lang)
    return await _apply_update(db, booking, payload, current_user, lang)


@router.put("/confirmed/{booking_id}", response_model=BookingResponse)
async def update_confirmed_booking(
    booking_id: uuid.UUID,
    payload: BookingUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    lang: str = Depends(get_lang),
):
    """확정 예약 수정"""
    booking = await _get_confirmed_or_400(db, booking_id, lang)
    return await _apply_update(db, booking, payload, current_user, lang)


@router.delete("/{booking_id}", response_model=MessageResponse)
async def delete_booking(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin),
    lang: str = Depends(get_lang),
):
    """예약 삭제 (관리자). 워크플로우 이력과 협업 요청도 함께 지운다."""
    booking = await _get_booking_or_404(db, booking_id, lang)
    try:
        await db.execute(delete(WorkflowHistory).where(WorkflowHistory.booking_id == booking.id))
        await db.execute(delete(CollaborationRequest).where(CollaborationRequest.booking_id == booking.id))
        await db.delete(booking)
        await db.commit()
    except Exception as e:
        await db.rollback()
        logger.exception(f"[bookings] delete failed: {e}")
        raise HTTPException(status_code=500, detail=t("delete_failed", lang, name="booking"))
    return MessageResponse(message=t("deleted", lang, name="booking"))


@router.put("/{booking_id}/status", response_model=StatusChangeResponse)
async def change_booking_status(
    booking_id: uuid.UUID,
    payload: StatusChangeRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    lang: str = Depends(get_lang),
):
    """워크플로우 단계 변경"""
    booking = await _get_booking_or_404(db, booking_id, lang)
    try:
        previous = await booking_service.change_step(
            db, booking, payload.new_status, str(current_user.id), payload.notes,
        )
    except TransitionError as e:
        detail = {"message": t(e.code, lang), "currentStatus": booking.current_step}
        if e.code == "invalid_transition":
            detail["allowedTransitions"] = e.allowed
            detail["requestedStatus"] = payload.new_status
        elif e.code == "invalid_status":
            detail["validStatuses"] = e.allowed
        raise HTTPException(status_code=400, detail=detail)
    except Exception as e:
        await db.rollback()
        logger.exception(f"[bookings] status change failed: {e}")
        raise HTTPException(status_code=500, detail=t("update_failed", lang, name="booking"))

    return StatusChangeResponse(
        message=t("status_changed", lang, previous=previous, current=booking.current_step),
        booking=BookingResponse.model_validate(booking),
        previous_step=previous,
        new_step=booking.current_step,
    )


@router.get("/{booking_id}/history", response_model=WorkflowHistoryList)
async def get_booking_history(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    lang: str = Depends(get_lang),
):
    """워크플로우 이력 (최신순) + 현재 단계에서 가능한 전환"""
    booking = await _get_booking_or_404(db, booking_id, lang)
    history = await booking_service.get_history(db, booking.id)
    return WorkflowHistoryList(
        booking_id=booking.id,
        booking_number=booking.booking_number,
        current_step=booking.current_step,
        progress=booking_service.WORKFLOW_PROGRESS.get(booking.current_step, 0),
        allowed_transitions=booking_service.allowed_transitions(booking.current_step),
        history=[WorkflowHistoryResponse.model_validate(h) for h in history],
    )


@router.post("/{booking_id}/confirm", response_model=ConfirmResponse)
async def confirm_booking(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    lang: str = Depends(get_lang),
):
    """예약 확정. 가능하면 워크플로우도 CONFIRMED 로 옮긴다."""
    booking = await _get_booking_or_404(db, booking_id, lang)
    try:
        await booking_service.confirm_booking(db, booking, current_user.email, str(current_user.id))
    except TransitionError as e:
        raise HTTPException(status_code=400, detail=t(e.code, lang))
    except Exception as e:
        await db.rollback()
        logger.exception(f"[bookings] confirm failed: {e}")
        raise HTTPException(status_code=500, detail=t("update_failed", lang, name="booking"))

    return ConfirmResponse(
        message=t("booking_confirmed", lang),
        booking=BookingResponse.model_validate(booking),
    )


@router.post("/{booking_id}/collaborate", response_model=CollaborationResponse, status_code=status.HTTP_201_CREATED)
async def create_collaboration(
    booking_id: uuid.UUID,
    payload: CollaborationCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    lang: str = Depends(get_lang),
):
    """다른 팀에 협업 요청"""
    booking = await _get_booking_or_404(db, booking_id, lang)
    error_key = collaboration_service.validate_create(booking, payload)
    if error_key:
        raise HTTPException(status_code=400, detail=t(error_key, lang))

    try:
        req = await collaboration_service.create_request(db, booking, payload, current_user)
    except Exception as e:
        await db.rollback()
        logger.exception(f"[bookings] collaboration create failed: {e}")
        raise HTTPException(status_code=500, detail=t("save_failed", lang, name="collaboration"))

    logger.info(f"[bookings] 협업 요청 생성: {req.id} ({booking.booking_number} → {req.requested_to_team})")
    return req


@router.get("/{booking_id}/collaborate", response_model=CollaborationList)
async def list_booking_collaborations(
    booking_id: uuid.UUID,
    collab_status: Optional[str] = Query(None, alias="status"),
    collab_type: Optional[str] = Query(None, alias="type"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    lang: str = Depends(get_lang),
):
    """예약별 협업 요청 (최신순)"""
    booking = await _get_booking_or_404(db, booking_id, lang)
    requests = await collaboration_service.list_requests(
        db, booking_id=booking.id, status=collab_status, collab_type=collab_type,
    )
    return CollaborationList(
        booking_id=booking.id,
        booking_number=booking.booking_number,
        requests=[CollaborationResponse.model_validate(r) for r in requests],
        total_count=len(requests),
    )
