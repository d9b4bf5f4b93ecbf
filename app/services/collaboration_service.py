"""
팀간 협업 요청 서비스

예약의 주담당 팀이 다른 팀(AIR ↔ CINT)에 견적/검토 등을 요청한다.
"""

from datetime import datetime, timezone
from typing import List, Optional, Union
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.booking import Booking
from app.models.collaboration import CollaborationRequest
from app.models.user import User
from app.schemas.collaboration import CollaborationCreate, CollaborationUpdate
from app.services.booking_service import PRIORITY_RANK, TEAMS


COLLABORATION_TYPES = (
    "FLIGHT_QUOTE_REQUEST",
    "LAND_QUOTE_REQUEST",
    "PACKAGE_CONSULTATION",
    "PRICING_REVIEW",
    "DOCUMENT_REVIEW",
    "CUSTOMER_CONSULTATION",
    "OTHER",
)
COLLABORATION_STATUSES = ("PENDING", "IN_PROGRESS", "COMPLETED", "REJECTED", "CANCELLED")
PRIORITIES = tuple(PRIORITY_RANK)


def validate_create(booking: Booking, data: CollaborationCreate) -> Optional[str]:
    """생성 요청 검증. 문제가 있으면 메시지 카탈로그 키"""
    if data.requested_to_team not in TEAMS:
        return "invalid_collab_team"
    if data.type not in COLLABORATION_TYPES:
        return "invalid_collab_type"
    if data.priority and data.priority not in PRIORITIES:
        return "invalid_priority"
    if not data.title:
        return "collab_title_required"
    if not data.description:
        return "collab_description_required"
    if booking.primary_team == data.requested_to_team:
        return "collab_same_team"
    return None


async def create_request(
    db: AsyncSession,
    booking: Booking,
    data: CollaborationCreate,
    requester: User,
) -> CollaborationRequest:
    # 요청 팀은 예약의 주담당 팀
    req = CollaborationRequest(
        booking_id=booking.id,
        requested_by_team=booking.primary_team,
        requested_by_user_id=str(requester.id),
        requested_by_name=requester.email,
        requested_to_team=data.requested_to_team,
        requested_to_user_ids=list(data.requested_to_user_ids or []),
        type=data.type,
        priority=data.priority or "MEDIUM",
        title=data.title,
        description=data.description,
        due_date=data.due_date,
        status="PENDING",
    )
    db.add(req)
    await db.commit()
    await db.refresh(req)
    return req


async def get_request(db: AsyncSession, request_id: Union[str, uuid.UUID]) -> Optional[CollaborationRequest]:
    result = await db.execute(select(CollaborationRequest).where(CollaborationRequest.id == request_id))
    return result.scalar_one_or_none()


async def list_requests(
    db: AsyncSession,
    *,
    booking_id: Optional[uuid.UUID] = None,
    requested_to_team: Optional[str] = None,
    requested_by_team: Optional[str] = None,
    status: Optional[str] = None,
    collab_type: Optional[str] = None,
    limit: Optional[int] = None,
) -> List[CollaborationRequest]:
    """최신순 목록. 잘못된 팀 값은 무시한다."""
    stmt = select(CollaborationRequest)
    if booking_id is not None:
        stmt = stmt.where(CollaborationRequest.booking_id == booking_id)
    if requested_to_team in TEAMS:
        stmt = stmt.where(CollaborationRequest.requested_to_team == requested_to_team)
    if requested_by_team in TEAMS:
        stmt = stmt.where(CollaborationRequest.requested_by_team == requested_by_team)
    if status:
        stmt = stmt.where(CollaborationRequest.status == status)
    if collab_type:
        stmt = stmt.where(CollaborationRequest.type == collab_type)
    stmt = stmt.order_by(CollaborationRequest.created_at.desc())
    if limit:
        stmt = stmt.limit(limit)
    return list((await db.execute(stmt)).scalars().all())


def apply_update(req: CollaborationRequest, data: CollaborationUpdate, actor: User) -> Optional[str]:
    """
    보낸 필드만 반영한다. 문제가 있으면 메시지 카탈로그 키를 반환하고 아무것도 바꾸지 않는다.

    응답(response)을 쓰면 응답자/응답 시각을 함께 남긴다.
    """
    fields = data.model_dump(exclude_unset=True, exclude_none=True)
    if not fields:
        return "nothing_to_update"
    if "status" in fields and fields["status"] not in COLLABORATION_STATUSES:
        return "invalid_status"
    if "priority" in fields and fields["priority"] not in PRIORITIES:
        return "invalid_priority"

    for field, value in fields.items():
        setattr(req, field, value)
    if "response" in fields:
        req.responded_by = {
            "user_id": str(actor.id),
            "user_name": actor.email,
            "responded_at": datetime.now(timezone.utc).isoformat(),
        }
    return None
