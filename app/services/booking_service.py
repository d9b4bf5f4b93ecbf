"""
예약 관련 서비스

- 예약번호 발번: CDC-<AIR|PKG|ISG>-<YYMMDD>-<NNN> (타입별, 날짜가 바뀌면 001부터)
- 워크플로우 단계 전환 규칙
- 목록 필터/정렬/페이지네이션
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.booking import Booking, BookingSequence, WorkflowHistory
from app.schemas.booking import BookingCreate, PricingInfo


PROJECT_TYPES = ("AIR_ONLY", "CINT_PACKAGE", "CINT_INCENTIVE_GROUP")
TYPE_PREFIX = {
    "AIR_ONLY": "AIR",
    "CINT_PACKAGE": "PKG",
    "CINT_INCENTIVE_GROUP": "ISG",
}
TEAMS = ("AIR", "CINT")


class WorkflowStep:
    INQUIRY = "INQUIRY"
    QUOTE_REQUESTED = "QUOTE_REQUESTED"
    QUOTE_RECEIVED = "QUOTE_RECEIVED"
    CUSTOMER_NOTIFIED = "CUSTOMER_NOTIFIED"
    CONFIRMED = "CONFIRMED"
    DEPOSIT_INVOICED = "DEPOSIT_INVOICED"
    DEPOSIT_RECEIVED = "DEPOSIT_RECEIVED"
    BLOCKED = "BLOCKED"
    FINAL_PAYMENT_INVOICED = "FINAL_PAYMENT_INVOICED"
    FINAL_PAYMENT_RECEIVED = "FINAL_PAYMENT_RECEIVED"
    TICKETED = "TICKETED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    ON_HOLD = "ON_HOLD"


S = WorkflowStep

WORKFLOW_STEPS: Tuple[str, ...] = (
    S.INQUIRY, S.QUOTE_REQUESTED, S.QUOTE_RECEIVED, S.CUSTOMER_NOTIFIED, S.CONFIRMED,
    S.DEPOSIT_INVOICED, S.DEPOSIT_RECEIVED, S.BLOCKED, S.FINAL_PAYMENT_INVOICED,
    S.FINAL_PAYMENT_RECEIVED, S.TICKETED, S.COMPLETED, S.CANCELLED, S.ON_HOLD,
)

WORKFLOW_TRANSITIONS: Dict[str, List[str]] = {
    S.INQUIRY: [S.QUOTE_REQUESTED, S.CANCELLED, S.ON_HOLD],
    S.QUOTE_REQUESTED: [S.QUOTE_RECEIVED, S.CANCELLED, S.ON_HOLD],
    S.QUOTE_RECEIVED: [S.CUSTOMER_NOTIFIED, S.CANCELLED, S.ON_HOLD],
    S.CUSTOMER_NOTIFIED: [S.CONFIRMED, S.CANCELLED, S.ON_HOLD],
    S.CONFIRMED: [S.DEPOSIT_INVOICED, S.FINAL_PAYMENT_INVOICED, S.CANCELLED],
    S.DEPOSIT_INVOICED: [S.DEPOSIT_RECEIVED, S.CANCELLED],
    S.DEPOSIT_RECEIVED: [S.BLOCKED, S.CANCELLED],
    S.BLOCKED: [S.FINAL_PAYMENT_INVOICED, S.TICKETED, S.CANCELLED],
    S.FINAL_PAYMENT_INVOICED: [S.FINAL_PAYMENT_RECEIVED, S.CANCELLED],
    S.FINAL_PAYMENT_RECEIVED: [S.TICKETED],
    S.TICKETED: [S.COMPLETED],
    S.COMPLETED: [],
    S.CANCELLED: [],
    S.ON_HOLD: [S.QUOTE_REQUESTED, S.CANCELLED],
}

# 진행도(%)
WORKFLOW_PROGRESS: Dict[str, int] = {
    S.INQUIRY: 5, S.QUOTE_REQUESTED: 15, S.QUOTE_RECEIVED: 25, S.CUSTOMER_NOTIFIED: 35,
    S.CONFIRMED: 45, S.DEPOSIT_INVOICED: 55, S.DEPOSIT_RECEIVED: 65, S.BLOCKED: 75,
    S.FINAL_PAYMENT_INVOICED: 85, S.FINAL_PAYMENT_RECEIVED: 90, S.TICKETED: 95,
    S.COMPLETED: 100, S.CANCELLED: 0, S.ON_HOLD: 0,
}

# 단계 → 예약 상태 (나머지 단계는 ACTIVE)
STEP_STATUS = {
    S.CANCELLED: "CANCELLED",
    S.COMPLETED: "COMPLETED",
    S.ON_HOLD: "ON_HOLD",
}

PRIORITY_RANK = {"LOW": 0, "MEDIUM": 1, "HIGH": 2, "URGENT": 3}
SORT_FIELDS = ("createdAt", "updatedAt", "departureDate", "priority")


class TransitionError(ValueError):
    """허용되지 않는 단계 전환. code 는 메시지 카탈로그 키"""

    def __init__(self, code: str, allowed: Optional[List[str]] = None):
        super().__init__(code)
        self.code = code
        self.allowed = allowed or []


def determine_team(project_type: str) -> str:
    return "AIR" if project_type == "AIR_ONLY" else "CINT"


def allowed_transitions(step: str) -> List[str]:
    return list(WORKFLOW_TRANSITIONS.get(step, []))


def check_transition(current: str, new: Optional[str]) -> None:
    """단계 전환 검증. 실패 시 TransitionError"""
    if not new or new not in WORKFLOW_STEPS:
        raise TransitionError("invalid_status", list(WORKFLOW_STEPS))
    if current == new:
        raise TransitionError("already_in_status")
    allowed = allowed_transitions(current)
    if new not in allowed:
        raise TransitionError("invalid_transition", allowed)


def validate_booking_create(data: BookingCreate) -> Optional[str]:
    """생성 요청 검증. 문제가 있으면 메시지 카탈로그 키를 반환한다."""
    if not data.project_type or data.project_type not in PROJECT_TYPES:
        return "project_type_required"
    if not data.customer or not data.customer.name.strip() or not data.customer.email.strip():
        return "customer_required"
    if not data.dates or not data.dates.start or not data.dates.end:
        return "dates_required"
    if data.dates.end < data.dates.start:
        return "invalid_date_range"
    if not data.pax_info or data.pax_info.adults < 1:
        return "adults_required"
    if data.project_type == "AIR_ONLY" and not data.flight_details:
        return "flight_details_required"
    if data.project_type == "CINT_PACKAGE" and not data.package_info:
        return "package_info_required"
    if data.project_type == "CINT_INCENTIVE_GROUP" and not (data.custom_requirements or "").strip():
        return "custom_requirements_required"
    return None


def pax_with_total(pax: Dict[str, Any]) -> Dict[str, Any]:
    pax = dict(pax)
    pax["total"] = int(pax.get("adults") or 0) + int(pax.get("children") or 0) + int(pax.get("infants") or 0)
    return pax


async def generate_booking_number(
    db: AsyncSession,
    project_type: str,
    now: Optional[datetime] = None,
) -> str:
    """예약번호 발번 (호출자 트랜잭션 안에서 시퀀스 행을 갱신한다)"""
    now = now or datetime.now()
    prefix = TYPE_PREFIX[project_type]
    yy = now.strftime("%y")
    mmdd = now.strftime("%m%d")

    stmt = select(BookingSequence).where(BookingSequence.key == f"{prefix}_{yy}").with_for_update()
    row = (await db.execute(stmt)).scalar_one_or_none()
    if row is None:
        row = BookingSequence(key=f"{prefix}_{yy}", last_date=mmdd, sequence=1)
        db.add(row)
    elif row.last_date == mmdd:
        row.sequence = (row.sequence or 0) + 1
    else:
        row.last_date = mmdd
        row.sequence = 1
    await db.flush()

    return f"CDC-{prefix}-{yy}{mmdd}-{row.sequence:03d}"


async def create_booking(
    db: AsyncSession,
    data: BookingCreate,
    created_by: str,
    now: Optional[datetime] = None,
) -> Booking:
    """검증이 끝난 요청으로 예약을 만든다. INQUIRY 이력을 함께 기록하고 커밋한다."""
    booking_number = await generate_booking_number(db, data.project_type, now=now)

    pax = pax_with_total(data.pax_info.model_dump(mode="json"))
    booking = Booking(
        booking_number=booking_number,
        project_type=data.project_type,
        primary_team=determine_team(data.project_type),
        status="ACTIVE",
        current_step=S.INQUIRY,
        customer=data.customer.model_dump(mode="json"),
        start_date=data.dates.start,
        end_date=data.dates.end,
        pax_info=pax,
        pricing=PricingInfo().model_dump(mode="json"),
        flight_details=data.flight_details,
        land_details=data.land_details,
        package_info=data.package_info,
        custom_requirements=data.custom_requirements,
        priority=data.priority or "MEDIUM",
        tags=list(data.tags or []),
        assigned_to=list(data.assigned_to or []) or [created_by],
        notes=data.notes or "",
        created_by=created_by,
        updated_by=created_by,
    )
    db.add(booking)
    await db.flush()

    db.add(WorkflowHistory(
        booking_id=booking.id,
        from_step=None,
        to_step=S.INQUIRY,
        changed_by=created_by,
        notes="예약 생성",
        automatic_change=True,
    ))
    await db.commit()
    await db.refresh(booking)
    return booking


async def change_step(
    db: AsyncSession,
    booking: Booking,
    new_step: Optional[str],
    changed_by: str,
    notes: Optional[str] = None,
) -> str:
    """단계 전환 + 이력 기록. 이전 단계를 반환한다."""
    previous = booking.current_step
    check_transition(previous, new_step)

    booking.current_step = new_step
    booking.status = STEP_STATUS.get(new_step, "ACTIVE")
    booking.updated_by = changed_by
    db.add(WorkflowHistory(
        booking_id=booking.id,
        from_step=previous,
        to_step=new_step,
        changed_by=changed_by,
        notes=notes or "상태 변경",
        automatic_change=False,
    ))
    await db.commit()
    await db.refresh(booking)
    return previous


async def confirm_booking(db: AsyncSession, booking: Booking, confirmed_by: str, actor_id: str) -> None:
    """
    예약 확정

    확정 시각/확정자를 기록하고, 워크플로우상 CONFIRMED 로 갈 수 있으면 단계도 함께 옮긴다.
    """
    if booking.confirmed_at is not None:
        raise TransitionError("already_confirmed")
    if booking.status in (STEP_STATUS[S.CANCELLED], STEP_STATUS[S.COMPLETED]):
        raise TransitionError("booking_closed")

    booking.confirmed_at = datetime.now(timezone.utc)
    booking.confirmed_by = confirmed_by
    booking.updated_by = actor_id
    if S.CONFIRMED in allowed_transitions(booking.current_step):
        previous = booking.current_step
        booking.current_step = S.CONFIRMED
        booking.status = STEP_STATUS.get(S.CONFIRMED, "ACTIVE")
        db.add(WorkflowHistory(
            booking_id=booking.id,
            from_step=previous,
            to_step=S.CONFIRMED,
            changed_by=actor_id,
            notes="예약 확정",
            automatic_change=True,
        ))
    await db.commit()
    await db.refresh(booking)


async def get_booking(db: AsyncSession, booking_id: Union[str, uuid.UUID]) -> Optional[Booking]:
    result = await db.execute(select(Booking).where(Booking.id == booking_id))
    return result.scalar_one_or_none()


async def get_history(db: AsyncSession, booking_id: uuid.UUID) -> List[WorkflowHistory]:
    result = await db.execute(
        select(WorkflowHistory)
        .where(WorkflowHistory.booking_id == booking_id)
        .order_by(WorkflowHistory.created_at.desc())
    )
    return list(result.scalars().all())


def _split(value: Optional[str]) -> List[str]:
    return [v.strip() for v in (value or "").split(",") if v.strip()]


def _sort_key(field: str):
    if field == "priority":
        return lambda b: PRIORITY_RANK.get(b.priority, 1)
    if field == "departureDate":
        return lambda b: b.start_date
    if field == "updatedAt":
        return lambda b: b.updated_at or b.created_at
    return lambda b: b.created_at


async def list_bookings(
    db: AsyncSession,
    *,
    team: Optional[str] = None,
    project_type: Optional[str] = None,
    status: Optional[str] = None,
    current_step: Optional[str] = None,
    assigned_to: Optional[str] = None,
    priority: Optional[str] = None,
    tags: Optional[str] = None,
    search_text: Optional[str] = None,
    sort_field: str = "createdAt",
    sort_direction: str = "desc",
    page: int = 1,
    page_size: int = 20,
) -> Tuple[List[Booking], int]:
    """
    예약 목록 조회

    단일 값 필터는 쿼리로, 목록/검색 필터(담당자, 태그, 검색어)는 JSON 컬럼이라 메모리에서 거른다.
    """
    stmt = select(Booking)
    if team:
        stmt = stmt.where(Booking.primary_team == team)
    if project_type:
        stmt = stmt.where(Booking.project_type == project_type)
    if status:
        stmt = stmt.where(Booking.status == status)
    if current_step:
        stmt = stmt.where(Booking.current_step == current_step)
    priorities = _split(priority)
    if priorities:
        stmt = stmt.where(Booking.priority.in_(priorities))

    rows: Sequence[Booking] = (await db.execute(stmt)).scalars().all()

    wanted_tags = set(_split(tags))
    needle = (search_text or "").strip().lower()

    def keep(b: Booking) -> bool:
        if assigned_to and assigned_to not in (b.assigned_to or []):
            return False
        if wanted_tags and not wanted_tags.intersection(b.tags or []):
            return False
        if needle:
            customer = b.customer or {}
            haystack = [
                b.booking_number or "",
                str(customer.get("name") or ""),
                str(customer.get("email") or ""),
            ]
            if not any(needle in h.lower() for h in haystack):
                return False
        return True

    filtered = [b for b in rows if keep(b)]
    if sort_field not in SORT_FIELDS:
        sort_field = "createdAt"
    filtered.sort(key=_sort_key(sort_field), reverse=(sort_direction != "asc"))

    total = len(filtered)
    start = (page - 1) * page_size
    return filtered[start:start + page_size], total
