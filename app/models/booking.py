"""
예약 모델 (예약, 일련번호, 워크플로우 이력)
"""

from sqlalchemy import Column, String, Text, Integer, Boolean, Date, DateTime, Index, func
from datetime import datetime, timezone
import uuid

from app.core.database import Base, UUID, JSON


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(UUID(), primary_key=True, default=uuid.uuid4, index=True)
    booking_number = Column(String(30), nullable=False, unique=True, index=True)
    # AIR_ONLY | CINT_PACKAGE | CINT_INCENTIVE_GROUP
    project_type = Column(String(30), nullable=False, index=True)
    # AIR | CINT
    primary_team = Column(String(10), nullable=False, index=True)
    # ACTIVE | CANCELLED | COMPLETED | ON_HOLD
    status = Column(String(20), nullable=False, default="ACTIVE", index=True)
    current_step = Column(String(40), nullable=False, default="INQUIRY", index=True)

    customer = Column(JSON(), nullable=False)
    start_date = Column(Date, nullable=False, index=True)
    end_date = Column(Date, nullable=False)
    pax_info = Column(JSON(), nullable=False)
    pricing = Column(JSON(), nullable=False)

    flight_details = Column(JSON())
    land_details = Column(JSON())
    package_info = Column(JSON())
    custom_requirements = Column(Text)

    # LOW | MEDIUM | HIGH | URGENT
    priority = Column(String(10), nullable=False, default="MEDIUM")
    tags = Column(JSON(), nullable=False, default=list)
    assigned_to = Column(JSON(), nullable=False, default=list)
    notes = Column(Text)

    # POST /bookings/{id}/confirm 으로 채워진다
    confirmed_at = Column(DateTime(timezone=True))
    confirmed_by = Column(String(255))

    created_by = Column(String(255))
    updated_by = Column(String(255))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    @property
    def dates(self) -> dict:
        return {"start": self.start_date, "end": self.end_date}

    def __repr__(self) -> str:
        return f"<Booking(number={self.booking_number}, step={self.current_step})>"


class BookingSequence(Base):
    """예약번호 일련번호 카운터 (키: <PREFIX>_<YY>)"""

    __tablename__ = "booking_sequences"

    key = Column(String(20), primary_key=True)
    # 마지막 발번 날짜 MMDD
    last_date = Column(String(4), nullable=False)
    sequence = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class WorkflowHistory(Base):
    __tablename__ = "workflow_history"

    id = Column(UUID(), primary_key=True, default=uuid.uuid4)
    booking_id = Column(UUID(), nullable=False)
    from_step = Column(String(40))
    to_step = Column(String(40), nullable=False)
    changed_by = Column(String(255))
    notes = Column(Text)
    automatic_change = Column(Boolean, nullable=False, default=False)
    # 같은 초에 여러 번 바뀌어도 순서가 유지되도록 앱에서 채운다
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    __table_args__ = (
        Index("ix_wh_booking_created", "booking_id", "created_at"),
    )
