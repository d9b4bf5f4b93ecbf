"""
팀간 협업 요청 모델 (AIR ↔ CINT)
"""

from sqlalchemy import Column, String, Text, DateTime, Index, func
from datetime import datetime, timezone
import uuid

from app.core.database import Base, UUID, JSON


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CollaborationRequest(Base):
    __tablename__ = "collaboration_requests"

    id = Column(UUID(), primary_key=True, default=uuid.uuid4, index=True)
    booking_id = Column(UUID(), nullable=False, index=True)

    requested_by_team = Column(String(10), nullable=False, index=True)
    requested_by_user_id = Column(String(64), nullable=False)
    requested_by_name = Column(String(255))
    requested_to_team = Column(String(10), nullable=False, index=True)
    # 비어 있으면 팀 전체
    requested_to_user_ids = Column(JSON(), nullable=False, default=list)

    # FLIGHT_QUOTE_REQUEST | LAND_QUOTE_REQUEST | ... | OTHER
    type = Column(String(40), nullable=False)
    priority = Column(String(10), nullable=False, default="MEDIUM")
    title = Column(String(300), nullable=False)
    description = Column(Text, nullable=False)
    due_date = Column(DateTime(timezone=True))

    # PENDING | IN_PROGRESS | COMPLETED | REJECTED | CANCELLED
    status = Column(String(20), nullable=False, default="PENDING", index=True)
    response = Column(Text)
    notes = Column(Text)
    assigned_to = Column(String(255))
    # {userId, userName, respondedAt}
    responded_by = Column(JSON())

    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index("ix_collab_booking_created", "booking_id", "created_at"),
    )

    @property
    def requested_by(self) -> dict:
        return {
            "team": self.requested_by_team,
            "user_id": self.requested_by_user_id,
            "user_name": self.requested_by_name,
        }

    @property
    def requested_to(self) -> dict:
        return {"team": self.requested_to_team, "user_ids": list(self.requested_to_user_ids or [])}

    def __repr__(self) -> str:
        return f"<CollaborationRequest(booking={self.booking_id}, type={self.type}, status={self.status})>"
