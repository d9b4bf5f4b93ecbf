"""
관리자 활동 로그 모델 (감사 기록)
"""
import uuid
from sqlalchemy import Column, String, Text, DateTime, Index
from sqlalchemy.sql import func

from app.core.database import Base, UUID


class ActivityLog(Base):
    __tablename__ = "activity_logs"

    id = Column(UUID(), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(), nullable=True)
    user_email = Column(String(255), nullable=True)
    action = Column(String(50), nullable=False)
    details = Column(Text, nullable=False)
    ip_address = Column(String(100), nullable=True)
    user_agent = Column(String(500), nullable=True)
    workspace = Column(String(50), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index("ix_al_user_created", "user_id", "created_at"),
        Index("ix_al_created", "created_at"),
    )
