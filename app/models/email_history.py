"""
TA 이메일 발송 이력 모델
"""

from sqlalchemy import Column, String, Text, Boolean, DateTime, Index, func
import uuid

from app.core.database import Base, UUID, JSON


class EmailHistory(Base):
    __tablename__ = "email_history"

    id = Column(UUID(), primary_key=True, default=uuid.uuid4)
    ta_id = Column(String(64), nullable=False)
    ta_email = Column(String(255), nullable=False)
    subject = Column(String(500), nullable=False)
    content = Column(Text, nullable=False)
    sent_by = Column(String(64))
    sent_by_email = Column(String(255))
    # [{filename, contentType, size}]
    attachments = Column(JSON(), nullable=False, default=list)
    include_logo = Column(Boolean, nullable=False, default=False)
    message_id = Column(String(255))
    # sent | delivered | failed | unknown
    delivery_status = Column(String(20), nullable=False, default="sent")
    # read | unread | unknown
    read_status = Column(String(20), nullable=False, default="unknown")
    sent_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index("ix_eh_ta_sent", "ta_id", "sent_at"),
    )
