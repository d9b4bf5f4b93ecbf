"""
포함/불포함 사항 프리셋 모델
"""

from sqlalchemy import Column, String, DateTime, func
import uuid

from app.core.database import Base, UUID, JSON


class IncludeItem(Base):
    __tablename__ = "include_items"

    id = Column(UUID(), primary_key=True, default=uuid.uuid4, index=True)
    # included | not_included
    kind = Column(String(20), nullable=False, index=True)
    text = Column(JSON(), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
