"""
전단지(포스터) 모델
"""

from sqlalchemy import Column, String, Integer, DateTime, func
import uuid

from app.core.database import Base, UUID


class Poster(Base):
    __tablename__ = "posters"

    id = Column(UUID(), primary_key=True, default=uuid.uuid4, index=True)
    name = Column(String(200), nullable=False)
    url = Column(String(1000), nullable=False)
    storage_key = Column(String(500), nullable=False)
    # 변환 후(webp) / 원본 바이트 수
    size = Column(Integer, nullable=False, default=0)
    original_size = Column(Integer, nullable=False, default=0)
    original_name = Column(String(255))
    created_by = Column(String(255))
    updated_by = Column(String(255))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
