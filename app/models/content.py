"""
여행정보 콘텐츠 모델
"""

from sqlalchemy import Column, String, Boolean, DateTime, func
import uuid

from app.core.database import Base, UUID, JSON


class Content(Base):
    __tablename__ = "contents"

    id = Column(UUID(), primary_key=True, default=uuid.uuid4, index=True)
    title = Column(JSON(), nullable=False)
    body = Column(JSON(), nullable=False)
    # destination | culture | food | transportation | accommodation | tips
    category = Column(String(30), nullable=False, index=True)
    image_urls = Column(JSON(), nullable=False, default=list)
    tags = Column(JSON(), nullable=False, default=list)
    is_published = Column(Boolean, default=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self) -> str:
        return f"<Content(id={self.id}, category={self.category})>"
