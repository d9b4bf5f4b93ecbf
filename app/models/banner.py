"""
메인 배너 모델
"""

from sqlalchemy import Column, String, Integer, Boolean, DateTime, func
import uuid

from app.core.database import Base, UUID, JSON


class Banner(Base):
    """메인 슬라이드 배너 (이미지/영상)"""

    __tablename__ = "banners"

    id = Column(UUID(), primary_key=True, default=uuid.uuid4, index=True)
    # image | video
    type = Column(String(10), nullable=False, default="image")
    url = Column(String(1000), nullable=False)
    link = Column(String(1000), nullable=False, default="")
    title = Column(JSON(), nullable=False)
    order = Column(Integer, nullable=False, default=1, index=True)
    active = Column(Boolean, nullable=False, default=True, index=True)

    # 왼쪽 텍스트 영역 스타일
    left_background_color = Column(String(200))
    left_title = Column(JSON())
    left_subtitle = Column(JSON())
    left_text_color = Column(String(100))

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self) -> str:
        return f"<Banner(id={self.id}, order={self.order})>"
