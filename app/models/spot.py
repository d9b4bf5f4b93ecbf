"""
여행 스팟(관광지/식당/숙소 등) 모델
"""

from sqlalchemy import Column, String, DateTime, func
import uuid

from app.core.database import Base, UUID, JSON


class Spot(Base):
    __tablename__ = "spots"

    id = Column(UUID(), primary_key=True, default=uuid.uuid4, index=True)
    name = Column(JSON(), nullable=False)
    description = Column(JSON(), nullable=False)
    address = Column(JSON(), nullable=False)
    region = Column(JSON(), nullable=False)
    country = Column(JSON())
    duration = Column(JSON())
    # 목록형 필드
    type = Column(JSON(), nullable=False, default=list)
    best_time = Column(JSON(), nullable=False, default=list)
    tags = Column(JSON(), nullable=False, default=list)
    extra_images = Column(JSON(), nullable=False, default=list)
    # {KRW, PHP, USD}
    price = Column(JSON())
    map_url = Column(String(1000))
    image_url = Column(String(1000))

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self) -> str:
        return f"<Spot(id={self.id})>"
