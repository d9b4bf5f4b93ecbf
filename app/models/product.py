"""
여행 상품 모델
"""

from sqlalchemy import Column, DateTime, func
import uuid

from app.core.database import Base, UUID, JSON


class Product(Base):
    """여행 상품

    schedule: [{"day": 1, "spots": [{"spotId", "spotName": {ko, en}, "spotImage"}]}]
    duration: {"startDate": "YYYY-MM-DD", "endDate": "YYYY-MM-DD"}
    """

    __tablename__ = "products"

    id = Column(UUID(), primary_key=True, default=uuid.uuid4, index=True)
    title = Column(JSON(), nullable=False)
    description = Column(JSON())
    region = Column(JSON())
    country = Column(JSON())
    price = Column(JSON())
    duration = Column(JSON())
    image_urls = Column(JSON(), nullable=False, default=list)
    schedule = Column(JSON(), nullable=False, default=list)
    highlights = Column(JSON(), nullable=False, default=list)
    included_items = Column(JSON(), nullable=False, default=list)
    not_included_items = Column(JSON(), nullable=False, default=list)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self) -> str:
        return f"<Product(id={self.id})>"
