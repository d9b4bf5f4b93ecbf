"""
TA(여행사 파트너) 모델
"""

from sqlalchemy import Column, String, DateTime, func
import uuid

from app.core.database import Base, UUID, JSON


class TravelAgent(Base):
    __tablename__ = "travel_agents"

    id = Column(UUID(), primary_key=True, default=uuid.uuid4, index=True)
    company_name = Column(String(200), nullable=False)
    ta_code = Column(String(50), nullable=False, index=True)
    phone = Column(String(50), nullable=False)
    address = Column(String(500), nullable=False)
    email = Column(String(255), nullable=False)
    logo = Column(String(1000))
    overlay_image = Column(String(1000))
    # [{name, position, phone, email}]
    contact_persons = Column(JSON(), nullable=False, default=list)
    updated_by = Column(String(255))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self) -> str:
        return f"<TravelAgent(code={self.ta_code})>"
