"""
사이트 설정 모델 (Key-Value)

key="site" 한 건에 사이트 기본 정보(이름/설명/연락처/SNS/언어/시간대)를 JSON으로 저장한다.
"""

from sqlalchemy import Column, String, DateTime, func
import uuid

from app.core.database import Base, UUID, JSON


class SiteConfig(Base):
    __tablename__ = "site_configs"

    id = Column(UUID(), primary_key=True, default=uuid.uuid4, index=True)
    key = Column(String(100), nullable=False, unique=True, index=True)
    value = Column(JSON(), nullable=False)
    updated_by = Column(String(255))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self) -> str:
        return f"<SiteConfig(key={self.key})>"
