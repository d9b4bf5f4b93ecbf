"""
관리자 사용자 모델
"""

from sqlalchemy import Column, String, Boolean, DateTime, func
import uuid

from app.core.database import Base, UUID


class User(Base):
    """백오피스 사용자 모델"""
    __tablename__ = "users"

    id = Column(UUID(), primary_key=True, default=uuid.uuid4, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    display_name = Column(String(100))
    hashed_password = Column(String(255), nullable=False)
    # admin | user
    role = Column(String(20), nullable=False, default="user")
    # AIR | CINT | None
    team = Column(String(10))
    disabled = Column(Boolean, nullable=False, default=False)
    last_activity_at = Column(DateTime(timezone=True))

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
