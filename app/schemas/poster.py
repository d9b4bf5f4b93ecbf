"""
전단지 관련 Pydantic 스키마
"""

from typing import Optional
from datetime import datetime
import uuid

from app.schemas.common import CamelModel


class PosterResponse(CamelModel):
    id: uuid.UUID
    name: str
    url: str
    storage_key: str
    size: int
    original_size: int
    original_name: Optional[str] = None
    created_by: Optional[str] = None
    updated_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime
