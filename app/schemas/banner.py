"""
배너 관련 Pydantic 스키마
"""

from pydantic import Field, field_validator
from typing import Optional, Literal, List
from datetime import datetime
import uuid

from app.schemas.common import CamelModel, LocalizedText, sanitize_text


class BannerCreate(CamelModel):
    type: Literal["image", "video"] = "image"
    url: str = Field(..., min_length=1, max_length=1000)
    link: str = Field("", max_length=1000)
    title: LocalizedText = LocalizedText()
    active: bool = True
    left_background_color: Optional[str] = Field(None, max_length=200)
    left_title: Optional[LocalizedText] = None
    left_subtitle: Optional[LocalizedText] = None
    left_text_color: Optional[str] = Field(None, max_length=100)

    @field_validator("link", mode="before")
    @classmethod
    def sanitize_link(cls, v):
        return sanitize_text(v, 1000) or ""


class BannerUpdate(CamelModel):
    type: Optional[Literal["image", "video"]] = None
    url: Optional[str] = Field(None, min_length=1, max_length=1000)
    link: Optional[str] = Field(None, max_length=1000)
    title: Optional[LocalizedText] = None
    active: Optional[bool] = None
    left_background_color: Optional[str] = Field(None, max_length=200)
    left_title: Optional[LocalizedText] = None
    left_subtitle: Optional[LocalizedText] = None
    left_text_color: Optional[str] = Field(None, max_length=100)


class BannerOrderUpdate(CamelModel):
    """드래그앤드롭 정렬 결과 (앞에서부터 order = 1, 2, ...)"""
    ids: List[uuid.UUID] = Field(..., min_length=1)


class BannerResponse(CamelModel):
    id: uuid.UUID
    type: str
    url: str
    link: str = ""
    title: LocalizedText
    order: int
    active: bool
    left_background_color: Optional[str] = None
    left_title: Optional[LocalizedText] = None
    left_subtitle: Optional[LocalizedText] = None
    left_text_color: Optional[str] = None
    created_at: datetime
    updated_at: datetime
