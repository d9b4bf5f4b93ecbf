"""
스팟/포함사항 관련 Pydantic 스키마
"""

from pydantic import Field
from typing import Optional, Literal, List
from datetime import datetime
import uuid

from app.schemas.common import CamelModel, LocalizedText, CurrencyPrice


class SpotBase(CamelModel):
    name: LocalizedText = LocalizedText()
    description: LocalizedText = LocalizedText()
    address: LocalizedText = LocalizedText()
    region: LocalizedText = LocalizedText()
    country: Optional[LocalizedText] = None
    duration: Optional[LocalizedText] = None
    type: List[str] = Field(default_factory=list)
    best_time: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    extra_images: List[str] = Field(default_factory=list)
    price: Optional[CurrencyPrice] = None
    map_url: Optional[str] = Field(None, max_length=1000)
    image_url: Optional[str] = Field(None, max_length=1000)


class SpotCreate(SpotBase):
    pass


class SpotUpdate(CamelModel):
    name: Optional[LocalizedText] = None
    description: Optional[LocalizedText] = None
    address: Optional[LocalizedText] = None
    region: Optional[LocalizedText] = None
    country: Optional[LocalizedText] = None
    duration: Optional[LocalizedText] = None
    type: Optional[List[str]] = None
    best_time: Optional[List[str]] = None
    tags: Optional[List[str]] = None
    extra_images: Optional[List[str]] = None
    price: Optional[CurrencyPrice] = None
    map_url: Optional[str] = Field(None, max_length=1000)
    image_url: Optional[str] = Field(None, max_length=1000)


class SpotResponse(SpotBase):
    id: uuid.UUID
    created_at: datetime
    updated_at: datetime


class IncludeItemCreate(CamelModel):
    kind: Literal["included", "not_included"]
    text: LocalizedText


class IncludeItemUpdate(CamelModel):
    kind: Optional[Literal["included", "not_included"]] = None
    text: Optional[LocalizedText] = None


class IncludeItemResponse(CamelModel):
    id: uuid.UUID
    kind: str
    text: LocalizedText
    created_at: datetime
