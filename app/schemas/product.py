"""
상품 관련 Pydantic 스키마
"""

from pydantic import Field, field_validator
from typing import Optional, List
from datetime import datetime
import uuid

from app.core.i18n import normalize_list
from app.schemas.common import CamelModel, LocalizedText, CurrencyPrice


class ScheduleSpot(CamelModel):
    spot_id: str
    spot_name: LocalizedText = LocalizedText()
    spot_image: Optional[str] = None


class ScheduleDay(CamelModel):
    day: int = 0
    spots: List[ScheduleSpot] = Field(default_factory=list)


class ProductDuration(CamelModel):
    start_date: Optional[str] = None
    end_date: Optional[str] = None


class ProductBase(CamelModel):
    title: LocalizedText = LocalizedText()
    description: Optional[LocalizedText] = None
    region: Optional[LocalizedText] = None
    country: Optional[LocalizedText] = None
    price: Optional[CurrencyPrice] = None
    duration: Optional[ProductDuration] = None
    image_urls: List[str] = Field(default_factory=list)
    schedule: List[ScheduleDay] = Field(default_factory=list)
    highlights: List[ScheduleSpot] = Field(default_factory=list)
    included_items: List[str] = Field(default_factory=list)
    not_included_items: List[str] = Field(default_factory=list)

    @field_validator("image_urls", "schedule", "highlights", "included_items", "not_included_items", mode="before")
    @classmethod
    def legacy_index_maps(cls, v):
        # 예전 데이터는 배열이 {"0": .., "1": ..} 형태로 저장된 경우가 있다
        return normalize_list(v)


class ProductCreate(ProductBase):
    pass


class ProductUpdate(CamelModel):
    title: Optional[LocalizedText] = None
    description: Optional[LocalizedText] = None
    region: Optional[LocalizedText] = None
    country: Optional[LocalizedText] = None
    price: Optional[CurrencyPrice] = None
    duration: Optional[ProductDuration] = None
    image_urls: Optional[List[str]] = None
    schedule: Optional[List[ScheduleDay]] = None
    highlights: Optional[List[ScheduleSpot]] = None
    included_items: Optional[List[str]] = None
    not_included_items: Optional[List[str]] = None


class ProductResponse(ProductBase):
    id: uuid.UUID
    price_text: Optional[str] = None
    main_price: Optional[str] = None
    created_at: datetime
    updated_at: datetime
