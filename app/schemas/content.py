"""
여행정보 콘텐츠 / 사이트 설정 관련 Pydantic 스키마
"""

from pydantic import Field
from typing import Optional, Literal, List
from datetime import datetime
import uuid

from app.schemas.common import CamelModel, LocalizedText


ContentCategory = Literal["destination", "culture", "food", "transportation", "accommodation", "tips"]


class ContentCreate(CamelModel):
    title: LocalizedText
    body: LocalizedText
    category: ContentCategory
    image_urls: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    is_published: bool = True


class ContentUpdate(CamelModel):
    title: Optional[LocalizedText] = None
    body: Optional[LocalizedText] = None
    category: Optional[ContentCategory] = None
    image_urls: Optional[List[str]] = None
    tags: Optional[List[str]] = None
    is_published: Optional[bool] = None


class ContentResponse(CamelModel):
    id: uuid.UUID
    title: LocalizedText
    body: LocalizedText
    category: str
    image_urls: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    is_published: bool = True
    created_at: datetime
    updated_at: datetime


class SocialMedia(CamelModel):
    facebook: str = ""
    kakao: str = ""
    viber: str = ""
    instagram: str = ""


class SiteSettings(CamelModel):
    """사이트 기본 설정 (저장값이 없으면 기본값으로 응답)"""
    site_name: LocalizedText = LocalizedText(ko="CDC Travel", en="CDC Travel")
    site_description: LocalizedText = LocalizedText(
        ko="당신의 완벽한 여행을 위한 최고의 선택",
        en="The best choice for your perfect trip",
    )
    address: LocalizedText = LocalizedText()
    contact_email: str = "info@cdc-travel.com"
    contact_phone: str = "+82-XXX-XXXX-XXXX"
    social_media: SocialMedia = SocialMedia()
    default_language: Literal["ko", "en"] = "ko"
    timezone: str = "Asia/Seoul"
