"""
사용자/활동 기록 관련 Pydantic 스키마
"""

from pydantic import EmailStr, Field, field_validator
from typing import Optional, Literal, Dict, List
from datetime import datetime
import uuid

from app.schemas.common import CamelModel, sanitize_text


ACTIVITY_ACTIONS = (
    "login",
    "bannerCreate", "bannerEdit", "bannerDelete", "bannerOrderChange",
    "spotCreate", "spotEdit", "spotDelete",
    "productCreate", "productEdit", "productDelete",
    "taCreate", "taEdit", "taDelete",
)


class UserCreate(CamelModel):
    """사용자 생성 스키마"""
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=100)
    display_name: Optional[str] = Field(None, max_length=100)
    role: Literal["admin", "user"] = "user"
    team: Optional[Literal["AIR", "CINT"]] = None

    @field_validator("display_name", mode="before")
    @classmethod
    def sanitize_name(cls, v):
        return sanitize_text(v, 100)


class UserUpdate(CamelModel):
    """사용자 상태 변경 (비활성화/권한)"""
    disabled: Optional[bool] = None
    role: Optional[Literal["admin", "user"]] = None
    team: Optional[Literal["AIR", "CINT"]] = None


class UserResponse(CamelModel):
    """사용자 응답 스키마"""
    id: uuid.UUID
    email: str
    display_name: Optional[str] = None
    role: str
    team: Optional[str] = None
    disabled: bool = False
    last_activity_at: Optional[datetime] = None
    created_at: datetime


class UserListResponse(CamelModel):
    users: List[UserResponse]
    total: int


class UserStatsResponse(CamelModel):
    user_id: uuid.UUID
    total_activities: int
    action_counts: Dict[str, int]
    last_activity_at: Optional[datetime] = None


class ActivityCreate(CamelModel):
    """활동 기록 요청. userId/userEmail 이 없으면 호출자 기준으로 기록한다."""
    action: str = ""
    details: str = ""
    user_id: Optional[uuid.UUID] = None
    user_email: Optional[str] = None
    workspace: Optional[str] = Field(None, max_length=50)


class ActivityResponse(CamelModel):
    id: uuid.UUID
    user_id: Optional[uuid.UUID] = None
    user_email: Optional[str] = None
    action: str
    details: str
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    workspace: Optional[str] = None
    created_at: datetime


class ActivityListResponse(CamelModel):
    activities: List[ActivityResponse]
    total: int
