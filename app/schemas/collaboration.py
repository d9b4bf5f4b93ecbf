"""
팀간 협업 요청 스키마
"""

from pydantic import Field, field_validator
from typing import Optional, List
from datetime import datetime
import uuid

from app.schemas.common import CamelModel, sanitize_text


class CollaborationCreate(CamelModel):
    requested_to_team: Optional[str] = None
    requested_to_user_ids: List[str] = Field(default_factory=list)
    type: Optional[str] = None
    priority: Optional[str] = None
    title: str = ""
    description: str = ""
    due_date: Optional[datetime] = None

    @field_validator("title", "description", mode="before")
    @classmethod
    def sanitize_fields(cls, v):
        return sanitize_text(v, 5000) or ""


class CollaborationUpdate(CamelModel):
    status: Optional[str] = None
    response: Optional[str] = None
    notes: Optional[str] = None
    assigned_to: Optional[str] = None
    priority: Optional[str] = None
    due_date: Optional[datetime] = None


class Requester(CamelModel):
    team: str
    user_id: str
    user_name: Optional[str] = None


class RequestedTo(CamelModel):
    team: str
    user_ids: List[str] = Field(default_factory=list)


class RespondedBy(CamelModel):
    user_id: str
    user_name: Optional[str] = None
    responded_at: Optional[datetime] = None


class CollaborationResponse(CamelModel):
    id: uuid.UUID
    booking_id: uuid.UUID
    requested_by: Requester
    requested_to: RequestedTo
    type: str
    priority: str
    title: str
    description: str
    due_date: Optional[datetime] = None
    status: str
    response: Optional[str] = None
    notes: Optional[str] = None
    assigned_to: Optional[str] = None
    responded_by: Optional[RespondedBy] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class CollaborationList(CamelModel):
    booking_id: Optional[uuid.UUID] = None
    booking_number: Optional[str] = None
    requests: List[CollaborationResponse]
    total_count: int
