"""
TA/TA 이메일 관련 Pydantic 스키마
"""

from pydantic import Field, field_validator
from typing import Optional, List, Literal
from datetime import datetime
import uuid

from app.schemas.common import CamelModel, sanitize_text


class ContactPerson(CamelModel):
    name: str = ""
    position: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None


class TravelAgentBase(CamelModel):
    company_name: str = ""
    ta_code: str = ""
    phone: str = ""
    address: str = ""
    email: str = ""
    logo: Optional[str] = None
    contact_persons: List[ContactPerson] = Field(default_factory=list)

    @field_validator("company_name", "ta_code", "phone", "address", "email", mode="before")
    @classmethod
    def sanitize_fields(cls, v):
        return sanitize_text(v, 500) or ""


class TravelAgentCreate(TravelAgentBase):
    pass


class TravelAgentUpdate(TravelAgentBase):
    pass


class TravelAgentResponse(CamelModel):
    id: uuid.UUID
    company_name: str
    ta_code: str
    phone: str
    address: str
    email: str
    logo: Optional[str] = None
    overlay_image: Optional[str] = None
    contact_persons: List[ContactPerson] = Field(default_factory=list)
    updated_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class EmailHistoryResponse(CamelModel):
    id: uuid.UUID
    ta_id: str
    ta_email: str
    subject: str
    content: str
    sent_by: Optional[str] = None
    sent_by_email: Optional[str] = None
    attachments: List[dict] = Field(default_factory=list)
    include_logo: bool = False
    message_id: Optional[str] = None
    delivery_status: str
    read_status: str = "unknown"
    sent_at: datetime
    updated_at: Optional[datetime] = None


class DeliveryStatusUpdate(CamelModel):
    delivery_status: Optional[Literal["sent", "delivered", "failed", "unknown"]] = None
    read_status: Optional[Literal["read", "unread", "unknown"]] = None


class DeliveryStatusResponse(CamelModel):
    success: bool = True
    message: str
    history: EmailHistoryResponse


class EmailImageRequest(CamelModel):
    ta_ids: List[str] = Field(default_factory=list)
    attachment_base64: str = ""
    attachment_type: str = "image/png"


class EmailImageResult(CamelModel):
    ta_id: str
    ta_name: str = ""
    image_url: str
    thumbnail_url: Optional[str] = None
    file_name: Optional[str] = None
    thumbnail_file_name: Optional[str] = None
    error: Optional[str] = None


class EmailImageResponse(CamelModel):
    results: List[EmailImageResult]
    session_id: str
    timestamp: int


class SendResult(CamelModel):
    ta_id: str
    company_name: Optional[str] = None
    email: Optional[str] = None
    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None


class SendEmailResponse(CamelModel):
    success: bool
    message: str
    success_count: int
    fail_count: int
    results: List[SendResult]


class CleanupRequest(CamelModel):
    session_id: Optional[str] = None


class CleanupResponse(CamelModel):
    success: bool
    message: str
    deleted: List[str] = Field(default_factory=list)
    failed: List[str] = Field(default_factory=list)
