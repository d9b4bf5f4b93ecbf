"""
예약 관련 Pydantic 스키마

생성 요청은 필수값 검증을 서비스 계층에서 다국어 메시지로 처리하므로
대부분의 필드를 Optional 로 받는다.
"""

from pydantic import Field
from typing import Optional, Literal, List, Any, Dict
from datetime import date, datetime
import uuid

from app.schemas.common import CamelModel


Priority = Literal["LOW", "MEDIUM", "HIGH", "URGENT"]


class CustomerInfo(CamelModel):
    name: str = ""
    email: str = ""
    phone: str = ""
    company: Optional[str] = None
    address: Optional[str] = None
    nationality: Optional[str] = None
    notes: Optional[str] = None
    ta_id: Optional[str] = None
    ta_code: Optional[str] = None
    assigned_manager: Optional[str] = None


class DateRange(CamelModel):
    start: Optional[date] = None
    end: Optional[date] = None


class PaxInfo(CamelModel):
    adults: int = Field(0, ge=0)
    children: int = Field(0, ge=0)
    infants: int = Field(0, ge=0)
    total: int = 0
    details: List[Dict[str, Any]] = Field(default_factory=list)


class PriceBreakdown(CamelModel):
    flight: Optional[float] = None
    land: Optional[float] = None
    visa: Optional[float] = None
    others: Optional[float] = None
    total: float = 0


class CommissionBreakdown(CamelModel):
    air: Optional[float] = None
    cint: Optional[float] = None
    visa: Optional[float] = None
    ta: Optional[float] = None
    total: float = 0


class PricingInfo(CamelModel):
    currency: Literal["KRW", "PHP", "USD"] = "PHP"
    cost_price: PriceBreakdown = PriceBreakdown()
    sell_price: PriceBreakdown = PriceBreakdown()
    commission: CommissionBreakdown = CommissionBreakdown()
    final_price: float = 0


class BookingCreate(CamelModel):
    project_type: Optional[str] = None
    customer: Optional[CustomerInfo] = None
    dates: Optional[DateRange] = None
    pax_info: Optional[PaxInfo] = None
    pricing: Optional[PricingInfo] = None
    flight_details: Optional[Dict[str, Any]] = None
    land_details: Optional[Dict[str, Any]] = None
    package_info: Optional[Dict[str, Any]] = None
    custom_requirements: Optional[str] = None
    priority: Priority = "MEDIUM"
    tags: List[str] = Field(default_factory=list)
    assigned_to: List[str] = Field(default_factory=list)
    notes: Optional[str] = None


class BookingUpdate(CamelModel):
    customer: Optional[CustomerInfo] = None
    dates: Optional[DateRange] = None
    pax_info: Optional[PaxInfo] = None
    pricing: Optional[PricingInfo] = None
    flight_details: Optional[Dict[str, Any]] = None
    land_details: Optional[Dict[str, Any]] = None
    package_info: Optional[Dict[str, Any]] = None
    custom_requirements: Optional[str] = None
    priority: Optional[Priority] = None
    tags: Optional[List[str]] = None
    assigned_to: Optional[List[str]] = None
    notes: Optional[str] = None


class StatusChangeRequest(CamelModel):
    new_status: Optional[str] = None
    notes: Optional[str] = None


class BookingResponse(CamelModel):
    id: uuid.UUID
    booking_number: str
    project_type: str
    primary_team: str
    status: str
    current_step: str
    customer: CustomerInfo
    dates: DateRange
    pax_info: PaxInfo
    pricing: PricingInfo
    flight_details: Optional[Dict[str, Any]] = None
    land_details: Optional[Dict[str, Any]] = None
    package_info: Optional[Dict[str, Any]] = None
    custom_requirements: Optional[str] = None
    priority: str
    tags: List[str] = Field(default_factory=list)
    assigned_to: List[str] = Field(default_factory=list)
    notes: Optional[str] = None
    confirmed_at: Optional[datetime] = None
    confirmed_by: Optional[str] = None
    created_by: Optional[str] = None
    updated_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class BookingListResponse(CamelModel):
    bookings: List[BookingResponse]
    total_count: int
    page: int
    page_size: int
    has_more: bool


class WorkflowHistoryResponse(CamelModel):
    id: uuid.UUID
    booking_id: uuid.UUID
    from_step: Optional[str] = None
    to_step: str
    changed_by: Optional[str] = None
    notes: Optional[str] = None
    automatic_change: bool = False
    created_at: datetime


class ConfirmResponse(CamelModel):
    success: bool = True
    message: str
    booking: BookingResponse


class StatusChangeResponse(CamelModel):
    success: bool = True
    message: str
    booking: BookingResponse
    previous_step: str
    new_step: str


class WorkflowHistoryList(CamelModel):
    booking_id: uuid.UUID
    booking_number: str
    current_step: str
    progress: int
    allowed_transitions: List[str]
    history: List[WorkflowHistoryResponse]
