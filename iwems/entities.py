from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, List, Literal, Optional

from dateutil import parser as date_parser
from pydantic import AliasChoices, BaseModel, Field, field_validator


class Role(str, Enum):
    COUPLE = "couple"
    PLANNER = "planner"
    VENDOR = "vendor"
    VENUE_MANAGER = "venue_manager"
    ADMIN = "admin"

    @classmethod
    def parse(cls, value: Any) -> Optional["Role"]:
        """Returns the Role for a stored value, or None for missing/unknown values."""
        if value is None:
            return None
        try:
            return cls(value)
        except ValueError:
            return None


class EventStatus(str, Enum):
    PLANNING = "planning"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ApprovalStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class InquiryStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"


class BookingStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


def parse_timestamp(value: Any) -> Any:
    """Parses backend timestamp strings (ISO or Postgres text form) into aware datetimes."""
    if isinstance(value, str):
        value = date_parser.parse(value)
    if isinstance(value, datetime) and value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


class _Record(BaseModel):
    @field_validator("created_at", mode="before", check_fields=False)
    @classmethod
    def _parse_created_at(cls, value):
        return parse_timestamp(value)


class Principal(BaseModel):
    id: str
    display_name: Optional[str] = None
    email: Optional[str] = None
    authenticated: bool = True


class Event(_Record):
    id: str
    owner_id: str = Field(validation_alias=AliasChoices("owner_id", "couple_id"))
    title: str
    event_date: date
    venue_location: Optional[str] = None
    budget: Optional[float] = None
    guest_count: Optional[int] = None
    status: EventStatus = EventStatus.PLANNING
    created_at: datetime


class EventDraft(BaseModel):
    title: str
    event_date: date
    venue_location: Optional[str] = None
    budget: Optional[float] = None
    guest_count: Optional[int] = None


class Vendor(BaseModel):
    id: str
    name: str = Field(validation_alias=AliasChoices("name", "business_name"))
    description: Optional[str] = None
    category: str
    location: Optional[str] = None
    price_range: Optional[str] = None
    rating: Optional[float] = None
    review_count: Optional[int] = None
    approval_status: ApprovalStatus = ApprovalStatus.PENDING


class Venue(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    location: Optional[str] = None
    capacity: Optional[int] = None
    price_per_day: Optional[float] = None
    rating: Optional[float] = None
    review_count: Optional[int] = None
    approval_status: ApprovalStatus = ApprovalStatus.PENDING


class VendorInquiry(_Record):
    id: str
    vendor_id: str
    event_id: str
    inquirer_id: str
    message: str
    status: InquiryStatus = InquiryStatus.PENDING
    created_at: datetime
    # Joined from vendors.business_name for display only
    vendor_name: Optional[str] = None


class BookingRequest(_Record):
    id: str
    venue_id: str
    event_id: str
    requester_id: str
    request_date: date
    guest_count: int
    message: Optional[str] = None
    status: BookingStatus = BookingStatus.PENDING
    created_at: datetime
    # Joined from venues.name for display only
    venue_name: Optional[str] = None


class PrincipalEngagements(BaseModel):
    events: List[Event] = []
    inquiries: List[VendorInquiry] = []
    bookings: List[BookingRequest] = []


class ActivityRecord(BaseModel):
    """Read-only projection for the dashboard feed. Never written back."""
    id: str
    type: Literal["event", "vendor_inquiry", "booking_request"]
    title: str
    description: str
    timestamp: datetime
    status: Optional[str] = None


class DashboardStats(BaseModel):
    events_count: int = 0
    vendor_inquiries_count: int = 0
    booking_requests_count: int = 0
    total_budget: float = 0
