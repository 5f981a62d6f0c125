from pydantic import BaseModel
from typing import Optional, Union
from datetime import date


class InquiryCreate(BaseModel):
    vendor_id: str
    event_id: str
    message: str


class BookingCreate(BaseModel):
    venue_id: str
    event_id: str
    request_date: Optional[date] = None
    # Checked by the lifecycle engine, not here.
    guest_count: Union[int, str, None] = None
    message: Optional[str] = None


class StatusUpdate(BaseModel):
    status: str
