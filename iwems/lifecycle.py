"""
State machine for vendor inquiries and venue booking requests.

Both kinds start `pending` and move once to a terminal status; nothing moves
on a timer. All checks here are pure and run before anything is written.
"""
from datetime import date
from typing import Any, Dict, Optional, Union

from iwems.entities import (
    ApprovalStatus,
    BookingRequest,
    BookingStatus,
    Event,
    InquiryStatus,
    Vendor,
    Venue,
)
from iwems.exceptions import InvalidTransition, OwnershipViolation, TargetUnavailable, ValidationError

INQUIRY_TRANSITIONS = {
    InquiryStatus.PENDING: frozenset({InquiryStatus.ACCEPTED, InquiryStatus.DECLINED}),
    InquiryStatus.ACCEPTED: frozenset(),
    InquiryStatus.DECLINED: frozenset(),
}

BOOKING_TRANSITIONS = {
    BookingStatus.PENDING: frozenset({BookingStatus.APPROVED, BookingStatus.REJECTED, BookingStatus.CANCELLED}),
    BookingStatus.APPROVED: frozenset(),
    BookingStatus.REJECTED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
}

# Statuses the venue side may set; `cancelled` belongs to the requester.
VENUE_RESPONSES = frozenset({BookingStatus.APPROVED, BookingStatus.REJECTED})


class LifecycleEngine:

    @staticmethod
    def parse_inquiry_status(value: Any) -> InquiryStatus:
        try:
            return InquiryStatus(value)
        except ValueError:
            raise ValidationError(f"'{value}' is not a valid inquiry status.") from None

    @staticmethod
    def parse_booking_status(value: Any) -> BookingStatus:
        try:
            return BookingStatus(value)
        except ValueError:
            raise ValidationError(f"'{value}' is not a valid booking status.") from None

    @staticmethod
    def is_terminal(status: Union[InquiryStatus, BookingStatus]) -> bool:
        table = INQUIRY_TRANSITIONS if isinstance(status, InquiryStatus) else BOOKING_TRANSITIONS
        return not table[status]

    def check_inquiry_transition(self, current: Any, target: Any) -> InquiryStatus:
        current = self.parse_inquiry_status(current)
        target = self.parse_inquiry_status(target)
        if target not in INQUIRY_TRANSITIONS[current]:
            raise InvalidTransition(f"An inquiry that is {current.value} cannot become {target.value}.")
        return target

    def check_booking_transition(self, current: Any, target: Any) -> BookingStatus:
        current = self.parse_booking_status(current)
        target = self.parse_booking_status(target)
        if target not in BOOKING_TRANSITIONS[current]:
            raise InvalidTransition(f"A booking request that is {current.value} cannot become {target.value}.")
        return target

    def check_venue_response(self, current: Any, target: Any) -> BookingStatus:
        target = self.check_booking_transition(current, target)
        if target not in VENUE_RESPONSES:
            raise ValidationError("Venues can only approve or reject a booking request.")
        return target

    def authorize_booking_cancel(self, booking: BookingRequest, actor_id: str) -> BookingStatus:
        """Only the original requester may cancel, and only while the request is pending."""
        if booking.requester_id != actor_id:
            raise OwnershipViolation("Only the requester can cancel this booking request.")
        return self.check_booking_transition(booking.status, BookingStatus.CANCELLED)

    @staticmethod
    def validate_inquiry_draft(message: Optional[str]) -> str:
        message = (message or "").strip()
        if not message:
            raise ValidationError("Please enter a message.")
        return message

    @staticmethod
    def validate_booking_draft(request_date: Optional[date], guest_count: Any,
                               message: Optional[str] = None) -> Dict[str, Any]:
        if request_date is None:
            raise ValidationError("Please select a booking date.")
        if isinstance(guest_count, bool):
            raise ValidationError("Please enter a valid guest count.")
        # Whole numbers only; int() would truncate 2.7 to 2.
        if isinstance(guest_count, float) and not guest_count.is_integer():
            raise ValidationError("Please enter a valid guest count.")
        try:
            guest_count = int(guest_count)
        except (TypeError, ValueError):
            raise ValidationError("Please enter a valid guest count.") from None
        if guest_count <= 0:
            raise ValidationError("Please enter a valid guest count.")
        message = (message or "").strip() or None
        return {"request_date": request_date, "guest_count": guest_count, "message": message}

    @staticmethod
    def check_event_ownership(event: Optional[Event], actor_id: str) -> Event:
        if event is None or event.owner_id != actor_id:
            raise OwnershipViolation("You can only send requests for your own events.")
        return event

    @staticmethod
    def check_target_available(target: Optional[Union[Vendor, Venue]], kind: str) -> Union[Vendor, Venue]:
        if target is None or target.approval_status != ApprovalStatus.APPROVED:
            raise TargetUnavailable(f"This {kind} is no longer available.")
        return target

    @staticmethod
    def stamp_new_inquiry(vendor_id: str, event_id: str, inquirer_id: str, message: str) -> Dict[str, Any]:
        return {
            "vendor_id": vendor_id,
            "event_id": event_id,
            "inquirer_id": inquirer_id,
            "message": message,
            "status": InquiryStatus.PENDING,
        }

    @staticmethod
    def stamp_new_booking(venue_id: str, event_id: str, requester_id: str, draft: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "venue_id": venue_id,
            "event_id": event_id,
            "requester_id": requester_id,
            "request_date": draft["request_date"],
            "guest_count": draft["guest_count"],
            "message": draft["message"],
            "status": BookingStatus.PENDING,
        }


lifecycle_engine = LifecycleEngine()
