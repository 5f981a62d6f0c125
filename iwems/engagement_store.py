"""
Facade over events, vendor inquiries and booking requests.

Every write runs the lifecycle checks first; a failed check never reaches
the store. Store failures surface as StoreUnavailable or ConstraintViolation.
"""
import asyncio
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from cache import get_from_cache, invalidate_cache, set_to_cache
from config import CATALOG_CACHE_TTL
from iwems import db_queries
from iwems.entities import (
    BookingRequest,
    BookingStatus,
    Event,
    EventDraft,
    PrincipalEngagements,
    Vendor,
    VendorInquiry,
    Venue,
)
from iwems.exceptions import NotFound, OwnershipViolation, StaleState, ValidationError
from iwems.helpers import fetch_rows
from iwems.lifecycle import LifecycleEngine, lifecycle_engine
from logger import json_logger as logger

VENDOR_CATALOG_KEY = "catalog:vendors"
VENUE_CATALOG_KEY = "catalog:venues"


def _first(rows: List[Dict[str, Any]], model):
    return model.model_validate(rows[0]) if rows else None


class EngagementStore:
    def __init__(self, engine: LifecycleEngine = lifecycle_engine):
        self.engine = engine

    # --- single-record reads ---

    async def get_event(self, event_id: str) -> Optional[Event]:
        return _first(await fetch_rows(db_queries.get_event_by_id_query(), {"event_id": event_id}), Event)

    async def get_vendor(self, vendor_id: str) -> Optional[Vendor]:
        return _first(await fetch_rows(db_queries.get_vendor_by_id_query(), {"vendor_id": vendor_id}), Vendor)

    async def get_venue(self, venue_id: str) -> Optional[Venue]:
        return _first(await fetch_rows(db_queries.get_venue_by_id_query(), {"venue_id": venue_id}), Venue)

    async def get_inquiry(self, inquiry_id: str) -> Optional[VendorInquiry]:
        rows = await fetch_rows(db_queries.get_inquiry_by_id_query(), {"inquiry_id": inquiry_id})
        return _first(rows, VendorInquiry)

    async def get_booking(self, booking_id: str) -> Optional[BookingRequest]:
        rows = await fetch_rows(db_queries.get_booking_by_id_query(), {"booking_id": booking_id})
        return _first(rows, BookingRequest)

    # --- engagements ---

    async def create_inquiry(self, actor_id: str, vendor_id: str, event_id: str, message: str) -> VendorInquiry:
        with logger.contextualize(operation="create_inquiry", actor_id=actor_id, vendor_id=vendor_id, event_id=event_id):
            message = self.engine.validate_inquiry_draft(message)
            self.engine.check_event_ownership(await self.get_event(event_id), actor_id)
            self.engine.check_target_available(await self.get_vendor(vendor_id), "vendor")

            payload = self.engine.stamp_new_inquiry(vendor_id, event_id, actor_id, message)
            rows = await fetch_rows(db_queries.create_vendor_inquiry_query(), payload)
            inquiry = _first(rows, VendorInquiry)
            if inquiry is None:
                raise NotFound("The inquiry was not saved. Please try again.")
            logger.info(f"Vendor inquiry {inquiry.id} created.")
            return inquiry

    async def create_booking(self, actor_id: str, venue_id: str, event_id: str, request_date: Optional[date],
                             guest_count: Any, message: Optional[str] = None) -> BookingRequest:
        with logger.contextualize(operation="create_booking", actor_id=actor_id, venue_id=venue_id, event_id=event_id):
            draft = self.engine.validate_booking_draft(request_date, guest_count, message)
            self.engine.check_event_ownership(await self.get_event(event_id), actor_id)
            self.engine.check_target_available(await self.get_venue(venue_id), "venue")

            payload = self.engine.stamp_new_booking(venue_id, event_id, actor_id, draft)
            rows = await fetch_rows(db_queries.create_booking_request_query(), payload)
            booking = _first(rows, BookingRequest)
            if booking is None:
                raise NotFound("The booking request was not saved. Please try again.")
            logger.info(f"Booking request {booking.id} created.")
            return booking

    async def respond_to_inquiry(self, inquiry_id: str, status: Any) -> VendorInquiry:
        """Vendor accepts or declines a pending inquiry."""
        target = self.engine.parse_inquiry_status(status)
        inquiry = await self.get_inquiry(inquiry_id)
        if inquiry is None:
            raise NotFound("This inquiry no longer exists.")
        self.engine.check_inquiry_transition(inquiry.status, target)
        rows = await fetch_rows(
            db_queries.update_inquiry_status_query(),
            {"inquiry_id": inquiry_id, "status": target, "expected_status": inquiry.status},
        )
        if not rows:
            await self._raise_stale(self.get_inquiry, inquiry_id, inquiry.status)
        logger.info(f"Inquiry {inquiry_id} moved {inquiry.status.value} -> {target.value}")
        return VendorInquiry.model_validate(rows[0])

    async def respond_to_booking(self, booking_id: str, status: Any) -> BookingRequest:
        """Venue approves or rejects a pending booking request."""
        target = self.engine.parse_booking_status(status)
        booking = await self.get_booking(booking_id)
        if booking is None:
            raise NotFound("This booking request no longer exists.")
        self.engine.check_venue_response(booking.status, target)
        return await self._update_booking_status(booking, target)

    async def cancel_booking(self, booking_id: str, actor_id: str) -> BookingRequest:
        booking = await self.get_booking(booking_id)
        if booking is None:
            raise NotFound("This booking request no longer exists.")
        target = self.engine.authorize_booking_cancel(booking, actor_id)
        return await self._update_booking_status(booking, target)

    async def _update_booking_status(self, booking: BookingRequest, target: BookingStatus) -> BookingRequest:
        rows = await fetch_rows(
            db_queries.update_booking_status_query(),
            {"booking_id": booking.id, "status": target, "expected_status": booking.status},
        )
        if not rows:
            await self._raise_stale(self.get_booking, booking.id, booking.status)
        logger.info(f"Booking request {booking.id} moved {booking.status.value} -> {target.value}")
        return BookingRequest.model_validate(rows[0])

    async def _raise_stale(self, loader, record_id: str, expected) -> None:
        current = await loader(record_id)
        if current is None:
            raise NotFound("This request no longer exists.")
        logger.warning(f"Stale transition on {record_id}: expected {expected.value}, found {current.status.value}")
        raise StaleState(f"This request is already {current.status.value}.")

    # --- listings ---

    async def list_events(self, principal_id: str) -> List[Event]:
        rows = await fetch_rows(db_queries.get_events_for_owner_query(), {"owner_id": principal_id})
        return [Event.model_validate(row) for row in rows]

    async def list_inquiries(self, principal_id: str) -> List[VendorInquiry]:
        rows = await fetch_rows(db_queries.get_inquiries_for_inquirer_query(), {"inquirer_id": principal_id})
        return [VendorInquiry.model_validate(row) for row in rows]

    async def list_bookings(self, principal_id: str) -> List[BookingRequest]:
        rows = await fetch_rows(db_queries.get_bookings_for_requester_query(), {"requester_id": principal_id})
        return [BookingRequest.model_validate(row) for row in rows]

    async def list_for_principal(self, principal_id: str) -> PrincipalEngagements:
        events, inquiries, bookings = await asyncio.gather(
            self.list_events(principal_id),
            self.list_inquiries(principal_id),
            self.list_bookings(principal_id),
        )
        return PrincipalEngagements(events=events, inquiries=inquiries, bookings=bookings)

    async def list_recent(self, principal_id: str, per_kind: int = 3) -> PrincipalEngagements:
        """Newest `per_kind` records of each kind by creation time."""
        event_rows, inquiry_rows, booking_rows = await asyncio.gather(
            fetch_rows(db_queries.get_recent_events_query(), {"owner_id": principal_id, "limit": per_kind}),
            fetch_rows(db_queries.get_recent_inquiries_query(), {"inquirer_id": principal_id, "limit": per_kind}),
            fetch_rows(db_queries.get_recent_bookings_query(), {"requester_id": principal_id, "limit": per_kind}),
        )
        return PrincipalEngagements(
            events=[Event.model_validate(row) for row in event_rows],
            inquiries=[VendorInquiry.model_validate(row) for row in inquiry_rows],
            bookings=[BookingRequest.model_validate(row) for row in booking_rows],
        )

    async def count_engagements(self, principal_id: str) -> Tuple[int, int]:
        rows = await fetch_rows(db_queries.count_engagements_query(), {"principal_id": principal_id})
        if not rows:
            return 0, 0
        return int(rows[0].get("vendor_inquiries_count") or 0), int(rows[0].get("booking_requests_count") or 0)

    async def list_inquiries_for_vendor(self, vendor_id: str) -> List[VendorInquiry]:
        rows = await fetch_rows(db_queries.get_inquiries_for_vendor_query(), {"vendor_id": vendor_id})
        return [VendorInquiry.model_validate(row) for row in rows]

    async def list_bookings_for_venue(self, venue_id: str) -> List[BookingRequest]:
        rows = await fetch_rows(db_queries.get_bookings_for_venue_query(), {"venue_id": venue_id})
        return [BookingRequest.model_validate(row) for row in rows]

    # --- events ---

    async def create_event(self, owner_id: str, draft: EventDraft) -> Event:
        title = draft.title.strip()
        if not title:
            raise ValidationError("Please give the event a title.")
        self._check_event_numbers(draft.budget, draft.guest_count)
        params = draft.model_dump()
        params.update({"owner_id": owner_id, "title": title})
        event = _first(await fetch_rows(db_queries.create_event_query(), params), Event)
        if event is None:
            raise NotFound("The event was not saved. Please try again.")
        logger.info(f"Event {event.id} created for {owner_id}.")
        return event

    async def update_event_details(self, event_id: str, actor_id: str, budget: Optional[float] = None,
                                   guest_count: Optional[int] = None) -> Event:
        """Owner-only edit of budget and guest count."""
        updates = {key: value for key, value in (("budget", budget), ("guest_count", guest_count)) if value is not None}
        if not updates:
            raise ValidationError("Nothing to update.")
        self._check_event_numbers(budget, guest_count)
        event = await self.get_event(event_id)
        if event is None or event.owner_id != actor_id:
            raise OwnershipViolation("Only the event owner can edit this event.")
        params = dict(updates, event_id=event_id, owner_id=actor_id)
        updated = _first(await fetch_rows(db_queries.update_event_fields_query(list(updates)), params), Event)
        if updated is None:
            raise NotFound("This event no longer exists.")
        return updated

    @staticmethod
    def _check_event_numbers(budget: Optional[float], guest_count: Optional[int]) -> None:
        if budget is not None and budget < 0:
            raise ValidationError("Budget cannot be negative.")
        if guest_count is not None and guest_count <= 0:
            raise ValidationError("Guest count must be positive.")

    # --- catalog ---

    async def list_approved_vendors(self) -> List[Vendor]:
        rows = get_from_cache(VENDOR_CATALOG_KEY)
        if rows is None:
            rows = await fetch_rows(db_queries.get_approved_vendors_query())
            set_to_cache(VENDOR_CATALOG_KEY, rows, ttl=CATALOG_CACHE_TTL)
        return [Vendor.model_validate(row) for row in rows]

    async def list_approved_venues(self) -> List[Venue]:
        rows = get_from_cache(VENUE_CATALOG_KEY)
        if rows is None:
            rows = await fetch_rows(db_queries.get_approved_venues_query())
            set_to_cache(VENUE_CATALOG_KEY, rows, ttl=CATALOG_CACHE_TTL)
        return [Venue.model_validate(row) for row in rows]

    @staticmethod
    def invalidate_catalog() -> None:
        invalidate_cache(VENDOR_CATALOG_KEY)
        invalidate_cache(VENUE_CATALOG_KEY)


engagement_store = EngagementStore()
