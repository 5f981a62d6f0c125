"""
Dashboard activity feed and summary statistics.

The feed is a read-only projection: the newest few records of each kind are
projected into `ActivityRecord`s, merged and sorted by timestamp, newest
first. Records with equal timestamps keep the order events, then inquiries,
then bookings.
"""
import asyncio
from typing import Iterable, List, Optional

from config import ACTIVITY_FEED_LIMIT, ACTIVITY_PER_KIND
from iwems.entities import ActivityRecord, BookingRequest, DashboardStats, Event, VendorInquiry
from logger import json_logger as logger

# Position of each kind when timestamps are equal.
KIND_ORDER = {"event": 0, "vendor_inquiry": 1, "booking_request": 2}


def project_event(event: Event) -> ActivityRecord:
    return ActivityRecord(
        id=event.id,
        type="event",
        title="Event Created",
        description=event.title,
        timestamp=event.created_at,
        status=event.status.value,
    )


def project_inquiry(inquiry: VendorInquiry) -> ActivityRecord:
    return ActivityRecord(
        id=inquiry.id,
        type="vendor_inquiry",
        title="Vendor Inquiry",
        description=inquiry.vendor_name or "Unknown Vendor",
        timestamp=inquiry.created_at,
        status=inquiry.status.value,
    )


def project_booking(booking: BookingRequest) -> ActivityRecord:
    return ActivityRecord(
        id=booking.id,
        type="booking_request",
        title="Venue Booking Request",
        description=booking.venue_name or "Unknown Venue",
        timestamp=booking.created_at,
        status=booking.status.value,
    )


def _newest(records: Iterable, per_kind: Optional[int]) -> List:
    ordered = sorted(records, key=lambda record: record.created_at, reverse=True)
    return ordered if per_kind is None else ordered[:per_kind]


def merge_feed(events: Iterable[Event], inquiries: Iterable[VendorInquiry], bookings: Iterable[BookingRequest],
               limit: int = ACTIVITY_FEED_LIMIT, per_kind: Optional[int] = ACTIVITY_PER_KIND) -> List[ActivityRecord]:
    """
    Merges the three kinds into one feed.

    Args:
        limit: maximum number of records returned.
        per_kind: how many of the newest records of each kind take part; None keeps all.

    Returns:
        Records sorted by timestamp descending. On equal timestamps events come
        before inquiries, and inquiries before bookings.
    """
    if limit <= 0:
        return []
    feed = [project_event(e) for e in _newest(events, per_kind)]
    feed += [project_inquiry(i) for i in _newest(inquiries, per_kind)]
    feed += [project_booking(b) for b in _newest(bookings, per_kind)]
    # Stable sorts: kind order first, then timestamp.
    feed.sort(key=lambda record: KIND_ORDER[record.type])
    feed.sort(key=lambda record: record.timestamp, reverse=True)
    return feed[:limit]


def compute_stats(events: Iterable[Event], inquiries_count: int, bookings_count: int) -> DashboardStats:
    events = list(events)
    return DashboardStats(
        events_count=len(events),
        vendor_inquiries_count=inquiries_count,
        booking_requests_count=bookings_count,
        total_budget=sum(event.budget or 0 for event in events),
    )


class ActivityAggregator:
    def __init__(self, store):
        self.store = store

    async def build_feed(self, principal_id: str, limit: int = ACTIVITY_FEED_LIMIT,
                         per_kind: int = ACTIVITY_PER_KIND) -> List[ActivityRecord]:
        recent = await self.store.list_recent(principal_id, per_kind=per_kind)
        feed = merge_feed(recent.events, recent.inquiries, recent.bookings, limit=limit, per_kind=per_kind)
        logger.debug(f"build_feed: {len(feed)} activity records for principal {principal_id}")
        return feed

    async def dashboard_stats(self, principal_id: str) -> DashboardStats:
        events, (inquiries_count, bookings_count) = await asyncio.gather(
            self.store.list_events(principal_id),
            self.store.count_engagements(principal_id),
        )
        return compute_stats(events, inquiries_count, bookings_count)
