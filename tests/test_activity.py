import unittest
from unittest.mock import AsyncMock, MagicMock
from datetime import date, datetime, timedelta, timezone

from config import ACTIVITY_PER_KIND
from iwems.activity import ActivityAggregator, compute_stats, merge_feed
from iwems.entities import BookingRequest, Event, PrincipalEngagements, VendorInquiry

BASE = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def event(event_id, minutes=0, budget=None):
    return Event(id=event_id, couple_id="c1", title=f"Event {event_id}", event_date=date(2026, 12, 12),
                 budget=budget, created_at=BASE + timedelta(minutes=minutes))


def inquiry(inquiry_id, minutes=0, vendor_name="Blooms"):
    return VendorInquiry(id=inquiry_id, vendor_id="v1", event_id="e1", inquirer_id="c1", message="hi",
                         vendor_name=vendor_name, created_at=BASE + timedelta(minutes=minutes))


def booking(booking_id, minutes=0, venue_name="Lakeside Hall"):
    return BookingRequest(id=booking_id, venue_id="vn1", event_id="e1", requester_id="c1",
                          request_date=date(2026, 12, 12), guest_count=100, venue_name=venue_name,
                          created_at=BASE + timedelta(minutes=minutes))


class TestMergeFeed(unittest.TestCase):

    def test_sorted_newest_first_and_truncated(self):
        feed = merge_feed(
            [event("e1", minutes=1), event("e2", minutes=30)],
            [inquiry("i1", minutes=20)],
            [booking("b1", minutes=10), booking("b2", minutes=40)],
            limit=4,
        )
        self.assertEqual([r.id for r in feed], ["b2", "e2", "i1", "b1"])
        # Expected: the oldest record (e1) falls off at limit 4.

    def test_equal_timestamps_order_events_inquiries_bookings(self):
        feed = merge_feed([event("e1")], [inquiry("i1")], [booking("b1")], limit=5)
        self.assertEqual([r.type for r in feed], ["event", "vendor_inquiry", "booking_request"])

    def test_per_kind_bound(self):
        events = [event(f"e{n}", minutes=n) for n in range(5)]
        feed = merge_feed(events, [], [], limit=10, per_kind=3)
        self.assertEqual([r.id for r in feed], ["e4", "e3", "e2"])

    def test_projection_fields(self):
        feed = merge_feed([], [inquiry("i1", vendor_name=None)], [booking("b1", minutes=-1, venue_name=None)], limit=5)
        self.assertEqual(feed[0].title, "Vendor Inquiry")
        self.assertEqual(feed[0].description, "Unknown Vendor")
        self.assertEqual(feed[0].status, "pending")
        self.assertEqual(feed[1].title, "Venue Booking Request")
        self.assertEqual(feed[1].description, "Unknown Venue")

    def test_non_positive_limit_is_empty(self):
        self.assertEqual(merge_feed([event("e1")], [], [], limit=0), [])


class TestComputeStats(unittest.TestCase):

    def test_total_budget_treats_missing_as_zero(self):
        stats = compute_stats([event("e1", budget=500), event("e2"), event("e3", budget=1200)], 2, 1)
        self.assertEqual(stats.total_budget, 1700)
        self.assertEqual(stats.events_count, 3)
        self.assertEqual(stats.vendor_inquiries_count, 2)
        self.assertEqual(stats.booking_requests_count, 1)

    def test_empty(self):
        stats = compute_stats([], 0, 0)
        self.assertEqual(stats.total_budget, 0)
        self.assertEqual(stats.events_count, 0)


class TestActivityAggregator(unittest.IsolatedAsyncioTestCase):

    async def test_build_feed_uses_recent_records(self):
        store = MagicMock()
        store.list_recent = AsyncMock(return_value=PrincipalEngagements(
            events=[event("e1", minutes=5)], inquiries=[inquiry("i1", minutes=6)], bookings=[],
        ))

        feed = await ActivityAggregator(store).build_feed("c1", limit=5)

        store.list_recent.assert_awaited_once_with("c1", per_kind=ACTIVITY_PER_KIND)
        self.assertEqual([r.id for r in feed], ["i1", "e1"])

    async def test_dashboard_stats(self):
        store = MagicMock()
        store.list_events = AsyncMock(return_value=[event("e1", budget=500), event("e2", budget=250.5)])
        store.count_engagements = AsyncMock(return_value=(3, 4))

        stats = await ActivityAggregator(store).dashboard_stats("c1")

        self.assertEqual(stats.total_budget, 750.5)
        self.assertEqual(stats.booking_requests_count, 4)
