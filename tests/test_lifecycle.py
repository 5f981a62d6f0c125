import pytest
from datetime import date, datetime, timezone

from iwems.entities import ApprovalStatus, BookingRequest, BookingStatus, Event, InquiryStatus, Vendor
from iwems.exceptions import InvalidTransition, OwnershipViolation, TargetUnavailable, ValidationError
from iwems.lifecycle import BOOKING_TRANSITIONS, INQUIRY_TRANSITIONS, LifecycleEngine

engine = LifecycleEngine()
CREATED = datetime(2026, 1, 1, tzinfo=timezone.utc)


def make_booking(status=BookingStatus.PENDING, requester_id="couple-1"):
    return BookingRequest(
        id="b1", venue_id="v1", event_id="e1", requester_id=requester_id,
        request_date=date(2026, 12, 12), guest_count=100, status=status, created_at=CREATED,
    )


@pytest.mark.parametrize("target", [InquiryStatus.ACCEPTED, InquiryStatus.DECLINED])
def test_pending_inquiry_can_be_decided(target):
    assert engine.check_inquiry_transition(InquiryStatus.PENDING, target) == target


@pytest.mark.parametrize("current", [InquiryStatus.ACCEPTED, InquiryStatus.DECLINED])
@pytest.mark.parametrize("target", list(InquiryStatus))
def test_decided_inquiry_never_moves(current, target):
    with pytest.raises(InvalidTransition):
        engine.check_inquiry_transition(current, target)


@pytest.mark.parametrize("current", [BookingStatus.APPROVED, BookingStatus.REJECTED, BookingStatus.CANCELLED])
@pytest.mark.parametrize("target", list(BookingStatus))
def test_terminal_booking_never_moves(current, target):
    with pytest.raises(InvalidTransition):
        engine.check_booking_transition(current, target)


def test_pending_is_not_a_self_transition():
    with pytest.raises(InvalidTransition):
        engine.check_booking_transition("pending", "pending")


def test_transition_tables_cover_every_status():
    assert set(INQUIRY_TRANSITIONS) == set(InquiryStatus)
    assert set(BOOKING_TRANSITIONS) == set(BookingStatus)
    assert engine.is_terminal(BookingStatus.CANCELLED)
    assert not engine.is_terminal(InquiryStatus.PENDING)


def test_unknown_status_value_is_a_validation_error():
    with pytest.raises(ValidationError):
        engine.check_booking_transition("pending", "maybe")


def test_venue_response_excludes_cancel():
    assert engine.check_venue_response("pending", "rejected") == BookingStatus.REJECTED
    with pytest.raises(ValidationError):
        engine.check_venue_response("pending", "cancelled")


def test_only_requester_cancels():
    assert engine.authorize_booking_cancel(make_booking(), "couple-1") == BookingStatus.CANCELLED
    with pytest.raises(OwnershipViolation):
        engine.authorize_booking_cancel(make_booking(), "someone-else")


def test_cancel_after_decision_is_invalid():
    with pytest.raises(InvalidTransition):
        engine.authorize_booking_cancel(make_booking(status=BookingStatus.APPROVED), "couple-1")


def test_booking_draft_normalizes_fields():
    draft = engine.validate_booking_draft(date(2026, 12, 12), "120", "  ")
    assert draft == {"request_date": date(2026, 12, 12), "guest_count": 120, "message": None}


def test_booking_draft_rejects_boolean_guest_count():
    with pytest.raises(ValidationError):
        engine.validate_booking_draft(date(2026, 12, 12), True)


@pytest.mark.parametrize("guest_count", [2.7, "2.7", float("nan")])
def test_booking_draft_rejects_fractional_guest_count(guest_count):
    with pytest.raises(ValidationError):
        engine.validate_booking_draft(date(2026, 12, 12), guest_count)


def test_booking_draft_accepts_whole_float():
    assert engine.validate_booking_draft(date(2026, 12, 12), 40.0)["guest_count"] == 40


def test_event_ownership():
    event = Event(id="e1", couple_id="couple-1", title="Wedding", event_date=date(2026, 12, 12), created_at=CREATED)
    assert engine.check_event_ownership(event, "couple-1") is event
    with pytest.raises(OwnershipViolation):
        engine.check_event_ownership(event, "couple-2")


def test_target_must_be_approved():
    vendor = Vendor(id="v1", business_name="Blooms", category="florist", approval_status=ApprovalStatus.REJECTED)
    with pytest.raises(TargetUnavailable):
        engine.check_target_available(vendor, "vendor")
    with pytest.raises(TargetUnavailable):
        engine.check_target_available(None, "venue")


def test_new_records_are_stamped_pending():
    assert engine.stamp_new_inquiry("v1", "e1", "couple-1", "hi")["status"] == InquiryStatus.PENDING
    draft = engine.validate_booking_draft(date(2026, 12, 12), 10)
    assert engine.stamp_new_booking("v1", "e1", "couple-1", draft)["status"] == BookingStatus.PENDING
