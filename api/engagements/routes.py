from fastapi import APIRouter, Depends, status
from typing import List
import logging

from api.engagements.models import BookingCreate, InquiryCreate, StatusUpdate
from api.security import get_engagement_store, require_area, require_roles
from iwems.access_guard import PLANNING_ROLES
from iwems.engagement_store import EngagementStore
from iwems.entities import BookingRequest, PrincipalEngagements, Role, VendorInquiry
from iwems.identity import SessionResolution

engagements_router = APIRouter()


@engagements_router.post("/inquiries", response_model=VendorInquiry, status_code=status.HTTP_201_CREATED)
async def create_inquiry(
    body: InquiryCreate,
    session: SessionResolution = Depends(require_area("/vendors")),
    store: EngagementStore = Depends(get_engagement_store),
):
    logging.info(f"Inquiry request from user_id={session.principal.id} to vendor_id={body.vendor_id}")
    return await store.create_inquiry(session.principal.id, body.vendor_id, body.event_id, body.message)


@engagements_router.post("/bookings", response_model=BookingRequest, status_code=status.HTTP_201_CREATED)
async def create_booking(
    body: BookingCreate,
    session: SessionResolution = Depends(require_area("/venues")),
    store: EngagementStore = Depends(get_engagement_store),
):
    logging.info(f"Booking request from user_id={session.principal.id} to venue_id={body.venue_id}")
    return await store.create_booking(
        session.principal.id, body.venue_id, body.event_id, body.request_date, body.guest_count, body.message
    )


@engagements_router.get("", response_model=PrincipalEngagements)
async def list_engagements(
    session: SessionResolution = Depends(require_roles(PLANNING_ROLES)),
    store: EngagementStore = Depends(get_engagement_store),
):
    return await store.list_for_principal(session.principal.id)


@engagements_router.post("/bookings/{booking_id}/cancel", response_model=BookingRequest)
async def cancel_booking(
    booking_id: str,
    session: SessionResolution = Depends(require_roles(PLANNING_ROLES)),
    store: EngagementStore = Depends(get_engagement_store),
):
    return await store.cancel_booking(booking_id, session.principal.id)


# Counterpart side. Which vendor or venue a manager may act for is enforced by the store's row policies.

@engagements_router.get("/vendor/{vendor_id}/inquiries", response_model=List[VendorInquiry])
async def list_vendor_inquiries(
    vendor_id: str,
    session: SessionResolution = Depends(require_area("/vendor-dashboard")),
    store: EngagementStore = Depends(get_engagement_store),
):
    return await store.list_inquiries_for_vendor(vendor_id)


@engagements_router.post("/inquiries/{inquiry_id}/status", response_model=VendorInquiry)
async def respond_to_inquiry(
    inquiry_id: str,
    body: StatusUpdate,
    session: SessionResolution = Depends(require_roles({Role.VENDOR})),
    store: EngagementStore = Depends(get_engagement_store),
):
    logging.info(f"user_id={session.principal.id} sets inquiry {inquiry_id} to {body.status}")
    return await store.respond_to_inquiry(inquiry_id, body.status)


@engagements_router.get("/venue/{venue_id}/bookings", response_model=List[BookingRequest])
async def list_venue_bookings(
    venue_id: str,
    session: SessionResolution = Depends(require_area("/venue-manager")),
    store: EngagementStore = Depends(get_engagement_store),
):
    return await store.list_bookings_for_venue(venue_id)


@engagements_router.post("/bookings/{booking_id}/status", response_model=BookingRequest)
async def respond_to_booking(
    booking_id: str,
    body: StatusUpdate,
    session: SessionResolution = Depends(require_roles({Role.VENUE_MANAGER})),
    store: EngagementStore = Depends(get_engagement_store),
):
    logging.info(f"user_id={session.principal.id} sets booking {booking_id} to {body.status}")
    return await store.respond_to_booking(booking_id, body.status)
