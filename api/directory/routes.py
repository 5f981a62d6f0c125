from fastapi import APIRouter, Depends, status
from typing import List, Optional
import logging

from api.security import get_engagement_store, require_area
from iwems.directory_filter import filter_directory
from iwems.engagement_store import EngagementStore
from iwems.entities import Vendor, Venue
from iwems.identity import SessionResolution

directory_router = APIRouter()


@directory_router.get("/vendors", response_model=List[Vendor])
async def browse_vendors(
    search: Optional[str] = None,
    category: Optional[str] = None,
    price_range: Optional[str] = None,
    session: SessionResolution = Depends(require_area("/vendors")),
    store: EngagementStore = Depends(get_engagement_store),
):
    vendors = await store.list_approved_vendors()
    return filter_directory(vendors, search_text=search, category=category, price_range=price_range)


@directory_router.get("/venues", response_model=List[Venue])
async def browse_venues(
    search: Optional[str] = None,
    capacity: Optional[str] = None,
    session: SessionResolution = Depends(require_area("/venues")),
    store: EngagementStore = Depends(get_engagement_store),
):
    venues = await store.list_approved_venues()
    return filter_directory(venues, search_text=search, capacity_range=capacity)


@directory_router.delete("/cache", status_code=status.HTTP_204_NO_CONTENT)
async def refresh_catalog(
    session: SessionResolution = Depends(require_area("/admin")),
    store: EngagementStore = Depends(get_engagement_store),
):
    """Drops the cached vendor and venue catalogs after an approval change."""
    logging.info(f"Catalog cache cleared by user_id={session.principal.id}")
    store.invalidate_catalog()
