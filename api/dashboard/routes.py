from fastapi import APIRouter, Depends, Query
from typing import List

from api.security import get_engagement_store, require_area
from config import ACTIVITY_FEED_LIMIT
from iwems.activity import ActivityAggregator
from iwems.engagement_store import EngagementStore
from iwems.entities import ActivityRecord, DashboardStats
from iwems.identity import SessionResolution

dashboard_router = APIRouter()


def get_activity_aggregator(store: EngagementStore = Depends(get_engagement_store)) -> ActivityAggregator:
    return ActivityAggregator(store)


@dashboard_router.get("/activity", response_model=List[ActivityRecord])
async def recent_activity(
    limit: int = Query(ACTIVITY_FEED_LIMIT, ge=1, le=50),
    session: SessionResolution = Depends(require_area("/dashboard")),
    aggregator: ActivityAggregator = Depends(get_activity_aggregator),
):
    return await aggregator.build_feed(session.principal.id, limit=limit)


@dashboard_router.get("/stats", response_model=DashboardStats)
async def dashboard_stats(
    session: SessionResolution = Depends(require_area("/dashboard")),
    aggregator: ActivityAggregator = Depends(get_activity_aggregator),
):
    return await aggregator.dashboard_stats(session.principal.id)
