from fastapi import APIRouter, Depends, status
from typing import List
import logging

from api.events.models import EventUpdate
from api.security import get_engagement_store, require_area
from iwems.engagement_store import EngagementStore
from iwems.entities import Event, EventDraft
from iwems.identity import SessionResolution

events_router = APIRouter()


@events_router.get("", response_model=List[Event])
async def list_events(
    session: SessionResolution = Depends(require_area("/events")),
    store: EngagementStore = Depends(get_engagement_store),
):
    return await store.list_events(session.principal.id)


@events_router.post("", response_model=Event, status_code=status.HTTP_201_CREATED)
async def create_event(
    draft: EventDraft,
    session: SessionResolution = Depends(require_area("/events/create")),
    store: EngagementStore = Depends(get_engagement_store),
):
    logging.info(f"Create event request from user_id={session.principal.id}: {draft.model_dump_json()}")
    return await store.create_event(session.principal.id, draft)


@events_router.patch("/{event_id}", response_model=Event)
async def update_event(
    event_id: str,
    event_update: EventUpdate,
    session: SessionResolution = Depends(require_area("/events")),
    store: EngagementStore = Depends(get_engagement_store),
):
    logging.info(f"Update request for event_id: {event_id} with data: {event_update.model_dump_json()}")
    return await store.update_event_details(
        event_id, session.principal.id, budget=event_update.budget, guest_count=event_update.guest_count
    )
