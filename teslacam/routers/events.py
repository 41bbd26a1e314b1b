# teslacam/routers/events.py
"""
Read-only event endpoints for the dashboard.
GET /events                 — ingested events, newest first, with their cameras.
GET /events/{id}            — one event.
GET /events/{id}/thumbnail  — the recorder's thumb.png.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from teslacam.database import get_db
from teslacam.models.event import Event
from teslacam.schemas.event import EventOut
from teslacam.services import repository

router = APIRouter()


@router.get("/events", response_model=list[EventOut], summary="Ingested events, newest first")
def list_events(
    source: Optional[str] = None,
    limit: int = 100,
    db: Session = Depends(get_db),
):
    """Filter by source (Sentry | Saved)."""
    return repository.list_events(db, limit=limit, source=source)


@router.get("/events/{event_id}", response_model=EventOut, summary="Single event")
def get_event(event_id: int, db: Session = Depends(get_db)):
    event = db.get(Event, event_id)
    if event is None:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


@router.get("/events/{event_id}/thumbnail", summary="Event thumbnail (PNG)")
def get_event_thumbnail(event_id: int, db: Session = Depends(get_db)):
    event = db.get(Event, event_id)
    if event is None or event.thumbnail is None:
        raise HTTPException(status_code=404, detail="Thumbnail not found")
    return Response(content=event.thumbnail, media_type="image/png")
