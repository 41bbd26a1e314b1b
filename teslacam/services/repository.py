# teslacam/services/repository.py
"""
Query/persist helpers for Event, Clip and Camera rows.
Every function takes an explicit Session; callers own commit/close.
"""

from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from teslacam.models.camera import Camera
from teslacam.models.clip import Clip
from teslacam.models.event import Event


def find_event(db: Session, folder_name: str, source: str) -> Optional[Event]:
    return (
        db.query(Event)
        .filter(Event.folder_name == folder_name, Event.source == source)
        .first()
    )


def event_exists(db: Session, folder_name: str, source: str) -> bool:
    return find_event(db, folder_name, source) is not None


def create_event(db: Session, folder_name: str, source: str, created_at: datetime, metadata) -> Event:
    """Add an Event built from ParsedEventMetadata. Falls back to created_at when no timestamp parsed."""
    event = Event(
        folder_name=folder_name,
        source=source,
        created_at=created_at,
        timestamp=metadata.timestamp or created_at,
        type=metadata.type or "unknown",
        latitude=metadata.latitude,
        longitude=metadata.longitude,
        street=metadata.street,
        city=metadata.city,
        camera=metadata.camera,
        thumbnail=metadata.thumbnail,
    )
    db.add(event)
    db.flush()   # assign event.id
    return event


def clip_exists(db: Session, path: str) -> bool:
    return db.query(Clip.id).filter(Clip.path == path).first() is not None


def add_clips(db: Session, event: Optional[Event], clips: Iterable) -> int:
    """Insert RawClips whose path isn't indexed yet. Returns how many were added."""
    inserted = 0
    for raw in clips:
        path = str(raw.path)
        if clip_exists(db, path):
            continue
        db.add(Clip(camera=raw.camera, path=path, timestamp=raw.timestamp, event=event))
        inserted += 1
    return inserted


def camera_exists(db: Session, event_id: int, camera_name: str) -> bool:
    return (
        db.query(Camera.id)
        .filter(Camera.event_id == event_id, Camera.camera_name == camera_name)
        .first()
    ) is not None


def add_camera(db: Session, event_id: int, camera_name: str, storage_path: str, bucket_name: str,
               timestamp: datetime, duration_seconds: float, file_size: int) -> Camera:
    camera = Camera(
        event_id=event_id,
        camera_name=camera_name,
        storage_path=storage_path,
        bucket_name=bucket_name,
        timestamp=timestamp,
        duration_seconds=duration_seconds,
        file_size=file_size,
    )
    db.add(camera)
    return camera


def list_events(db: Session, limit: int = 100, source: Optional[str] = None) -> list:
    q = db.query(Event).options(selectinload(Event.cameras))
    if source:
        q = q.filter(Event.source == source)
    return q.order_by(Event.created_at.desc(), Event.id.desc()).limit(limit).all()


def list_recent_clips(db: Session, limit: int = 500) -> list:
    return db.query(Clip).order_by(Clip.timestamp.desc()).limit(limit).all()


def count_rows(db: Session) -> dict:
    return {
        "events": db.query(func.count(Event.id)).scalar(),
        "clips": db.query(func.count(Clip.id)).scalar(),
        "cameras": db.query(func.count(Camera.id)).scalar(),
    }
