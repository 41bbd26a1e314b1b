# teslacam/models/event.py
"""
Events table — one row per recorder incident folder (Sentry alert or manual Save).
Metadata columns are filled once, when the folder is first ingested.
"""

from sqlalchemy import Column, Integer, String, DateTime, LargeBinary, UniqueConstraint
from sqlalchemy.orm import relationship
from teslacam.database import Base


class Event(Base):
    __tablename__ = "events"
    __table_args__ = (
        UniqueConstraint("folder_name", "source", name="uq_events_folder_source"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    folder_name = Column(String(100), nullable=False, index=True)   # e.g. 2026-02-04_10-25-59
    source = Column(String(20), nullable=False, default="Sentry")   # Sentry | Saved
    created_at = Column(DateTime, nullable=False, index=True)       # when ingest first saw it
    timestamp = Column(DateTime, index=True)                        # when the incident happened
    type = Column(String(200), nullable=False, default="unknown")   # event.json "reason"
    # Kept as text, exactly as the recorder wrote them
    latitude = Column(String(50), nullable=False, default="")
    longitude = Column(String(50), nullable=False, default="")
    street = Column(String(200), nullable=False, default="")
    city = Column(String(200), nullable=False, default="")
    camera = Column(Integer)                                        # triggering camera code
    thumbnail = Column(LargeBinary)

    clips = relationship("Clip", back_populates="event")
    cameras = relationship("Camera", back_populates="event", order_by="Camera.camera_name")

    @property
    def has_thumbnail(self) -> bool:
        return self.thumbnail is not None

    def __repr__(self):
        return f"<Event {self.id} folder={self.folder_name} source={self.source}>"
