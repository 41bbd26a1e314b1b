# teslacam/models/clip.py
"""
Clips table — one row per raw per-minute segment written by the recorder.
The path is the natural key; rows are never updated after insert.
"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from teslacam.database import Base


class Clip(Base):
    __tablename__ = "clips"

    id = Column(Integer, primary_key=True, autoincrement=True)
    camera = Column(String(20), nullable=False, index=True)   # front | back | left_repeater | right_repeater | unknown
    path = Column(String(1024), nullable=False, unique=True)  # absolute path on the clip mount
    timestamp = Column(DateTime, nullable=False, index=True)
    event_id = Column(Integer, ForeignKey("events.id"), index=True)

    event = relationship("Event", back_populates="clips")

    def __repr__(self):
        return f"<Clip {self.id} cam={self.camera} path={self.path}>"
