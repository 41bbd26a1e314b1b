# teslacam/models/camera.py
"""
Cameras table — one consolidated, uploaded video per camera angle per event.
Only written after the merged file has been stored in object storage.
"""

from sqlalchemy import Column, Integer, BigInteger, Float, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from teslacam.database import Base


class Camera(Base):
    __tablename__ = "cameras"
    __table_args__ = (
        UniqueConstraint("event_id", "camera_name", name="uq_cameras_event_camera"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    camera_name = Column(String(20), nullable=False)
    storage_path = Column(String(1024), nullable=False)   # object key, events/<folder>/<camera>.mp4
    bucket_name = Column(String(100), nullable=False)
    timestamp = Column(DateTime, nullable=False)          # earliest segment
    duration_seconds = Column(Float, nullable=False, default=0.0)
    file_size = Column(BigInteger, nullable=False, default=0)
    event_id = Column(Integer, ForeignKey("events.id"), nullable=False, index=True)

    event = relationship("Event", back_populates="cameras")

    def __repr__(self):
        return f"<Camera {self.id} event={self.event_id} cam={self.camera_name}>"
