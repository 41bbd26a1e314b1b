from pydantic import BaseModel
from datetime import datetime
from typing import Optional
from teslacam.schemas.camera import CameraOut


class EventOut(BaseModel):
    id: int
    folder_name: str
    source: str
    created_at: datetime
    timestamp: Optional[datetime]
    type: str
    latitude: str
    longitude: str
    street: str
    city: str
    camera: Optional[int]
    has_thumbnail: bool = False
    cameras: list[CameraOut] = []

    class Config:
        from_attributes = True
