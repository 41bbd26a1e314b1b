from pydantic import BaseModel
from datetime import datetime


class CameraOut(BaseModel):
    id: int
    event_id: int
    camera_name: str
    storage_path: str
    bucket_name: str
    timestamp: datetime
    duration_seconds: float
    file_size: int

    class Config:
        from_attributes = True
