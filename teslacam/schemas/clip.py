from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class ClipOut(BaseModel):
    id: int
    camera: str
    path: str
    timestamp: datetime
    event_id: Optional[int]

    class Config:
        from_attributes = True
