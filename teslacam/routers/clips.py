# teslacam/routers/clips.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from teslacam.database import get_db
from teslacam.schemas.clip import ClipOut
from teslacam.services import repository

router = APIRouter()


@router.get("/clips", response_model=list[ClipOut], summary="Most recent raw clips")
def list_clips(limit: int = 500, db: Session = Depends(get_db)):
    return repository.list_recent_clips(db, limit=limit)
