# teslacam/routers/health.py
"""
System health check endpoint.
Returns status of backend + DB + object storage + clip mounts.
"""

import os
from datetime import datetime

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from teslacam.config import settings
from teslacam.database import get_db
from teslacam.routers.videos import get_storage
from teslacam.services import repository
from teslacam.services.storage import VideoStorage

router = APIRouter()


@router.get("/health", summary="System health check")
def health_check(db: Session = Depends(get_db), storage: VideoStorage = Depends(get_storage)):
    """
    Returns:
    - Database connectivity + row counts
    - Bucket reachability
    - Whether each clip root is mounted
    """
    result = {
        "status": "ok",
        "timestamp": datetime.utcnow().isoformat(),
        "database": "unknown",
        "storage": "unknown",
        "roots": {},
        "counts": {},
    }

    try:
        db.execute(text("SELECT 1"))
        result["database"] = "ok"
        result["counts"] = repository.count_rows(db)
    except Exception as e:
        result["database"] = f"error: {str(e)}"
        result["status"] = "degraded"

    try:
        exists = storage.client.bucket_exists(bucket_name=storage.bucket)
        result["storage"] = "ok" if exists else "bucket_missing"
        if not exists:
            result["status"] = "degraded"
    except Exception as e:
        result["storage"] = f"error: {str(e)}"
        result["status"] = "degraded"

    for path, source in settings.SCAN_ROOTS:
        result["roots"][source] = "ok" if os.path.isdir(path) else "missing"

    return result
