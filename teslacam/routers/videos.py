# teslacam/routers/videos.py
"""
Video streaming endpoints.
GET /video/{clip_id}    — a raw per-minute clip, straight from the clip mount.
GET /camera/{camera_id} — a consolidated camera video, from object storage.
Both honour HTTP Range requests so browsers can seek.
"""

import os
import re
from typing import Optional, Tuple

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import FileResponse, StreamingResponse
from minio.error import S3Error
from sqlalchemy.orm import Session

from teslacam.database import get_db
from teslacam.models.camera import Camera
from teslacam.models.clip import Clip
from teslacam.services.storage import VideoStorage, VIDEO_CONTENT_TYPE
from teslacam.utils.logger import get_logger

router = APIRouter()
logger = get_logger(__name__)

_CHUNK_SIZE = 256 * 1024
_RANGE_RE = re.compile(r"^bytes=(\d*)-(\d*)$")

_storage: Optional[VideoStorage] = None


def get_storage() -> VideoStorage:
    """FastAPI dependency — one shared storage client per process."""
    global _storage
    if _storage is None:
        _storage = VideoStorage()
    return _storage


def parse_range(header: Optional[str], size: int) -> Optional[Tuple[int, int]]:
    """
    Parse a single-range `Range: bytes=a-b` header into inclusive (start, end).
    Returns None when there is no header; raises 416 when it can't be satisfied.
    """
    if not header:
        return None
    match = _RANGE_RE.match(header.strip())
    if not match or (not match.group(1) and not match.group(2)):
        raise HTTPException(status_code=416, detail="Unsupported Range header",
                            headers={"Content-Range": f"bytes */{size}"})

    first, last = match.group(1), match.group(2)
    if first:
        start = int(first)
        end = min(int(last), size - 1) if last else size - 1
    else:
        # suffix range: last N bytes
        start = max(size - int(last), 0)
        end = size - 1

    if start >= size or start > end:
        raise HTTPException(status_code=416, detail="Range not satisfiable",
                            headers={"Content-Range": f"bytes */{size}"})
    return start, end


@router.get("/video/{clip_id}", summary="Stream a raw clip")
def stream_clip(clip_id: int, db: Session = Depends(get_db)):
    clip = db.get(Clip, clip_id)
    if clip is None or not clip.path:
        logger.warning(f"Clip {clip_id} not found in database or has no path")
        raise HTTPException(status_code=404, detail="Clip not found")

    if not os.path.isfile(clip.path):
        logger.warning(f"Video file not found at path: {clip.path}")
        raise HTTPException(status_code=404, detail="Video file not found")

    return FileResponse(clip.path, media_type=VIDEO_CONTENT_TYPE)


@router.get("/camera/{camera_id}", summary="Stream a consolidated camera video")
def stream_camera(
    camera_id: int,
    request: Request,
    db: Session = Depends(get_db),
    storage: VideoStorage = Depends(get_storage),
):
    camera = db.get(Camera, camera_id)
    if camera is None:
        raise HTTPException(status_code=404, detail="Camera not found")
    if not camera.storage_path:
        raise HTTPException(status_code=404, detail="No video path available")

    try:
        size = storage.object_size(camera.storage_path, bucket=camera.bucket_name)
        byte_range = parse_range(request.headers.get("range"), size)
        start, end = byte_range or (0, size - 1)
        obj = storage.open_object(
            camera.storage_path, bucket=camera.bucket_name,
            offset=start, length=end - start + 1,
        )
    except S3Error as e:
        logger.error(f"Failed to open {camera.storage_path} for camera {camera_id}: {e}")
        raise HTTPException(status_code=404 if e.code == "NoSuchKey" else 502,
                            detail="Failed to retrieve video from storage")

    logger.info(f"Streaming camera {camera_id} ({camera.camera_name}) bytes {start}-{end}/{size}")

    def body():
        try:
            yield from obj.stream(_CHUNK_SIZE)
        finally:
            obj.close()
            obj.release_conn()

    headers = {
        "Accept-Ranges": "bytes",
        "Content-Length": str(end - start + 1),
    }
    status_code = 200
    if byte_range is not None:
        headers["Content-Range"] = f"bytes {start}-{end}/{size}"
        status_code = 206
    return StreamingResponse(body(), status_code=status_code, media_type=VIDEO_CONTENT_TYPE, headers=headers)
