# teslacam/services/storage.py
"""
Object storage for consolidated camera videos (MinIO / any S3-compatible server).

Key scheme: events/<folder-name>/<camera>.<ext> in one configured bucket.
No retries here: a failed upload surfaces to the scanner, and the next scan
pass is the retry.
"""

import asyncio
from pathlib import Path
from typing import Optional

from minio import Minio
from minio.error import MinioException
from urllib3.exceptions import HTTPError as TransportError

from teslacam.config import settings
from teslacam.errors import StorageError
from teslacam.utils.logger import get_logger

logger = get_logger(__name__)

VIDEO_CONTENT_TYPE = "video/mp4"


def object_key(folder_name: str, camera: str, extension: str = ".mp4") -> str:
    if not extension.startswith("."):
        extension = "." + extension
    return f"events/{folder_name}/{camera}{extension}"


def build_minio_client() -> Minio:
    return Minio(
        endpoint=settings.MINIO_ENDPOINT,
        access_key=settings.MINIO_ACCESS_KEY,
        secret_key=settings.MINIO_SECRET_KEY,
        secure=settings.MINIO_SECURE,
    )


class VideoStorage:
    """Thin async wrapper; the minio client is blocking, so calls run in a worker thread."""

    def __init__(self, client: Optional[Minio] = None, bucket: str = settings.MINIO_BUCKET):
        self.client = client or build_minio_client()
        self.bucket = bucket
        self.bucket_ready = False

    async def ensure_bucket(self) -> bool:
        """Create the bucket if it's missing. Returns False (and logs) if storage is unreachable."""
        try:
            exists = await asyncio.to_thread(self.client.bucket_exists, bucket_name=self.bucket)
            if not exists:
                await asyncio.to_thread(self.client.make_bucket, bucket_name=self.bucket)
                logger.info(f"[UPLOAD] Created bucket '{self.bucket}'")
            self.bucket_ready = True
        except (MinioException, TransportError, OSError, ValueError) as e:
            self.bucket_ready = False
            logger.critical(f"[UPLOAD] Bucket '{self.bucket}' unavailable: {e}")
        return self.bucket_ready

    async def upload(self, local_path: Path, key: str) -> int:
        """Upload a local file under `key`. Returns the uploaded size in bytes."""
        if not self.bucket_ready and not await self.ensure_bucket():
            raise StorageError(f"bucket '{self.bucket}' is not available")

        local_path = Path(local_path)
        size = local_path.stat().st_size
        try:
            await asyncio.to_thread(
                self.client.fput_object,
                bucket_name=self.bucket,
                object_name=key,
                file_path=str(local_path),
                content_type=VIDEO_CONTENT_TYPE,
            )
        except (MinioException, TransportError, OSError, ValueError) as e:
            raise StorageError(f"upload of {key} failed: {e}") from e

        logger.info(f"[UPLOAD] {key} ({size / 1024 / 1024:.1f} MB) → {self.bucket}")
        return size

    def object_size(self, key: str, bucket: Optional[str] = None) -> int:
        return self.client.stat_object(bucket_name=bucket or self.bucket, object_name=key).size

    def open_object(self, key: str, bucket: Optional[str] = None, offset: int = 0, length: int = 0):
        """Blocking; returns a urllib3 response. Caller must close() and release_conn()."""
        return self.client.get_object(
            bucket_name=bucket or self.bucket, object_name=key, offset=offset, length=length,
        )
