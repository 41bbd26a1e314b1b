# teslacam/services/clip_scanner.py
"""
Clip scanner — the background ingest loop.

Every SCAN_INTERVAL_SECONDS it walks the Sentry and Saved roots. For each event
folder not yet in the database it:

  1. waits until the recorder has finished writing the folder
  2. parses event.json + thumbnail (optionally reverse-geocoding the location)
  3. persists the Event and its raw Clips in one short transaction
  4. per camera: merges the clips with ffmpeg, uploads the result to object
     storage and records a Camera row

A folder counts as known once its Event row exists. Known folders are skipped
entirely, so a crash between steps 3 and 4 leaves that event without Camera
rows until someone intervenes.

Failures are isolated: a camera failing doesn't stop the other cameras, a
folder failing doesn't stop the root, a root failing doesn't stop the loop.
Task cancellation is never swallowed.
"""

import asyncio
import os
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional, Sequence

from teslacam.config import settings
from teslacam.database import SessionLocal
from teslacam.services import repository
from teslacam.services.filename_decoder import decode_clip_name, UNKNOWN_CAMERA
from teslacam.services.geocoder import build_geocoder
from teslacam.services.metadata_parser import MetadataParser
from teslacam.services.readiness import ReadinessDetector
from teslacam.services.storage import VideoStorage, object_key
from teslacam.services.video_consolidator import VideoConsolidator
from teslacam.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class RawClip:
    path: Path
    camera: str
    timestamp: datetime


@dataclass
class FolderResult:
    clips_inserted: int = 0
    cameras_created: int = 0
    cameras_failed: int = 0


def collect_clips(folder: Path, extension: str = settings.CLIP_EXTENSION) -> list:
    """Decode every clip file directly inside `folder`. Unparseable names get the current time."""
    clips = []
    for entry in sorted(os.scandir(folder), key=lambda e: e.name):
        if not entry.is_file() or not entry.name.lower().endswith(extension):
            continue
        camera, ts = decode_clip_name(entry.name)
        if ts is None:
            logger.debug(f"[SCAN] No timestamp in '{entry.name}', using ingest time")
            ts = datetime.utcnow()
        clips.append(RawClip(path=Path(entry.path).resolve(), camera=camera, timestamp=ts))
    return clips


def group_by_camera(clips: Sequence[RawClip]) -> dict:
    """camera label → clips in ascending capture order. Unknown-camera clips are left out."""
    groups = defaultdict(list)
    for clip in clips:
        if clip.camera != UNKNOWN_CAMERA:
            groups[clip.camera].append(clip)
    return {cam: sorted(group, key=lambda c: (c.timestamp, str(c.path))) for cam, group in groups.items()}


class ClipScanner:
    def __init__(self,
                 roots: Sequence = None,
                 session_factory: Callable = SessionLocal,
                 readiness: Optional[ReadinessDetector] = None,
                 metadata_parser: Optional[MetadataParser] = None,
                 consolidator: Optional[VideoConsolidator] = None,
                 storage: Optional[VideoStorage] = None,
                 interval_seconds: float = settings.SCAN_INTERVAL_SECONDS,
                 clip_extension: str = settings.CLIP_EXTENSION,
                 sleep: Callable = asyncio.sleep):
        self.roots = list(roots if roots is not None else settings.SCAN_ROOTS)
        self.session_factory = session_factory
        self.readiness = readiness or ReadinessDetector()
        self.metadata_parser = metadata_parser or MetadataParser()
        self.consolidator = consolidator or VideoConsolidator()
        self.storage = storage or VideoStorage()
        self.interval_seconds = interval_seconds
        self.clip_extension = clip_extension
        self._sleep = sleep

    # ── Loop ─────────────────────────────────────────────────────────────

    async def run(self):
        """Scan forever. Stop it by cancelling the task."""
        roots = ", ".join(f"{source}={path}" for path, source in self.roots)
        logger.info(f"🚀 Clip scanner started ({roots}, every {self.interval_seconds:.0f}s)")
        try:
            await self.storage.ensure_bucket()
        except Exception as e:
            logger.critical(f"[UPLOAD] Bucket check failed, will retry on upload: {e}", exc_info=True)

        try:
            while True:
                await self.scan_once()
                await self._sleep(self.interval_seconds)
        except asyncio.CancelledError:
            logger.info("🛑 Clip scanner stopped")
            raise

    async def scan_once(self):
        for root, source in self.roots:
            try:
                await self.scan_root(Path(root), source)
            except Exception as e:
                logger.error(f"[SCAN] {source} scan of {root} failed: {e}", exc_info=True)

    async def scan_root(self, root: Path, source: str):
        if not root.is_dir():
            logger.warning(f"[SCAN] Directory {root} does not exist, skipping {source}")
            return

        logger.info(f"[SCAN] Scanning {source} clips in {root}")
        folders = [entry for entry in sorted(root.iterdir()) if entry.is_dir()]

        events_processed = 0
        clips_inserted = 0
        for folder in folders:
            try:
                result = await self.process_folder(folder, source)
            except Exception as e:
                logger.error(f"[SCAN] Folder {folder.name} ({source}) failed: {e}", exc_info=True)
                continue
            if result is not None:
                events_processed += 1
                clips_inserted += result.clips_inserted

        logger.info(
            f"[SCAN] Scan completed for {source}. "
            f"EventsProcessed={events_processed}, ClipsInserted={clips_inserted}"
        )

    # ── Per folder ───────────────────────────────────────────────────────

    async def process_folder(self, folder: Path, source: str) -> Optional[FolderResult]:
        """Ingest one event folder. Returns None if it was already known."""
        folder_name = folder.name
        with self.session_factory() as db:
            if repository.event_exists(db, folder_name, source):
                logger.debug(f"[SCAN] {folder_name} ({source}) already ingested")
                return None

        await self.readiness.wait_until_ready(folder)

        discovered_at = datetime.utcnow()
        metadata = await self.metadata_parser.parse(folder)
        if metadata.errors:
            logger.warning(f"[META] {folder_name}: {len(metadata.errors)} field error(s), defaults applied")
        clips = await asyncio.to_thread(collect_clips, folder, self.clip_extension)

        result = FolderResult()
        with self.session_factory() as db:
            event = repository.create_event(db, folder_name, source, discovered_at, metadata)
            result.clips_inserted = repository.add_clips(db, event, clips)
            db.commit()
            event_id = event.id
        logger.info(
            f"📥 New event: {folder_name} ({source}) type={metadata.type} "
            f"clips={result.clips_inserted}"
        )

        for camera, group in group_by_camera(clips).items():
            try:
                created = await self.consolidate_camera(event_id, folder_name, camera, group)
            except Exception as e:
                result.cameras_failed += 1
                logger.error(f"[CONCAT] {folder_name}/{camera} failed: {e}", exc_info=True)
                continue
            if created:
                result.cameras_created += 1

        logger.info(
            f"[SCAN] Processed folder {folder_name}: cameras={result.cameras_created} "
            f"failed={result.cameras_failed}"
        )
        return result

    async def consolidate_camera(self, event_id: int, folder_name: str, camera: str,
                                 clips: Sequence[RawClip]) -> bool:
        """Merge + upload + record one camera. Returns False if the Camera row already existed."""
        with self.session_factory() as db:
            if repository.camera_exists(db, event_id, camera):
                logger.debug(f"[CONCAT] {folder_name}/{camera} already consolidated")
                return False

        paths = [c.path for c in clips]
        extension = paths[0].suffix or self.clip_extension
        key = object_key(folder_name, camera, extension)

        async with self.consolidator.consolidate(paths, name=f"{camera}{extension}") as video:
            await self.storage.upload(video.path, key)

        with self.session_factory() as db:
            repository.add_camera(
                db,
                event_id=event_id,
                camera_name=camera,
                storage_path=key,
                bucket_name=self.storage.bucket,
                timestamp=clips[0].timestamp,
                duration_seconds=video.duration_seconds,
                file_size=video.size_bytes,
            )
            db.commit()
        logger.info(
            f"[CONCAT] {folder_name}/{camera}: {len(clips)} clip(s) → "
            f"{video.duration_seconds:.1f}s, {key}"
        )
        return True


def build_scanner() -> ClipScanner:
    """Wire the scanner from settings."""
    geocoder = build_geocoder(settings)
    return ClipScanner(metadata_parser=MetadataParser(geocoder=geocoder))
