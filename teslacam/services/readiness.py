# teslacam/services/readiness.py
"""
Folder readiness — decides when the recorder has finished writing an event folder.

A folder is ready when it holds the metadata file, the thumbnail and at least
MIN_CLIPS_PER_EVENT clips, AND nothing under it (recursively) was modified
within the last READY_QUIET_SECONDS. Any new write restarts the quiet window.

wait_until_ready() has no timeout: it polls until ready or until the calling
task is cancelled.
"""

import asyncio
import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from teslacam.config import settings
from teslacam.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class FolderStatus:
    has_metadata: bool
    has_thumbnail: bool
    clip_count: int
    latest_mtime: Optional[float]   # newest mtime of any file under the folder

    def has_required_files(self, min_clips: int) -> bool:
        return self.has_metadata and self.has_thumbnail and self.clip_count >= min_clips

    def quiet_for(self, now: float) -> float:
        if self.latest_mtime is None:
            return 0.0
        return now - self.latest_mtime


def inspect_folder(folder: Path,
                   metadata_file: str = settings.EVENT_METADATA_FILE,
                   thumbnail_file: str = settings.EVENT_THUMBNAIL_FILE,
                   clip_extension: str = settings.CLIP_EXTENSION) -> FolderStatus:
    folder = Path(folder)
    clip_count = 0
    latest = None
    for dirpath, _dirnames, filenames in os.walk(folder):
        for name in filenames:
            try:
                mtime = os.stat(os.path.join(dirpath, name)).st_mtime
            except FileNotFoundError:
                continue   # recorder rotated it away mid-walk
            latest = mtime if latest is None else max(latest, mtime)
            if dirpath == str(folder) and name.lower().endswith(clip_extension):
                clip_count += 1

    return FolderStatus(
        has_metadata=(folder / metadata_file).is_file(),
        has_thumbnail=(folder / thumbnail_file).is_file(),
        clip_count=clip_count,
        latest_mtime=latest,
    )


def is_folder_ready(status: FolderStatus, now: float,
                    quiet_seconds: float = settings.READY_QUIET_SECONDS,
                    min_clips: int = settings.MIN_CLIPS_PER_EVENT) -> bool:
    return status.has_required_files(min_clips) and status.quiet_for(now) >= quiet_seconds


class ReadinessDetector:
    def __init__(self,
                 quiet_seconds: float = settings.READY_QUIET_SECONDS,
                 poll_seconds: float = settings.READY_POLL_SECONDS,
                 log_seconds: float = settings.READY_LOG_SECONDS,
                 min_clips: int = settings.MIN_CLIPS_PER_EVENT,
                 metadata_file: str = settings.EVENT_METADATA_FILE,
                 thumbnail_file: str = settings.EVENT_THUMBNAIL_FILE,
                 clip_extension: str = settings.CLIP_EXTENSION,
                 clock: Callable[[], float] = time.time,
                 sleep: Callable = asyncio.sleep):
        self.quiet_seconds = quiet_seconds
        self.poll_seconds = poll_seconds
        self.log_seconds = log_seconds
        self.min_clips = min_clips
        self.metadata_file = metadata_file
        self.thumbnail_file = thumbnail_file
        self.clip_extension = clip_extension
        self._clock = clock
        self._sleep = sleep

    def check(self, folder: Path) -> bool:
        status = self._inspect(folder)
        return is_folder_ready(status, self._clock(), self.quiet_seconds, self.min_clips)

    async def wait_until_ready(self, folder: Path) -> FolderStatus:
        folder = Path(folder)
        started = self._clock()
        last_log = None

        while True:
            status = await asyncio.to_thread(self._inspect, folder)
            now = self._clock()
            if is_folder_ready(status, now, self.quiet_seconds, self.min_clips):
                if last_log is not None:
                    logger.info(f"[READY] {folder.name} ready after {now - started:.0f}s")
                return status

            if last_log is None or now - last_log >= self.log_seconds:
                last_log = now
                if status.has_required_files(self.min_clips):
                    logger.info(
                        f"[READY] {folder.name}: still being written "
                        f"(quiet {status.quiet_for(now):.1f}s of {self.quiet_seconds:.0f}s)"
                    )
                else:
                    logger.info(
                        f"[READY] {folder.name}: waiting for files "
                        f"(metadata={status.has_metadata} thumbnail={status.has_thumbnail} "
                        f"clips={status.clip_count}/{self.min_clips})"
                    )

            await self._sleep(self.poll_seconds)

    def _inspect(self, folder: Path) -> FolderStatus:
        return inspect_folder(folder, self.metadata_file, self.thumbnail_file, self.clip_extension)
