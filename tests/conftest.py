"""Shared fixtures: in-memory database, event-folder builder, fake transcoder and storage."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import json
import time
from datetime import datetime, timedelta
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from teslacam.database import create_tables
from teslacam.errors import TranscodeError, StorageError

CAMERAS = ("front", "back", "left_repeater", "right_repeater")


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_tables(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield factory
    engine.dispose()


def make_event_folder(root: Path, name="2026-02-04_10-25-59", metadata=None, thumbnail=True,
                      minutes=2, cameras=CAMERAS, duration=60.0, age_seconds=120):
    """
    Build a recorder-style event folder. Clip files hold their fake duration as text,
    which FakeTranscoder reads back. All mtimes are pushed `age_seconds` into the past.
    """
    folder = Path(root) / name
    folder.mkdir(parents=True, exist_ok=True)

    if metadata is not None:
        (folder / "event.json").write_text(json.dumps(metadata), encoding="utf-8")
    if thumbnail:
        (folder / "thumb.png").write_bytes(b"\x89PNG\r\n\x1a\nfake")

    start = datetime(2026, 2, 4, 10, 24, 44)
    for i in range(minutes):
        stamp = (start + timedelta(minutes=i)).strftime("%Y-%m-%d_%H-%M-%S")
        for cam in cameras:
            (folder / f"{stamp}-{cam}.mp4").write_text(str(duration), encoding="utf-8")

    age(folder, age_seconds)
    return folder


def age(folder: Path, seconds: float):
    old = time.time() - seconds
    for p in Path(folder).rglob("*"):
        os.utime(p, (old, old))


class FakeTranscoder:
    """concat() writes the summed input durations; probe_duration() reads them back."""

    def __init__(self, fail_on=()):
        self.fail_on = set(fail_on)
        self.concat_calls = []
        self.probe_calls = []

    async def concat(self, inputs, output):
        self.concat_calls.append([Path(p) for p in inputs])
        if any(token in Path(p).name for p in inputs for token in self.fail_on):
            raise TranscodeError("simulated ffmpeg failure")
        total = sum(float(Path(p).read_text()) for p in inputs)
        Path(output).write_text(str(total))
        return Path(output)

    async def probe_duration(self, path):
        self.probe_calls.append(Path(path))
        if any(token in Path(path).name for token in self.fail_on):
            raise TranscodeError("simulated ffprobe failure")
        return float(Path(path).read_text())


class FakeStorage:
    def __init__(self, bucket="teslacam-test", fail_keys=()):
        self.bucket = bucket
        self.fail_keys = set(fail_keys)
        self.uploads = {}
        self.ensure_calls = 0

    async def ensure_bucket(self):
        self.ensure_calls += 1
        return True

    async def upload(self, local_path, key):
        if key in self.fail_keys:
            raise StorageError(f"simulated upload failure for {key}")
        self.uploads[key] = Path(local_path).read_bytes()
        return len(self.uploads[key])


@pytest.fixture
def fake_transcoder():
    return FakeTranscoder()


@pytest.fixture
def fake_storage():
    return FakeStorage()
