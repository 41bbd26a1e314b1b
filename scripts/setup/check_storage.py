"""
Pre-flight check for the ingest pipeline's external collaborators:
object storage bucket, ffmpeg/ffprobe binaries and the clip mounts.
Usage: python scripts/setup/check_storage.py
"""

import sys
import os
import asyncio
import shutil
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from teslacam.config import settings
from teslacam.services.storage import VideoStorage


def main():
    print("🔍 TeslaCam Viewer pre-flight")
    print("=" * 40)
    ok = True

    for binary in (settings.FFMPEG_BINARY, settings.FFPROBE_BINARY):
        found = shutil.which(binary)
        print(f"{'✅' if found else '❌'} {binary}: {found or 'not found on PATH'}")
        ok = ok and bool(found)

    for path, source in settings.SCAN_ROOTS:
        exists = os.path.isdir(path)
        print(f"{'✅' if exists else '⚠️ '} {source} root: {path}{'' if exists else ' (missing)'}")

    print(f"\n🪣 Bucket '{settings.MINIO_BUCKET}' at {settings.MINIO_ENDPOINT}")
    storage = VideoStorage()
    if asyncio.run(storage.ensure_bucket()):
        print("✅ Bucket ready")
    else:
        print("❌ Bucket unavailable — check MINIO_* settings")
        ok = False

    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
