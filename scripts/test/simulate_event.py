# scripts/test/simulate_event.py
"""
Write a fake recorder event folder into a clip root so the scanner picks it up.
Clips are short ffmpeg test patterns, one per camera per minute.

Usage:
  python scripts/test/simulate_event.py --root /mnt/sentry
  python scripts/test/simulate_event.py --root /mnt/saved --minutes 3 --seconds 5 --reason user_interaction_honk
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

import argparse
import json
import subprocess
from datetime import datetime, timedelta
from pathlib import Path

from teslacam.config import settings
from teslacam.services.filename_decoder import CAMERA_TOKENS

# 1x1 transparent PNG
THUMBNAIL = bytes.fromhex(
    "89504e470d0a1a0a0000000d4948445200000001000000010806000000"
    "1f15c4890000000d49444154789c63000100000500010d0a2db40000000049454e44ae426082"
)


def make_clip(path: Path, seconds: int, label: str):
    subprocess.run(
        [
            settings.FFMPEG_BINARY, "-hide_banner", "-loglevel", "error", "-y",
            "-f", "lavfi", "-i", f"testsrc=size=320x240:rate=30:duration={seconds}",
            "-vf", f"drawtext=text='{label}':x=10:y=10:fontsize=20:fontcolor=white",
            "-c:v", "libx264", "-pix_fmt", "yuv420p", str(path),
        ],
        check=True,
    )


def main():
    parser = argparse.ArgumentParser(description="Simulate a recorder event folder")
    parser.add_argument("--root", default=settings.SENTRY_CLIPS_PATH, help="Sentry or Saved root")
    parser.add_argument("--minutes", type=int, default=2, help="Clips per camera")
    parser.add_argument("--seconds", type=int, default=3, help="Length of each fake clip")
    parser.add_argument("--reason", default="sentry_aware_object_detection")
    parser.add_argument("--lat", default="52.0907")
    parser.add_argument("--lon", default="5.1214")
    args = parser.parse_args()

    now = datetime.utcnow().replace(microsecond=0)
    start = now - timedelta(minutes=args.minutes)
    folder = Path(args.root) / now.strftime("%Y-%m-%d_%H-%M-%S")
    folder.mkdir(parents=True, exist_ok=False)
    print(f"📁 Creating {folder}")

    for i in range(args.minutes):
        stamp = (start + timedelta(minutes=i)).strftime("%Y-%m-%d_%H-%M-%S")
        for cam in CAMERA_TOKENS:
            clip = folder / f"{stamp}-{cam}.mp4"
            make_clip(clip, args.seconds, f"{cam} {stamp}")
            print(f"   🎬 {clip.name}")

    (folder / settings.EVENT_THUMBNAIL_FILE).write_bytes(THUMBNAIL)
    (folder / settings.EVENT_METADATA_FILE).write_text(json.dumps({
        "timestamp": now.isoformat(),
        "city": "",
        "street": "",
        "est_lat": args.lat,
        "est_lon": args.lon,
        "reason": args.reason,
        "camera": "0",
    }, indent=2))
    print(f"✅ Event written — ingested after {settings.READY_QUIET_SECONDS:.0f}s of quiet")


if __name__ == "__main__":
    main()
