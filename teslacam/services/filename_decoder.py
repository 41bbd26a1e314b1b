# teslacam/services/filename_decoder.py
"""
Decodes camera angle and capture time from a recorder clip filename.

Recorder naming: YYYY-MM-DD_HH-MM-SS-<camera>.mp4
e.g. 2026-02-04_10-25-44-back.mp4, 2026-02-04_10-25-44-left_repeater.mp4
"""

import os
from datetime import datetime
from typing import Optional, Tuple

UNKNOWN_CAMERA = "unknown"

# Checked in this order; first substring hit wins
CAMERA_TOKENS = ("back", "front", "left_repeater", "right_repeater")

_TIMESTAMP_LENGTH = len("2026-02-04_10-25-44")
_TIMESTAMP_FORMAT = "%Y-%m-%d %H-%M-%S"


def camera_from_name(file_name: str) -> str:
    name = os.path.basename(file_name).lower()
    for token in CAMERA_TOKENS:
        if token in name:
            return token
    return UNKNOWN_CAMERA


def timestamp_from_name(file_name: str) -> Optional[datetime]:
    """Capture time (UTC, naive) from the filename prefix, or None if it doesn't parse."""
    prefix = os.path.basename(file_name)[:_TIMESTAMP_LENGTH]
    try:
        return datetime.strptime(prefix.replace("_", " ", 1), _TIMESTAMP_FORMAT)
    except ValueError:
        return None


def decode_clip_name(file_name: str) -> Tuple[str, Optional[datetime]]:
    """Returns (camera label, capture timestamp or None)."""
    return camera_from_name(file_name), timestamp_from_name(file_name)
